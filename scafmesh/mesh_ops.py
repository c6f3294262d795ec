"""Triangle-mesh utilities: concatenation, flips, gradients and 2x2 polar SVD."""

from __future__ import annotations

import math
from typing import NamedTuple

import numpy as np
import scipy.sparse as sp

DEFAULT_DUPLICATE_EPSILON = 2.2204e-15

_EDGE_PAIRS = {
    3: ((1, 2), (2, 0), (0, 1)),
    4: ((3, 0), (3, 1), (3, 2), (1, 2), (2, 0), (0, 1)),
}


class DuplicateRemoval(NamedTuple):
    """Merged vertices ``NV``, re-indexed faces ``NF`` and old-to-new map ``I``."""

    NV: np.ndarray
    NF: np.ndarray
    I: np.ndarray


class PolarSVD(NamedTuple):
    """``A = R @ T`` with ``R = U @ V.T`` and ``T = V @ diag(S) @ V.T``."""

    R: np.ndarray
    T: np.ndarray
    U: np.ndarray
    S: np.ndarray
    V: np.ndarray


def edge_lengths(V, F) -> np.ndarray:
    """Edge lengths of edges, triangles or tetrahedra.

    For triangles column ``i`` is the edge opposite corner ``i``; for tets the
    columns are edges [3,0], [3,1], [3,2], [1,2], [2,0], [0,1].
    """
    V = np.asarray(V, dtype=float)
    F = np.asarray(F, dtype=int)
    if F.ndim != 2:
        raise ValueError("F must be a two-dimensional index array")
    if F.shape[1] == 2:
        return np.linalg.norm(V[F[:, 1]] - V[F[:, 0]], axis=1)
    pairs = _EDGE_PAIRS.get(F.shape[1])
    if pairs is None:
        raise ValueError(f"unsupported simplex size {F.shape[1]}")
    return np.stack(
        [np.linalg.norm(V[F[:, i]] - V[F[:, j]], axis=1) for i, j in pairs], axis=1
    )


def remove_duplicates(V, F, epsilon=DEFAULT_DUPLICATE_EPSILON) -> DuplicateRemoval:
    """Merge vertices closer than ``epsilon``, keeping first occurrences in order."""
    V = np.asarray(V, dtype=float)
    F = np.asarray(F, dtype=int)
    index = np.full(len(V), -1, dtype=int)
    kept: list[int] = []
    for i, row in enumerate(V):
        if index[i] >= 0:
            continue
        k = len(kept)
        kept.append(i)
        tail = index[i:]
        close = (np.linalg.norm(V[i:] - row, axis=1) < epsilon) & (tail < 0)
        tail[close] = k
        index[i] = k
    NV = V[np.array(kept, dtype=int)]
    return DuplicateRemoval(NV, index[F], index)


def mesh_cat(V1, F1, V2, F2) -> tuple[np.ndarray, np.ndarray]:
    """Concatenate two meshes and merge their coincident vertices."""
    V1, V2 = np.asarray(V1, dtype=float), np.asarray(V2, dtype=float)
    F1, F2 = np.asarray(F1, dtype=int), np.asarray(F2, dtype=int)
    if F1.shape[1] != F2.shape[1] or V1.shape[1] != V2.shape[1]:
        raise ValueError("Input mesh not compatible!")
    Vc = np.vstack([V1, V2])
    Fc = np.vstack([F1, F2 + len(V1)])
    NV, NF, _ = remove_duplicates(Vc, Fc)
    return NV, NF


def soft_cat(dim, A, B) -> sp.csc_matrix:
    """Stack sparse matrices (``dim=1`` vertically, ``dim=2`` horizontally).

    Unlike a strict concatenation, the other dimension is padded to the larger
    of the two; an empty operand yields a copy of the other.
    """
    if dim not in (1, 2):
        raise ValueError("dim must be 1 or 2")
    a = sp.coo_matrix(A)
    b = sp.coo_matrix(B)
    if a.shape[0] * a.shape[1] == 0:
        return sp.csc_matrix(b)
    if b.shape[0] * b.shape[1] == 0:
        return sp.csc_matrix(a)
    if dim == 1:
        shape = (a.shape[0] + b.shape[0], max(a.shape[1], b.shape[1]))
        rows = np.concatenate([a.row, b.row + a.shape[0]])
        cols = np.concatenate([a.col, b.col])
    else:
        shape = (max(a.shape[0], b.shape[0]), a.shape[1] + b.shape[1])
        rows = np.concatenate([a.row, b.row])
        cols = np.concatenate([a.col, b.col + a.shape[1]])
    data = np.concatenate([a.data, b.data])
    return sp.csc_matrix((data, (rows, cols)), shape=shape)


def polar_svd2x2(A) -> PolarSVD:
    """Closed-form SVD and polar decomposition of a 2x2 matrix."""
    A = np.asarray(A, dtype=np.float64)
    if A.shape != (2, 2):
        raise ValueError("A must be 2x2")
    e = (A[0, 0] + A[1, 1]) / 2
    f = (A[0, 0] - A[1, 1]) / 2
    g = (A[0, 1] + A[1, 0]) / 2
    h = (A[0, 1] - A[1, 0]) / 2

    eh_sq = np.sqrt(e * e + h * h)
    fg_sq = np.sqrt(g * g + f * f)
    S = np.array([eh_sq + fg_sq, eh_sq - fg_sq])

    with np.errstate(divide="ignore", invalid="ignore"):
        atan_gf = np.arctan(g / f)
        atan_he = np.arctan(h / e)
    gamma = (atan_gf + atan_he) / 2
    beta = (-atan_gf + atan_he) / 2
    U = np.array([[np.cos(beta), np.sin(beta)], [-np.sin(beta), np.cos(beta)]])
    V = np.array([[np.cos(gamma), -np.sin(gamma)], [np.sin(gamma), np.cos(gamma)]])

    R = U @ V.T
    T = V @ np.diag(S) @ V.T
    return PolarSVD(R, T, U, S, V)


def get_flips(V, F, uv) -> list[int]:
    """Indices of faces whose UV triangle is clockwise (negative determinant)."""
    F = np.asarray(F, dtype=int)
    uv = np.asarray(uv, dtype=float)
    if len(F) == 0:
        return []
    corners = uv[F[:, :3], :2]  # (#F, 3, 2)
    homogeneous = np.concatenate(
        [corners.transpose(0, 2, 1), np.ones((len(F), 1, 3))], axis=1
    )
    det = np.linalg.det(homogeneous)
    return np.flatnonzero(det < 0).tolist()


def count_flips(V, F, uv) -> int:
    """Number of faces flipped in the UV layout."""
    return len(get_flips(V, F, uv))


def get_obtuse_angle(V, face) -> int:
    """Corner (0, 1 or 2) of the triangle with an obtuse angle, or -1 if none."""
    V = np.asarray(V, dtype=float)
    i0, i1, i2 = (int(i) for i in face)
    u01 = V[i1] - V[i0]
    u02 = V[i2] - V[i0]
    u12 = V[i2] - V[i1]
    if np.dot(u01, u02) < 0:
        return 0
    if np.dot(u01, u12) > 0:
        return 1
    if np.dot(u02, u12) < 0:
        return 2
    return -1


def adjusted_grad(V, F, eps) -> sp.csc_matrix:
    """Per-face gradient operator, robust to near-degenerate triangles.

    Triangles whose doubled area does not exceed ``eps`` are replaced by an
    abstract equilateral triangle of that area. The result has shape
    ``(3 * #F, #V)``; rows ``k * #F + i`` give coordinate ``k`` on face ``i``.
    """
    V = np.asarray(V, dtype=float)
    F = np.asarray(F, dtype=int)
    if V.ndim != 2 or V.shape[1] != 3:
        raise ValueError("V must have three columns")
    nf = len(F)
    i1, i2, i3 = F[:, 0], F[:, 1], F[:, 2]

    v32 = V[i3] - V[i2]
    v13 = V[i1] - V[i3]
    v21 = V[i2] - V[i1]
    n = np.cross(v32, v13)
    dblA = np.linalg.norm(n, axis=1)

    good = dblA > eps
    u = np.tile(np.array([0.0, 0.0, 1.0]), (nf, 1))
    u[good] = n[good] / dblA[good, None]

    bad = ~good
    if bad.any():
        dblA[bad] = eps
        h = math.sqrt(eps / math.sin(math.pi / 3.0)) if eps > 0 else 0.0
        p1 = np.zeros(3)
        p2 = np.array([h, 0.0, 0.0])
        p3 = np.array([h / 2.0, (math.sqrt(3) / 2.0) * h, 0.0])
        v32[bad] = p3 - p2
        v13[bad] = p1 - p3
        v21[bad] = p2 - p1

    def rotated(edge: np.ndarray) -> np.ndarray:
        with np.errstate(divide="ignore", invalid="ignore"):
            perp = np.cross(u, edge)
            perp = perp / np.linalg.norm(perp, axis=1)[:, None]
            return perp * (np.linalg.norm(edge, axis=1) / dblA)[:, None]

    eperp21 = rotated(v21)
    eperp13 = rotated(v13)

    rows = np.repeat(np.arange(3) * nf, 4 * nf) + np.tile(np.arange(nf), 12)
    cols = np.tile(np.concatenate([F[:, 1], F[:, 0], F[:, 2], F[:, 0]]), 3)
    vals = np.concatenate(
        [
            np.concatenate(
                [eperp13[:, r], -eperp13[:, r], eperp21[:, r], -eperp21[:, r]]
            )
            for r in range(3)
        ]
    )
    return sp.csc_matrix((vals, (rows, cols)), shape=(3 * nf, len(V)))