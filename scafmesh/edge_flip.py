"""Greedy quality-improving edge flips on planar triangle meshes."""

from __future__ import annotations

import heapq
import math
from typing import NamedTuple

import numpy as np

from scafmesh.mesh_ops import edge_lengths

# Flips that improve the worst triangle of a flap by no more than this are skipped.
MIN_IMPROVEMENT = 1e-7


class EdgeFlaps(NamedTuple):
    """Edge connectivity of a triangle mesh.

    ``E`` lists the unique edges; ``EF[e, 0]`` is the face in which ``E[e, 0]``
    is followed by ``E[e, 1]`` counter-clockwise and ``EF[e, 1]`` the face on the
    other side (-1 on the boundary). ``EV[e, s]`` is the vertex of face
    ``EF[e, s]`` opposite the edge. ``EMAP[c * #F + f]`` is the edge opposite
    corner ``c`` of face ``f``.
    """

    E: np.ndarray
    EF: np.ndarray
    EV: np.ndarray
    EMAP: np.ndarray


class FlipResult(NamedTuple):
    """Mesh and connectivity after edge flipping."""

    F: np.ndarray
    E: np.ndarray
    EF: np.ndarray
    EV: np.ndarray
    EMAP: np.ndarray


def edge_flaps(F) -> EdgeFlaps:
    """Compute unique edges with their adjacent faces and opposite vertices.

    Edges are ordered by their sorted vertex pair and keep the orientation of
    their first occurrence in corner-major order.
    """
    F = np.asarray(F, dtype=int)
    if F.ndim != 2 or F.shape[1] != 3:
        raise ValueError("F must be a #F by 3 array of triangles")
    m = len(F)
    if m == 0:
        empty = np.zeros((0, 2), dtype=int)
        return EdgeFlaps(empty, empty.copy(), empty.copy(), np.zeros(0, dtype=int))

    oriented = np.concatenate(
        [F[:, [(c + 1) % 3, (c + 2) % 3]] for c in range(3)], axis=0
    )
    key = np.sort(oriented, axis=1)
    _, first, inverse = np.unique(key, axis=0, return_index=True, return_inverse=True)
    emap = np.asarray(inverse, dtype=int).reshape(-1)
    E = oriented[np.asarray(first, dtype=int).reshape(-1)]

    corners = np.repeat(np.arange(3), m)
    faces = np.tile(np.arange(m), 3)
    side = (~np.all(oriented == E[emap], axis=1)).astype(int)

    EF = np.full((len(E), 2), -1, dtype=int)
    EV = np.full((len(E), 2), -1, dtype=int)
    EF[emap, side] = faces
    EV[emap, side] = F[faces, corners]
    return EdgeFlaps(E, EF, EV, emap)


def triangle_quality_by_length(a, b, c) -> float:
    """Area over the sum of squared edge lengths, from the three edge lengths.

    A negative squared area (lengths violating the triangle inequality) is
    treated as zero; all-zero lengths give NaN.
    """
    s = (a + b + c) / 2
    area_sq = s * (s - a) * (s - b) * (s - c)
    if area_sq < 0:
        area_sq = 0.0
    denom = a * a + b * b + c * c
    if denom == 0:
        return math.nan
    return math.sqrt(area_sq) / denom


def triangle_improving_edge_flip(V, F, E, EF, EV, EMAP) -> FlipResult:
    """Flip interior edges greedily while the worse triangle of a flap improves.

    ``E``, ``EF``, ``EV`` and ``EMAP`` are as returned by :func:`edge_flaps`.
    The inputs are not modified; updated copies are returned. After flipping,
    each face's entries in ``EMAP`` name its edges up to a rotation of corners.
    """
    V = np.asarray(V, dtype=float)
    F = np.array(F, dtype=int)
    if V.ndim != 2 or V.shape[1] != 2 or F.ndim != 2 or F.shape[1] != 3:
        raise ValueError("Not A Planar Triangle Mesh")
    E = np.array(E, dtype=int).reshape(-1, 2)
    EF = np.array(EF, dtype=int).reshape(-1, 2)
    EV = np.array(EV, dtype=int).reshape(-1, 2)
    m = len(F)
    emap = np.array(EMAP, dtype=int).reshape(3, m)

    points = [tuple(p) for p in V.tolist()]

    def tri_quality(p: int, q: int, r: int) -> float:
        return triangle_quality_by_length(
            math.dist(points[q], points[r]),
            math.dist(points[r], points[p]),
            math.dist(points[p], points[q]),
        )

    def qualities_for_flap(e: int) -> tuple[float, float]:
        a, b = int(E[e, 0]), int(E[e, 1])
        return (
            tri_quality(a, b, int(EV[e, 0])),
            tri_quality(b, a, int(EV[e, 1])),
        )

    def min_quality_after(e: int) -> float:
        o0, o1 = int(EV[e, 0]), int(EV[e, 1])
        if o0 < 0 or o1 < 0:
            return -1.0
        return min(
            tri_quality(int(E[e, 0]), o1, o0),
            tri_quality(int(E[e, 1]), o0, o1),
        )

    def ccw(u0: int, u1: int, u2: int) -> bool:
        x0, y0 = points[u0]
        x1, y1 = points[u1]
        x2, y2 = points[u2]
        return (x1 - x0) * (y2 - y0) - (y1 - y0) * (x2 - x0) > 0

    n_edges = len(E)
    if n_edges == 0:
        return FlipResult(F, E, EF, EV, emap.reshape(-1))

    elen = edge_lengths(V, E)
    face_quality = [
        triangle_quality_by_length(
            elen[emap[1, f]], elen[emap[2, f]], elen[emap[0, f]]
        )
        for f in range(m)
    ]
    flap_qual = np.full((n_edges, 2), -1.0)
    for e, faces in enumerate(EF.tolist()):
        for side, f in enumerate(faces):
            if f != -1:
                flap_qual[e, side] = face_quality[f]

    def quality_improvement(e: int) -> float:
        before = min(flap_qual[e, 0], flap_qual[e, 1])
        return min_quality_after(e) - before

    edge_stamp = [0] * n_edges
    # Entries are negated so the min-heap pops the largest (gain, id, stamp).
    heap = [(-quality_improvement(e), -e, 0) for e in range(n_edges)]
    heapq.heapify(heap)

    def push(gain: float, e: int) -> None:
        edge_stamp[e] += 1
        heapq.heappush(heap, (-gain, -e, -edge_stamp[e]))

    while heap:
        neg_gain, neg_id, neg_marker = heapq.heappop(heap)
        q_improv, edge_id, marker = -neg_gain, -neg_id, -neg_marker

        if q_improv <= MIN_IMPROVEMENT:
            break
        if marker < edge_stamp[edge_id]:
            continue

        e0, e1 = int(E[edge_id, 0]), int(E[edge_id, 1])
        f0, f1 = int(EF[edge_id, 0]), int(EF[edge_id, 1])
        v0, v1 = int(EV[edge_id, 0]), int(EV[edge_id, 1])
        if v0 < 0 or v1 < 0:
            continue
        if not ccw(v1, v0, e0) or not ccw(v0, v1, e1):
            continue

        try:
            m0 = next(c for c in range(3) if emap[c, f0] == edge_id)
            m1 = next(c for c in range(3) if emap[c, f1] == edge_id)
        except StopIteration:
            raise ValueError(f"EMAP does not reference edge {edge_id}") from None

        E[edge_id] = (v1, v0)
        EV[edge_id] = (e0, e1)

        m02 = int(emap[(m0 + 2) % 3, f0])
        m11 = int(emap[(m1 + 1) % 3, f1])
        m12 = int(emap[(m1 + 2) % 3, f1])
        m01 = int(emap[(m0 + 1) % 3, f0])

        emap[(m0 + 1) % 3, f0] = m02
        emap[(m0 + 2) % 3, f0] = m11
        emap[(m1 + 1) % 3, f1] = m12
        emap[(m1 + 2) % 3, f1] = m01

        EV[m02, 0 if EV[m02, 0] == e1 else 1] = v1
        EV[m12, 0 if EV[m12, 0] == e0 else 1] = v0

        side = 0 if EF[m01, 0] == f0 else 1
        EF[m01, side] = f1
        EV[m01, side] = v1

        side = 0 if EF[m11, 0] == f1 else 1
        EF[m11, side] = f0
        EV[m11, side] = v0

        F[f0][F[f0] == e1] = v1
        F[f1][F[f1] == e0] = v0

        new_flap = qualities_for_flap(edge_id)
        flap_qual[edge_id] = new_flap
        for ff in (0, 1):
            f = int(EF[edge_id, ff])
            for c in range(3):
                e = int(emap[c, f])
                if e != edge_id:
                    flap_qual[e, 0 if EF[e, 0] == f else 1] = new_flap[ff]

        push(-q_improv, edge_id)
        for e in (m02, m11, m12, m01):
            push(quality_improvement(e), e)

    return FlipResult(F, E, EF, EV, emap.reshape(-1))