"""Tetrahedron quality measures and duplicate-vertex removal for tet meshes."""

from __future__ import annotations

import math
from typing import NamedTuple

import numpy as np

# 6 * sqrt(2), truncated: a regular tetrahedron scores (almost exactly) one.
QUALITY_SCALE = 8.48528


class VertexDeduplication(NamedTuple):
    """Unique vertices ``SV`` with ``SV = V[SVI]`` and ``V ~= SV[SVJ]``."""

    SV: np.ndarray
    SVI: np.ndarray
    SVJ: np.ndarray


class TetVertexDeduplication(NamedTuple):
    """Deduplicated vertices together with re-indexed tets and faces."""

    SV: np.ndarray
    SVI: np.ndarray
    SVJ: np.ndarray
    ST: np.ndarray
    SF: np.ndarray


def _point(p) -> np.ndarray:
    return np.asarray(p, dtype=float).reshape(-1)


def ms_length(a, b, c, d) -> float:
    """Mean squared length of the six edges of tetrahedron ``abcd``."""
    a, b, c, d = (_point(p) for p in (a, b, c, d))
    pairs = ((a, b), (a, c), (a, d), (b, c), (b, d), (c, d))
    return sum(float(np.dot(p - q, p - q)) for p, q in pairs) / 6.0


def rms_length(a, b, c, d) -> float:
    """Root mean squared edge length of tetrahedron ``abcd``."""
    return math.sqrt(ms_length(a, b, c, d))


def signed_volume(a, b, c, d) -> float:
    """Signed volume of tetrahedron ``abcd``."""
    a, b, c, d = (_point(p) for p in (a, b, c, d))
    return float(np.dot(a - d, np.cross(b - d, c - d))) / 6.0


def quality(a, b, c, d) -> float:
    """Volume to cubed RMS edge length ratio, scaled so a regular tet scores one.

    The sign follows the orientation; a tet with all corners coincident yields NaN.
    """
    volume = signed_volume(a, b, c, d)
    lrms = rms_length(a, b, c, d)
    if lrms == 0.0:
        return math.nan
    return QUALITY_SCALE * volume / (lrms * lrms * lrms)


def _round_half_away(x: np.ndarray) -> np.ndarray:
    return np.sign(x) * np.floor(np.abs(x) + 0.5)


def remove_duplicate_vertices(V, epsilon) -> VertexDeduplication:
    """Merge vertices that coincide after snapping to a grid of ``10 * epsilon``.

    With ``epsilon <= 0`` only exactly equal rows are merged. Unique vertices
    come out in lexicographic order of their (snapped) coordinates.
    """
    V = np.asarray(V, dtype=float)
    if V.ndim != 2:
        raise ValueError("V must be a two-dimensional array")
    if len(V) == 0:
        empty = np.zeros(0, dtype=int)
        return VertexDeduplication(V.copy(), empty, empty.copy())
    key = _round_half_away(V / (10.0 * epsilon)) if epsilon > 0 else V
    _, svi, svj = np.unique(key, axis=0, return_index=True, return_inverse=True)
    svi = np.asarray(svi, dtype=int).reshape(-1)
    svj = np.asarray(svj, dtype=int).reshape(-1)
    return VertexDeduplication(V[svi], svi, svj)


def remove_duplicate_tet_vertices(V, T, F, epsilon) -> TetVertexDeduplication:
    """Merge duplicate vertices and re-index tetrahedra ``T`` and faces ``F``."""
    SV, SVI, SVJ = remove_duplicate_vertices(V, epsilon)
    T = np.asarray(T, dtype=int)
    F = np.asarray(F, dtype=int)
    return TetVertexDeduplication(SV, SVI, SVJ, SVJ[T], SVJ[F])