import math

import numpy as np
import pytest

from scafmesh.edge_flip import (
    edge_flaps,
    triangle_improving_edge_flip,
    triangle_quality_by_length,
)


def _face_edges(face):
    a, b, c = (int(x) for x in face)
    return {frozenset((a, b)), frozenset((b, c)), frozenset((c, a))}


def _signed_area(V, face):
    p0, p1, p2 = (V[int(i)] for i in face)
    return (p1[0] - p0[0]) * (p2[1] - p0[1]) - (p1[1] - p0[1]) * (p2[0] - p0[0])


def _min_quality(V, F):
    return min(
        triangle_quality_by_length(
            math.dist(V[f[1]], V[f[2]]),
            math.dist(V[f[2]], V[f[0]]),
            math.dist(V[f[0]], V[f[1]]),
        )
        for f in np.asarray(F).tolist()
    )


def _check_consistency(F, E, EF, EV, EMAP):
    F = np.asarray(F)
    m = len(F)
    all_edges = set()
    for face in F:
        all_edges |= _face_edges(face)
    assert {frozenset(map(int, e)) for e in E} == all_edges
    assert len(E) == len(all_edges)
    for e, (a, b) in enumerate(E.tolist()):
        for s in (0, 1):
            f = EF[e, s]
            if f < 0:
                assert EV[e, s] == -1
                continue
            face = F[f].tolist()
            first, second = (a, b) if s == 0 else (b, a)
            i = face.index(first)
            assert face[(i + 1) % 3] == second
            assert face[(i + 2) % 3] == EV[e, s]
    for f in range(m):
        got = {frozenset(map(int, E[EMAP[c * m + f]])) for c in range(3)}
        assert got == _face_edges(F[f])


@pytest.fixture
def kite():
    V = np.array([[-2.0, 0.0], [2.0, 0.0], [0.0, 0.5], [0.0, -0.5]])
    F = np.array([[0, 3, 1], [0, 1, 2]])
    return V, F


@pytest.fixture
def square():
    V = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    F = np.array([[0, 1, 2], [0, 2, 3]])
    return V, F


def test_quality_is_scale_invariant():
    assert triangle_quality_by_length(3.0, 4.0, 5.0) == pytest.approx(
        triangle_quality_by_length(6.0, 8.0, 10.0)
    )


def test_quality_is_symmetric():
    q = triangle_quality_by_length(2.0, 3.0, 4.0)
    assert triangle_quality_by_length(4.0, 2.0, 3.0) == pytest.approx(q)
    assert triangle_quality_by_length(3.0, 4.0, 2.0) == pytest.approx(q)


def test_quality_of_degenerate_and_impossible_triangles_is_zero():
    assert triangle_quality_by_length(1.0, 1.0, 2.0) == 0.0
    assert triangle_quality_by_length(1.0, 1.0, 3.0) == 0.0


def test_equilateral_beats_thin():
    assert triangle_quality_by_length(1.0, 1.0, 1.0) > triangle_quality_by_length(
        1.0, 1.0, 1.9
    )


def test_edge_flaps_square(square):
    _, F = square
    E, EF, EV, EMAP = edge_flaps(F)
    assert len(E) == 5
    interior = [e for e in range(len(E)) if (EF[e] >= 0).all()]
    assert len(interior) == 1
    assert frozenset(E[interior[0]].tolist()) == frozenset((0, 2))
    assert sum(1 for e in range(len(E)) if (EF[e] == -1).any()) == 4
    m = len(F)
    for f in range(m):
        for c in range(3):
            expected = {int(F[f, (c + 1) % 3]), int(F[f, (c + 2) % 3])}
            assert set(E[EMAP[c * m + f]].tolist()) == expected
    _check_consistency(F, E, EF, EV, EMAP)


def test_edge_flaps_rejects_non_triangles():
    with pytest.raises(ValueError):
        edge_flaps(np.array([[0, 1, 2, 3]]))


def test_kite_flips_long_diagonal(kite):
    V, F = kite
    F_before = F.copy()
    result = triangle_improving_edge_flip(V, F, *edge_flaps(F))
    assert np.array_equal(F, F_before)
    edges = {frozenset(map(int, e)) for e in result.E}
    assert frozenset((2, 3)) in edges
    assert frozenset((0, 1)) not in edges
    assert {frozenset(map(int, f)) for f in result.F} == {
        frozenset((0, 2, 3)),
        frozenset((1, 2, 3)),
    }
    for face in result.F:
        assert _signed_area(V, face) > 0
    assert _min_quality(V, result.F) > _min_quality(V, F)
    _check_consistency(result.F, result.E, result.EF, result.EV, result.EMAP)


def test_square_is_left_alone(square):
    V, F = square
    flaps = edge_flaps(F)
    result = triangle_improving_edge_flip(V, F, *flaps)
    assert np.array_equal(result.F, F)
    assert np.array_equal(result.E, flaps.E)
    assert np.array_equal(result.EMAP, flaps.EMAP)


def test_jittered_grid_invariants():
    rng = np.random.default_rng(0)
    n = 5
    xs, ys = np.meshgrid(np.arange(n, dtype=float), np.arange(n, dtype=float))
    V = np.stack([xs.ravel() * 3.0, ys.ravel()], axis=1)
    interior = (
        (xs.ravel() > 0) & (xs.ravel() < n - 1) & (ys.ravel() > 0) & (ys.ravel() < n - 1)
    )
    V[interior] += rng.uniform(-0.2, 0.2, size=(int(interior.sum()), 2))
    faces = []
    for j in range(n - 1):
        for i in range(n - 1):
            a = j * n + i
            b, c, d = a + 1, a + n + 1, a + n
            faces += [[a, b, c], [a, c, d]]
    F = np.array(faces)
    for face in F:
        assert _signed_area(V, face) > 0

    result = triangle_improving_edge_flip(V, F, *edge_flaps(F))
    assert len(result.F) == len(F)
    for face in result.F:
        assert _signed_area(V, face) > 0
    assert _min_quality(V, result.F) >= _min_quality(V, F) - 1e-12
    assert not np.array_equal(np.sort(result.F, axis=1), np.sort(F, axis=1))
    _check_consistency(result.F, result.E, result.EF, result.EV, result.EMAP)


def test_rejects_non_planar_vertices(kite):
    V, F = kite
    V3 = np.hstack([V, np.zeros((len(V), 1))])
    with pytest.raises(ValueError):
        triangle_improving_edge_flip(V3, F, *edge_flaps(F))