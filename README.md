# scafmesh

Helpers for triangle and tetrahedral meshes held as NumPy arrays: tetrahedron
quality measures, duplicate-vertex merging, OBJ reading, flip detection in 2D
parameterisations, a robust per-face gradient operator and greedy
quality-improving edge flips.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Modules

### `scafmesh.tet_quality`

- `ms_length(a, b, c, d)` and `rms_length(a, b, c, d)`: mean squared and root
  mean squared length of the six edges of a tetrahedron.
- `signed_volume(a, b, c, d)`: signed volume of the tetrahedron.
- `quality(a, b, c, d)`: volume over cubed RMS edge length, scaled so that a
  regular tetrahedron scores (almost exactly) one; the sign follows the
  orientation, and a tet whose corners all coincide gives NaN.
- `remove_duplicate_vertices(V, epsilon)`: merge vertices that fall on the same
  point after snapping to a grid of `10 * epsilon` (with `epsilon <= 0`, only
  exactly equal rows). Returns a `VertexDeduplication` named tuple
  `(SV, SVI, SVJ)` with `SV = V[SVI]` and `V ≈ SV[SVJ]`; unique vertices come
  out in lexicographic order of their snapped coordinates.
- `remove_duplicate_tet_vertices(V, T, F, epsilon)`: the same, also returning
  the tetrahedra and faces re-indexed (`TetVertexDeduplication`:
  `SV, SVI, SVJ, ST, SF`).

### `scafmesh.mesh_io`

- `read_obj(filename)` returns an `ObjMesh` dataclass with `V`, `TC`, `N`, `F`,
  `FTC` and `FN`; face indices are zero-based and negative (relative) OBJ
  indices are resolved. Malformed lines raise `ValueError`.
- `read_mesh_with_uv_seam(filename)` returns `(V, F)` with one vertex per
  texture coordinate and the texture indices as faces, so the mesh is cut along
  its UV seams. Without texture coordinates, positions and faces come back
  unchanged.

### `scafmesh.mesh_ops`

- `edge_lengths(V, F)`: lengths for edges (#F×2), triangles (column `i` is the
  edge opposite corner `i`) or tetrahedra (edges [3,0], [3,1], [3,2], [1,2],
  [2,0], [0,1]).
- `remove_duplicates(V, F, epsilon)`: merge vertices closer than `epsilon`,
  keeping first occurrences in order; returns `DuplicateRemoval(NV, NF, I)`.
- `mesh_cat(V1, F1, V2, F2)`: join two meshes and merge coincident vertices;
  raises `ValueError` if their column counts differ.
- `soft_cat(dim, A, B)`: stack two sparse matrices (`dim=1` vertically, `dim=2`
  horizontally), padding the other dimension to the larger size; an empty
  operand yields a copy of the other. Returns a `scipy.sparse.csc_matrix`.
- `polar_svd2x2(A)`: closed-form SVD and polar decomposition of a 2×2 matrix,
  returned as `PolarSVD(R, T, U, S, V)` with `A = R @ T`.
- `get_flips(V, F, uv)` and `count_flips(V, F, uv)`: indices and number of
  faces whose UV triangle has negative orientation.
- `get_obtuse_angle(V, face)`: corner (0, 1 or 2) with an obtuse angle, or -1.
- `adjusted_grad(V, F, eps)`: sparse per-face gradient operator of shape
  `(3 * #F, #V)`; triangles whose doubled area does not exceed `eps` are
  replaced by an equilateral triangle of that area.

### `scafmesh.edge_flip`

- `edge_flaps(F)`: unique edges with adjacent faces, opposite vertices and the
  corner-to-edge map, as `EdgeFlaps(E, EF, EV, EMAP)`.
- `triangle_quality_by_length(a, b, c)`: area over the sum of squared edge
  lengths.
- `triangle_improving_edge_flip(V, F, E, EF, EV, EMAP)`: on a planar (2D)
  triangle mesh, greedily flip interior edges while the worse triangle of the
  flap improves by more than `MIN_IMPROVEMENT`. Inputs are left untouched;
  updated copies come back as `FlipResult(F, E, EF, EV, EMAP)`.

## Example

```python
import numpy as np
from scafmesh.tet_quality import quality
from scafmesh.mesh_ops import count_flips
from scafmesh.edge_flip import edge_flaps, triangle_improving_edge_flip

a, b, c, d = np.eye(3)[0], np.eye(3)[1], np.eye(3)[2], np.zeros(3)
print(quality(a, b, c, d))

V = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
F = np.array([[0, 1, 2]])
print(count_flips(V, F, V))  # 0

flaps = edge_flaps(F)
result = triangle_improving_edge_flip(V, F, *flaps)
print(result.F)
```

## What it does not do

The package works on arrays only. It has no command-line program, no viewer
or screenshot output, no mesh writing, no tetrahedral mesh generation and no
tetrahedral topology improvement (edge removal, face removal, smoothing); the
edge flipping covers planar triangle meshes only.