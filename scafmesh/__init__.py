"""Triangle and tetrahedral mesh utilities: quality, duplicates, OBJ reading, flips and gradients."""

__version__ = "0.1.0"

__all__ = ["edge_flip", "mesh_io", "mesh_ops", "tet_quality"]