"""Reading Wavefront OBJ meshes, optionally cut along their UV seams."""

from __future__ import annotations

import os
from dataclasses import dataclass

import numpy as np


@dataclass
class ObjMesh:
    """Contents of an OBJ file, with zero-based face indices."""

    V: np.ndarray
    TC: np.ndarray
    N: np.ndarray
    F: np.ndarray
    FTC: np.ndarray
    FN: np.ndarray


def _to_matrix(rows, width: int, dtype, what: str) -> np.ndarray:
    if not rows:
        return np.zeros((0, width), dtype=dtype)
    widths = {len(r) for r in rows}
    if len(widths) != 1:
        raise ValueError(f"{what} rows have differing lengths: {sorted(widths)}")
    return np.array(rows, dtype=dtype)


def _floats(tokens, keyword: str, lineno: int) -> list[float]:
    try:
        return [float(t) for t in tokens]
    except ValueError as exc:
        raise ValueError(f"line {lineno}: bad number in '{keyword}' entry") from exc


def _resolve(token: str, count: int, lineno: int) -> int:
    try:
        index = int(token)
    except ValueError as exc:
        raise ValueError(f"line {lineno}: bad index '{token}'") from exc
    if index > 0:
        return index - 1
    if index < 0:
        return count + index
    raise ValueError(f"line {lineno}: index 0 is not valid in OBJ")


def read_obj(filename: str | os.PathLike) -> ObjMesh:
    """Read vertices, texture coordinates, normals and faces from an OBJ file."""
    V: list[list[float]] = []
    TC: list[list[float]] = []
    N: list[list[float]] = []
    F: list[list[int]] = []
    FTC: list[list[int]] = []
    FN: list[list[int]] = []

    with open(filename, encoding="utf-8") as stream:
        for lineno, raw in enumerate(stream, start=1):
            line = raw.split("#", 1)[0].strip()
            if not line:
                continue
            keyword, *tokens = line.split()
            if keyword == "v":
                V.append(_floats(tokens, keyword, lineno))
            elif keyword == "vt":
                TC.append(_floats(tokens, keyword, lineno))
            elif keyword == "vn":
                N.append(_floats(tokens, keyword, lineno))
            elif keyword == "f":
                if len(tokens) < 3:
                    raise ValueError(f"line {lineno}: face with fewer than 3 corners")
                face, face_tc, face_n = [], [], []
                for corner in tokens:
                    parts = corner.split("/")
                    face.append(_resolve(parts[0], len(V), lineno))
                    if len(parts) > 1 and parts[1]:
                        face_tc.append(_resolve(parts[1], len(TC), lineno))
                    if len(parts) > 2 and parts[2]:
                        face_n.append(_resolve(parts[2], len(N), lineno))
                F.append(face)
                for collected, target, name in (
                    (face_tc, FTC, "texture"),
                    (face_n, FN, "normal"),
                ):
                    if collected and len(collected) != len(face):
                        raise ValueError(
                            f"line {lineno}: {name} indices missing on some corners"
                        )
                    if collected:
                        target.append(collected)

    return ObjMesh(
        V=_to_matrix(V, 3, float, "vertex"),
        TC=_to_matrix(TC, 2, float, "texture coordinate"),
        N=_to_matrix(N, 3, float, "normal"),
        F=_to_matrix(F, 3, int, "face"),
        FTC=_to_matrix(FTC, 3, int, "face texture"),
        FN=_to_matrix(FN, 3, int, "face normal"),
    )


def read_mesh_with_uv_seam(filename: str | os.PathLike) -> tuple[np.ndarray, np.ndarray]:
    """Read a triangle mesh, splitting vertices so each UV corner gets its own.

    Returns ``(V, F)``: with texture coordinates present, ``V`` has one row per
    texture coordinate and ``F`` holds the texture indices; otherwise the
    positions and faces are returned unchanged.
    """
    mesh = read_obj(filename)
    if len(mesh.TC) == 0:
        return mesh.V, mesh.F

    out_V = np.zeros((len(mesh.TC), mesh.V.shape[1]))
    rows = min(len(mesh.FTC), len(mesh.F))
    uv_corners = mesh.FTC[:rows, :3].reshape(-1)
    pos_corners = mesh.F[:rows, :3].reshape(-1)
    if uv_corners.size:
        first_uv, first_at = np.unique(uv_corners, return_index=True)
        out_V[first_uv] = mesh.V[pos_corners[first_at]]
    return out_V, mesh.FTC