"""Shared numeric routines for triangle meshes."""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box."""

    min: tuple[float, float, float]
    max: tuple[float, float, float]

    @property
    def extents(self) -> np.ndarray:
        return np.asarray(self.max) - np.asarray(self.min)

    @property
    def center(self) -> np.ndarray:
        return (np.asarray(self.max) + np.asarray(self.min)) / 2.0

    def to_dict(self) -> dict:
        return {"min": list(self.min), "max": list(self.max)}


def face_normal(v0: np.ndarray, v1: np.ndarray, v2: np.ndarray) -> np.ndarray:
    """Unnormalized normal of triangle (v0, v1, v2).

    Args:
        v0: First corner (3,)
        v1: Second corner (3,)
        v2: Third corner (3,)

    Returns:
        Cross product of ``v1 - v0`` and ``v2 - v0``
    """
    v0 = np.asarray(v0, dtype=np.float64)
    return np.cross(np.asarray(v1, dtype=np.float64) - v0, np.asarray(v2, dtype=np.float64) - v0)


def triangle_area(v0: np.ndarray, v1: np.ndarray, v2: np.ndarray) -> float:
    """Area of triangle (v0, v1, v2)."""
    return float(np.linalg.norm(face_normal(v0, v1, v2)) / 2.0)


def tetrahedron_signed_volume(v0: np.ndarray, v1: np.ndarray, v2: np.ndarray) -> float:
    """Signed volume of the tetrahedron spanned by the origin and a triangle.

    Summed over every face of a closed, consistently wound mesh this gives
    the enclosed volume (positive for outward winding).
    """
    v0, v1, v2 = (np.asarray(v, dtype=np.float64) for v in (v0, v1, v2))
    return float(np.dot(v0, np.cross(v1, v2)) / 6.0)


def bounding_box(vertices: np.ndarray) -> BoundingBox:
    """Component-wise min/max over all vertex triples.

    Args:
        vertices: Flat (3N,) or (N, 3) vertex positions

    Returns:
        BoundingBox of the positions

    Raises:
        ValueError: If there are no vertices
    """
    positions = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
    if len(positions) == 0:
        raise ValueError("Cannot compute bounding box of an empty vertex set")
    lo = positions.min(axis=0)
    hi = positions.max(axis=0)
    return BoundingBox(
        min=(float(lo[0]), float(lo[1]), float(lo[2])),
        max=(float(hi[0]), float(hi[1]), float(hi[2])),
    )


def _corners(positions: np.ndarray, faces: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    return positions[faces[:, 0]], positions[faces[:, 1]], positions[faces[:, 2]]


def face_normals(positions: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """Unnormalized normal of every face, shape (F, 3)."""
    v0, v1, v2 = _corners(positions, faces)
    return np.cross(v1 - v0, v2 - v0)


def triangle_areas(positions: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """Area of every face, shape (F,)."""
    return np.linalg.norm(face_normals(positions, faces), axis=1) / 2.0


def signed_volumes(positions: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """Origin-relative signed tetrahedron volume of every face, shape (F,)."""
    v0, v1, v2 = _corners(positions, faces)
    return np.einsum("ij,ij->i", v0, np.cross(v1, v2)) / 6.0


def vertex_normals(positions: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """Vertex-averaged normals, shape (N, 3).

    Each face normal is normalized and added to the accumulator of its
    three corners; every accumulator is then renormalized. Zero-area faces
    contribute nothing and a vertex whose accumulator is exactly zero keeps
    a zero normal.

    Args:
        positions: Flat (3N,) or (N, 3) vertex positions
        faces: Flat (3F,) or (F, 3) triangle indices

    Returns:
        Array of per-vertex normals
    """
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)

    normals = face_normals(positions, faces)
    lengths = np.linalg.norm(normals, axis=1)
    unit = np.zeros_like(normals)
    nonzero = lengths > 0
    unit[nonzero] = normals[nonzero] / lengths[nonzero, None]

    accumulated = np.zeros_like(positions)
    for corner in range(3):
        np.add.at(accumulated, faces[:, corner], unit)

    lengths = np.linalg.norm(accumulated, axis=1)
    nonzero = lengths > 0
    accumulated[nonzero] /= lengths[nonzero, None]
    return accumulated
