"""Mesh validation and descriptive statistics."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import numpy as np

from mesher.core.config import ValidationConfig
from mesher.core.exceptions import (
    BoundsError,
    GeometricError,
    MeshValidationError,
    StructuralError,
)
from mesher.core.mesh import REQUIRED_PROPERTIES, Mesh
from mesher.core.metadata import GENERATION_TIME_KEYS, MeshMetadata, parse_metadata
from mesher.geometry import BoundingBox, bounding_box, signed_volumes, triangle_areas
from mesher.utils.logging import get_logger

logger = get_logger(__name__)

BYTES_PER_FLOAT = 8
BYTES_PER_INDEX = 4
# Assumed size of a compressed buffer relative to the raw one
ASSUMED_COMPRESSION = 0.5


def estimate_buffer_bytes(vertex_count: int, face_count: int) -> int:
    """Raw byte size of the position, normal, UV and index buffers."""
    return vertex_count * (3 + 3 + 2) * BYTES_PER_FLOAT + face_count * 3 * BYTES_PER_INDEX


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of :meth:`MeshValidator.validate`.

    Failures are returned rather than raised; ``raise_for_error`` re-raises
    the underlying exception for callers that prefer exceptions.
    """

    valid: bool
    error: Optional[str] = None
    exception: Optional[MeshValidationError] = field(default=None, repr=False, compare=False)

    @property
    def category(self) -> Optional[str]:
        """``structural``, ``bounds`` or ``geometric`` for failures."""
        return self.exception.category if self.exception is not None else None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def failure(cls, exc: MeshValidationError) -> "ValidationResult":
        return cls(valid=False, error=str(exc), exception=exc)

    def __bool__(self) -> bool:
        return self.valid

    def raise_for_error(self) -> None:
        if self.exception is not None:
            raise self.exception

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"valid": self.valid}
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class MeshStatistics:
    """Descriptive statistics of a mesh."""

    vertex_count: int
    face_count: int
    bounding_box: BoundingBox
    volume: float
    surface_area: float
    compression_ratio: float
    raw_size_bytes: int
    estimated_compressed_bytes: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "vertexCount": self.vertex_count,
            "faceCount": self.face_count,
            "boundingBox": self.bounding_box.to_dict(),
            "volume": self.volume,
            "surfaceArea": self.surface_area,
            "compressionRatio": self.compression_ratio,
        }


class MeshValidator:
    """Checks structural integrity and geometric sanity of meshes."""

    # Thresholds for validation
    NORMAL_TOLERANCE = 0.1
    MIN_FACE_AREA = 1e-6

    def __init__(
        self,
        normal_tolerance: Optional[float] = None,
        min_face_area: Optional[float] = None,
    ):
        """Initialize mesh validator.

        Args:
            normal_tolerance: Allowed deviation of a normal's length from 1.0
            min_face_area: Faces with a smaller area are degenerate
        """
        self.normal_tolerance = (
            self.NORMAL_TOLERANCE if normal_tolerance is None else normal_tolerance
        )
        self.min_face_area = self.MIN_FACE_AREA if min_face_area is None else min_face_area

    @classmethod
    def from_config(cls, config: ValidationConfig) -> "MeshValidator":
        return cls(
            normal_tolerance=config.normal_tolerance,
            min_face_area=config.min_face_area,
        )

    def validate(self, mesh: Union[Mesh, Mapping[str, Any], None]) -> ValidationResult:
        """Validate a mesh, stopping at the first problem.

        Checks run in a fixed order: required properties, vertices, indices,
        normals, UVs, metadata, degenerate faces, non-manifold edges.

        The manifold check assumes a closed surface: any edge used by an odd
        number of triangles is rejected, which includes the boundary edges of
        legitimately open meshes.

        Args:
            mesh: Mesh instance or its wire mapping

        Returns:
            ValidationResult; never raises for invalid meshes
        """
        try:
            self._check(mesh)
        except MeshValidationError as e:
            logger.debug("mesh_invalid", error=str(e), category=e.category)
            return ValidationResult.failure(e)
        return ValidationResult.ok()

    def _check(self, mesh: Union[Mesh, Mapping[str, Any], None]) -> None:
        fields = self._fields(mesh)

        vertices = self._check_vertices(fields["vertices"])
        vertex_count = len(vertices) // 3
        indices = self._check_indices(fields["indices"], vertex_count)
        self._check_normals(fields["normals"], vertex_count)
        self._check_uvs(fields["uvs"], vertex_count)
        self._check_metadata(fields["metadata"])

        positions = vertices.reshape(-1, 3)
        faces = indices.reshape(-1, 3)
        self._check_degenerate_faces(positions, faces)
        self._check_manifold_edges(faces)

    def _fields(self, mesh: Union[Mesh, Mapping[str, Any], None]) -> dict[str, Any]:
        if mesh is None:
            raise StructuralError("Mesh is undefined")

        if isinstance(mesh, Mesh):
            fields = {prop: getattr(mesh, prop) for prop in REQUIRED_PROPERTIES}
        elif isinstance(mesh, Mapping):
            for prop in REQUIRED_PROPERTIES:
                if prop not in mesh:
                    raise StructuralError(f"Missing required property: {prop}")
            fields = {prop: mesh[prop] for prop in REQUIRED_PROPERTIES}
        else:
            raise StructuralError(
                f"Mesh must be a Mesh or a mapping, got {type(mesh).__name__}"
            )

        if not isinstance(fields["id"], str) or not fields["id"]:
            raise StructuralError("Mesh id must be a non-empty string")
        return fields

    def _numeric_array(self, values: Any, name: str) -> np.ndarray:
        label = name.capitalize()
        if isinstance(values, (str, bytes)) or not isinstance(values, (Sequence, np.ndarray)):
            raise StructuralError(f"{label} must be an array")
        try:
            array = np.asarray(values)
        except (TypeError, ValueError):
            raise StructuralError(f"{label} must be a flat array of numbers")
        if array.ndim != 1:
            raise StructuralError(f"{label} must be a flat array of numbers")
        if array.size and array.dtype.kind not in "iuf":
            raise StructuralError(f"{label} must contain only numbers")
        return array

    def _check_vertices(self, values: Any) -> np.ndarray:
        array = self._numeric_array(values, "vertices")

        if len(array) % 3 != 0:
            raise StructuralError("Vertices array length must be a multiple of 3")
        if len(array) == 0:
            raise StructuralError("Vertices array cannot be empty")

        bad = np.flatnonzero(~np.isfinite(array))
        if bad.size:
            raise GeometricError(f"Invalid vertex value at index {bad[0]}")

        return array.astype(np.float64)

    def _check_indices(self, values: Any, vertex_count: int) -> np.ndarray:
        array = self._numeric_array(values, "indices")

        if len(array) % 3 != 0:
            raise StructuralError("Indices array length must be a multiple of 3")
        if len(array) == 0:
            raise StructuralError("Indices array cannot be empty")

        if array.dtype.kind == "f":
            with np.errstate(invalid="ignore"):
                non_integer = np.flatnonzero(~np.isfinite(array) | (np.mod(array, 1) != 0))
            if non_integer.size:
                raise StructuralError(f"Index must be an integer at index {non_integer[0]}")
            array = array.astype(np.int64)

        out_of_bounds = np.flatnonzero((array < 0) | (array >= vertex_count))
        if out_of_bounds.size:
            position = int(out_of_bounds[0])
            raise BoundsError(position, int(array[position]), vertex_count)

        return array.astype(np.int64)

    def _check_normals(self, values: Any, vertex_count: int) -> None:
        array = self._numeric_array(values, "normals")

        if len(array) != vertex_count * 3:
            raise StructuralError(
                "Normals array length must match vertex count "
                f"(expected {vertex_count * 3}, got {len(array)})"
            )

        bad = np.flatnonzero(~np.isfinite(array))
        if bad.size:
            raise GeometricError(f"Invalid normal value at index {bad[0]}")

        lengths = np.linalg.norm(array.astype(np.float64).reshape(-1, 3), axis=1)
        off_unit = np.flatnonzero(np.abs(lengths - 1.0) > self.normal_tolerance)
        if off_unit.size:
            vertex = int(off_unit[0])
            raise GeometricError(
                f"Normal at vertex {vertex} is not unit length (length {lengths[vertex]:.4f})"
            )

    def _check_uvs(self, values: Any, vertex_count: int) -> None:
        array = self._numeric_array(values, "uvs")

        if len(array) != vertex_count * 2:
            raise StructuralError(
                "UVs array length must match vertex count "
                f"(expected {vertex_count * 2}, got {len(array)})"
            )

        bad = np.flatnonzero(~np.isfinite(array))
        if bad.size:
            raise GeometricError(f"Invalid UV value at index {bad[0]}")

    def _check_metadata(self, metadata: Any) -> None:
        if isinstance(metadata, MeshMetadata):
            data = metadata.model_dump(by_alias=True)
        elif isinstance(metadata, Mapping):
            data = metadata
        else:
            raise StructuralError("Metadata must be an object")

        if not data.get("source"):
            raise StructuralError("Metadata missing required key: source")
        if all(data.get(key) is None for key in GENERATION_TIME_KEYS):
            raise StructuralError("Metadata missing required key: generationTime")

        if isinstance(metadata, Mapping):
            # Raises StructuralError for values Mesh.from_dict would reject
            parse_metadata(metadata)

    def _check_degenerate_faces(self, positions: np.ndarray, faces: np.ndarray) -> None:
        areas = triangle_areas(positions, faces)
        degenerate = np.flatnonzero(areas < self.min_face_area)
        if degenerate.size:
            face = int(degenerate[0])
            raise GeometricError(f"Degenerate face at index {face} (area {areas[face]:.3e})")

    def _check_manifold_edges(self, faces: np.ndarray) -> None:
        edges = np.concatenate([faces[:, [0, 1]], faces[:, [1, 2]], faces[:, [2, 0]]])
        edges = np.sort(edges, axis=1)
        unique_edges, counts = np.unique(edges, axis=0, return_counts=True)

        odd = np.flatnonzero(counts % 2 == 1)
        if odd.size:
            a, b = unique_edges[odd[0]]
            raise GeometricError(
                f"Non-manifold edge between vertices {a} and {b} "
                f"(shared by {counts[odd[0]]} face(s))"
            )

    def calculate_statistics(self, mesh: Mesh) -> MeshStatistics:
        """Compute descriptive statistics of a validated mesh.

        Volume is the absolute sum of origin-relative signed tetrahedron
        volumes, which is only meaningful for closed, consistently wound
        meshes. The compression ratio is a heuristic based on an assumed
        50% compressed size, not a measured figure.

        Args:
            mesh: Mesh to measure

        Returns:
            MeshStatistics
        """
        positions = mesh.positions
        faces = mesh.faces

        volume = abs(float(np.sum(signed_volumes(positions, faces))))
        surface_area = float(np.sum(triangle_areas(positions, faces)))

        float_entries = len(mesh.vertices) + len(mesh.normals) + len(mesh.uvs)
        raw_size = float_entries * BYTES_PER_FLOAT + len(mesh.indices) * BYTES_PER_INDEX
        compressed_size = int(raw_size * ASSUMED_COMPRESSION)

        return MeshStatistics(
            vertex_count=mesh.vertex_count,
            face_count=mesh.face_count,
            bounding_box=bounding_box(positions),
            volume=volume,
            surface_area=surface_area,
            compression_ratio=raw_size / compressed_size if compressed_size else 0.0,
            raw_size_bytes=raw_size,
            estimated_compressed_bytes=compressed_size,
        )


def validate_mesh(mesh: Union[Mesh, Mapping[str, Any], None]) -> ValidationResult:
    """Convenience function to validate a mesh with default thresholds."""
    return MeshValidator().validate(mesh)


def calculate_statistics(mesh: Mesh) -> MeshStatistics:
    """Convenience function to compute mesh statistics."""
    return MeshValidator().calculate_statistics(mesh)
