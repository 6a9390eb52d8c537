"""Mesh value type shared by every pipeline stage."""

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np
import trimesh

from mesher.core.exceptions import StructuralError
from mesher.core.metadata import MeshMetadata, parse_metadata

REQUIRED_PROPERTIES = ("id", "vertices", "indices", "normals", "uvs", "metadata")


def _frozen_array(values: Any, dtype: Any = None) -> np.ndarray:
    """Copy ``values`` into a flat, read-only array."""
    array = np.array(values, dtype=dtype).reshape(-1)
    array.setflags(write=False)
    return array


def _index_array(values: Any) -> np.ndarray:
    array = np.array(values).reshape(-1)
    if array.size == 0:
        array = array.astype(np.int64)
    elif array.dtype.kind == "f" and np.all(np.isfinite(array)) and np.all(array == np.round(array)):
        # JSON numbers such as 3.0 are valid indices
        array = array.astype(np.int64)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class Mesh:
    """Triangulated surface described by flat vertex/index/normal/UV buffers.

    Every buffer is copied on construction and made read-only, so a Mesh
    never shares memory with the caller and can't be changed in place.
    Stages produce new meshes through :meth:`replace`.

    Construction does not check the mesh invariants; use
    :class:`mesher.processing.MeshValidator` for that.
    """

    id: str
    vertices: np.ndarray
    indices: np.ndarray
    normals: np.ndarray
    uvs: np.ndarray
    metadata: MeshMetadata
    material_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "vertices", _frozen_array(self.vertices, np.float64))
        object.__setattr__(self, "indices", _index_array(self.indices))
        object.__setattr__(self, "normals", _frozen_array(self.normals, np.float64))
        object.__setattr__(self, "uvs", _frozen_array(self.uvs, np.float64))

    @property
    def vertex_count(self) -> int:
        return len(self.vertices) // 3

    @property
    def face_count(self) -> int:
        return len(self.indices) // 3

    @property
    def positions(self) -> np.ndarray:
        """Vertex positions as an (N, 3) view."""
        return self.vertices.reshape(-1, 3)

    @property
    def faces(self) -> np.ndarray:
        """Triangles as an (F, 3) view."""
        return self.indices.reshape(-1, 3)

    def replace(self, **changes: Any) -> "Mesh":
        """Return a new mesh with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON-compatible wire shape.

        Returns:
            Dictionary with camelCase keys and plain lists
        """
        data = {
            "id": self.id,
            "vertices": self.vertices.tolist(),
            "indices": self.indices.tolist(),
            "normals": self.normals.tolist(),
            "uvs": self.uvs.tolist(),
            "metadata": self.metadata.to_wire(),
        }
        if self.material_id is not None:
            data["materialId"] = self.material_id
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Mesh":
        """Create a mesh from its wire shape.

        Args:
            data: Mapping with the keys listed in ``REQUIRED_PROPERTIES``
                and an optional ``materialId``

        Returns:
            Mesh instance

        Raises:
            StructuralError: If a property is missing or malformed
        """
        if not isinstance(data, Mapping):
            raise StructuralError("Mesh must be an object")
        for prop in REQUIRED_PROPERTIES:
            if prop not in data:
                raise StructuralError(f"Missing required property: {prop}")

        try:
            return cls(
                id=str(data["id"]),
                vertices=data["vertices"],
                indices=data["indices"],
                normals=data["normals"],
                uvs=data["uvs"],
                metadata=parse_metadata(data["metadata"]),
                material_id=data.get("materialId", data.get("material_id")),
            )
        except (TypeError, ValueError) as e:
            raise StructuralError(f"Malformed mesh buffers: {e}") from e

    def to_trimesh(self) -> trimesh.Trimesh:
        """Build a trimesh object sharing this mesh's geometry.

        The result is not processed (no merging or reordering), so vertex
        and face indices line up with this mesh.
        """
        return trimesh.Trimesh(
            vertices=self.positions.copy(),
            faces=self.faces.copy(),
            vertex_normals=self.normals.reshape(-1, 3).copy(),
            process=False,
        )
