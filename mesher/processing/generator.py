"""Mesh generation from images, point clouds and text descriptions."""

import os
import uuid
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional, Union

import numpy as np

from mesher.core.config import MesherOptions
from mesher.core.exceptions import GenerationError
from mesher.core.mesh import Mesh
from mesher.core.metadata import (
    ImageMetadata,
    MeshMetadata,
    PointCloudMetadata,
    TextMetadata,
    utcnow,
)
from mesher.geometry import vertex_normals
from mesher.utils.logging import get_logger

logger = get_logger(__name__)

OptionsLike = Optional[Union[MesherOptions, Mapping[str, Any]]]
ImageRef = Union[str, os.PathLike]


@dataclass(frozen=True, eq=False)
class PointCloudInput:
    """Point cloud handed to a generation backend."""

    points: np.ndarray
    normals: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        points = np.array(self.points, dtype=np.float64).reshape(-1)
        if points.size == 0:
            raise ValueError("Point cloud is empty")
        if points.size % 3 != 0:
            raise ValueError("Point buffer length must be a multiple of 3")
        points.setflags(write=False)
        object.__setattr__(self, "points", points)

        if self.normals is not None:
            normals = np.array(self.normals, dtype=np.float64).reshape(-1)
            if normals.size != points.size:
                raise ValueError(
                    f"Point normals length must match points (expected {points.size}, "
                    f"got {normals.size})"
                )
            normals.setflags(write=False)
            object.__setattr__(self, "normals", normals)

    @property
    def point_count(self) -> int:
        return self.points.size // 3

    @classmethod
    def coerce(cls, cloud: Union["PointCloudInput", Mapping[str, Any], Sequence[float], np.ndarray]) -> "PointCloudInput":
        """Build a PointCloudInput from ``{"points": ..., "normals"?: ...}`` or a bare buffer.

        Raises:
            GenerationError: If the cloud is malformed
        """
        if isinstance(cloud, PointCloudInput):
            return cloud
        if isinstance(cloud, Mapping):
            if "points" not in cloud:
                raise GenerationError("point-cloud", "Point cloud requires 'points'")
            points, normals = cloud["points"], cloud.get("normals")
        else:
            points, normals = cloud, None

        try:
            return cls(points=points, normals=normals)
        except (TypeError, ValueError) as e:
            raise GenerationError("point-cloud", f"Invalid point cloud: {e}") from e


@dataclass(frozen=True)
class GenerationRequest:
    """Everything a backend needs to synthesize geometry."""

    source: str
    options: MesherOptions
    images: tuple[str, ...] = ()
    point_cloud: Optional[PointCloudInput] = None
    description: Optional[str] = None


@dataclass(frozen=True, eq=False)
class SurfaceGeometry:
    """Raw triangulated geometry produced by a backend."""

    positions: np.ndarray
    faces: np.ndarray
    uvs: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        positions = np.asarray(self.positions, dtype=np.float64).reshape(-1, 3)
        object.__setattr__(self, "positions", positions)
        object.__setattr__(self, "faces", np.asarray(self.faces, dtype=np.int64).reshape(-1, 3))
        if self.uvs is None:
            object.__setattr__(self, "uvs", np.zeros((len(positions), 2)))
        else:
            object.__setattr__(self, "uvs", np.asarray(self.uvs, dtype=np.float64).reshape(-1, 2))


class GenerationBackend(ABC):
    """Synthesizes surface geometry for a generation request.

    Real backends (multi-view reconstruction, surface fitting, text-to-3D
    inference) are typically I/O bound, hence the async contract.
    """

    @abstractmethod
    async def reconstruct(self, request: GenerationRequest) -> SurfaceGeometry:
        """Produce geometry for ``request``."""
        pass


class PlaceholderBackend(GenerationBackend):
    """Reference backend emitting a fixed unit cube for every request.

    This is not a reconstruction; it gives the validation and optimization
    stages a stable fixture.
    """

    CUBE_POSITIONS = 0.5 * np.array(
        [
            [-1, -1, -1],
            [1, -1, -1],
            [1, 1, -1],
            [-1, 1, -1],
            [-1, -1, 1],
            [1, -1, 1],
            [1, 1, 1],
            [-1, 1, 1],
        ],
        dtype=np.float64,
    )

    # Outward (counter-clockwise seen from outside) winding
    CUBE_FACES = np.array(
        [
            [0, 2, 1], [0, 3, 2],  # -z
            [4, 5, 6], [4, 6, 7],  # +z
            [0, 1, 5], [0, 5, 4],  # -y
            [3, 7, 6], [3, 6, 2],  # +y
            [0, 4, 7], [0, 7, 3],  # -x
            [1, 2, 6], [1, 6, 5],  # +x
        ],
        dtype=np.int64,
    )

    async def reconstruct(self, request: GenerationRequest) -> SurfaceGeometry:
        positions = self.CUBE_POSITIONS.copy()
        return SurfaceGeometry(
            positions=positions,
            faces=self.CUBE_FACES.copy(),
            uvs=positions[:, :2] + 0.5,
        )


class MeshGenerator:
    """Produces baseline meshes from images, point clouds or text."""

    def __init__(
        self,
        options: OptionsLike = None,
        backend: Optional[GenerationBackend] = None,
    ):
        """Initialize mesh generator.

        Args:
            options: Default options, merged under per-call options
            backend: Geometry backend (placeholder cube if None)
        """
        self.options = MesherOptions().merged(options)
        self.backend = backend or PlaceholderBackend()

    async def from_images(self, images: Union[ImageRef, Sequence[ImageRef]], options: OptionsLike = None) -> Mesh:
        """Generate a mesh from an image set.

        Args:
            images: Image URIs or paths
            options: Per-call options

        Returns:
            Generated mesh

        Raises:
            GenerationError: If no usable images are given or the backend fails
        """
        merged = self.options.merged(options)
        if isinstance(images, (str, os.PathLike)):
            images = [images]
        if not images:
            raise GenerationError("images", "At least one image is required")

        uris = []
        for position, image in enumerate(images):
            if not isinstance(image, (str, os.PathLike)):
                raise GenerationError(
                    "images", f"Image at position {position} must be a URI or path"
                )
            uris.append(os.fspath(image))

        request = GenerationRequest(source="images", options=merged, images=tuple(uris))
        geometry = await self._reconstruct(request)
        metadata = ImageMetadata(
            generation_time=utcnow(),
            options=merged,
            image_count=len(uris),
            image_uris=tuple(uris),
        )
        return self._build_mesh(geometry, metadata)

    async def from_point_cloud(
        self,
        cloud: Union[PointCloudInput, Mapping[str, Any]],
        options: OptionsLike = None,
    ) -> Mesh:
        """Generate a mesh from a point cloud ``{"points": [...], "normals"?: [...]}``.

        Raises:
            GenerationError: If the cloud is malformed or the backend fails
        """
        merged = self.options.merged(options)
        point_cloud = PointCloudInput.coerce(cloud)

        request = GenerationRequest(source="point-cloud", options=merged, point_cloud=point_cloud)
        geometry = await self._reconstruct(request)
        metadata = PointCloudMetadata(
            generation_time=utcnow(),
            options=merged,
            point_count=point_cloud.point_count,
            has_normals=point_cloud.normals is not None,
        )
        return self._build_mesh(geometry, metadata)

    async def from_text(self, description: str, options: OptionsLike = None) -> Mesh:
        """Generate a mesh from a text description.

        Raises:
            GenerationError: If the description is empty or the backend fails
        """
        merged = self.options.merged(options)
        if not isinstance(description, str) or not description.strip():
            raise GenerationError("text", "Description must be a non-empty string")

        request = GenerationRequest(source="text", options=merged, description=description)
        geometry = await self._reconstruct(request)
        metadata = TextMetadata(
            generation_time=utcnow(),
            options=merged,
            description=description,
        )
        return self._build_mesh(geometry, metadata)

    async def _reconstruct(self, request: GenerationRequest) -> SurfaceGeometry:
        try:
            return await self.backend.reconstruct(request)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(request.source, str(e)) from e

    def _build_mesh(self, geometry: SurfaceGeometry, metadata: MeshMetadata) -> Mesh:
        mesh = Mesh(
            id=f"mesh_{uuid.uuid4().hex}",
            vertices=geometry.positions,
            indices=geometry.faces,
            normals=vertex_normals(geometry.positions, geometry.faces),
            uvs=geometry.uvs,
            metadata=metadata,
        )
        logger.info(
            "mesh_generated",
            mesh_id=mesh.id,
            source=metadata.source,
            vertex_count=mesh.vertex_count,
            face_count=mesh.face_count,
        )
        return mesh
