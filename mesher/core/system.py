"""Orchestrator sequencing generation, validation and optimization."""

import time
from collections.abc import Awaitable, Mapping
from typing import Any, Callable, Dict, Optional, Union

from mesher.core.config import Config, MesherOptions
from mesher.core.mesh import Mesh
from mesher.processing import (
    MeshGenerator,
    MeshOptimizer,
    MeshStatistics,
    MeshValidator,
    PointCloudInput,
    ValidationResult,
)
from mesher.utils.logging import StructuredLogger, get_logger, log_mesher_result

logger = get_logger(__name__)

OptionsLike = Optional[Union[MesherOptions, Mapping[str, Any]]]
MeshLike = Union[Mesh, Mapping[str, Any]]


class MesherResult:
    """Result of an orchestrated generation call."""

    def __init__(
        self,
        success: bool,
        mesh: Optional[Mesh] = None,
        error: Optional[str] = None,
        metrics: Optional[Dict[str, Any]] = None,
    ):
        """Initialize mesher result.

        Args:
            success: Whether every stage succeeded
            mesh: Optimized mesh (if successful)
            error: Error message (if failed)
            metrics: Timings and vertex/face counts
        """
        self.success = success
        self.mesh = mesh
        self.error = error
        self.metrics = metrics or {}
        self.timestamp = time.time()

    def to_dict(self) -> Dict[str, Any]:
        """Wire envelope ``{success, mesh?, error?}``."""
        data: Dict[str, Any] = {"success": self.success}
        if self.mesh is not None:
            data["mesh"] = self.mesh.to_dict()
        if self.error is not None:
            data["error"] = self.error
        return data


class MesherSystem:
    """Entry point of the mesh pipeline.

    Merges caller options over the system defaults, then runs
    generator -> validator -> optimizer. Any failure, raised or returned,
    becomes ``MesherResult(success=False, error=...)``; a partial mesh is
    never returned. The default options are fixed at construction.
    """

    def __init__(
        self,
        options: OptionsLike = None,
        config: Optional[Config] = None,
        generator: Optional[MeshGenerator] = None,
        validator: Optional[MeshValidator] = None,
        optimizer: Optional[MeshOptimizer] = None,
    ):
        """Initialize mesher system.

        Args:
            options: Default options, merged over ``config.mesher``
            config: Configuration object
            generator: Mesh generator (placeholder backend if not provided)
            validator: Mesh validator (built from ``config.validation`` if not provided)
            optimizer: Mesh optimizer (built from ``config.optimizer`` if not provided)
        """
        self.config = config or Config()
        self._options = self.config.mesher.merged(options)

        self.generator = generator or MeshGenerator(self._options)
        self.validator = validator or MeshValidator.from_config(self.config.validation)
        self.optimizer = optimizer or MeshOptimizer.from_config(self.config, self._options)

    @property
    def options(self) -> MesherOptions:
        """Default options of this system (immutable)."""
        return self._options

    async def generate_from_images(self, images: Any, options: OptionsLike = None) -> MesherResult:
        """Generate, validate and optimize a mesh from an image set."""
        return await self._run(
            "generate_from_images",
            lambda merged: self.generator.from_images(images, merged),
            options,
        )

    async def generate_from_point_cloud(
        self,
        cloud: Union[PointCloudInput, Mapping[str, Any]],
        options: OptionsLike = None,
    ) -> MesherResult:
        """Generate, validate and optimize a mesh from a point cloud."""
        return await self._run(
            "generate_from_point_cloud",
            lambda merged: self.generator.from_point_cloud(cloud, merged),
            options,
        )

    async def generate_from_text(self, description: str, options: OptionsLike = None) -> MesherResult:
        """Generate, validate and optimize a mesh from a text description."""
        return await self._run(
            "generate_from_text",
            lambda merged: self.generator.from_text(description, merged),
            options,
        )

    async def _run(
        self,
        operation: str,
        generate: Callable[[MesherOptions], Awaitable[Mesh]],
        options: OptionsLike,
    ) -> MesherResult:
        start_time = time.perf_counter()
        metrics: Dict[str, Any] = {}

        try:
            with StructuredLogger(logger, operation) as op:
                merged = self._options.merged(options)

                # 1. Generate
                mesh = await generate(merged)
                metrics["generation_time"] = time.perf_counter() - start_time
                metrics["vertex_count"] = mesh.vertex_count
                metrics["face_count"] = mesh.face_count
                op.update_context(mesh_id=mesh.id)

                # 2. Validate (fail fast)
                validation = self.validator.validate(mesh)
                metrics["validation_time"] = (
                    time.perf_counter() - start_time - metrics["generation_time"]
                )

                if not validation.valid:
                    result = MesherResult(
                        success=False,
                        error=f"Generated mesh failed validation: {validation.error}",
                        metrics=metrics,
                    )
                else:
                    # 3. Optimize
                    optimized = self.optimizer.optimize(mesh, merged)
                    metrics["optimization_time"] = (
                        time.perf_counter()
                        - start_time
                        - metrics["generation_time"]
                        - metrics["validation_time"]
                    )
                    metrics["optimized_vertex_count"] = optimized.vertex_count
                    metrics["optimized_face_count"] = optimized.face_count
                    result = MesherResult(success=True, mesh=optimized, metrics=metrics)

        except Exception as e:
            result = MesherResult(success=False, error=str(e), metrics=metrics)

        result.metrics["total_time"] = time.perf_counter() - start_time
        log_mesher_result(logger, operation, result)
        return result

    def validate_mesh(self, mesh: Optional[MeshLike]) -> ValidationResult:
        """Validate a mesh obtained elsewhere, e.g. deserialized from the wire."""
        return self.validator.validate(mesh)

    def optimize_mesh(self, mesh: MeshLike, options: OptionsLike = None) -> Mesh:
        """Optimize a mesh obtained elsewhere.

        The mesh must already have passed :meth:`validate_mesh`.

        Raises:
            StructuralError: If a wire mapping can't be converted to a Mesh
        """
        if not isinstance(mesh, Mesh):
            mesh = Mesh.from_dict(mesh)
        return self.optimizer.optimize(mesh, self._options.merged(options))

    def calculate_statistics(self, mesh: MeshLike) -> MeshStatistics:
        """Compute statistics of a mesh or its wire mapping."""
        if not isinstance(mesh, Mesh):
            mesh = Mesh.from_dict(mesh)
        return self.validator.calculate_statistics(mesh)
