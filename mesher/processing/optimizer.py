"""Mesh optimization pipeline and coordinate quantization."""

import time
from collections.abc import Mapping
from typing import Any, Optional, Union

import numpy as np

from mesher.core.config import Config, MesherOptions
from mesher.core.mesh import Mesh
from mesher.core.metadata import OptimizationInfo, utcnow
from mesher.geometry import bounding_box, vertex_normals
from mesher.processing.validator import estimate_buffer_bytes
from mesher.strategies import (
    IdentityReorderer,
    IndexReorderer,
    PassthroughSimplifier,
    Simplifier,
    StrategyFactory,
)
from mesher.utils.logging import get_logger, log_performance

logger = get_logger(__name__)

OptionsLike = Optional[Union[MesherOptions, Mapping[str, Any]]]

# Fraction of vertices kept by simplification, per quality level
QUALITY_FRACTIONS = {"low": 0.3, "medium": 0.6, "high": 0.9}
MIN_TARGET_VERTICES = 4


class MeshOptimizer:
    """Transforms a mesh into a smaller, cleaner equivalent.

    ``optimize`` runs five stages, each producing a new mesh: weld duplicate
    vertices, simplify, reorder indices, recompute normals and stamp
    metadata. Simplification and reordering are delegated to strategies.

    The input must already have passed validation; the optimizer does no
    bounds or NaN checking and never repairs invalid geometry.
    """

    WELD_EPSILON = 1e-6
    QUANTIZATION_BITS = 16

    def __init__(
        self,
        options: OptionsLike = None,
        simplifier: Optional[Simplifier] = None,
        reorderer: Optional[IndexReorderer] = None,
        weld_epsilon: Optional[float] = None,
        quantization_bits: Optional[int] = None,
    ):
        """Initialize mesh optimizer.

        Args:
            options: Default options, merged under per-call options
            simplifier: Simplification strategy (passthrough if None)
            reorderer: Index reordering strategy (identity if None)
            weld_epsilon: Spatial tolerance for welding
            quantization_bits: Default precision for :meth:`quantize`
        """
        self.options = MesherOptions().merged(options)
        self.simplifier = simplifier or PassthroughSimplifier()
        self.reorderer = reorderer or IdentityReorderer()
        self.weld_epsilon = weld_epsilon or self.WELD_EPSILON
        self.quantization_bits = quantization_bits or self.QUANTIZATION_BITS

    @classmethod
    def from_config(cls, config: Config, options: OptionsLike = None) -> "MeshOptimizer":
        """Create an optimizer with the strategies named in ``config``."""
        return cls(
            options=config.mesher.merged(options),
            simplifier=StrategyFactory.create_simplifier(config.optimizer.simplifier),
            reorderer=StrategyFactory.create_reorderer(config.optimizer.reorderer),
            weld_epsilon=config.optimizer.weld_epsilon,
            quantization_bits=config.optimizer.quantization_bits,
        )

    def optimize(self, mesh: Mesh, options: OptionsLike = None) -> Mesh:
        """Optimize a mesh.

        Args:
            mesh: Validated input mesh, left untouched
            options: Per-call options merged over the optimizer defaults

        Returns:
            New optimized mesh
        """
        merged = self.options.merged(options)
        start_time = time.perf_counter()

        optimized = self.weld_vertices(mesh)
        optimized = self.simplify(optimized, merged)
        optimized = self.reorderer.reorder(optimized)
        optimized = self.recompute_normals(optimized)
        optimized = self._stamp_metadata(mesh, optimized, merged)

        if optimized.vertex_count > merged.max_vertices or optimized.face_count > merged.max_faces:
            logger.warning(
                "mesh_budget_exceeded",
                mesh_id=mesh.id,
                vertex_count=optimized.vertex_count,
                face_count=optimized.face_count,
                max_vertices=merged.max_vertices,
                max_faces=merged.max_faces,
            )

        log_performance(
            logger,
            "optimize",
            time.perf_counter() - start_time,
            mesh_id=mesh.id,
            quality=merged.quality,
            vertices_before=mesh.vertex_count,
            vertices_after=optimized.vertex_count,
            faces_before=mesh.face_count,
            faces_after=optimized.face_count,
        )
        return optimized

    def weld_vertices(self, mesh: Mesh) -> Mesh:
        """Merge vertices whose positions round to the same spatial key.

        The first vertex with a given key becomes canonical and keeps its
        normal and UV; canonical vertices stay in order of first occurrence.
        Faces referencing a vertex that was never registered are dropped.

        Args:
            mesh: Input mesh

        Returns:
            Welded mesh
        """
        positions = mesh.positions
        keys = np.round(positions / self.weld_epsilon)

        _, first, inverse = np.unique(keys, axis=0, return_index=True, return_inverse=True)
        inverse = inverse.reshape(-1)

        order = np.argsort(first)
        rank = np.empty(len(first), dtype=np.int64)
        rank[order] = np.arange(len(first))
        vertex_map = rank[inverse]
        canonical = first[order]

        faces = mesh.faces
        registered = np.all((faces >= 0) & (faces < len(vertex_map)), axis=1)
        if not np.all(registered):
            logger.warning(
                "weld_dropped_faces",
                mesh_id=mesh.id,
                dropped=int(np.count_nonzero(~registered)),
            )

        return mesh.replace(
            vertices=positions[canonical],
            indices=vertex_map[faces[registered]],
            normals=mesh.normals.reshape(-1, 3)[canonical],
            uvs=mesh.uvs.reshape(-1, 2)[canonical],
        )

    @staticmethod
    def target_vertex_count(vertex_count: int, options: MesherOptions) -> int:
        """Vertex target for simplification at the given quality."""
        target = int(vertex_count * QUALITY_FRACTIONS[options.quality])
        return max(MIN_TARGET_VERTICES, min(target, options.max_vertices))

    def simplify(self, mesh: Mesh, options: MesherOptions) -> Mesh:
        """Run the simplification strategy if the mesh exceeds its target."""
        target = self.target_vertex_count(mesh.vertex_count, options)
        if mesh.vertex_count <= target:
            return mesh.replace()
        return self.simplifier.reduce(mesh, target)

    def recompute_normals(self, mesh: Mesh) -> Mesh:
        """Rebuild vertex-averaged normals from the current triangulation."""
        return mesh.replace(normals=vertex_normals(mesh.positions, mesh.faces))

    def _stamp_metadata(self, original: Mesh, optimized: Mesh, options: MesherOptions) -> Mesh:
        size_before = estimate_buffer_bytes(original.vertex_count, original.face_count)
        size_after = estimate_buffer_bytes(optimized.vertex_count, optimized.face_count)

        info = OptimizationInfo(
            optimization_time=utcnow(),
            options=options,
            original_vertex_count=original.vertex_count,
            optimized_vertex_count=optimized.vertex_count,
            original_face_count=original.face_count,
            optimized_face_count=optimized.face_count,
            compression_ratio=size_before / size_after if size_after else 0.0,
        )
        return optimized.replace(
            metadata=optimized.metadata.with_updates(optimized=True, optimization=info)
        )

    def quantize(self, mesh: Mesh, precision_bits: Optional[int] = None) -> Mesh:
        """Snap vertex coordinates onto a per-axis grid.

        Each axis of the bounding box is divided into ``2**precision_bits - 1``
        steps; coordinates are rounded to the nearest step and mapped back
        into original units. Axes with zero extent are left unchanged.

        Args:
            mesh: Input mesh
            precision_bits: Grid precision (1-32), optimizer default if None

        Returns:
            New mesh with quantized positions

        Raises:
            ValueError: If precision_bits is out of range
        """
        bits = self.quantization_bits if precision_bits is None else precision_bits
        if not 1 <= bits <= 32:
            raise ValueError(f"precision_bits must be between 1 and 32, got {bits}")

        box = bounding_box(mesh.vertices)
        lo = np.asarray(box.min)
        extents = box.extents
        axes = extents > 0

        scale = np.zeros(3)
        scale[axes] = (2**bits - 1) / extents[axes]

        positions = mesh.positions
        snapped = positions.copy()
        snapped[:, axes] = (
            np.round((positions[:, axes] - lo[axes]) * scale[axes]) / scale[axes] + lo[axes]
        )

        return mesh.replace(
            vertices=snapped,
            metadata=mesh.metadata.with_updates(quantization_bits=bits),
        )


def optimize_mesh(mesh: Mesh, options: OptionsLike = None) -> Mesh:
    """Convenience function to optimize a mesh with default strategies."""
    return MeshOptimizer().optimize(mesh, options)


def quantize(mesh: Mesh, precision_bits: int = 16) -> Mesh:
    """Convenience function to quantize vertex coordinates."""
    return MeshOptimizer().quantize(mesh, precision_bits)
