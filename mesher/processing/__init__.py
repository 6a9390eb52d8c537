"""Mesh processing functionality for Mesher."""

from mesher.processing.generator import (
    GenerationBackend,
    GenerationRequest,
    MeshGenerator,
    PlaceholderBackend,
    PointCloudInput,
    SurfaceGeometry,
)
from mesher.processing.optimizer import MeshOptimizer, optimize_mesh, quantize
from mesher.processing.validator import (
    MeshStatistics,
    MeshValidator,
    ValidationResult,
    calculate_statistics,
    validate_mesh,
)

__all__ = [
    "GenerationBackend",
    "GenerationRequest",
    "MeshGenerator",
    "PlaceholderBackend",
    "PointCloudInput",
    "SurfaceGeometry",
    "MeshOptimizer",
    "optimize_mesh",
    "quantize",
    "MeshStatistics",
    "MeshValidator",
    "ValidationResult",
    "calculate_statistics",
    "validate_mesh",
]
