"""Custom exceptions for Mesher."""

from typing import Any, Optional


class MesherError(Exception):
    """Base exception for Mesher."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(MesherError):
    """Raised when configuration or options are invalid."""

    pass


class MeshValidationError(MesherError):
    """Base class for problems found while validating a mesh."""

    category = "validation"


class StructuralError(MeshValidationError):
    """Raised for a missing field, a wrong buffer length or element type."""

    category = "structural"


class BoundsError(MeshValidationError):
    """Raised when an index references a vertex that does not exist."""

    category = "bounds"

    def __init__(self, position: int, index: int, vertex_count: int):
        super().__init__(
            f"Index out of bounds at index {position}: {index} "
            f"(vertex count: {vertex_count})",
            details={"position": position, "index": index, "vertex_count": vertex_count},
        )
        self.position = position
        self.index = index
        self.vertex_count = vertex_count


class GeometricError(MeshValidationError):
    """Raised for non-finite values, non-unit normals, degenerate faces or non-manifold edges."""

    category = "geometric"


class GenerationError(MesherError):
    """Raised when a generation backend fails to synthesize a mesh."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"Mesh generation from {source} failed: {reason}")
        self.source = source
        self.reason = reason


class OptimizationError(MesherError):
    """Raised when an optimization strategy cannot process a mesh."""

    def __init__(self, stage: str, reason: str):
        super().__init__(f"Optimization stage '{stage}' failed: {reason}")
        self.stage = stage
        self.reason = reason
