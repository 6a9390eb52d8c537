"""Mesher - generate, validate and optimize triangulated surface meshes."""

from mesher.core import (
    Config,
    GenerationError,
    Mesh,
    MesherError,
    MesherOptions,
    MesherResult,
    MesherSystem,
    load_config,
)
from mesher.processing import (
    MeshGenerator,
    MeshOptimizer,
    MeshValidator,
    ValidationResult,
)

__version__ = "0.1.0"

__all__ = [
    "Config",
    "GenerationError",
    "Mesh",
    "MesherError",
    "MesherOptions",
    "MesherResult",
    "MesherSystem",
    "MeshGenerator",
    "MeshOptimizer",
    "MeshValidator",
    "ValidationResult",
    "load_config",
]
