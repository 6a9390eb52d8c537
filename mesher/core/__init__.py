"""Core functionality for Mesher."""

from mesher.core.config import (
    Config,
    LoggingConfig,
    MesherOptions,
    OptimizerConfig,
    ValidationConfig,
    get_default_config,
    load_config,
)
from mesher.core.exceptions import (
    BoundsError,
    ConfigurationError,
    GenerationError,
    GeometricError,
    MesherError,
    MeshValidationError,
    OptimizationError,
    StructuralError,
)
from mesher.core.mesh import Mesh
from mesher.core.metadata import (
    ImageMetadata,
    MeshMetadata,
    OptimizationInfo,
    PointCloudMetadata,
    TextMetadata,
    parse_metadata,
)

# system depends on mesher.processing, which depends on the modules above
from mesher.core.system import MesherResult, MesherSystem

__all__ = [
    # Config classes
    "Config",
    "MesherOptions",
    "OptimizerConfig",
    "ValidationConfig",
    "LoggingConfig",
    # Config functions
    "get_default_config",
    "load_config",
    # Mesh value types
    "Mesh",
    "MeshMetadata",
    "ImageMetadata",
    "PointCloudMetadata",
    "TextMetadata",
    "OptimizationInfo",
    "parse_metadata",
    # Orchestrator
    "MesherSystem",
    "MesherResult",
    # Exceptions
    "MesherError",
    "ConfigurationError",
    "MeshValidationError",
    "StructuralError",
    "BoundsError",
    "GeometricError",
    "GenerationError",
    "OptimizationError",
]
