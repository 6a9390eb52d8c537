"""Configuration management for Mesher using Pydantic."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal, Optional, Union

import tomli
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from mesher.core.exceptions import ConfigurationError


class MesherOptions(BaseModel):
    """Options recognized by the generation and optimization stages.

    Field names are snake_case in Python and camelCase on the wire
    (``maxVertices``, ``maxFaces``). Unknown keys are ignored.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    resolution: int = Field(
        128, gt=0, description="Reconstruction density for generation backends"
    )
    quality: Literal["low", "medium", "high"] = Field(
        "medium", description="Drives simplification aggressiveness"
    )
    max_vertices: int = Field(100000, gt=0, description="Vertex budget")
    max_faces: int = Field(200000, gt=0, description="Face budget")

    def merged(
        self, overrides: Optional[Union["MesherOptions", Mapping[str, Any]]] = None
    ) -> "MesherOptions":
        """Shallow-merge call-site overrides on top of these options.

        Args:
            overrides: Another MesherOptions (only its explicitly set fields
                count) or a mapping with snake_case or camelCase keys.
                ``None`` values and unrecognized keys are ignored.

        Returns:
            New MesherOptions instance

        Raises:
            ConfigurationError: If a merged value is invalid
        """
        if overrides is None:
            return self

        if isinstance(overrides, MesherOptions):
            update = overrides.model_dump(include=overrides.model_fields_set)
        elif isinstance(overrides, Mapping):
            update = dict(overrides)
        else:
            raise ConfigurationError(
                f"Options must be a mapping or MesherOptions, got {type(overrides).__name__}"
            )

        fields = type(self).model_fields
        by_alias = {info.alias: name for name, info in fields.items() if info.alias}
        data = self.model_dump()
        for key, value in update.items():
            name = by_alias.get(key, key)
            if name in fields and value is not None:
                data[name] = value

        try:
            return MesherOptions.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid mesher options: {e}") from e

    def to_wire(self) -> dict[str, Any]:
        """Return the camelCase wire representation."""
        return self.model_dump(by_alias=True)


class OptimizerConfig(BaseModel):
    """Configuration for the optimization pipeline."""

    model_config = ConfigDict(frozen=True)

    simplifier: str = Field("none", description="Registered simplifier strategy name")
    reorderer: str = Field("none", description="Registered index reorderer name")
    weld_epsilon: float = Field(
        1e-6, gt=0, description="Spatial tolerance used to weld duplicate vertices"
    )
    quantization_bits: int = Field(
        16, ge=1, le=32, description="Default precision for coordinate quantization"
    )


class ValidationConfig(BaseModel):
    """Configuration for mesh validation thresholds."""

    model_config = ConfigDict(frozen=True)

    normal_tolerance: float = Field(
        0.1, gt=0, description="Allowed deviation of normal length from 1.0"
    )
    min_face_area: float = Field(
        1e-6, ge=0, description="Faces below this area are degenerate"
    )


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    model_config = ConfigDict(frozen=True)

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO", description="Logging level"
    )
    format: Literal["json", "console", "plain"] = Field(
        "console", description="Log format"
    )
    timestamp_format: str = Field("iso", description="structlog timestamp format")
    colorize: bool = Field(True, description="Colorize console output on a TTY")
    add_caller_info: bool = Field(
        False, description="Add file name, line number and function to records"
    )
    log_file: Optional[Path] = Field(None, description="Optional JSON log file")


class Config(BaseModel):
    """Main configuration for Mesher."""

    model_config = ConfigDict(frozen=True)

    mesher: MesherOptions = Field(
        default_factory=MesherOptions, description="Default mesher options"
    )
    optimizer: OptimizerConfig = Field(
        default_factory=OptimizerConfig, description="Optimizer configuration"
    )
    validation: ValidationConfig = Field(
        default_factory=ValidationConfig, description="Validation configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    @classmethod
    def from_toml(cls, path: Path | str) -> "Config":
        """Load configuration from TOML file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            tomli.TOMLDecodeError: If TOML is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "rb") as f:
            data = tomli.load(f)

        return cls(**data)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create configuration from dictionary."""
        return cls(**data)

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return self.model_dump()

    def save_toml(self, path: Path | str) -> None:
        """Save configuration to TOML file.

        Args:
            path: Path to save TOML file
        """
        import tomli_w

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        # TOML has no null
        with open(path, "wb") as f:
            tomli_w.dump(self.model_dump(mode="json", exclude_none=True), f)


def get_default_config() -> Config:
    """Get default configuration."""
    return Config()


def load_config(path: Optional[Path | str] = None) -> Config:
    """Load configuration from file or return defaults.

    Args:
        path: Optional path to configuration file

    Returns:
        Config instance
    """
    if path:
        return Config.from_toml(path)
    return get_default_config()
