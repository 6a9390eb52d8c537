"""Provenance metadata attached to generated and optimized meshes.

Metadata is a tagged union keyed on ``source``: each input modality has its
own record type sharing a common base (source, generation time, echoed
options). Records serialize with camelCase keys to match the wire format.
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from mesher.core.config import MesherOptions
from mesher.core.exceptions import StructuralError

# Accepted spellings of the generation timestamp; emitted as generationTime
GENERATION_TIME_KEYS = ("generationTime", "generatedAt", "generation_time", "generated_at")


def utcnow() -> datetime:
    """Timezone-aware current time used for metadata stamps."""
    return datetime.now(timezone.utc)


class OptimizationInfo(BaseModel):
    """Summary stamped by the optimizer."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    optimization_time: datetime
    options: MesherOptions
    original_vertex_count: int = Field(ge=0)
    optimized_vertex_count: int = Field(ge=0)
    original_face_count: int = Field(ge=0)
    optimized_face_count: int = Field(ge=0)
    compression_ratio: float = Field(ge=0)


class MeshMetadata(BaseModel):
    """Common provenance fields shared by every metadata variant."""

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    source: str
    generation_time: datetime = Field(
        validation_alias=AliasChoices(*GENERATION_TIME_KEYS),
        serialization_alias="generationTime",
    )
    options: MesherOptions = Field(default_factory=MesherOptions)
    optimized: bool = False
    optimization: Optional[OptimizationInfo] = None
    quantization_bits: Optional[int] = Field(None, ge=1, le=32)

    def with_updates(self, **changes: Any) -> "MeshMetadata":
        """Return a copy of this record with ``changes`` applied."""
        return self.model_copy(update=changes)

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-compatible camelCase representation."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ImageMetadata(MeshMetadata):
    """Metadata for meshes generated from an image set."""

    source: Literal["images"] = "images"
    image_count: int = Field(0, ge=0)
    image_uris: tuple[str, ...] = ()


class PointCloudMetadata(MeshMetadata):
    """Metadata for meshes generated from a point cloud."""

    source: Literal["point-cloud"] = "point-cloud"
    point_count: int = Field(0, ge=0)
    has_normals: bool = False


class TextMetadata(MeshMetadata):
    """Metadata for meshes generated from a text description."""

    source: Literal["text"] = "text"
    description: str = ""


AnyMetadata = Union[ImageMetadata, PointCloudMetadata, TextMetadata, MeshMetadata]

_VARIANTS: dict[str, type[MeshMetadata]] = {
    "images": ImageMetadata,
    "point-cloud": PointCloudMetadata,
    "text": TextMetadata,
}


def parse_metadata(data: Union[MeshMetadata, Mapping[str, Any]]) -> MeshMetadata:
    """Build the metadata variant matching ``data["source"]``.

    Sources without a dedicated variant fall back to :class:`MeshMetadata`,
    keeping their extra keys.

    Raises:
        StructuralError: If ``data`` is not a mapping or fails validation
    """
    if isinstance(data, MeshMetadata):
        return data
    if not isinstance(data, Mapping):
        raise StructuralError("Metadata must be an object")

    source = data.get("source")
    model = _VARIANTS.get(source, MeshMetadata) if isinstance(source, str) else MeshMetadata
    try:
        return model.model_validate(dict(data))
    except ValidationError as e:
        raise StructuralError(f"Invalid mesh metadata: {e}") from e
