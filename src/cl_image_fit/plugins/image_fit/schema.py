"""Image fit HTTP response schemas."""

from pydantic import BaseModel, Field

from ...common.schemas import DEFAULT_MAX_KB, DEFAULT_QUALITY
from ...utils.media_types import OutputFormat


class OutputFormatInfo(BaseModel):
    """One selectable output format."""

    media_type: OutputFormat = Field(description="Output format tag")
    extension: str = Field(description="File extension used for downloads")
    lossless: bool = Field(description="Format ignores the quality parameter")


class FormatsResponse(BaseModel):
    """Formats accepted and produced by the converter."""

    output_formats: list[OutputFormatInfo] = Field(
        description="Formats the converter can encode"
    )
    input_media_types: list[str] = Field(
        description="Media types with a dedicated decoder; others use the raster decoder"
    )
    default_format: OutputFormat = Field(default=OutputFormat.WEBP)
    default_quality: float = Field(default=DEFAULT_QUALITY)
    default_max_kb: float = Field(default=DEFAULT_MAX_KB)
