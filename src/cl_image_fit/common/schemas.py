"""Pydantic schemas and value types for conversion requests and results."""

from dataclasses import dataclass
from typing import ClassVar, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.media_types import OutputFormat
from ..utils.rounding import round_half_up
from .errors import SizeBudgetUnreachable

DEFAULT_QUALITY = 0.85
DEFAULT_MAX_KB = 1024.0

# ─────────────────────────────────────────────────────────────
# Sizing
# ─────────────────────────────────────────────────────────────


class SizeSpec(BaseModel):
    """Requested output size. ``None`` means "auto" for that axis.

    Zero or negative requests are accepted here; the size resolver clamps them.
    """

    width: int | None = Field(default=None, description="Requested width in pixels")
    height: int | None = Field(default=None, description="Requested height in pixels")
    keep_aspect: bool = Field(default=True, description="Preserve the source aspect ratio")

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


class ResolvedSize(NamedTuple):
    width: int
    height: int


# ─────────────────────────────────────────────────────────────
# Export configuration
# ─────────────────────────────────────────────────────────────


class ExportSettings(BaseModel):
    """Tunables of the quality-constrained export search."""

    floor_quality: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Initial lower bound of the quality search window",
    )
    iterations: int = Field(
        default=12,
        ge=0,
        le=64,
        description="Number of bisection steps after an over-budget probe",
    )
    margin: float = Field(
        default=0.02,
        ge=0.0,
        le=0.5,
        description="Amount the window moves past each midpoint",
    )
    lossless_quality: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Nominal quality passed to formats that ignore quality",
    )

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


def max_bytes_from_kb(max_kb: float) -> int:
    """Byte budget for a kilobyte budget (1 KB = 1024 bytes), at least 1."""
    return max(1, round_half_up(max_kb * 1024))


class ConversionParams(BaseModel):
    """Everything a conversion needs besides the input bytes."""

    media_type: str | None = Field(
        default=None,
        description="Declared media type of the input (e.g. image/svg+xml)",
    )
    size: SizeSpec = Field(default_factory=SizeSpec)
    format: OutputFormat = Field(default=OutputFormat.WEBP, description="Output format")
    quality: float = Field(
        default=DEFAULT_QUALITY,
        ge=0.0,
        le=1.0,
        description="Requested quality, normalized to 0..1",
    )
    max_bytes: int = Field(
        default=max_bytes_from_kb(DEFAULT_MAX_KB),
        gt=0,
        description="Maximum size of the encoded output in bytes",
    )

    @field_validator("format", mode="before")
    @classmethod
    def parse_format(cls, v: object) -> object:
        if isinstance(v, str):
            return OutputFormat.parse(v)
        return v


# ─────────────────────────────────────────────────────────────
# Results
# ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ExportResult:
    """Encoded output of one conversion.

    ``quality`` is None for formats that ignore quality. ``advisory`` is set
    when the returned bytes are still over the budget.
    """

    data: bytes
    format: OutputFormat
    width: int
    height: int
    max_bytes: int
    quality: float | None = None
    encode_calls: int = 1
    advisory: SizeBudgetUnreachable | None = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def budget_met(self) -> bool:
        return self.size <= self.max_bytes
