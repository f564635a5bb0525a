"""Common module - canonical image, errors and schemas."""

from .canonical_image import CanonicalImage
from .errors import (
    ConversionCancelled,
    ConversionError,
    DecodeError,
    EncodeError,
    InvalidDimension,
    SizeBudgetUnreachable,
)
from .schemas import (
    ConversionParams,
    ExportResult,
    ExportSettings,
    ResolvedSize,
    SizeSpec,
    max_bytes_from_kb,
)

__all__ = [
    "CanonicalImage",
    "ConversionCancelled",
    "ConversionError",
    "ConversionParams",
    "DecodeError",
    "EncodeError",
    "ExportResult",
    "ExportSettings",
    "InvalidDimension",
    "ResolvedSize",
    "SizeBudgetUnreachable",
    "SizeSpec",
    "max_bytes_from_kb",
]
