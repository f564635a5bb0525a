"""cl_image_fit - Convert images to a target format, size and byte budget."""

from .common.canonical_image import CanonicalImage
from .common.errors import (
    ConversionCancelled,
    ConversionError,
    DecodeError,
    EncodeError,
    InvalidDimension,
    SizeBudgetUnreachable,
)
from .common.schemas import ConversionParams, ExportResult, ExportSettings, SizeSpec
from .master import create_master_router
from .plugins.image_fit.algo.session import (
    ConversionSession,
    convert_image,
    convert_image_async,
)
from .utils.media_types import OutputFormat

__version__ = "0.1.0"

__all__ = [
    "CanonicalImage",
    "ConversionCancelled",
    "ConversionError",
    "ConversionParams",
    "ConversionSession",
    "DecodeError",
    "EncodeError",
    "ExportResult",
    "ExportSettings",
    "InvalidDimension",
    "OutputFormat",
    "SizeBudgetUnreachable",
    "SizeSpec",
    "__version__",
    "convert_image",
    "convert_image_async",
    "create_master_router",
]
