"""Public algorithm API for cl_image_fit.

This module exports the conversion pipeline stages for direct use in
applications without the FastAPI routes.

Example:
    One-call conversion::

        from cl_image_fit.algorithms import ConversionParams, SizeSpec, convert_image

        with open("photo.jpg", "rb") as f:
            result = convert_image(
                f.read(),
                ConversionParams(
                    media_type="image/jpeg",
                    size=SizeSpec(width=800),
                    format="image/webp",
                    quality=0.85,
                    max_bytes=50 * 1024,
                ),
            )
        if result.advisory:
            print(result.advisory)

    Individual stages::

        from cl_image_fit.algorithms import decode, export_with_budget, resample, resolve_size

        image = decode(svg_bytes, "image/svg+xml")
        width, height = resolve_size(image.width, image.height, True, 256, None)
        result = export_with_budget(resample(image, width, height), "image/avif", 0.8, 20_000)
"""

from .common.canonical_image import CanonicalImage
from .common.errors import (
    ConversionCancelled,
    ConversionError,
    DecodeError,
    EncodeError,
    InvalidDimension,
    SizeBudgetUnreachable,
)
from .common.schemas import (
    ConversionParams,
    ExportResult,
    ExportSettings,
    ResolvedSize,
    SizeSpec,
    max_bytes_from_kb,
)
from .plugins.image_fit.algo import (
    ConversionSession,
    QualityBudgetSearch,
    convert_image,
    convert_image_async,
    decode,
    encode,
    export_with_budget,
    parse_svg_size,
    registered_media_types,
    resample,
    resolve_size,
    resolve_size_spec,
    supported_output_formats,
)
from .utils.media_types import OutputFormat, download_name

__all__ = [
    # Data model
    "CanonicalImage",
    "ConversionParams",
    "ExportResult",
    "ExportSettings",
    "OutputFormat",
    "ResolvedSize",
    "SizeSpec",
    # Errors
    "ConversionCancelled",
    "ConversionError",
    "DecodeError",
    "EncodeError",
    "InvalidDimension",
    "SizeBudgetUnreachable",
    # Pipeline stages
    "ConversionSession",
    "QualityBudgetSearch",
    "convert_image",
    "convert_image_async",
    "decode",
    "encode",
    "export_with_budget",
    "resample",
    "resolve_size",
    "resolve_size_spec",
    # Helpers
    "download_name",
    "max_bytes_from_kb",
    "parse_svg_size",
    "registered_media_types",
    "supported_output_formats",
]
