from .decoders import decode, parse_svg_size, registered_media_types
from .encoders import encode, supported_output_formats
from .export_controller import QualityBudgetSearch, export_with_budget
from .resample import resample
from .session import ConversionSession, convert_image, convert_image_async
from .size_resolver import resolve_size, resolve_size_spec

__all__ = [
    "ConversionSession",
    "QualityBudgetSearch",
    "convert_image",
    "convert_image_async",
    "decode",
    "encode",
    "export_with_budget",
    "parse_svg_size",
    "registered_media_types",
    "resample",
    "resolve_size",
    "resolve_size_spec",
    "supported_output_formats",
]
