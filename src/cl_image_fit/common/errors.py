"""Error taxonomy for the conversion pipeline.

Every failure carries a ``stage`` tag so callers can tell which part of the
pipeline rejected the request without string matching on the message.
"""

from typing_extensions import override


class ConversionError(Exception):
    """Base class for all conversion failures."""

    stage: str = "conversion"

    def __init__(self, message: str = "Image conversion failed."):
        self.message: str = message
        super().__init__(self.message)

    @override
    def __str__(self):
        return self.message


class DecodeError(ConversionError):
    """Input bytes are unparsable, corrupt, or of an unsupported type."""

    stage = "decode"


class EncodeError(ConversionError):
    """The codec rejected the canonical buffer or the format is not registered."""

    stage = "encode"


class InvalidDimension(ConversionError, ValueError):
    """A width or height below 1 reached a stage that requires a real raster."""

    stage = "resize"


class ConversionCancelled(ConversionError):
    """The caller dropped the conversion between two encode calls."""

    stage = "cancelled"

    def __init__(self, message: str = "Conversion cancelled."):
        super().__init__(message)


class SizeBudgetUnreachable(ConversionError):
    """Advisory: the best achievable encode is still larger than the budget.

    Not raised by the pipeline. It is attached to ``ExportResult.advisory``
    while the best-effort bytes are still returned.
    """

    stage = "export"

    def __init__(self, *, max_bytes: int, actual_bytes: int, format: str):
        self.max_bytes: int = max_bytes
        self.actual_bytes: int = actual_bytes
        self.format: str = format
        super().__init__(
            f"{format} output is {actual_bytes} bytes, "
            f"which exceeds the budget of {max_bytes} bytes"
        )
