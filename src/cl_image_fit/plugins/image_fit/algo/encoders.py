"""Format-tag keyed encoders for canonical RGBA buffers.

Each encoder takes a normalized quality in 0..1 and maps it to the codec's
own control. The mapping direction is not uniform: AVIF goes through an
inverse 0..63 quantizer level where lower means better.
"""

from collections.abc import Callable
from dataclasses import dataclass
from io import BytesIO

import qoi
from PIL import Image

from ....common.canonical_image import CanonicalImage
from ....common.errors import EncodeError
from ....utils.media_types import OutputFormat
from ....utils.profiling import timed
from ....utils.rounding import round_half_up

AVIF_MAX_CQ_LEVEL = 63

EncodeFn = Callable[[CanonicalImage, float], bytes]


@dataclass(frozen=True)
class Encoder:
    format: OutputFormat
    encode: EncodeFn

    @property
    def honors_quality(self) -> bool:
        return not self.format.is_lossless


# ─────────────────────────────────────────────────────────────
# Quality mappings
# ─────────────────────────────────────────────────────────────


def quality_to_percent(quality: float) -> int:
    """0..1 -> 1..100, for codecs where higher means better."""
    return max(1, min(100, round_half_up(quality * 100)))


def quality_to_cq_level(quality: float) -> int:
    """0..1 -> 63..0, lower level means higher quality."""
    return max(0, min(AVIF_MAX_CQ_LEVEL, round_half_up((1 - quality) * AVIF_MAX_CQ_LEVEL)))


def cq_level_to_avif_quality(cq_level: int) -> int:
    """Pillow's AVIF plugin takes 0..100 and derives the quantizer from it."""
    return round_half_up((AVIF_MAX_CQ_LEVEL - cq_level) * 100 / AVIF_MAX_CQ_LEVEL)


# ─────────────────────────────────────────────────────────────
# Codec calls
# ─────────────────────────────────────────────────────────────


def _save(image: Image.Image, pil_format: str, **save_kwargs: object) -> bytes:
    buffer = BytesIO()
    try:
        image.save(buffer, format=pil_format, **save_kwargs)
    except (OSError, ValueError, KeyError, RuntimeError) as exc:
        raise EncodeError(f"{pil_format} encoder rejected the image: {exc}") from exc
    return buffer.getvalue()


def encode_jpeg(image: CanonicalImage, quality: float) -> bytes:
    # JPEG has no alpha channel
    rgb = image.to_pil().convert("RGB")
    return _save(rgb, "JPEG", quality=quality_to_percent(quality))


def encode_webp(image: CanonicalImage, quality: float) -> bytes:
    return _save(image.to_pil(), "WEBP", quality=quality_to_percent(quality))


def encode_avif(image: CanonicalImage, quality: float) -> bytes:
    cq_level = quality_to_cq_level(quality)
    return _save(image.to_pil(), "AVIF", quality=cq_level_to_avif_quality(cq_level))


def encode_png(image: CanonicalImage, quality: float) -> bytes:
    return _save(image.to_pil(), "PNG", optimize=True)


def encode_qoi(image: CanonicalImage, quality: float) -> bytes:
    try:
        return bytes(qoi.encode(image.to_array()))
    except (RuntimeError, ValueError) as exc:
        raise EncodeError(f"QOI encoder rejected the image: {exc}") from exc


ENCODERS: dict[OutputFormat, Encoder] = {
    OutputFormat.WEBP: Encoder(OutputFormat.WEBP, encode_webp),
    OutputFormat.JPEG: Encoder(OutputFormat.JPEG, encode_jpeg),
    OutputFormat.AVIF: Encoder(OutputFormat.AVIF, encode_avif),
    OutputFormat.PNG: Encoder(OutputFormat.PNG, encode_png),
    OutputFormat.QOI: Encoder(OutputFormat.QOI, encode_qoi),
}


def get_encoder(format: OutputFormat | str) -> Encoder:
    try:
        return ENCODERS[OutputFormat.parse(format)]
    except (KeyError, ValueError) as exc:
        raise EncodeError(f"Unsupported output format: {format}") from exc


def supported_output_formats() -> list[OutputFormat]:
    return list(ENCODERS)


@timed
def encode(image: CanonicalImage, format: OutputFormat | str, quality: float) -> bytes:
    """
    Encode a canonical image.

    Args:
        image: Image to encode, never modified
        format: Output format tag
        quality: Normalized quality in 0..1 (ignored by PNG and QOI)

    Returns:
        Encoded bytes

    Raises:
        EncodeError: If the format is unsupported or the codec fails
    """
    return get_encoder(format).encode(image, quality)
