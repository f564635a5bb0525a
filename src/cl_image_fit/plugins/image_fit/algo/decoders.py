"""Media-type keyed decoders producing canonical RGBA buffers.

Built-ins:
  - svg decoder: intrinsic size parsing + rasterization at that size
  - raster decoder: any container Pillow can open, also the fallback for
    media types nobody registered
"""

import math
import re
import xml.etree.ElementTree as ET
from collections.abc import Callable
from dataclasses import dataclass
from io import BytesIO

import numpy as np
from loguru import logger
from PIL import Image, ImageOps

from ....common.canonical_image import CanonicalImage
from ....common.errors import DecodeError
from ....utils.profiling import timed
from ....utils.rounding import round_half_up

SVG_FALLBACK_SIZE = (512, 512)

DecodeFn = Callable[[bytes], CanonicalImage]


@dataclass(frozen=True)
class Decoder:
    name: str
    media_types: tuple[str, ...]
    decode: DecodeFn


_registry: list[Decoder] = []


def register_decoder(decoder: Decoder) -> None:
    """Add a decoder. Only called while this module is imported."""
    _registry.append(decoder)


def find_decoder(media_type: str | None) -> Decoder:
    mime = (media_type or "").lower()
    for decoder in _registry:
        if mime in decoder.media_types:
            return decoder
    return RASTER_DECODER


def registered_media_types() -> list[str]:
    return [mime for decoder in _registry for mime in decoder.media_types]


@timed
def decode(data: bytes, media_type: str | None) -> CanonicalImage:
    """
    Decode input bytes into a canonical RGBA image.

    Args:
        data: Raw input bytes
        media_type: Declared media type, matched exactly (case-insensitive)

    Returns:
        CanonicalImage at the source's native resolution

    Raises:
        DecodeError: If the bytes cannot be decoded
    """
    decoder = find_decoder(media_type)
    logger.debug(f"Decoding {len(data)} bytes declared as {media_type!r} with {decoder.name}")
    return decoder.decode(data)


# ─────────────────────────────────────────────────────────────
# Raster
# ─────────────────────────────────────────────────────────────


def _narrow_wide_gray(image: Image.Image) -> Image.Image:
    """Scale 16/32-bit integer grayscale to 8-bit; convert() would clip it."""
    if image.mode != "I" and not image.mode.startswith("I;16"):
        return image
    pixels = np.asarray(image).astype(np.int64) >> 8
    return Image.fromarray(np.clip(pixels, 0, 255).astype(np.uint8))


def decode_raster(data: bytes) -> CanonicalImage:
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            # Browsers honour EXIF orientation when decoding
            oriented = ImageOps.exif_transpose(img)
            return CanonicalImage.from_pil(_narrow_wide_gray(oriented))
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Cannot decode image: {exc}") from exc


RASTER_DECODER = Decoder(
    name="raster",
    media_types=(
        "image/png",
        "image/jpeg",
        "image/webp",
        "image/avif",
        "image/gif",
        "image/bmp",
    ),
    decode=decode_raster,
)


# ─────────────────────────────────────────────────────────────
# SVG
# ─────────────────────────────────────────────────────────────

_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_VIEWBOX_SEPARATOR = re.compile(r"[\s,]+")


def _to_px(value: str | None) -> int | None:
    """First number in a length attribute, rounded. Units are ignored."""
    if not value:
        return None
    match = _NUMBER.search(value.strip())
    if not match:
        return None
    number = float(match.group(0))
    if not math.isfinite(number) or number <= 0:
        return None
    return round_half_up(number)


def _viewbox_size(viewbox: str | None) -> tuple[int, int] | None:
    if not viewbox:
        return None
    parts = [p for p in _VIEWBOX_SEPARATOR.split(viewbox.strip()) if p]
    if len(parts) != 4:
        return None
    try:
        vb_width, vb_height = float(parts[2]), float(parts[3])
    except ValueError:
        return None
    if not (math.isfinite(vb_width) and math.isfinite(vb_height)):
        return None
    return max(1, round_half_up(vb_width)), max(1, round_half_up(vb_height))


def parse_svg_size(svg: bytes | str) -> tuple[int, int]:
    """
    Intrinsic size of an SVG document.

    Priority: width/height attributes of the root element, then the viewBox
    for whichever of them is missing, then a 512x512 fallback (also used
    when the markup does not parse).
    """
    try:
        root = ET.fromstring(svg)
    except (ET.ParseError, ValueError):
        return SVG_FALLBACK_SIZE

    width = _to_px(root.get("width"))
    height = _to_px(root.get("height"))
    if not width or not height:
        viewbox = _viewbox_size(root.get("viewBox"))
        if viewbox is not None:
            width = width or viewbox[0]
            height = height or viewbox[1]
    if not width or not height:
        return SVG_FALLBACK_SIZE
    return width, height


def decode_svg(data: bytes) -> CanonicalImage:
    try:
        import cairosvg
    except (ImportError, OSError) as exc:
        raise DecodeError(
            "SVG input requires cairosvg and the cairo library. "
            + "Install with: pip install cairosvg"
        ) from exc

    width, height = parse_svg_size(data)
    try:
        png = cairosvg.svg2png(bytestring=data, output_width=width, output_height=height)
    except Exception as exc:
        raise DecodeError(f"Cannot rasterize SVG: {exc}") from exc
    if not png:
        raise DecodeError("Cannot rasterize SVG: renderer produced no output")
    return decode_raster(png)


SVG_DECODER = Decoder(
    name="svg",
    media_types=("image/svg+xml",),
    decode=decode_svg,
)


# svg first, then raster
register_decoder(SVG_DECODER)
register_decoder(RASTER_DECODER)
