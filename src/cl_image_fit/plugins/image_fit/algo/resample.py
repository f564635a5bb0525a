"""Pure image resample computation logic (single file)."""

from PIL import Image

from ....common.canonical_image import CanonicalImage
from ....common.errors import InvalidDimension
from ....utils.profiling import timed

RESAMPLE_FILTERS: dict[str, Image.Resampling] = {
    "lanczos": Image.Resampling.LANCZOS,
    "bicubic": Image.Resampling.BICUBIC,
    "hamming": Image.Resampling.HAMMING,
    "bilinear": Image.Resampling.BILINEAR,
    "box": Image.Resampling.BOX,
}


def get_resample_filter(name: str) -> Image.Resampling:
    try:
        return RESAMPLE_FILTERS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unsupported resample filter: {name}. Choose one of {', '.join(RESAMPLE_FILTERS)}"
        ) from None


@timed
def resample(
    image: CanonicalImage,
    width: int,
    height: int,
    filter: str = "lanczos",
) -> CanonicalImage:
    """
    Resample a canonical image to exactly width x height.

    Pillow resizes RGBA through premultiplied alpha, so transparent pixels
    do not bleed their colour into opaque neighbours; input and output are
    both straight alpha. The result always owns a fresh buffer, also when
    the size is unchanged.

    Args:
        image: Source image
        width: Target width
        height: Target height
        filter: Interpolation filter name (nearest-neighbour is not offered)

    Returns:
        New CanonicalImage of the requested size

    Raises:
        InvalidDimension: If width or height is below 1
        ValueError: If the filter name is unknown
    """
    if width < 1 or height < 1:
        raise InvalidDimension(f"Target dimensions must be at least 1x1, got {width}x{height}")

    resample_filter = get_resample_filter(filter)
    source = image.to_pil()
    if source.size == (width, height):
        return CanonicalImage.from_pil(source)

    return CanonicalImage.from_pil(source.resize((width, height), resample_filter))
