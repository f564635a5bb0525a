"""Pure output-size computation (single file)."""

from ....common.errors import InvalidDimension
from ....common.schemas import ResolvedSize, SizeSpec
from ....utils.rounding import round_half_up


def resolve_size(
    source_width: int,
    source_height: int,
    keep_aspect: bool,
    requested_width: int | None = None,
    requested_height: int | None = None,
) -> ResolvedSize:
    """
    Compute the output size of a conversion.

    Args:
        source_width: Width of the decoded source image
        source_height: Height of the decoded source image
        keep_aspect: Preserve the source aspect ratio if True
        requested_width: Target width, None for auto
        requested_height: Target height, None for auto

    Returns:
        ResolvedSize with both dimensions >= 1. With keep_aspect and both
        targets given, the source is contain-fitted into the target box.

    Raises:
        InvalidDimension: If a source dimension is not positive
    """
    if source_width < 1 or source_height < 1:
        raise InvalidDimension(
            f"Source dimensions must be positive, got {source_width}x{source_height}"
        )

    if not keep_aspect:
        width = source_width if requested_width is None else requested_width
        height = source_height if requested_height is None else requested_height
        return ResolvedSize(max(1, width), max(1, height))

    aspect = source_width / source_height

    if requested_width is None and requested_height is None:
        return ResolvedSize(source_width, source_height)

    if requested_width is None:
        assert requested_height is not None
        height = max(1, requested_height)
        return ResolvedSize(max(1, round_half_up(height * aspect)), height)

    if requested_height is None:
        width = max(1, requested_width)
        return ResolvedSize(width, max(1, round_half_up(width / aspect)))

    box_width = max(1, requested_width)
    box_height = max(1, requested_height)
    if box_width / box_height > aspect:
        height = box_height
        width = max(1, round_half_up(height * aspect))
    else:
        width = box_width
        height = max(1, round_half_up(width / aspect))
    return ResolvedSize(width, height)


def resolve_size_spec(source_width: int, source_height: int, spec: SizeSpec) -> ResolvedSize:
    return resolve_size(
        source_width,
        source_height,
        spec.keep_aspect,
        spec.width,
        spec.height,
    )
