"""Command line entry point: convert one image file to a byte budget."""

import argparse
import sys
from collections.abc import Sequence
from io import BytesIO
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from .common.errors import ConversionError
from .common.schemas import (
    DEFAULT_MAX_KB,
    DEFAULT_QUALITY,
    ConversionParams,
    ExportSettings,
    SizeSpec,
    max_bytes_from_kb,
)
from .plugins.image_fit.algo.resample import RESAMPLE_FILTERS
from .plugins.image_fit.algo.session import convert_image
from .utils.media_types import OutputFormat, determine_mime, download_name, normalize_media_type


def _dimension(value: str) -> int | None:
    if value.lower() == "auto":
        return None
    return int(value)


def build_parser() -> argparse.ArgumentParser:
    defaults = ExportSettings()
    parser = argparse.ArgumentParser(
        prog="cl-image-fit",
        description="Resize and re-encode an image so that it fits a maximum file size.",
    )
    parser.add_argument("input", type=Path, help="Path to the source image")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output file (default: input name with the format's extension, same directory)",
    )
    parser.add_argument(
        "-f",
        "--format",
        default=OutputFormat.WEBP.value,
        help="Output format: webp, avif, jpeg, png, qoi or a media type (default webp)",
    )
    parser.add_argument("--width", type=_dimension, default=None, help="Target width or 'auto'")
    parser.add_argument("--height", type=_dimension, default=None, help="Target height or 'auto'")
    parser.add_argument(
        "--no-keep-aspect",
        dest="keep_aspect",
        action="store_false",
        help="Stretch to width x height instead of fitting inside them",
    )
    parser.add_argument(
        "-q",
        "--quality",
        type=float,
        default=DEFAULT_QUALITY,
        help=f"Requested quality 0..1 (default {DEFAULT_QUALITY})",
    )
    parser.add_argument(
        "--max-kb",
        type=float,
        default=DEFAULT_MAX_KB,
        help=f"Maximum output size in KB (default {DEFAULT_MAX_KB:g})",
    )
    parser.add_argument(
        "--media-type",
        help="Declared input media type (default: detected with libmagic)",
    )
    parser.add_argument(
        "--filter",
        choices=sorted(RESAMPLE_FILTERS),
        default="lanczos",
        help="Resampling filter (default lanczos)",
    )
    parser.add_argument("--iterations", type=int, default=defaults.iterations)
    parser.add_argument("--margin", type=float, default=defaults.margin)
    parser.add_argument("--floor-quality", type=float, default=defaults.floor_quality)
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every search step")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logger.remove()
    _ = logger.add(sys.stderr, level="DEBUG" if args.verbose else "WARNING")

    source: Path = args.input
    if not source.is_file():
        print(f"error[input]: file not found: {source}", file=sys.stderr)
        return 1
    data = source.read_bytes()

    media_type: str | None = normalize_media_type(args.media_type) or None
    if media_type is None:
        try:
            media_type = determine_mime(BytesIO(data))
        except ImportError as exc:
            print(
                f"error[input]: cannot detect the media type ({exc}); pass --media-type",
                file=sys.stderr,
            )
            return 1

    try:
        settings = ExportSettings(
            floor_quality=args.floor_quality,
            iterations=args.iterations,
            margin=args.margin,
        )
        params = ConversionParams(
            media_type=media_type,
            size=SizeSpec(width=args.width, height=args.height, keep_aspect=args.keep_aspect),
            format=args.format,
            quality=args.quality,
            max_bytes=max_bytes_from_kb(args.max_kb),
        )
    except ValidationError as exc:
        print(f"error[params]: {exc}", file=sys.stderr)
        return 1

    try:
        result = convert_image(data, params, settings=settings, resample_filter=args.filter)
    except ConversionError as exc:
        print(f"error[{exc.stage}]: {exc.message}", file=sys.stderr)
        return 1

    output: Path | None = args.output
    if output is None:
        output = source.with_name(download_name(source.name, result.format))
        if output == source:
            output = source.with_name(f"converted_{output.name}")
    _ = output.write_bytes(result.data)

    if result.advisory is not None:
        logger.warning(str(result.advisory))

    quality = "n/a" if result.quality is None else f"{result.quality:.3f}"
    print(
        f"{output}: {result.width}x{result.height} {result.format.extension}, "
        + f"{result.size / 1024:.1f} KB, quality {quality}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
