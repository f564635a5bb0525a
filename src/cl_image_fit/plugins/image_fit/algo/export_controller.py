"""Quality-constrained export: find the best quality that fits a byte budget.

The search is a small explicit state machine:

    PROBE  -> encode at the requested quality; done if it fits
    BISECT -> a fixed number of midpoint encodes between the floor and the
              requested quality, keeping the best under-budget candidate
    DONE   -> best candidate, or the probe plus an advisory

Formats that ignore quality are encoded exactly once.
"""

import threading
from collections.abc import Callable
from enum import StrEnum

from loguru import logger

from ....common.canonical_image import CanonicalImage
from ....common.errors import ConversionCancelled, SizeBudgetUnreachable
from ....common.schemas import ExportResult, ExportSettings
from ....utils.media_types import OutputFormat
from ....utils.profiling import timed
from .encoders import EncodeFn, get_encoder

ProgressCb = Callable[[int], None]


class SearchPhase(StrEnum):
    PROBE = "probe"
    BISECT = "bisect"
    DONE = "done"


class QualityBudgetSearch:
    """Bounded bisection over quality for one image and one lossy format.

    At most ``1 + settings.iterations`` encode calls. The working quality
    never exceeds the requested quality.
    """

    def __init__(
        self,
        encode_at: Callable[[float], bytes],
        requested_quality: float,
        max_bytes: int,
        settings: ExportSettings,
        cancel_event: threading.Event | None = None,
        progress_callback: ProgressCb | None = None,
    ) -> None:
        self._encode_at: Callable[[float], bytes] = encode_at
        self.max_bytes: int = max_bytes
        self.settings: ExportSettings = settings
        self.cancel_event: threading.Event | None = cancel_event
        self.progress_callback: ProgressCb | None = progress_callback

        self.phase: SearchPhase = SearchPhase.PROBE
        self.requested_quality: float = requested_quality
        self.low: float = settings.floor_quality
        self.high: float = requested_quality
        self.encode_calls: int = 0

        self.probe: bytes | None = None
        self.best: bytes | None = None
        self.best_quality: float | None = None

    def _encode(self, quality: float) -> bytes:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ConversionCancelled(
                f"Quality search cancelled after {self.encode_calls} encode calls"
            )
        data = self._encode_at(quality)
        self.encode_calls += 1
        return data

    def run(self) -> tuple[bytes, float, bool]:
        """Return ``(data, quality, within_budget)``."""
        while self.phase is not SearchPhase.DONE:
            if self.phase is SearchPhase.PROBE:
                self._run_probe()
            else:
                self._run_bisection()

        if self.best is not None and self.best_quality is not None:
            return self.best, self.best_quality, True

        assert self.probe is not None
        return self.probe, self.requested_quality, len(self.probe) <= self.max_bytes

    def _run_probe(self) -> None:
        self.probe = self._encode(self.high)
        logger.debug(
            f"Probe at quality {self.high:.4f}: {len(self.probe)} bytes "
            + f"(budget {self.max_bytes})"
        )
        if len(self.probe) <= self.max_bytes:
            self.best, self.best_quality = self.probe, self.high
            self.phase = SearchPhase.DONE
        else:
            self.phase = SearchPhase.BISECT

    def _run_bisection(self) -> None:
        margin = self.settings.margin
        total = self.settings.iterations
        for step in range(total):
            # The window may cross over after an under-budget step
            mid = min(self.requested_quality, (self.low + self.high) / 2)
            data = self._encode(mid)
            if len(data) <= self.max_bytes:
                self.best, self.best_quality = data, mid
                self.low = mid + margin
            else:
                self.high = mid - margin
            logger.debug(
                f"Bisection {step + 1}/{total} at quality {mid:.4f}: {len(data)} bytes, "
                + f"window [{self.low:.4f}, {self.high:.4f}]"
            )
            if self.progress_callback:
                self.progress_callback(int((step + 1) / total * 100))
        self.phase = SearchPhase.DONE


@timed
def export_with_budget(
    image: CanonicalImage,
    format: OutputFormat | str,
    requested_quality: float,
    max_bytes: int,
    *,
    settings: ExportSettings | None = None,
    encoder: EncodeFn | None = None,
    cancel_event: threading.Event | None = None,
    progress_callback: ProgressCb | None = None,
) -> ExportResult:
    """
    Encode an image at the highest quality (up to the requested one) that
    fits in max_bytes.

    Args:
        image: Already resized image
        format: Output format tag
        requested_quality: Upper bound of the search, 0..1
        max_bytes: Byte budget, positive
        settings: Search tunables (floor, iterations, margin)
        encoder: Encode capability override, defaults to the registered one
        cancel_event: Checked before every encode call
        progress_callback: Receives 0..100 while the search runs

    Returns:
        ExportResult. ``advisory`` is set when the bytes exceed the budget.

    Raises:
        ValueError: If quality or budget is out of range
        EncodeError: If the codec fails
        ConversionCancelled: If cancel_event is set during the search
    """
    if not 0.0 <= requested_quality <= 1.0:
        raise ValueError(f"Quality must be within 0..1, got {requested_quality}")
    if max_bytes < 1:
        raise ValueError(f"Byte budget must be positive, got {max_bytes}")

    settings = settings or ExportSettings()
    registered = get_encoder(format)
    output_format = registered.format
    encode_fn = encoder or registered.encode

    if not registered.honors_quality:
        data = encode_fn(image, settings.lossless_quality)
        if progress_callback:
            progress_callback(100)
        advisory = None
        if len(data) > max_bytes:
            advisory = SizeBudgetUnreachable(
                max_bytes=max_bytes, actual_bytes=len(data), format=output_format
            )
            logger.warning(f"{advisory}; lossless output cannot be shrunk by lowering quality")
        return ExportResult(
            data=data,
            format=output_format,
            width=image.width,
            height=image.height,
            max_bytes=max_bytes,
            quality=None,
            encode_calls=1,
            advisory=advisory,
        )

    search = QualityBudgetSearch(
        lambda quality: encode_fn(image, quality),
        requested_quality,
        max_bytes,
        settings,
        cancel_event=cancel_event,
        progress_callback=progress_callback,
    )
    data, quality, within_budget = search.run()

    advisory = None
    if not within_budget:
        advisory = SizeBudgetUnreachable(
            max_bytes=max_bytes, actual_bytes=len(data), format=output_format
        )
        logger.warning(
            f"{advisory} even at quality floor {settings.floor_quality}; returning the probe"
        )
    else:
        logger.info(
            f"Encoded {output_format} at quality {quality:.4f}: {len(data)} bytes "
            + f"in {search.encode_calls} encode calls"
        )

    return ExportResult(
        data=data,
        format=output_format,
        width=image.width,
        height=image.height,
        max_bytes=max_bytes,
        quality=quality,
        encode_calls=search.encode_calls,
        advisory=advisory,
    )
