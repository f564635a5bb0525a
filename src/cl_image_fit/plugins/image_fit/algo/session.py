"""Conversion session: decode -> resolve size -> resample -> export with budget."""

import asyncio
import threading
from types import TracebackType

from loguru import logger

from ....common.canonical_image import CanonicalImage
from ....common.schemas import ConversionParams, ExportResult, ExportSettings
from .decoders import decode
from .encoders import EncodeFn
from .export_controller import ProgressCb, export_with_budget
from .resample import resample
from .size_resolver import resolve_size_spec

# Share of the progress range reported once each stage finishes
_DECODED = 10
_RESAMPLED = 20


class ConversionSession:
    """Runs one conversion and owns its canonical image while doing so.

    The decoded and resampled buffers are dropped on every exit path, so a
    session holds no pixels once ``run`` returns or raises.

    Example:
        with ConversionSession() as session:
            result = session.run(data, ConversionParams(format="image/avif"))
    """

    def __init__(
        self,
        settings: ExportSettings | None = None,
        *,
        resample_filter: str = "lanczos",
        encoder: EncodeFn | None = None,
        cancel_event: threading.Event | None = None,
        progress_callback: ProgressCb | None = None,
    ) -> None:
        self.settings: ExportSettings = settings or ExportSettings()
        self.resample_filter: str = resample_filter
        self.encoder: EncodeFn | None = encoder
        self.cancel_event: threading.Event | None = cancel_event
        self.progress_callback: ProgressCb | None = progress_callback
        self._image: CanonicalImage | None = None

    def __enter__(self) -> "ConversionSession":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    @property
    def holds_image(self) -> bool:
        return self._image is not None

    def release(self) -> None:
        self._image = None

    def _report(self, progress: int) -> None:
        if self.progress_callback:
            self.progress_callback(progress)

    def _report_search(self, progress: int) -> None:
        self._report(_RESAMPLED + progress * (99 - _RESAMPLED) // 100)

    def run(self, data: bytes, params: ConversionParams) -> ExportResult:
        """
        Convert input bytes according to params.

        Raises:
            DecodeError: If the input cannot be decoded
            EncodeError: If the output codec fails
            ConversionCancelled: If the cancel event is set mid-search
        """
        try:
            self._report(0)
            self._image = decode(data, params.media_type)
            source_width, source_height = self._image.size
            self._report(_DECODED)

            target = resolve_size_spec(source_width, source_height, params.size)
            logger.debug(
                f"Resizing {source_width}x{source_height} -> {target.width}x{target.height}"
            )
            self._image = resample(
                self._image, target.width, target.height, filter=self.resample_filter
            )
            self._report(_RESAMPLED)

            result = export_with_budget(
                self._image,
                params.format,
                params.quality,
                params.max_bytes,
                settings=self.settings,
                encoder=self.encoder,
                cancel_event=self.cancel_event,
                progress_callback=self._report_search,
            )
            self._report(100)
            return result
        finally:
            self.release()


def convert_image(
    data: bytes,
    params: ConversionParams | None = None,
    *,
    settings: ExportSettings | None = None,
    resample_filter: str = "lanczos",
    cancel_event: threading.Event | None = None,
    progress_callback: ProgressCb | None = None,
) -> ExportResult:
    """Single-call conversion entry point for in-memory buffers."""
    with ConversionSession(
        settings,
        resample_filter=resample_filter,
        cancel_event=cancel_event,
        progress_callback=progress_callback,
    ) as session:
        return session.run(data, params or ConversionParams())


async def convert_image_async(
    data: bytes,
    params: ConversionParams | None = None,
    *,
    settings: ExportSettings | None = None,
    resample_filter: str = "lanczos",
    cancel_event: threading.Event | None = None,
) -> ExportResult:
    """Run convert_image in a worker thread so the event loop stays free.

    Setting ``cancel_event`` stops the search at its next encode call.
    """
    return await asyncio.to_thread(
        convert_image,
        data,
        params,
        settings=settings,
        resample_filter=resample_filter,
        cancel_event=cancel_event,
    )
