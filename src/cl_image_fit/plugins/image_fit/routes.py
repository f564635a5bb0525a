"""Image fit route factory."""

from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from loguru import logger
from pydantic import ValidationError

from ...common.errors import DecodeError, EncodeError, InvalidDimension
from ...common.schemas import (
    DEFAULT_MAX_KB,
    DEFAULT_QUALITY,
    ConversionParams,
    ExportSettings,
    SizeSpec,
    max_bytes_from_kb,
)
from ...utils.media_types import OutputFormat, download_name, normalize_media_type
from .algo.decoders import registered_media_types
from .algo.encoders import supported_output_formats
from .algo.session import convert_image_async
from .schema import FormatsResponse, OutputFormatInfo


def create_router(settings: ExportSettings | None = None) -> APIRouter:
    """Create router with injected export settings."""
    router = APIRouter()
    export_settings = settings or ExportSettings()

    @router.get("/image_fit/formats", response_model=FormatsResponse)
    async def list_formats() -> FormatsResponse:
        return FormatsResponse(
            output_formats=[
                OutputFormatInfo(media_type=fmt, extension=fmt.extension, lossless=fmt.is_lossless)
                for fmt in supported_output_formats()
            ],
            input_media_types=registered_media_types(),
        )

    @router.post("/image_fit/convert")
    async def convert(
        file: Annotated[UploadFile, File(description="Image file to convert")],
        format: Annotated[str, Form(description="Output format tag")] = OutputFormat.WEBP.value,
        width: Annotated[int | None, Form(gt=0, description="Target width in pixels")] = None,
        height: Annotated[
            int | None, Form(gt=0, description="Target height in pixels")
        ] = None,
        keep_aspect: Annotated[bool, Form(description="Maintain aspect ratio")] = True,
        quality: Annotated[
            float, Form(ge=0.0, le=1.0, description="Requested quality (0-1)")
        ] = DEFAULT_QUALITY,
        max_kb: Annotated[
            float, Form(gt=0, description="Maximum output size in KB")
        ] = DEFAULT_MAX_KB,
        media_type: Annotated[
            str | None, Form(description="Declared input media type (defaults to upload's)")
        ] = None,
    ) -> Response:
        try:
            params = ConversionParams(
                media_type=normalize_media_type(media_type or file.content_type),
                size=SizeSpec(width=width, height=height, keep_aspect=keep_aspect),
                format=format,
                quality=quality,
                max_bytes=max_bytes_from_kb(max_kb),
            )
        except ValidationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        data = await file.read()
        try:
            result = await convert_image_async(data, params, settings=export_settings)
        except DecodeError as exc:
            raise HTTPException(status_code=415, detail=exc.message) from exc
        except (EncodeError, InvalidDimension) as exc:
            raise HTTPException(status_code=422, detail=exc.message) from exc

        if result.advisory is not None:
            logger.warning(f"Returning over-budget output for {file.filename}: {result.advisory}")

        headers = {
            "Content-Disposition": (
                f'attachment; filename="{download_name(file.filename, result.format)}"'
            ),
            "X-Image-Width": str(result.width),
            "X-Image-Height": str(result.height),
            "X-Encode-Calls": str(result.encode_calls),
            "X-Size-Budget-Met": "true" if result.budget_met else "false",
        }
        if result.quality is not None:
            headers["X-Encode-Quality"] = f"{result.quality:.4f}"

        return Response(content=result.data, media_type=result.format.value, headers=headers)

    _ = list_formats
    _ = convert
    return router
