from enum import StrEnum
from io import BytesIO
from pathlib import PurePath


class OutputFormat(StrEnum):
    WEBP = "image/webp"
    AVIF = "image/avif"
    JPEG = "image/jpeg"
    PNG = "image/png"
    QOI = "image/qoi"

    @property
    def extension(self) -> str:
        return self.value.split("/")[1].replace("jpeg", "jpg")

    @property
    def is_lossless(self) -> bool:
        return self in (OutputFormat.PNG, OutputFormat.QOI)

    @classmethod
    def parse(cls, tag: "str | OutputFormat") -> "OutputFormat":
        """Accept a media type or a short name such as ``webp`` or ``jpg``."""
        value = tag.strip().lower()
        if "/" not in value:
            value = "image/" + ("jpeg" if value == "jpg" else value)
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unsupported output format: {tag}") from None


def normalize_media_type(media_type: str | None) -> str:
    """Lower-case a declared media type and drop any parameters.

    ``"Image/SVG+XML; charset=utf-8"`` becomes ``"image/svg+xml"``; a missing
    type becomes the empty string.
    """
    if not media_type:
        return ""
    return media_type.split(";", 1)[0].strip().lower()


def determine_mime(bytes_io: BytesIO) -> str:
    """Media type of a buffer according to libmagic."""
    import magic

    _ = bytes_io.seek(0)
    mime = magic.Magic(mime=True)

    file_type = mime.from_buffer(bytes_io.getvalue())
    if not file_type:
        file_type = "application/octet-stream"
    return file_type


def download_name(filename: str | None, format: OutputFormat) -> str:
    """Name of the converted file: the input's stem with the output extension."""
    base = PurePath(filename).stem if filename else ""
    return f"{base or 'image'}.{format.extension}"
