"""Image fit plugin: convert an image to a format and a byte budget."""

from .routes import create_router
from .schema import FormatsResponse, OutputFormatInfo

__all__ = ["create_router", "FormatsResponse", "OutputFormatInfo"]
