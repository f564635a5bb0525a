"""Test configuration and fixtures for cl_image_fit.

This module provides:
- Pytest configuration (markers, optional codec checks)
- Synthetic images generated with Pillow/numpy (no media files on disk)
- A deterministic fake encoder for the quality search
- An API client with all plugin routes mounted
"""

from collections.abc import Callable
from io import BytesIO

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image, ImageDraw, features

from cl_image_fit.common.canonical_image import CanonicalImage

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "requires_cairo: requires cairosvg and the cairo library",
    )
    config.addinivalue_line(
        "markers",
        "requires_avif: requires Pillow built with AVIF support",
    )


def _cairo_available() -> bool:
    try:
        import cairosvg  # noqa: F401
    except (ImportError, OSError):
        return False
    return True


def pytest_runtest_setup(item):
    """Skip tests whose native codec is not installed."""
    if item.get_closest_marker("requires_cairo") and not _cairo_available():
        pytest.skip(
            "cairo not available. "
            "Install: brew install cairo (macOS) or apt-get install libcairo2 (Linux)"
        )

    if item.get_closest_marker("requires_avif") and not features.check("avif"):
        pytest.skip("Pillow was built without AVIF support")


# ============================================================================
# Image Fixtures
# ============================================================================


def encode_pil(img: Image.Image, pil_format: str, **kwargs: object) -> bytes:
    buffer = BytesIO()
    img.save(buffer, format=pil_format, **kwargs)
    return buffer.getvalue()


@pytest.fixture
def synthetic_image() -> Image.Image:
    """800x600 RGB image with a grid and a circle."""
    img = Image.new("RGB", (800, 600), color=(73, 109, 137))
    draw = ImageDraw.Draw(img)

    for i in range(0, 800, 50):
        draw.line([(i, 0), (i, 600)], fill=(255, 255, 255), width=2)
    for i in range(0, 600, 50):
        draw.line([(0, i), (800, i)], fill=(255, 255, 255), width=2)

    draw.ellipse([300, 200, 500, 400], fill=(200, 100, 100))
    return img


@pytest.fixture
def synthetic_jpeg(synthetic_image: Image.Image) -> bytes:
    return encode_pil(synthetic_image, "JPEG", quality=85)


@pytest.fixture
def rgba_png() -> bytes:
    """64x48 PNG with a horizontal colour ramp and a vertical alpha ramp."""
    x = np.linspace(0, 255, 64, dtype=np.uint8)
    y = np.linspace(0, 255, 48, dtype=np.uint8)
    pixels = np.zeros((48, 64, 4), dtype=np.uint8)
    pixels[..., 0] = x[np.newaxis, :]
    pixels[..., 1] = 255 - x[np.newaxis, :]
    pixels[..., 2] = 128
    pixels[..., 3] = y[:, np.newaxis]
    return encode_pil(Image.fromarray(pixels, "RGBA"), "PNG")


@pytest.fixture
def noisy_image() -> CanonicalImage:
    """Opaque 256x256 random noise; compresses poorly at any quality."""
    rng = np.random.default_rng(1234)
    pixels = rng.integers(0, 256, size=(256, 256, 4), dtype=np.uint8)
    pixels[..., 3] = 255
    return CanonicalImage.from_array(pixels)


@pytest.fixture
def solid_image() -> CanonicalImage:
    """100x100 solid colour buffer."""
    return CanonicalImage.from_pil(Image.new("RGBA", (100, 100), (30, 144, 255, 255)))


# ============================================================================
# Fake Codec Fixtures
# ============================================================================


class FakeEncoder:
    """Encode capability whose output size is a pure function of quality.

    Records every quality it was called with.
    """

    def __init__(self, size_for: Callable[[float], int]):
        self.size_for: Callable[[float], int] = size_for
        self.calls: list[float] = []

    def __call__(self, image: CanonicalImage, quality: float) -> bytes:
        self.calls.append(quality)
        return b"\x00" * self.size_for(quality)


@pytest.fixture
def linear_encoder() -> FakeEncoder:
    """1000 bytes per 0.01 of quality: 0.85 -> 85000 bytes, 0.3 -> 30000 bytes."""
    return FakeEncoder(lambda q: int(round(q * 100_000)))


# ============================================================================
# API Fixtures
# ============================================================================


@pytest.fixture
def api_client():
    """Provide FastAPI TestClient with every registered plugin route."""
    from fastapi import FastAPI

    from cl_image_fit import create_master_router

    app = FastAPI()
    app.include_router(create_master_router())

    return TestClient(app)


@pytest.fixture
def make_encoder() -> type[FakeEncoder]:
    """FakeEncoder factory for tests that need a custom size curve."""
    return FakeEncoder
