"""Canonical RGBA pixel buffer shared by decoders, the resampler and encoders."""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from .errors import InvalidDimension

CHANNELS = 4


@dataclass(frozen=True)
class CanonicalImage:
    """Straight-alpha, interleaved 8-bit RGBA raster.

    ``data`` is always exactly ``width * height * 4`` bytes, row-major with no
    padding. Instances are immutable; every stage that changes pixels returns
    a new instance backed by a fresh buffer.
    """

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise InvalidDimension(
                f"Image dimensions must be at least 1x1, got {self.width}x{self.height}"
            )
        expected = self.width * self.height * CHANNELS
        if len(self.data) != expected:
            raise ValueError(
                f"RGBA buffer for {self.width}x{self.height} must be {expected} bytes, "
                + f"got {len(self.data)}"
            )

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @classmethod
    def from_pil(cls, image: Image.Image) -> "CanonicalImage":
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(width=image.width, height=image.height, data=image.tobytes())

    def to_pil(self) -> Image.Image:
        return Image.frombytes("RGBA", self.size, self.data)

    @classmethod
    def from_array(cls, array: NDArray[np.uint8]) -> "CanonicalImage":
        """Build from an ``(height, width, 4)`` uint8 array."""
        if array.ndim != 3 or array.shape[2] != CHANNELS:
            raise ValueError(f"Expected an (H, W, 4) array, got shape {array.shape}")
        height, width = array.shape[:2]
        return cls(
            width=int(width),
            height=int(height),
            data=np.ascontiguousarray(array, dtype=np.uint8).tobytes(),
        )

    def to_array(self) -> NDArray[np.uint8]:
        """Writable ``(height, width, 4)`` copy of the pixels."""
        flat = np.frombuffer(self.data, dtype=np.uint8)
        return flat.reshape(self.height, self.width, CHANNELS).copy()
