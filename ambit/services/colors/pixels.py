"""
Pixel buffer input types.

The engine never decodes images. Callers hand over a flat RGBA8 buffer with
its dimensions and this module validates it and exposes it as a numpy view.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np

from .errors import EmptyInputError, PixelBufferError

PixelData = Union[bytes, bytearray, memoryview, np.ndarray]

CHANNELS = 4


@dataclass(frozen=True)
class Region:
    """Axis-aligned pixel rectangle (x, y is the top-left corner)."""
    x: int
    y: int
    width: int
    height: int

    def clip(self, image_width: int, image_height: int) -> Optional[Tuple[int, int, int, int]]:
        """
        Clip the region to the image bounds.

        Returns:
            (x0, y0, x1, y1) half-open bounds, or None when nothing remains
        """
        x0 = max(0, int(self.x))
        y0 = max(0, int(self.y))
        x1 = min(int(image_width), int(self.x) + int(self.width))
        y1 = min(int(image_height), int(self.y) + int(self.height))
        if x1 <= x0 or y1 <= y0:
            return None
        return x0, y0, x1, y1


class PixelBuffer:
    """
    Validated RGBA8 pixel buffer.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        data: width * height * 4 bytes in RGBA order, row-major. A uint8
            numpy array of shape (height, width, 4) or flat is also accepted.

    Raises:
        EmptyInputError: Zero area or empty data
        PixelBufferError: Data length or dtype does not match the dimensions
    """

    def __init__(self, width: int, height: int, data: PixelData):
        width = int(width)
        height = int(height)
        if width <= 0 or height <= 0:
            raise EmptyInputError(f"Pixel buffer has zero area ({width}x{height})")

        if isinstance(data, np.ndarray):
            if data.dtype != np.uint8:
                raise PixelBufferError(f"Pixel array must be uint8, got {data.dtype}")
            flat = np.ascontiguousarray(data).reshape(-1)
        elif isinstance(data, (bytes, bytearray, memoryview)):
            flat = np.frombuffer(bytes(data), dtype=np.uint8)
        else:
            raise PixelBufferError(f"Unsupported pixel data type: {type(data).__name__}")

        if flat.size == 0:
            raise EmptyInputError("Pixel buffer is empty")

        expected = width * height * CHANNELS
        if flat.size != expected:
            raise PixelBufferError(
                f"Pixel buffer length {flat.size} does not match {width}x{height}x{CHANNELS} = {expected}"
            )

        self.width = width
        self.height = height
        self._array = flat.reshape(height, width, CHANNELS)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Build a buffer from an (h, w, 4) uint8 array."""
        if array.ndim != 3 or array.shape[2] != CHANNELS:
            raise PixelBufferError(f"Expected an (h, w, 4) array, got shape {array.shape}")
        return cls(array.shape[1], array.shape[0], array)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def array(self) -> np.ndarray:
        """(height, width, 4) uint8 view of the pixels."""
        return self._array

    def flat_pixels(self) -> np.ndarray:
        """(width * height, 4) uint8 view in row-major order."""
        return self._array.reshape(-1, CHANNELS)

    def to_bytes(self) -> bytes:
        return self._array.tobytes()

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"
