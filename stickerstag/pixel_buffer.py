"""
Implements :class:`.PixelBuffer`, the raster every StickerStag stage reads and
writes, together with the mask and distance field conventions.

Conventions:
- PixelBuffer: uint8, shape (height, width, channels), channels 3 or 4,
  row-major and channel-interleaved.
- Mask: uint8, shape (height, width), either binary {0, 1} or strength 0..255.
- DistanceField: float32, shape (height, width), 0 at seed pixels.

Stages never mutate a buffer they were handed. A stage that needs the input
after producing its output clones it first.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math

import numpy as np

from .errors import DimensionMismatch, InvalidBuffer

Mask = np.ndarray
"A (height, width) uint8 array with values {0, 1} or 0..255"

DistanceField = np.ndarray
"A (height, width) float32 array of non-negative distances"


class PixelFormat(Enum):
    """Pixel format of a buffer."""
    RGB8 = "RGB8"  # uint8, 3 channels
    RGBA8 = "RGBA8"  # uint8, 4 channels

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "PixelFormat":
        """Detect pixel format from numpy array."""
        if arr.ndim != 3:
            raise InvalidBuffer(f"Expected 3D array, got {arr.ndim}D")
        if arr.dtype != np.uint8:
            raise InvalidBuffer(f"Unsupported dtype: {arr.dtype}")
        channels = arr.shape[2]
        if channels == 4:
            return cls.RGBA8
        if channels == 3:
            return cls.RGB8
        raise InvalidBuffer(f"Expected 3 or 4 channels, got {channels}")

    @property
    def channels(self) -> int:
        return 4 if self is PixelFormat.RGBA8 else 3

    @property
    def has_alpha(self) -> bool:
        return self is PixelFormat.RGBA8


class PixelBuffer:
    """
    A width x height x channels uint8 raster.

    The buffer owns its pixel array. Pass ``copy=False`` only when handing over
    an array nobody else holds a reference to.
    """

    __slots__ = ("_pixels", "metadata")

    def __init__(self, pixels: np.ndarray, copy: bool = True):
        """
        :param pixels: Array of shape (height, width, 3|4) and dtype uint8
        :param copy: Copy the array (default) or take ownership of it

        Raises InvalidBuffer if the array does not describe a valid raster.
        """
        if not isinstance(pixels, np.ndarray):
            raise InvalidBuffer(f"Expected numpy array, got {type(pixels).__name__}")
        PixelFormat.from_array(pixels)
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise InvalidBuffer(f"Empty raster of shape {pixels.shape}")
        self._pixels = np.array(pixels, copy=True) if copy else np.ascontiguousarray(pixels)
        self.metadata: dict = {}
        "Arbitrary metadata attached to this buffer."

    @classmethod
    def from_bytes(cls, width: int, height: int, channels: int, data: bytes) -> PixelBuffer:
        """
        Creates a buffer from raw interleaved bytes.

        :param width: Width in pixels
        :param height: Height in pixels
        :param channels: 3 (RGB) or 4 (RGBA)
        :param data: width * height * channels bytes, row-major
        """
        if channels not in (3, 4):
            raise InvalidBuffer(f"Expected 3 or 4 channels, got {channels}")
        if width <= 0 or height <= 0:
            raise InvalidBuffer(f"Invalid size {width}x{height}")
        expected = width * height * channels
        if len(data) != expected:
            raise InvalidBuffer(
                f"Buffer length {len(data)} does not match {width}x{height}x{channels}={expected}"
            )
        pixels = np.frombuffer(bytes(data), dtype=np.uint8).reshape(height, width, channels)
        return cls(pixels)

    @classmethod
    def blank(cls, width: int, height: int, color: tuple = (0, 0, 0, 0)) -> PixelBuffer:
        """Creates a RGBA buffer filled with a single color, transparent by default."""
        if width <= 0 or height <= 0:
            raise InvalidBuffer(f"Invalid size {width}x{height}")
        rgba = tuple(color) + (255,) * (4 - len(color))
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :] = rgba[:4]
        return cls(pixels, copy=False)

    @property
    def pixels(self) -> np.ndarray:
        """The pixel array. Treat as read-only unless you own the buffer."""
        return self._pixels

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        """(width, height)"""
        return self.width, self.height

    @property
    def channels(self) -> int:
        return self._pixels.shape[2]

    @property
    def format(self) -> PixelFormat:
        return PixelFormat.from_array(self._pixels)

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    @property
    def rgb(self) -> np.ndarray:
        """View of the color channels, shape (height, width, 3)."""
        return self._pixels[:, :, :3]

    @property
    def alpha(self) -> np.ndarray:
        """Alpha plane, synthesized as fully opaque for RGB buffers."""
        if self.has_alpha:
            return self._pixels[:, :, 3]
        return np.full((self.height, self.width), 255, dtype=np.uint8)

    @property
    def data(self) -> bytes:
        """Raw interleaved bytes, width * height * channels long."""
        return self._pixels.tobytes()

    def clone(self) -> PixelBuffer:
        buffer = PixelBuffer(self._pixels)
        buffer.metadata = dict(self.metadata)
        return buffer

    def to_rgba(self) -> PixelBuffer:
        """Returns a RGBA copy, adding an opaque alpha channel if needed."""
        if self.has_alpha:
            return self.clone()
        alpha = np.full((self.height, self.width, 1), 255, dtype=np.uint8)
        buffer = PixelBuffer(np.concatenate([self._pixels, alpha], axis=2), copy=False)
        buffer.metadata = dict(self.metadata)
        return buffer

    def with_alpha(self, alpha: np.ndarray) -> PixelBuffer:
        """Returns a RGBA copy whose alpha channel is replaced by ``alpha``."""
        validate_mask(alpha, self.width, self.height)
        result = self.to_rgba()
        result._pixels[:, :, 3] = np.clip(alpha, 0, 255).astype(np.uint8)
        return result

    def padded(self, padding: int) -> PixelBuffer:
        """Returns a RGBA copy with a transparent border of ``padding`` pixels."""
        padding = max(0, int(padding))
        rgba = self.to_rgba()
        if padding == 0:
            return rgba
        pixels = np.pad(
            rgba._pixels,
            ((padding, padding), (padding, padding), (0, 0)),
            mode="constant",
            constant_values=0,
        )
        buffer = PixelBuffer(pixels, copy=False)
        buffer.metadata = dict(self.metadata)
        return buffer

    def same_size(self, other: PixelBuffer | np.ndarray) -> bool:
        shape = other.pixels.shape if isinstance(other, PixelBuffer) else other.shape
        return tuple(shape[:2]) == (self.height, self.width)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (
            self._pixels.shape == other._pixels.shape
            and np.array_equal(self._pixels, other._pixels)
        )

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height}, {self.format.value})"


def validate_mask(mask: np.ndarray, width: int, height: int) -> None:
    """Raises if ``mask`` is not a 2D array of size width x height."""
    if not isinstance(mask, np.ndarray) or mask.ndim != 2:
        raise InvalidBuffer("Masks must be 2D numpy arrays")
    if mask.shape != (height, width):
        raise DimensionMismatch(
            f"Mask is {mask.shape[1]}x{mask.shape[0]}, expected {width}x{height}"
        )


@dataclass(frozen=True)
class LightVector:
    """Unit 2D light direction, 0 degrees pointing right and 90 pointing down."""
    x: float
    y: float

    @classmethod
    def from_angle(cls, degrees: float) -> LightVector:
        rad = math.radians(float(degrees))
        return cls(math.cos(rad), math.sin(rad))
