"""
Pytest fixtures for StickerStag tests
"""

import numpy as np
import pytest

from stickerstag.pixel_buffer import PixelBuffer


def rgba_canvas(width: int, height: int, color=(0, 0, 0, 0)) -> np.ndarray:
    """A (height, width, 4) uint8 array filled with one color."""
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[:, :] = color
    return pixels


def disk(size: int, radius: float) -> np.ndarray:
    """Boolean disk centered in a size x size grid."""
    yy, xx = np.mgrid[:size, :size]
    center = (size - 1) / 2
    return (yy - center) ** 2 + (xx - center) ** 2 <= radius ** 2


@pytest.fixture
def white_canvas() -> PixelBuffer:
    """Uniform pure white 200x200 RGB image."""
    return PixelBuffer(np.full((200, 200, 3), 255, dtype=np.uint8))


@pytest.fixture
def square_on_white() -> PixelBuffer:
    """
    200x200 white RGB canvas with a centered 50x50 black square.

    The square encloses a 2x2 white island, and a 2x2 white patch touches the
    left canvas edge.
    """
    pixels = np.full((200, 200, 3), 255, dtype=np.uint8)
    pixels[75:125, 75:125] = 0
    pixels[99:101, 99:101] = 255  # Island inside the square
    pixels[0:2, 0:2] = 255  # Edge patch, part of the background anyway
    return PixelBuffer(pixels)


@pytest.fixture
def red_square_cutout() -> PixelBuffer:
    """20x20 transparent RGBA canvas with an opaque red 10x10 square at [5:15, 5:15]."""
    pixels = rgba_canvas(20, 20)
    pixels[5:15, 5:15] = (255, 0, 0, 255)
    return PixelBuffer(pixels)


@pytest.fixture
def gray_disk() -> PixelBuffer:
    """61x61 transparent canvas with an opaque mid gray disk of radius 15."""
    pixels = rgba_canvas(61, 61)
    pixels[disk(61, 15)] = (128, 128, 128, 255)
    return PixelBuffer(pixels)
