# StickerStag Filters - Border Flood Segmentation
"""
Background detection by flood fill from the image border.

Only near-white pixels that are connected to one of the four image edges
through other near-white pixels (4-connectivity) count as background. A plain
luminance threshold would also erase enclosed whites such as eyes and
highlights; requiring border connectivity keeps them.
"""

from __future__ import annotations

import logging

import numpy as np
from PIL import Image as PILImage, ImageFilter
from scipy import ndimage

from stickerstag.params import clamp
from stickerstag.pixel_buffer import Mask, PixelBuffer, validate_mask
from .mask import luminance

logger = logging.getLogger(__name__)


def near_white(lum: np.ndarray, tolerance: float) -> np.ndarray:
    """Boolean mask of pixels with luminance >= tolerance.

    A tolerance of 0 or below selects nothing, which turns background removal
    into a no-op.
    """
    if tolerance <= 0:
        return np.zeros(lum.shape, dtype=bool)
    return lum >= tolerance


def preblurred(buffer: PixelBuffer, sigma: float) -> PixelBuffer:
    """Copy of the color data blurred with a Gaussian of radius ``sigma``.

    Used only to decide what is background; output colors come from the
    unblurred source.
    """
    if sigma <= 0:
        return buffer
    rgb = np.ascontiguousarray(buffer.rgb)
    blurred = PILImage.fromarray(rgb).filter(ImageFilter.GaussianBlur(radius=sigma))
    return PixelBuffer(np.asarray(blurred, dtype=np.uint8))


def flood_from_border(qualifies: np.ndarray) -> Mask:
    """Flood fill through ``qualifies`` starting at every border pixel.

    :param qualifies: Boolean (height, width) array of passable pixels
    :return: Binary mask, 1 for every passable pixel reachable from the border
    """
    height, width = qualifies.shape
    passable = qualifies.ravel().tolist()
    visited = bytearray(width * height)
    stack: list[int] = []

    def push(i: int) -> None:
        if passable[i] and not visited[i]:
            visited[i] = 1
            stack.append(i)

    last_row = (height - 1) * width
    for x in range(width):
        push(x)
        push(last_row + x)
    for y in range(height):
        push(y * width)
        push(y * width + width - 1)

    while stack:
        i = stack.pop()
        x = i % width
        if x > 0:
            push(i - 1)
        if x < width - 1:
            push(i + 1)
        if i >= width:
            push(i - width)
        if i < last_row:
            push(i + width)

    return np.frombuffer(bytes(visited), dtype=np.uint8).reshape(height, width).copy()


def border_flood(buffer: PixelBuffer, tolerance: float = 220, preblur: float = 0.0) -> Mask:
    """Find the border-connected near-white background.

    :param buffer: Source buffer (RGB or RGBA)
    :param tolerance: Luminance threshold, 0..255
    :param preblur: Optional blur sigma merging speckles before the test
    :return: Binary mask, 1 marks background to remove
    """
    tolerance = clamp("tolerance", tolerance, 0, 255, default=220)
    preblur = clamp("preblur", preblur, 0, 2, default=0)
    lum = luminance(preblurred(buffer, preblur))
    background = flood_from_border(near_white(lum, tolerance))
    logger.debug(f"Border flood marked {int(background.sum())} of {background.size} pixels")
    return background


def feather_background(background: Mask, radius: int) -> Mask:
    """Shrink the background so it stops ``radius`` pixels short of the subject.

    A pixel stays background only if every pixel of the (2r+1) x (2r+1) square
    around it is background. Pixels beyond the image edge count as background,
    so the mask only shrinks away from the subject, never from the frame.
    """
    radius = int(radius)
    if radius <= 0:
        return background.copy()
    structure = np.ones((2 * radius + 1, 2 * radius + 1), dtype=bool)
    eroded = ndimage.binary_erosion(background.astype(bool), structure=structure, border_value=1)
    return eroded.astype(np.uint8)


def apply_background(buffer: PixelBuffer, background: Mask) -> PixelBuffer:
    """RGBA copy with alpha 0 on background pixels and the source alpha elsewhere."""
    validate_mask(background, buffer.width, buffer.height)
    result = buffer.to_rgba()
    result.pixels[background.astype(bool), 3] = 0
    return result
