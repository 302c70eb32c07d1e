# StickerStag Filters - Mask Extraction
"""
Derive binary or luminance masks from a :class:`PixelBuffer`.
"""

from __future__ import annotations

from enum import Enum

import numpy as np

from stickerstag.errors import InvalidBuffer
from stickerstag.pixel_buffer import Mask, PixelBuffer

LUMA_WEIGHTS = np.array([299, 587, 114], dtype=np.int32)
"Rec. 601 luma weights for R, G and B, in thousandths"


class MaskMode(Enum):
    """What a mask is derived from."""
    ALPHA = "alpha"  # Binary, alpha > threshold
    LUMINANCE = "luminance"  # Strength, 0.299R + 0.587G + 0.114B


def _check_channels(buffer: PixelBuffer) -> None:
    if buffer.channels < 3:
        raise InvalidBuffer(f"Expected at least 3 channels, got {buffer.channels}")


def luminance(buffer: PixelBuffer) -> np.ndarray:
    """Per-pixel luminance as float32 in 0..255, shape (height, width).

    Computed in integer thousandths so pure white is exactly 255.
    """
    _check_channels(buffer)
    weighted = buffer.rgb.astype(np.int32) @ LUMA_WEIGHTS
    return weighted.astype(np.float32) / np.float32(1000)


def extract_mask(buffer: PixelBuffer, mode: MaskMode | str = MaskMode.ALPHA,
                 threshold: int = 0) -> Mask:
    """Extract a mask from a buffer.

    ALPHA yields a binary mask, 1 where alpha > threshold. Buffers without
    an alpha channel count as fully opaque. LUMINANCE yields the luminance
    rounded to uint8.

    :param buffer: Source buffer
    :param mode: MaskMode or its value
    :param threshold: Alpha threshold for ALPHA mode
    """
    _check_channels(buffer)
    mode = MaskMode(mode)
    if mode is MaskMode.ALPHA:
        return (buffer.alpha > threshold).astype(np.uint8)
    return np.clip(np.rint(luminance(buffer)), 0, 255).astype(np.uint8)


def normalize_off_white(buffer: PixelBuffer, min_value: int = 220,
                        max_spread: int = 20) -> PixelBuffer:
    """Snap cream and light gray pixels to pure white.

    A pixel is snapped when all color channels exceed ``min_value`` and the
    largest difference between two channels is below ``max_spread``, so light
    tints such as pink are left alone. Alpha is unchanged.
    """
    _check_channels(buffer)
    result = buffer.clone()
    rgb = result.rgb.astype(np.int16)
    light = np.all(rgb > min_value, axis=2)
    spread = rgb.max(axis=2) - rgb.min(axis=2)
    neutral = light & (spread < max_spread)
    result.pixels[neutral, :3] = 255
    return result
