# StickerStag Filters - Blend Compositing
"""
Layer compositing with separable blend modes and source-over alpha.

Follows the W3C compositing model. With the layer color ``Cs``, layer alpha
``as`` (multiplied by the opacity), base color ``Cb`` and base alpha ``ab``:

    Cs' = (1 - ab) * Cs + ab * B(Cb, Cs)
    co  = as * Cs' + (1 - as) * ab * Cb
    ao  = as + ab * (1 - as)
    C   = co / ao

Where the layer is fully transparent the base pixel is passed through
unchanged, so compositing an empty layer never alters a buffer.
"""

from __future__ import annotations

from enum import Enum, auto
import logging

import numpy as np

from stickerstag.errors import DimensionMismatch
from stickerstag.params import clamp
from stickerstag.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


class BlendMode(Enum):
    """Blend modes for combining layers."""
    NORMAL = auto()
    MULTIPLY = auto()
    SCREEN = auto()
    OVERLAY = auto()
    SOFT_LIGHT = auto()

    @classmethod
    def parse(cls, mode: BlendMode | str) -> BlendMode:
        """Accepts a BlendMode or a name such as ``"multiply"`` or ``"soft-light"``."""
        if isinstance(mode, BlendMode):
            return mode
        name = str(mode).strip().upper().replace('-', '_')
        if name == 'OVER':
            return cls.NORMAL
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Unknown blend mode: {mode}") from None


def blend_colors(base: np.ndarray, overlay: np.ndarray, mode: BlendMode) -> np.ndarray:
    """Apply a blend function to float colors in 0..1."""
    if mode == BlendMode.NORMAL:
        return overlay
    elif mode == BlendMode.MULTIPLY:
        return base * overlay
    elif mode == BlendMode.SCREEN:
        return 1 - (1 - base) * (1 - overlay)
    elif mode == BlendMode.OVERLAY:
        # Multiply if base < 0.5, screen otherwise
        mask = base < 0.5
        return np.where(mask, 2 * base * overlay, 1 - 2 * (1 - base) * (1 - overlay))
    elif mode == BlendMode.SOFT_LIGHT:
        return (1 - 2 * overlay) * base ** 2 + 2 * overlay * base
    return overlay


def finalize(pixels: np.ndarray) -> PixelBuffer:
    """Turn float RGBA in 0..1 into a uint8 RGBA buffer, clamping every channel."""
    scaled = np.clip(np.rint(np.asarray(pixels, dtype=np.float64) * 255.0), 0, 255)
    return PixelBuffer(scaled.astype(np.uint8), copy=False)


def composite(base: PixelBuffer, layer: PixelBuffer, mode: BlendMode | str = BlendMode.NORMAL,
              opacity: float = 1.0) -> PixelBuffer:
    """Composite ``layer`` over ``base``.

    :param base: Bottom buffer
    :param layer: Top buffer, same width and height
    :param mode: Blend mode applied where both are visible
    :param opacity: Extra layer opacity, 0..1
    :return: New RGBA buffer
    """
    if not layer.same_size(base):
        raise DimensionMismatch(
            f"Layer is {layer.width}x{layer.height}, base is {base.width}x{base.height}"
        )
    mode = BlendMode.parse(mode)
    opacity = clamp("opacity", opacity, 0.0, 1.0, default=1.0)

    base_px = base.to_rgba().pixels
    layer_px = layer.to_rgba().pixels
    cb = base_px[:, :, :3].astype(np.float64) / 255.0
    ab = base_px[:, :, 3:].astype(np.float64) / 255.0
    cs = layer_px[:, :, :3].astype(np.float64) / 255.0
    a_s = layer_px[:, :, 3:].astype(np.float64) / 255.0 * opacity

    mixed = (1 - ab) * cs + ab * blend_colors(cb, cs, mode)
    co = a_s * mixed + (1 - a_s) * ab * cb
    ao = a_s + ab * (1 - a_s)
    color = np.divide(co, ao, out=np.zeros_like(co), where=ao > 0)

    result = finalize(np.concatenate([color, ao], axis=2))
    untouched = a_s[:, :, 0] == 0
    result.pixels[untouched] = base_px[untouched]
    result.metadata = dict(base.metadata)
    return result


def composite_layers(base: PixelBuffer, layers: list[tuple[PixelBuffer, BlendMode | str]]) -> PixelBuffer:
    """Composite several layers over ``base`` in order, bottom to top."""
    result = base.to_rgba()
    for layer, mode in layers:
        result = composite(result, layer, mode)
    return result
