# StickerStag Filters - Band / Ring Compositing
"""
Turn distance from a subject into stroke and ring alpha masks.

A band is the set of background pixels (source alpha 0) whose distance to the
subject lies in ``(inner, outer]``. It renders the solid sticker border
directly around a cutout (inner = 0) and decorative rings further out
(inner > 0).

Smoothing strategies:
- HARD: alpha 255 inside the band, 0 outside.
- FALLOFF: ``255 * clamp(1 - d / outer, 0, 1) ** (1 / softness)`` inside the
  band, an anti-aliased border that fades towards ``outer``.
- DILATION: round morphological dilation of the subject by ``outer`` minus
  the dilation by ``inner``. Uses the exact Euclidean distance instead of the
  chamfer approximation, which gives perfectly round corners on large strokes.
"""

from __future__ import annotations

from enum import Enum
import logging

import numpy as np
from PIL import Image as PILImage, ImageOps
from scipy import ndimage

from stickerstag.color import RGBColor
from stickerstag.errors import DimensionMismatch
from stickerstag.params import clamp
from stickerstag.pixel_buffer import DistanceField, Mask, PixelBuffer, validate_mask
from .distance import chamfer_distance

logger = logging.getLogger(__name__)


class SmoothingStrategy(Enum):
    """How band edges are rendered."""
    HARD = "hard"
    FALLOFF = "falloff"
    DILATION = "dilation"


def hard_band(distance: DistanceField, background: np.ndarray, inner: float, outer: float) -> Mask:
    """255 where the pixel is background and inner < distance <= outer."""
    inside = background & (distance > inner) & (distance <= outer)
    return inside.astype(np.uint8) * 255


def falloff_band(distance: DistanceField, background: np.ndarray, inner: float, outer: float,
                 softness: float) -> Mask:
    """Band alpha fading with distance, steeper for small softness values."""
    inside = background & (distance > inner) & (distance <= outer)
    ramp = np.clip(1.0 - distance.astype(np.float64) / outer, 0.0, 1.0) ** (1.0 / softness)
    alpha = np.floor(255.0 * ramp + 0.5)
    alpha[~inside] = 0
    return alpha.astype(np.uint8)


def exact_distance(seeds: np.ndarray) -> np.ndarray:
    """Euclidean distance to the nearest seed, 0 on seeds."""
    if not seeds.any():
        return np.full(seeds.shape, np.inf)
    return ndimage.distance_transform_edt(~seeds.astype(bool))


def dilation_band(seeds: np.ndarray, background: np.ndarray, inner: float, outer: float) -> Mask:
    """Disk dilation by ``outer`` minus disk dilation by ``inner``."""
    distance = exact_distance(seeds)
    outer_dilation = distance <= outer
    inner_dilation = distance <= inner
    return (background & outer_dilation & ~inner_dilation).astype(np.uint8) * 255


def close_mask(seeds: np.ndarray, radius: float) -> Mask:
    """Morphological closing with a disk, filling gaps and concavities narrower than the radius."""
    if radius <= 0:
        return seeds.astype(np.uint8)
    dilated = exact_distance(seeds) <= radius
    closed = ndimage.distance_transform_edt(dilated) > radius
    return (closed | seeds.astype(bool)).astype(np.uint8)


def band_alpha(source_alpha: np.ndarray, inner: float, outer: float,
               strategy: SmoothingStrategy | str = SmoothingStrategy.HARD,
               softness: float = 1.0, seeds: np.ndarray | None = None,
               distance: DistanceField | None = None) -> Mask:
    """Alpha mask of the band ``(inner, outer]`` around a subject.

    :param source_alpha: Alpha channel of the subject; pixels with alpha 0 are
        background and the only candidates for the band
    :param inner: Inner radius (exclusive)
    :param outer: Outer radius (inclusive)
    :param strategy: SmoothingStrategy or its value
    :param softness: Falloff exponent control, (0, 5]
    :param seeds: Subject mask the distance is measured from, defaults to
        ``source_alpha > 0``
    :param distance: Precomputed chamfer distance field from ``seeds``
    :return: uint8 band alpha, 0..255
    """
    strategy = SmoothingStrategy(strategy)
    inner = clamp("inner_radius", inner, 0, None, default=0)
    outer = clamp("outer_radius", outer, 1, None, default=1)
    if inner >= outer:
        logger.warning(f"Empty band: inner radius {inner} >= outer radius {outer}")
        return np.zeros(source_alpha.shape, dtype=np.uint8)
    if seeds is None:
        seeds = source_alpha > 0
    validate_mask(seeds, source_alpha.shape[1], source_alpha.shape[0])
    background = source_alpha == 0

    if strategy is SmoothingStrategy.DILATION:
        return dilation_band(seeds, background, inner, outer)

    if distance is None:
        distance = chamfer_distance(seeds, max_distance=2 * outer)
    else:
        validate_mask(distance, source_alpha.shape[1], source_alpha.shape[0])

    if strategy is SmoothingStrategy.FALLOFF:
        softness = clamp("softness", softness, 0.1, 5.0, default=1.0)
        return falloff_band(distance, background, inner, outer, softness)
    return hard_band(distance, background, inner, outer)


def cover_resize(texture: PixelBuffer, width: int, height: int) -> PixelBuffer:
    """Scale and center-crop a texture so it covers width x height."""
    if texture.size == (width, height):
        return texture.to_rgba()
    image = PILImage.fromarray(np.ascontiguousarray(texture.to_rgba().pixels))
    fitted = ImageOps.fit(image, (width, height), method=PILImage.Resampling.LANCZOS)
    return PixelBuffer(np.asarray(fitted, dtype=np.uint8))


def render_band(alpha: Mask, color: RGBColor | None = None,
                texture: PixelBuffer | None = None) -> PixelBuffer:
    """RGBA layer with the band alpha, filled with a color or sampled from a texture.

    Color and texture are exclusive; without either the band is white.
    Pixels outside the band are fully transparent black.
    """
    height, width = alpha.shape
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    inside = alpha > 0
    if texture is not None:
        if not texture.same_size(alpha):
            raise DimensionMismatch(
                f"Texture is {texture.width}x{texture.height}, band is {width}x{height}"
            )
        pixels[inside, :3] = texture.rgb[inside]
    else:
        pixels[inside, :3] = color if color is not None else (255, 255, 255)
    pixels[:, :, 3] = alpha
    return PixelBuffer(pixels, copy=False)
