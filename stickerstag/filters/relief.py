# StickerStag Filters - Directional Relief
"""
Bevel shading of a subject's inner rim, lit from a configurable direction.

The alpha channel is blurred into a height field that ramps from 0 outside
the subject to 1 inside. Its Sobel gradient points inward, perpendicular to
the silhouette. Rim pixels facing away from the light get a black shadow,
pixels facing it a white highlight:

    dot = normalize(gx, gy) . (cos(angle), sin(angle))
    shadow alpha    = round(255 * intensity * |dot|)  where dot < 0
    highlight alpha = round(255 * intensity * dot)    where dot >= 0

Shadow and highlight stay separate layers because the shadow is composited
with multiply and the highlight with screen.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

import numpy as np
from scipy import ndimage

from stickerstag.params import clamp, clamp_int
from stickerstag.pixel_buffer import LightVector, Mask, PixelBuffer, validate_mask

logger = logging.getLogger(__name__)

SOBEL_X = np.array([[-1, 0, 1],
                    [-2, 0, 2],
                    [-1, 0, 1]], dtype=np.float32)
SOBEL_Y = SOBEL_X.T.copy()


@dataclass
class ReliefLayers:
    """Shading layers of one relief pass plus the intermediate maps."""
    shadow: PixelBuffer  # Black, composite with multiply
    highlight: PixelBuffer  # White, composite with screen
    rim: Mask  # Binary rim the shading is restricted to
    height: np.ndarray  # float32 height field, 0..1


def rim_mask(mask: np.ndarray, radius: int) -> Mask:
    """Pixels of the mask within ``radius`` of its outer edge.

    ``mask AND NOT erode(mask)`` where the erosion is a 3x3 erosion repeated
    ``radius`` times. Pixels beyond the image edge count as transparent, so a
    subject touching the frame gets a rim along the frame as well.
    """
    inside = mask.astype(bool)
    radius = int(radius)
    if radius <= 0:
        return np.zeros(mask.shape, dtype=np.uint8)
    eroded = ndimage.binary_erosion(
        inside, structure=np.ones((3, 3), dtype=bool), iterations=radius, border_value=0
    )
    return (inside & ~eroded).astype(np.uint8)


def height_field(alpha: np.ndarray, rim_radius: int) -> np.ndarray:
    """Blurred alpha normalized to 0..1, blur sigma ``max(0.6, 0.6 * rim_radius)``."""
    sigma = max(0.6, rim_radius * 0.6)
    blurred = ndimage.gaussian_filter(alpha.astype(np.float32), sigma=sigma, mode="nearest")
    return np.clip(np.rint(blurred), 0, 255).astype(np.float32) / np.float32(255)


def sobel(height: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """3x3 Sobel gradient (gx, gy) of a height field, zero on the outermost pixel ring."""
    gx = ndimage.correlate(height.astype(np.float32), SOBEL_X, mode="constant", cval=0.0)
    gy = ndimage.correlate(height.astype(np.float32), SOBEL_Y, mode="constant", cval=0.0)
    for grad in (gx, gy):
        grad[0, :] = 0
        grad[-1, :] = 0
        grad[:, 0] = 0
        grad[:, -1] = 0
    return gx, gy


def _layer(alpha: np.ndarray, value: int) -> PixelBuffer:
    pixels = np.zeros((*alpha.shape, 4), dtype=np.uint8)
    visible = alpha > 0
    pixels[visible, :3] = value
    pixels[:, :, 3] = alpha
    return PixelBuffer(pixels, copy=False)


def shade(gx: np.ndarray, gy: np.ndarray, rim: Mask, light: LightVector,
          intensity: float) -> tuple[PixelBuffer, PixelBuffer]:
    """Split rim pixels into a shadow and a highlight layer.

    :param gx: Horizontal gradient
    :param gy: Vertical gradient
    :param rim: Binary mask shading is restricted to
    :param light: Unit light direction
    :param intensity: Maximum opacity factor, 0..1
    :return: (shadow, highlight) RGBA layers
    """
    validate_mask(rim, gx.shape[1], gx.shape[0])
    length = np.hypot(gx, gy).astype(np.float64)
    length[length == 0] = 1e-6
    dot = (gx * light.x + gy * light.y) / length
    strength = np.clip(np.floor(255.0 * intensity * np.abs(dot) + 0.5), 0, 255).astype(np.uint8)

    on_rim = rim.astype(bool)
    shadow_alpha = np.where(on_rim & (dot < 0), strength, 0).astype(np.uint8)
    highlight_alpha = np.where(on_rim & (dot >= 0), strength, 0).astype(np.uint8)
    return _layer(shadow_alpha, 0), _layer(highlight_alpha, 255)


def relief_layers(buffer: PixelBuffer, rim_radius: int = 4, light_angle: float = 45.0,
                  intensity: float = 0.35) -> ReliefLayers:
    """Compute bevel shadow and highlight layers for a buffer's alpha.

    :param buffer: RGBA (or RGB, fully opaque) source
    :param rim_radius: Rim thickness in pixels, 1..50
    :param light_angle: Light direction in degrees, 0 = right, 90 = down
    :param intensity: Shading strength, 0..1
    """
    rim_radius = clamp_int("bevel_px", rim_radius, 1, 50, default=4)
    intensity = clamp("intensity", intensity, 0.0, 1.0, default=0.35)
    light = LightVector.from_angle(clamp("light_angle", light_angle, default=45.0))

    alpha = buffer.alpha
    rim = rim_mask(alpha > 0, rim_radius)
    height = height_field(alpha, rim_radius)
    gx, gy = sobel(height)
    shadow, highlight = shade(gx, gy, rim, light, intensity)
    logger.debug(f"Relief rim of {int(rim.sum())} px, radius {rim_radius}")
    return ReliefLayers(shadow=shadow, highlight=highlight, rim=rim, height=height)
