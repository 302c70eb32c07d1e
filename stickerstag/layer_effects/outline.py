"""
Outline asset effect.

Turns line art on a white page (maps, clue sheets) into black strokes on
transparency. Luminance maps to alpha through a linear ramp:

    L <= low          -> 255
    low < L < high    -> round(255 * (1 - (L - low) / (high - low)))
    L >= high         -> 0

Existing transparency is kept by taking the minimum with the source alpha.
The alpha is then blurred very slightly and snapped to remove halos.
"""

import logging
from typing import ClassVar

import numpy as np
from pydantic import Field, model_validator

from stickerstag.config import settings
from stickerstag.filters.components import smooth_alpha_edges
from stickerstag.filters.mask import luminance
from stickerstag.pixel_buffer import PixelBuffer
from .base import AssetEffect, EffectResult

logger = logging.getLogger(__name__)


class Outline(AssetEffect):
    """
    Black line art extraction.

    Example:
        >>> from stickerstag.layer_effects import Outline
        >>> result = Outline(luminance_low=200, luminance_high=240).apply(scan)
    """

    effect_type: ClassVar[str] = "outline"
    display_name: ClassVar[str] = "Outline"
    output_suffix: ClassVar[str] = "outline"
    _limits: ClassVar[dict] = {
        'luminance_low': (0, 254, True),
        'luminance_high': (1, 255, True),
        'smoothing': (0.0, 2.0, False),
    }

    luminance_low: int = Field(default=settings.LUMINANCE_LOW, alias='luminanceLow')
    luminance_high: int = Field(default=settings.LUMINANCE_HIGH, alias='luminanceHigh')
    smoothing: float = Field(default=0.5)

    @model_validator(mode='after')
    def _order_ramp(self) -> 'Outline':
        if self.luminance_high <= self.luminance_low:
            logger.warning(
                f"Outline ramp [{self.luminance_low}, {self.luminance_high}] is empty, "
                f"raising the upper bound"
            )
            self.luminance_high = self.luminance_low + 1
        return self

    def ramp(self, buffer: PixelBuffer) -> np.ndarray:
        """Alpha from luminance before smoothing, uint8."""
        lum = luminance(buffer).astype(np.float64)
        low, high = float(self.luminance_low), float(self.luminance_high)
        position = np.clip((lum - low) / (high - low), 0.0, 1.0)
        alpha = np.floor(255.0 * (1.0 - position) + 0.5).astype(np.uint8)
        return np.minimum(alpha, buffer.alpha)

    def apply(self, buffer: PixelBuffer) -> EffectResult:
        """
        Extract the outline.

        Args:
            buffer: RGB or RGBA scan

        Returns:
            EffectResult with a black RGBA buffer of the same size
        """
        if not self.enabled:
            return self._passthrough(buffer)

        alpha = self.ramp(buffer)
        alpha = smooth_alpha_edges(alpha, self.smoothing, low=30, high=225)
        pixels = np.zeros((buffer.height, buffer.width, 4), dtype=np.uint8)
        pixels[:, :, 3] = alpha
        image = PixelBuffer(pixels, copy=False)
        image.metadata = dict(buffer.metadata)
        logger.info(f"Outline kept {int((alpha > 0).sum())} of {alpha.size} px")
        return EffectResult(image=image, offset_x=0, offset_y=0)

    def __repr__(self) -> str:
        return (
            f"Outline(luminanceLow={self.luminance_low}, "
            f"luminanceHigh={self.luminance_high})"
        )
