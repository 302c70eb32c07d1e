"""
Bevel asset effect.

Lights the inner rim of a sticker from one direction: a black shadow layer is
multiplied onto the rim facing away from the light, a white highlight layer
is screened onto the rim facing it. Canvas size is unchanged.
"""

import logging
from typing import ClassVar

from pydantic import Field

from stickerstag.config import settings
from stickerstag.filters.blend import BlendMode, composite_layers
from stickerstag.filters.relief import ReliefLayers, relief_layers
from stickerstag.pixel_buffer import PixelBuffer
from .base import AssetEffect, EffectResult

logger = logging.getLogger(__name__)


class Bevel(AssetEffect):
    """
    Directional bevel shading.

    Example:
        >>> from stickerstag.layer_effects import Bevel
        >>> result = Bevel(bevel_px=6, light_angle=225, intensity=0.5).apply(sticker)
    """

    effect_type: ClassVar[str] = "bevel"
    display_name: ClassVar[str] = "Bevel"
    output_suffix: ClassVar[str] = "bevel"
    _limits: ClassVar[dict] = {
        'bevel_px': (1, 50, True),
        'light_angle': (None, None, False),
        'intensity': (0.0, 1.0, False),
    }

    bevel_px: int = Field(default=settings.BEVEL_PX, alias='bevelPx')
    light_angle: float = Field(default=settings.LIGHT_ANGLE, alias='lightAngle')  # Degrees, 0 = right
    intensity: float = Field(default=settings.INTENSITY)

    def layers(self, buffer: PixelBuffer) -> ReliefLayers:
        """Shadow, highlight, rim and height maps without compositing."""
        return relief_layers(buffer, self.bevel_px, self.light_angle, self.intensity)

    def apply(self, buffer: PixelBuffer) -> EffectResult:
        """
        Shade the rim.

        Args:
            buffer: RGBA sticker

        Returns:
            EffectResult with a buffer of the same size
        """
        if not self.enabled:
            return self._passthrough(buffer)

        relief = self.layers(buffer)
        image = composite_layers(buffer, [
            (relief.shadow, BlendMode.MULTIPLY),
            (relief.highlight, BlendMode.SCREEN),
        ])
        logger.info(
            f"Bevel {self.bevel_px}px lit from {self.light_angle} deg, "
            f"intensity {self.intensity}"
        )
        return EffectResult(image=image, offset_x=0, offset_y=0)

    def __repr__(self) -> str:
        return (
            f"Bevel(bevelPx={self.bevel_px}, lightAngle={self.light_angle}, "
            f"intensity={self.intensity})"
        )
