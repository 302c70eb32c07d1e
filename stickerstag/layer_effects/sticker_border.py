"""
Sticker border asset effect.

Grows a solid (white by default) border around a cutout:
1. Snapping cream and light gray pixels to pure white
2. Padding the canvas by the stroke width
3. Measuring the distance of every transparent pixel to the subject
4. Filling the band up to ``stroke_px`` with the border color
5. Compositing the original on top
"""

import logging
from typing import Any, ClassVar

from pydantic import Field, model_validator

from stickerstag.color import parse_color, rgb_to_hex
from stickerstag.config import settings
from stickerstag.filters.band import SmoothingStrategy, band_alpha, close_mask, render_band
from stickerstag.filters.blend import composite
from stickerstag.filters.mask import normalize_off_white
from stickerstag.params import to_bool
from stickerstag.pixel_buffer import PixelBuffer
from .base import AssetEffect, EffectResult

logger = logging.getLogger(__name__)

SEED_THRESHOLD = 127
"Alpha above which a pixel belongs to the subject the border grows from"


class StickerBorder(AssetEffect):
    """
    Sticker border around a transparent cutout.

    Strategies:
    - hard: opaque border, the classic die-cut sticker look
    - falloff: border alpha fades towards the outer edge, shaped by softness
    - dilation: exact round dilation, smoothest corners on large strokes

    Example:
        >>> from stickerstag.layer_effects import StickerBorder
        >>> result = StickerBorder(stroke_px=24).apply(cutout)
        >>> result.offset_x  # -24, the canvas grew by 24 px on each side
    """

    effect_type: ClassVar[str] = "stickerBorder"
    display_name: ClassVar[str] = "Sticker Border"
    output_suffix: ClassVar[str] = "sticker"
    _limits: ClassVar[dict] = {
        'stroke_px': (1, 500, True),
        'softness': (0.1, 5.0, False),
        'simplify_px': (0, 50, True),
    }

    stroke_px: int = Field(default=settings.STROKE_PX, alias='strokePx')
    softness: float = Field(default=settings.SOFTNESS)
    strategy: SmoothingStrategy = Field(default=SmoothingStrategy.HARD)
    simplify_px: int = Field(default=0, alias='simplifyPx')
    color: str = Field(default=settings.STROKE_COLOR)
    normalize_whites: bool = Field(default=True, alias='normalizeWhites')

    @model_validator(mode='before')
    @classmethod
    def _normalize_input(cls, data: Any) -> Any:
        """Accept RGB tuples for the color and strategy names in any case."""
        if isinstance(data, dict):
            data = dict(data)
            color = data.get('color')
            if isinstance(color, (list, tuple)):
                data['color'] = rgb_to_hex(color)
            strategy = data.get('strategy')
            if isinstance(strategy, str):
                data['strategy'] = strategy.strip().lower()
            if to_bool(data.get('vectorSmooth')):
                data['strategy'] = SmoothingStrategy.DILATION
        return data

    @property
    def color_rgb(self):
        """Get color as RGB tuple (0-255)."""
        return parse_color(self.color)

    def apply(self, buffer: PixelBuffer) -> EffectResult:
        """
        Add the border.

        Args:
            buffer: RGBA cutout (RGB counts as fully opaque)

        Returns:
            EffectResult with a buffer grown by ``stroke_px`` on every side
        """
        if not self.enabled:
            return self._passthrough(buffer)

        source = normalize_off_white(buffer) if self.normalize_whites else buffer
        padded = source.padded(self.stroke_px)
        alpha = padded.alpha
        seeds = alpha > SEED_THRESHOLD

        filled = None
        if self.simplify_px > 0:
            closed = close_mask(seeds, self.simplify_px).astype(bool)
            filled = closed & (alpha == 0)
            seeds = closed

        border = band_alpha(
            alpha, 0, self.stroke_px,
            strategy=self.strategy,
            softness=self.softness,
            seeds=seeds,
        )
        if filled is not None:
            # Closed concavities are seeds themselves, so fill them explicitly
            border[filled] = 255

        layer = render_band(border, color=self.color_rgb)
        image = composite(layer, padded)
        logger.info(
            f"Sticker border {self.stroke_px}px ({self.strategy.value}), "
            f"{int((border > 0).sum())} border px"
        )
        return EffectResult(image=image, offset_x=-self.stroke_px, offset_y=-self.stroke_px)

    def __repr__(self) -> str:
        return (
            f"StickerBorder(strokePx={self.stroke_px}, softness={self.softness}, "
            f"strategy={self.strategy.value}, color={self.color})"
        )
