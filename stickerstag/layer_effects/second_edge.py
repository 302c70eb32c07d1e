"""
Second edge asset effect.

Adds a decorative ring (a brown cardboard edge by default) around a sticker,
optionally separated from it by a transparent gap:

    ring = { transparent pixels p : offset_px < distance(p) <= offset_px + edge_px }

The ring is filled with a solid color or sampled from a texture that is
cover-resized to the padded canvas.
"""

import logging
from typing import Any, ClassVar, Optional

from pydantic import Field, model_validator

from stickerstag.color import parse_color, rgb_to_hex
from stickerstag.config import settings
from stickerstag.filters.band import SmoothingStrategy, band_alpha, cover_resize, render_band
from stickerstag.filters.blend import composite
from stickerstag.pixel_buffer import PixelBuffer
from .base import AssetEffect, EffectResult

logger = logging.getLogger(__name__)


class SecondEdge(AssetEffect):
    """
    Hard-edged ring around the non-transparent area.

    Example:
        >>> from stickerstag.layer_effects import SecondEdge
        >>> result = SecondEdge(edge_px=40, offset_px=8, color='#8C4B15').apply(sticker)
    """

    effect_type: ClassVar[str] = "secondEdge"
    display_name: ClassVar[str] = "Second Edge"
    output_suffix: ClassVar[str] = "edge"
    _limits: ClassVar[dict] = {
        'edge_px': (1, None, True),
        'offset_px': (0, None, True),
        'min_padding': (0, None, True),
    }

    edge_px: int = Field(default=settings.EDGE_PX, alias='edgePx')
    offset_px: int = Field(default=settings.EDGE_OFFSET_PX, alias='offsetPx')
    color: str = Field(default=settings.EDGE_COLOR)
    min_padding: int = Field(default=settings.EDGE_MIN_PADDING, alias='minPadding')

    @model_validator(mode='before')
    @classmethod
    def _normalize_input(cls, data: Any) -> Any:
        """Convert RGB tuple colors to hex strings."""
        if isinstance(data, dict):
            color = data.get('color')
            if isinstance(color, (list, tuple)):
                data = dict(data)
                data['color'] = rgb_to_hex(color)
        return data

    @property
    def color_rgb(self):
        """Get color as RGB tuple (0-255)."""
        return parse_color(self.color)

    @property
    def padding(self) -> int:
        """Canvas growth on every side."""
        return max(self.edge_px + self.offset_px, self.min_padding)

    def apply(self, buffer: PixelBuffer, texture: Optional[PixelBuffer] = None) -> EffectResult:
        """
        Add the ring.

        Args:
            buffer: RGBA sticker, every pixel with alpha > 0 counts as subject
            texture: Optional fill texture, any size

        Returns:
            EffectResult with a buffer grown by ``padding`` on every side
        """
        if not self.enabled:
            return self._passthrough(buffer)

        pad = self.padding
        padded = buffer.padded(pad)
        alpha = padded.alpha
        ring = band_alpha(
            alpha,
            self.offset_px,
            self.offset_px + self.edge_px,
            strategy=SmoothingStrategy.HARD,
            seeds=alpha > 0,
        )

        if texture is not None:
            fill = cover_resize(texture, padded.width, padded.height)
            layer = render_band(ring, texture=fill)
        else:
            layer = render_band(ring, color=self.color_rgb)

        image = composite(layer, padded)
        logger.info(
            f"Second edge {self.edge_px}px at offset {self.offset_px}px, "
            f"{int((ring > 0).sum())} ring px"
        )
        return EffectResult(image=image, offset_x=-pad, offset_y=-pad)

    def __repr__(self) -> str:
        return (
            f"SecondEdge(edgePx={self.edge_px}, offsetPx={self.offset_px}, "
            f"color={self.color})"
        )
