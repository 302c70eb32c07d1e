"""
Cutout asset effect.

Removes the near-white background of character art by:
1. Flood filling near-white pixels from the image border
2. Feathering the background away from the subject against halos
3. Optionally smoothing the alpha edge
4. Keeping only the largest connected silhouette
5. Despeckling antialiasing noise along the edge

Enclosed whites (eyes, highlights) are not connected to the border and
survive.
"""

import logging
from typing import ClassVar

from pydantic import Field

from stickerstag.config import settings
from stickerstag.filters.components import despeckle, select_largest, smooth_alpha_edges
from stickerstag.filters.flood import apply_background, border_flood, feather_background
from stickerstag.pixel_buffer import PixelBuffer
from .base import AssetEffect, EffectResult

logger = logging.getLogger(__name__)


class Cutout(AssetEffect):
    """
    Border-connected background removal.

    Example:
        >>> from stickerstag.layer_effects import Cutout
        >>> result = Cutout(tolerance=230, feather=1).apply(buffer)
        >>> result.image  # RGBA buffer, background alpha 0
    """

    effect_type: ClassVar[str] = "cutout"
    display_name: ClassVar[str] = "Cutout"
    output_suffix: ClassVar[str] = "cutout"
    _limits: ClassVar[dict] = {
        'tolerance': (0, 255, True),
        'feather': (0, 5, True),
        'preblur': (0.0, 2.0, False),
        'edge_smoothing': (0.0, 2.0, False),
        'min_component_size': (1, None, True),
        'opaque_threshold': (0, 254, True),
        'clear_threshold': (0, 255, True),
        'despeckle_neighbors': (1, 8, True),
    }

    tolerance: int = Field(default=settings.TOLERANCE)
    feather: int = Field(default=settings.FEATHER)
    preblur: float = Field(default=settings.PREBLUR)
    edge_smoothing: float = Field(default=settings.EDGE_SMOOTHING, alias='edgeSmoothing')
    min_component_size: int = Field(default=settings.MIN_COMPONENT_SIZE, alias='minComponentSize')
    opaque_threshold: int = Field(default=settings.OPAQUE_THRESHOLD, alias='opaqueThreshold')
    clear_threshold: int = Field(default=settings.CLEAR_THRESHOLD, alias='clearThreshold')
    despeckle_neighbors: int = Field(default=settings.DESPECKLE_NEIGHBORS, alias='despeckleNeighbors')

    def apply(self, buffer: PixelBuffer) -> EffectResult:
        """
        Cut the subject out of its background.

        Args:
            buffer: RGB or RGBA source; existing alpha is kept on the subject

        Returns:
            EffectResult with an RGBA buffer of the same size
        """
        if not self.enabled:
            return self._passthrough(buffer)

        background = border_flood(buffer, self.tolerance, self.preblur)
        background = feather_background(background, self.feather)
        cut = apply_background(buffer, background)

        alpha = cut.alpha
        if self.edge_smoothing > 0:
            alpha = smooth_alpha_edges(alpha, self.edge_smoothing)
        alpha, stats = select_largest(
            alpha,
            min_size=self.min_component_size,
            opaque_threshold=self.opaque_threshold,
            clear_threshold=self.clear_threshold,
        )
        alpha = despeckle(alpha, self.despeckle_neighbors, self.clear_threshold)

        result = cut.with_alpha(alpha)
        logger.info(
            f"Cutout removed {int(background.sum())} background px, "
            f"kept component of {stats.kept_size} px out of {stats.components}"
        )
        return EffectResult(image=result, offset_x=0, offset_y=0)

    def __repr__(self) -> str:
        return (
            f"Cutout(tolerance={self.tolerance}, feather={self.feather}, "
            f"preblur={self.preblur})"
        )
