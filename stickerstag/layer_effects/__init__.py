"""
StickerStag Asset Effects

Pipeline stages that turn raw character and map art into finished assets.

Example:
    >>> from stickerstag.layer_effects import Cutout, StickerBorder, Pipeline
    >>> pipeline = Pipeline([Cutout(), StickerBorder(stroke_px=16)])
    >>> result = pipeline.run(buffer)
    >>> # result.image contains the output, result.offset_x/y the canvas growth

Supported Effects:
    - Cutout: Border-connected near-white background removal
    - StickerBorder: Solid border grown around a cutout
    - SecondEdge: Decorative ring around a sticker
    - Bevel: Directional rim shading
    - Outline: Black line art from a white page
"""

from .base import AssetEffect, EffectResult
from .cutout import Cutout
from .sticker_border import StickerBorder
from .second_edge import SecondEdge
from .bevel import Bevel
from .outline import Outline
from .pipeline import Pipeline, ReplacementRequest

__all__ = [
    # Base classes
    "AssetEffect",
    "EffectResult",
    # Effects
    "Cutout",
    "StickerBorder",
    "SecondEdge",
    "Bevel",
    "Outline",
    # Chaining
    "Pipeline",
    "ReplacementRequest",
]
