# StickerStag Filters Module
"""
Pure raster stages of the asset pipeline.

Every function takes numpy arrays or :class:`~stickerstag.pixel_buffer.PixelBuffer`
objects and returns new ones; inputs are never modified.
"""

from .mask import (
    LUMA_WEIGHTS,
    MaskMode,
    luminance,
    extract_mask,
    normalize_off_white,
)

from .flood import (
    near_white,
    border_flood,
    flood_from_border,
    feather_background,
    apply_background,
)

from .components import (
    ComponentLabeling,
    ComponentStats,
    label_components,
    select_largest,
    despeckle,
    smooth_alpha_edges,
)

from .distance import chamfer_distance

from .band import (
    SmoothingStrategy,
    band_alpha,
    close_mask,
    cover_resize,
    render_band,
)

from .relief import (
    ReliefLayers,
    rim_mask,
    height_field,
    sobel,
    shade,
    relief_layers,
)

from .blend import (
    BlendMode,
    composite,
    composite_layers,
    finalize,
)

__all__ = [
    # Masks
    "LUMA_WEIGHTS",
    "MaskMode",
    "luminance",
    "extract_mask",
    "normalize_off_white",
    # Segmentation
    "near_white",
    "border_flood",
    "flood_from_border",
    "feather_background",
    "apply_background",
    # Components
    "ComponentLabeling",
    "ComponentStats",
    "label_components",
    "select_largest",
    "despeckle",
    "smooth_alpha_edges",
    # Distance and bands
    "chamfer_distance",
    "SmoothingStrategy",
    "band_alpha",
    "close_mask",
    "cover_resize",
    "render_band",
    # Relief
    "ReliefLayers",
    "rim_mask",
    "height_field",
    "sobel",
    "shade",
    "relief_layers",
    # Compositing
    "BlendMode",
    "composite",
    "composite_layers",
    "finalize",
]
