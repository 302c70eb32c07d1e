"""Application configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Tuned defaults for the asset tools.

    Every value can be overridden with a ``STICKERSTAG_`` environment variable,
    e.g. ``STICKERSTAG_TOLERANCE=230``.
    """

    # Cutout
    TOLERANCE: int = 220  # Luminance at or above which a pixel is near-white
    FEATHER: int = 2  # Background erosion radius against halos
    PREBLUR: float = 0.6  # Sigma of the blur applied before the luminance test
    EDGE_SMOOTHING: float = 0.0  # Alpha blur after removal, 0 disables, 0.4 blurs and snaps
    MIN_COMPONENT_SIZE: int = 10
    OPAQUE_THRESHOLD: int = 128
    CLEAR_THRESHOLD: int = 50
    DESPECKLE_NEIGHBORS: int = 6

    # Sticker border
    STROKE_PX: int = 16
    SOFTNESS: float = 0.8
    STROKE_COLOR: str = "#FFFFFF"

    # Secondary ring
    EDGE_PX: int = 100
    EDGE_OFFSET_PX: int = 0
    EDGE_COLOR: str = "#8C4B15"
    EDGE_MIN_PADDING: int = 100

    # Bevel
    BEVEL_PX: int = 4
    LIGHT_ANGLE: float = 45.0  # Degrees, 0 = right, 90 = down
    INTENSITY: float = 0.35

    # Outline
    LUMINANCE_LOW: int = 210
    LUMINANCE_HIGH: int = 235

    # Batch
    MAX_WORKERS: int = 0  # 0 = one worker per CPU

    model_config = {"env_prefix": "STICKERSTAG_"}


settings = Settings()
