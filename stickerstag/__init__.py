"""
StickerStag - raster asset preparation for character and map art.

Border-connected background removal, sticker borders, decorative rings,
directional bevels and line-art outlines, built on numpy, SciPy and Pillow.
"""

from .errors import (
    StickerStagError,
    InvalidBuffer,
    DimensionMismatch,
    ParameterOutOfRange,
    DecodeFailure,
    EncodeFailure,
)
from .pixel_buffer import PixelBuffer, PixelFormat, LightVector, validate_mask
from .io import load_image, decode_image, save_image, encode_image

__version__ = "0.1.0"

__all__ = [
    "StickerStagError",
    "InvalidBuffer",
    "DimensionMismatch",
    "ParameterOutOfRange",
    "DecodeFailure",
    "EncodeFailure",
    "PixelBuffer",
    "PixelFormat",
    "LightVector",
    "validate_mask",
    "load_image",
    "decode_image",
    "save_image",
    "encode_image",
]
