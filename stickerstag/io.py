"""
Image decoding and lossless encoding.

Decoding honors the EXIF orientation and always yields RGBA. Encoding only
supports lossless formats with full alpha precision: WebP (lossless, exact,
so colors under transparent pixels survive) and PNG.
"""

from __future__ import annotations

import io
import logging
import os
from pathlib import Path

import numpy as np
import PIL.Image
import PIL.ImageOps

from .errors import DecodeFailure, EncodeFailure
from .pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

SUPPORTED_INPUT_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp"}
SUPPORTED_OUTPUT_FORMATS = {"webp", "png"}


def _from_pil(handle: PIL.Image.Image) -> PixelBuffer:
    handle = PIL.ImageOps.exif_transpose(handle)
    if handle.mode != "RGBA":
        handle = handle.convert("RGBA")
    return PixelBuffer(np.asarray(handle, dtype=np.uint8))


def decode_image(data: bytes) -> PixelBuffer:
    """
    Decodes a PNG, JPEG or WebP file in memory into an RGBA buffer.

    :param data: The encoded file's bytes
    :return: RGBA buffer, rotated according to its EXIF orientation
    """
    try:
        with PIL.Image.open(io.BytesIO(data)) as handle:
            handle.load()
            return _from_pil(handle)
    except (PIL.UnidentifiedImageError, OSError, ValueError, PIL.Image.DecompressionBombError) as e:
        raise DecodeFailure(f"Invalid or damaged image data: {e}") from e


def load_image(path: str | os.PathLike) -> PixelBuffer:
    """
    Loads an image file into an RGBA buffer.

    :param path: The file to read
    :return: RGBA buffer
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise DecodeFailure(f"Could not read {path}: {e}") from e
    buffer = decode_image(data)
    buffer.metadata["source"] = str(path)
    logger.debug(f"Loaded {path} ({buffer.width}x{buffer.height})")
    return buffer


def _normalize_format(filetype: str) -> str:
    filetype = filetype.lstrip(".").lower()
    if filetype not in SUPPORTED_OUTPUT_FORMATS:
        raise EncodeFailure(
            f"Unsupported output format {filetype!r}, use one of {sorted(SUPPORTED_OUTPUT_FORMATS)}"
        )
    return filetype


def encode_image(buffer: PixelBuffer, filetype: str = "webp") -> bytes:
    """
    Compresses a buffer losslessly.

    :param buffer: The buffer to encode, RGB or RGBA
    :param filetype: "webp" or "png"
    :return: The encoded file's bytes
    """
    filetype = _normalize_format(filetype)
    parameters = {}
    if filetype == "webp":
        parameters = {"lossless": True, "quality": 100, "exact": True}
    try:
        handle = PIL.Image.fromarray(np.ascontiguousarray(buffer.pixels))
        output_stream = io.BytesIO()
        handle.save(output_stream, format=filetype.upper(), **parameters)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeFailure(f"Could not encode {buffer!r} as {filetype}: {e}") from e
    data = output_stream.getvalue()
    if not data:
        raise EncodeFailure(f"Encoding {buffer!r} as {filetype} produced no data")
    return data


def save_image(buffer: PixelBuffer, path: str | os.PathLike) -> Path:
    """
    Saves a buffer to disk, the format is taken from the file extension.

    The file is written to a temporary name first and renamed when complete,
    so an interrupted run never leaves a truncated output that a later run
    would skip.

    :param buffer: The buffer to store
    :param path: Target file ending in .webp or .png
    :return: The written path
    """
    path = Path(path)
    data = encode_image(buffer, path.suffix)
    partial = path.with_name(path.name + ".part")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        partial.write_bytes(data)
        os.replace(partial, path)
    except OSError as e:
        partial.unlink(missing_ok=True)
        raise EncodeFailure(f"Could not write {path}: {e}") from e
    logger.debug(f"Saved {path} ({len(data)} bytes)")
    return path
