"""
Tests for image decoding and lossless encoding.
"""

import io

import numpy as np
import PIL.Image
import pytest

from stickerstag.errors import DecodeFailure, EncodeFailure
from stickerstag.io import decode_image, encode_image, load_image, save_image
from stickerstag.pixel_buffer import PixelBuffer


@pytest.fixture
def noisy_rgba() -> PixelBuffer:
    """Random RGBA pixels, a third of them fully transparent with arbitrary colors."""
    rng = np.random.default_rng(7)
    pixels = rng.integers(0, 256, size=(6, 8, 4), dtype=np.uint8)
    pixels[rng.random((6, 8)) < 0.33, 3] = 0
    return PixelBuffer(pixels)


class TestEncode:
    """Lossless output formats."""

    @pytest.mark.parametrize("filetype", ["webp", "png", ".PNG"])
    def test_lossless(self, noisy_rgba, filetype):
        data = encode_image(noisy_rgba, filetype)
        assert decode_image(data) == noisy_rgba

    def test_webp_signature(self, noisy_rgba):
        data = encode_image(noisy_rgba)
        assert data[:4] == b"RIFF"
        assert data[8:12] == b"WEBP"

    def test_lossy_format_rejected(self, noisy_rgba):
        with pytest.raises(EncodeFailure):
            encode_image(noisy_rgba, "jpg")


class TestDecode:
    """Reading sources."""

    def test_rgb_becomes_rgba(self):
        pixels = np.full((3, 5, 3), 90, dtype=np.uint8)
        decoded = decode_image(encode_image(PixelBuffer(pixels), "png"))
        assert decoded.channels == 4
        assert np.all(decoded.alpha == 255)
        assert np.all(decoded.rgb == 90)

    def test_garbage(self):
        with pytest.raises(DecodeFailure):
            decode_image(b"definitely not an image")

    def test_exif_orientation(self):
        handle = PIL.Image.new("RGB", (4, 2), (200, 10, 10))
        exif = PIL.Image.Exif()
        exif[0x0112] = 6  # Rotate 90 degrees clockwise on display
        stream = io.BytesIO()
        handle.save(stream, format="JPEG", exif=exif)
        decoded = decode_image(stream.getvalue())
        assert decoded.pixels.shape == (4, 2, 4)


class TestFiles:
    """Loading and saving paths."""

    def test_save_and_load(self, tmp_path, noisy_rgba):
        target = tmp_path / "nested" / "fox.cutout.webp"
        written = save_image(noisy_rgba, target)
        assert written == target
        assert not (tmp_path / "nested" / "fox.cutout.webp.part").exists()
        loaded = load_image(target)
        assert loaded == noisy_rgba
        assert loaded.metadata["source"] == str(target)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DecodeFailure):
            load_image(tmp_path / "missing.png")

    def test_unsupported_extension(self, tmp_path, noisy_rgba):
        target = tmp_path / "fox.bmp"
        with pytest.raises(EncodeFailure):
            save_image(noisy_rgba, target)
        assert not target.exists()

    def test_overwrites(self, tmp_path, noisy_rgba):
        target = tmp_path / "fox.png"
        save_image(PixelBuffer.blank(2, 2), target)
        save_image(noisy_rgba, target)
        assert load_image(target) == noisy_rgba
