"""
Tests for blend modes and layer compositing.
"""

import numpy as np
import pytest

from stickerstag.errors import DimensionMismatch
from stickerstag.filters.blend import BlendMode, blend_colors, composite, composite_layers, finalize
from stickerstag.pixel_buffer import PixelBuffer


def solid(color, width=2, height=2) -> PixelBuffer:
    return PixelBuffer.blank(width, height, color)


class TestBlendMode:
    """Parsing blend mode names."""

    @pytest.mark.parametrize("name,expected", [
        ("multiply", BlendMode.MULTIPLY),
        ("SCREEN", BlendMode.SCREEN),
        ("soft-light", BlendMode.SOFT_LIGHT),
        ("over", BlendMode.NORMAL),
        (BlendMode.OVERLAY, BlendMode.OVERLAY),
    ])
    def test_parse(self, name, expected):
        assert BlendMode.parse(name) is expected

    def test_unknown(self):
        with pytest.raises(ValueError):
            BlendMode.parse("dissolve")


class TestBlendColors:
    """Per-channel blend functions."""

    def test_multiply_and_screen(self):
        base = np.array([0.5])
        assert blend_colors(base, np.array([0.5]), BlendMode.MULTIPLY)[0] == pytest.approx(0.25)
        assert blend_colors(base, np.array([0.5]), BlendMode.SCREEN)[0] == pytest.approx(0.75)

    def test_overlay(self):
        result = blend_colors(np.array([0.25, 0.75]), np.array([0.5, 0.5]), BlendMode.OVERLAY)
        assert result == pytest.approx([0.25, 0.75])

    def test_soft_light_neutral_gray(self):
        base = np.array([0.1, 0.6, 0.9])
        assert blend_colors(base, np.full(3, 0.5), BlendMode.SOFT_LIGHT) == pytest.approx(base)


class TestFinalize:
    """Float to uint8 conversion."""

    def test_clamps_and_rounds(self):
        result = finalize(np.array([[[1.2, -0.1, 0.5, 1.0]]]))
        assert tuple(result.pixels[0, 0]) == (255, 0, 128, 255)
        assert result.pixels.dtype == np.uint8


class TestComposite:
    """Source-over compositing."""

    def test_opaque_normal_replaces(self):
        result = composite(solid((255, 0, 0, 255)), solid((0, 0, 255, 255)))
        assert np.all(result.pixels == (0, 0, 255, 255))

    def test_transparent_layer_keeps_base_exactly(self):
        base = solid((10, 20, 30, 0))
        result = composite(base, solid((255, 255, 255, 0)), BlendMode.SCREEN)
        assert result == base

    def test_half_alpha_over_black(self):
        result = composite(solid((0, 0, 0, 255)), solid((255, 255, 255, 128)))
        assert tuple(result.pixels[0, 0]) == (128, 128, 128, 255)

    def test_over_transparent_base(self):
        result = composite(solid((0, 0, 0, 0)), solid((200, 100, 50, 128)), BlendMode.MULTIPLY)
        assert tuple(result.pixels[0, 0]) == (200, 100, 50, 128)

    def test_multiply(self):
        result = composite(solid((255, 255, 255, 255)), solid((100, 150, 200, 255)), "multiply")
        assert tuple(result.pixels[0, 0]) == (100, 150, 200, 255)

    def test_screen(self):
        result = composite(solid((100, 100, 100, 255)), solid((255, 255, 255, 255)), "screen")
        assert tuple(result.pixels[0, 0]) == (255, 255, 255, 255)

    def test_opacity(self):
        result = composite(solid((0, 0, 0, 255)), solid((255, 255, 255, 255)), opacity=0.5)
        assert tuple(result.pixels[0, 0]) == (128, 128, 128, 255)

    def test_rgb_base(self):
        base = PixelBuffer(np.zeros((2, 2, 3), dtype=np.uint8))
        result = composite(base, solid((0, 0, 0, 0)))
        assert result.channels == 4
        assert np.all(result.alpha == 255)

    def test_size_mismatch(self):
        with pytest.raises(DimensionMismatch):
            composite(solid((0, 0, 0, 255), 2, 2), solid((0, 0, 0, 255), 3, 2))

    def test_keeps_base_metadata(self):
        base = solid((0, 0, 0, 255))
        base.metadata["source"] = "fox.png"
        result = composite(base, solid((255, 0, 0, 255)))
        assert result.metadata == {"source": "fox.png"}

    def test_inputs_unchanged(self):
        base = solid((0, 0, 0, 255))
        layer = solid((255, 255, 255, 128))
        composite(base, layer)
        assert np.all(base.pixels == (0, 0, 0, 255))
        assert np.all(layer.pixels == (255, 255, 255, 128))


class TestCompositeLayers:
    """Stacking several layers."""

    def test_bottom_to_top(self):
        base = solid((128, 128, 128, 255))
        result = composite_layers(base, [
            (solid((0, 0, 0, 255)), BlendMode.MULTIPLY),
            (solid((255, 255, 255, 255)), BlendMode.SCREEN),
        ])
        assert tuple(result.pixels[0, 0]) == (255, 255, 255, 255)

    def test_no_layers(self):
        base = solid((1, 2, 3, 4))
        assert composite_layers(base, []) == base
