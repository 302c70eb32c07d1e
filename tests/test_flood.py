"""
Tests for border-connected background segmentation.
"""

import numpy as np
import pytest

from stickerstag.errors import DimensionMismatch, ParameterOutOfRange
from stickerstag.filters.flood import (
    apply_background,
    border_flood,
    feather_background,
    flood_from_border,
    near_white,
)
from stickerstag.pixel_buffer import PixelBuffer


class TestNearWhite:
    """Luminance threshold."""

    def test_threshold_inclusive(self):
        lum = np.array([[219.9, 220.0, 255.0]], dtype=np.float32)
        assert near_white(lum, 220).tolist() == [[False, True, True]]

    def test_zero_tolerance_selects_nothing(self):
        lum = np.full((3, 3), 255.0, dtype=np.float32)
        assert not near_white(lum, 0).any()


class TestFloodFromBorder:
    """Multi-source flood fill."""

    def test_enclosed_region_not_reached(self):
        qualifies = np.ones((7, 7), dtype=bool)
        qualifies[1:6, 1:6] = False
        qualifies[3, 3] = True  # Enclosed
        result = flood_from_border(qualifies)
        assert result[3, 3] == 0
        assert result[0, 0] == 1
        assert int(result.sum()) == 24

    def test_four_connectivity(self):
        qualifies = np.zeros((5, 5), dtype=bool)
        qualifies[0, 0] = True
        qualifies[1, 1] = True  # Only diagonally connected to the border pixel
        qualifies[2, 2] = True
        result = flood_from_border(qualifies)
        assert result[0, 0] == 1
        assert result[1, 1] == 0
        assert result[2, 2] == 0

    def test_large_region_without_recursion(self):
        qualifies = np.ones((600, 600), dtype=bool)
        assert int(flood_from_border(qualifies).sum()) == 600 * 600


class TestBorderFlood:
    """Background detection on images."""

    def test_uniform_white_is_all_background(self, white_canvas):
        background = border_flood(white_canvas, tolerance=255)
        assert np.all(background == 1)

    def test_square_on_white(self, square_on_white):
        background = border_flood(square_on_white, tolerance=220)
        alpha = apply_background(square_on_white, background).alpha
        # The square including its enclosed island stays opaque
        assert int((alpha == 255).sum()) == 2500
        assert np.all(alpha[75:125, 75:125] == 255)
        assert alpha[99, 99] == 255
        # Border-connected white, including the edge patch, is removed
        assert alpha[0, 0] == 0
        assert alpha[1, 1] == 0
        assert alpha[74, 100] == 0

    def test_zero_tolerance_is_noop(self, square_on_white):
        background = border_flood(square_on_white, tolerance=0)
        assert not background.any()

    def test_tolerance_clamped(self, white_canvas):
        with pytest.warns(ParameterOutOfRange):
            background = border_flood(white_canvas, tolerance=300)
        assert np.all(background == 1)

    def test_preblur_does_not_change_colors(self, square_on_white):
        background = border_flood(square_on_white, tolerance=220, preblur=1.0)
        result = apply_background(square_on_white, background)
        assert np.array_equal(result.rgb, square_on_white.rgb)


class TestFeather:
    """Shrinking the background away from the subject."""

    def test_pulls_back_from_subject(self, square_on_white):
        background = border_flood(square_on_white, tolerance=220)
        feathered = feather_background(background, 2)
        assert feathered[74, 100] == 0
        assert feathered[73, 100] == 0
        assert feathered[72, 100] == 1

    def test_frame_is_kept(self, white_canvas):
        background = border_flood(white_canvas, tolerance=220)
        feathered = feather_background(background, 3)
        assert np.all(feathered == 1)

    def test_zero_radius_is_copy(self):
        background = np.eye(4, dtype=np.uint8)
        assert np.array_equal(feather_background(background, 0), background)


class TestApplyBackground:
    """Writing the background into alpha."""

    def test_keeps_existing_alpha(self):
        pixels = np.zeros((2, 2, 4), dtype=np.uint8)
        pixels[:, :, 3] = [[10, 20], [30, 40]]
        background = np.array([[1, 0], [0, 0]], dtype=np.uint8)
        result = apply_background(PixelBuffer(pixels), background)
        assert result.alpha.tolist() == [[0, 20], [30, 40]]

    def test_mismatched_mask(self, white_canvas):
        with pytest.raises(DimensionMismatch):
            apply_background(white_canvas, np.zeros((10, 10), dtype=np.uint8))
