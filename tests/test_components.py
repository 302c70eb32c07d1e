"""
Tests for connected component selection and despeckling.
"""

import numpy as np

from stickerstag.filters.components import (
    despeckle,
    label_components,
    select_largest,
    smooth_alpha_edges,
)


class TestLabelComponents:
    """8-connected labeling."""

    def test_scan_order_ids(self):
        fg = np.zeros((6, 6), dtype=bool)
        fg[4, 0] = True
        fg[0, 3] = True
        labeling = label_components(fg)
        assert labeling.count == 2
        assert labeling.labels[0, 3] == 1
        assert labeling.labels[4, 0] == 2

    def test_diagonal_pixels_connect(self):
        fg = np.eye(5, dtype=bool)
        labeling = label_components(fg)
        assert labeling.count == 1
        assert labeling.sizes == [5]

    def test_background_is_zero(self):
        labeling = label_components(np.zeros((3, 3), dtype=bool))
        assert labeling.count == 0
        assert not labeling.labels.any()

    def test_large_component_without_recursion(self):
        labeling = label_components(np.ones((400, 400), dtype=bool))
        assert labeling.sizes == [160000]


class TestSelectLargest:
    """Keeping the dominant silhouette."""

    def test_keeps_larger_blob(self):
        alpha = np.zeros((120, 120), dtype=np.uint8)
        alpha[2:12, 2:22] = 255  # 200 px
        alpha[20:70, 10:110] = 255  # 5000 px
        result, stats = select_largest(alpha)
        assert not result[2:12, 2:22].any()
        assert np.all(result[20:70, 10:110] == 255)
        assert int((result > 0).sum()) == 5000
        assert stats.components == 2
        assert stats.kept_size == 5000
        assert stats.cleared_pixels == 200

    def test_tie_keeps_first_in_scan_order(self):
        alpha = np.zeros((20, 20), dtype=np.uint8)
        alpha[10:14, 2:7] = 255  # 20 px, lower
        alpha[2:6, 12:17] = 255  # 20 px, upper
        result, _ = select_largest(alpha)
        assert np.all(result[2:6, 12:17] == 255)
        assert not result[10:14, 2:7].any()

    def test_small_components_never_selected(self):
        alpha = np.zeros((10, 10), dtype=np.uint8)
        alpha[1:3, 1:4] = 255  # 6 px
        alpha[6:8, 6:8] = 255  # 4 px
        result, stats = select_largest(alpha, min_size=10)
        assert np.array_equal(result, alpha)
        assert stats.candidates == 0
        assert stats.kept_size == 0

    def test_faint_pixels_are_kept(self):
        alpha = np.zeros((30, 30), dtype=np.uint8)
        alpha[5:25, 5:25] = 255
        alpha[0, 0] = 40  # Below the clear threshold
        alpha[0, 29] = 90  # Above the clear threshold, not foreground
        result, _ = select_largest(alpha, clear_threshold=50)
        assert result[0, 0] == 40
        assert result[0, 29] == 0

    def test_input_unchanged(self):
        alpha = np.zeros((30, 30), dtype=np.uint8)
        alpha[1:4, 1:4] = 255
        alpha[10:25, 10:25] = 255
        before = alpha.copy()
        select_largest(alpha)
        assert np.array_equal(alpha, before)


class TestDespeckle:
    """Edge speck removal."""

    def test_isolated_pixel_removed(self):
        alpha = np.zeros((5, 5), dtype=np.uint8)
        alpha[2, 2] = 255
        assert not despeckle(alpha).any()

    def test_thin_line_removed(self):
        alpha = np.zeros((5, 9), dtype=np.uint8)
        alpha[2, 2:7] = 255
        assert not despeckle(alpha).any()

    def test_block_corner_survives(self):
        alpha = np.zeros((6, 6), dtype=np.uint8)
        alpha[2:4, 2:4] = 255  # Each pixel has 5 transparent neighbors
        assert np.array_equal(despeckle(alpha), alpha)

    def test_outer_ring_untouched(self):
        alpha = np.zeros((5, 5), dtype=np.uint8)
        alpha[0, 2] = 255
        assert despeckle(alpha)[0, 2] == 255

    def test_reads_neighbors_from_input(self):
        # (3, 3) has 5 transparent neighbors while (2, 2) is still opaque.
        # Removing (2, 2) first must not cascade into (3, 3).
        alpha = np.zeros((7, 7), dtype=np.uint8)
        alpha[2, 2] = 255
        alpha[3, 3] = 255
        alpha[3, 4] = 255
        alpha[4, 4] = 255
        result = despeckle(alpha)
        assert result[2, 2] == 0
        assert result[3, 3] == 255
        assert result[3, 4] == 0
        assert result[4, 4] == 0


class TestSmoothAlphaEdges:
    """Alpha blur and snap."""

    def test_zero_sigma_is_copy(self):
        alpha = np.arange(16, dtype=np.uint8).reshape(4, 4)
        assert np.array_equal(smooth_alpha_edges(alpha, 0), alpha)

    def test_snaps_extremes(self):
        alpha = np.zeros((20, 20), dtype=np.uint8)
        alpha[5:15, 5:15] = 255
        result = smooth_alpha_edges(alpha, 0.5, low=30, high=220)
        assert result[10, 10] == 255
        assert result[0, 0] == 0
        values = set(np.unique(result).tolist())
        assert all(v == 0 or v == 255 or 30 <= v <= 220 for v in values)
