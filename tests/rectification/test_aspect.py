"""
Unit tests for the aspect-ratio regularizer.
"""

import pytest

from docscan.config_loader import AspectSnapBand
from docscan.rectification.aspect import default_snap_bands, match_band, regularize


class TestRegularize:
    """Test the default snap table."""

    def test_portrait_id_snaps_height(self):
        """Test 88x130 (ratio 0.677) -> height = 88 / 0.704 = 125."""
        width, height = regularize(88, 130)
        assert width == pytest.approx(88.0)
        assert height == pytest.approx(125.0)

    def test_landscape_id_snaps_width(self):
        """Test 400x300 (ratio 1.333) -> width = 300 * 1.42 = 426."""
        width, height = regularize(400, 300)
        assert width == pytest.approx(426.0)
        assert height == pytest.approx(300.0)

    def test_square_snaps_height(self):
        """Test 110x100 (ratio 1.1) -> height = width."""
        assert regularize(110, 100) == pytest.approx((110.0, 110.0))

    def test_exact_square_unchanged(self):
        """Test that 100x100 stays 100x100."""
        assert regularize(100, 100) == (100.0, 100.0)

    @pytest.mark.parametrize(
        "dims",
        [(50, 200), (200, 50), (83, 100), (120, 100), (170, 100)],
    )
    def test_outside_bands_unchanged(self, dims):
        """Test receipts and gaps between bands keep their measured size."""
        assert regularize(*dims) == (float(dims[0]), float(dims[1]))

    @pytest.mark.parametrize("ratio", [0.60, 0.82, 1.25, 1.65, 0.85, 1.15])
    def test_bounds_inclusive(self, ratio):
        """Test that band bounds are inclusive."""
        assert match_band(ratio, default_snap_bands()) is not None

    def test_zero_height_unchanged(self):
        """Test that a zero height is returned as-is."""
        assert regularize(10, 0) == (10.0, 0.0)


class TestCustomBands:
    """Test configurable snap tables."""

    def test_first_match_wins(self):
        """Test that overlapping bands resolve to the first entry."""
        bands = [
            AspectSnapBand(min_ratio=0.9, max_ratio=1.2, target_ratio=1.0, adjust="height"),
            AspectSnapBand(min_ratio=1.0, max_ratio=1.5, target_ratio=1.5, adjust="width"),
        ]
        assert match_band(1.1, bands).target_ratio == 1.0
        assert regularize(110, 100, bands) == pytest.approx((110.0, 110.0))

    def test_empty_table_disables_snapping(self):
        """Test that no bands means no regularization."""
        assert regularize(88, 130, []) == (88.0, 130.0)
