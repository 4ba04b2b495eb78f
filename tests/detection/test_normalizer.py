"""
Unit tests for the corner normalizer.
"""

import itertools

import numpy as np
import pytest

from docscan.common.types import Point2D, Quadrilateral
from docscan.detection.normalizer import normalize_corners, order_points


class TestOrderPoints:
    """Test suite for order_points."""

    def test_order_points_basic(self, sample_quadrilateral_points):
        """Test basic point ordering with a standard quadrilateral."""
        ordered = order_points(sample_quadrilateral_points)

        assert ordered.shape == (4, 2), "Output should have shape (4, 2)"
        np.testing.assert_array_equal(
            ordered,
            np.array([[100, 200], [300, 150], [320, 400], [80, 380]], dtype=np.float32),
        )

    def test_order_points_list_input(self):
        """Test that function accepts list input and converts it."""
        ordered = order_points([[300, 150], [100, 200], [320, 400], [80, 380]])

        assert isinstance(ordered, np.ndarray), "Output should be numpy array"
        assert ordered.dtype == np.float32

    def test_order_points_contour_shape(self):
        """Test that OpenCV-style (4, 1, 2) arrays are accepted."""
        pts = np.array([[[10, 10]], [[0, 0]], [[10, 0]], [[0, 10]]], dtype=np.int32)
        ordered = order_points(pts)
        np.testing.assert_array_equal(ordered, [[0, 0], [10, 0], [10, 10], [0, 10]])

    def test_order_points_invalid_count(self):
        """Test that function raises ValueError for wrong number of points."""
        with pytest.raises(ValueError, match="Expected exactly 4 points"):
            order_points(np.array([[100, 200], [300, 150]]))

    def test_order_points_already_ordered(self):
        """Test with already correctly ordered points."""
        pts_ordered = np.array(
            [[100, 100], [400, 100], [400, 300], [100, 300]], dtype=np.float32
        )
        np.testing.assert_array_almost_equal(order_points(pts_ordered), pts_ordered)

    def test_dtype_parameter(self):
        """Test that percentage data can keep float64 precision."""
        pts = [[10.123456789, 5.0], [90.0, 5.0], [90.0, 95.0], [10.0, 95.0]]
        ordered = order_points(pts, dtype=np.float64)
        assert ordered.dtype == np.float64
        assert ordered[0][0] == 10.123456789


class TestNormalizeCorners:
    """Test suite for normalize_corners."""

    @pytest.mark.parametrize(
        "points",
        [
            [(12, 8), (88, 10), (90, 92), (10, 90)],  # skewed document
            [(0, 0), (100, 0), (100, 100), (0, 100)],  # full frame
            [(30, 20), (70, 20), (70, 80), (30, 80)],  # tie on y for both pairs
            [(50, 0), (100, 50), (50, 100), (0, 50)],  # diamond
        ],
    )
    def test_permutation_idempotence(self, points):
        """Test that every ordering of the same 4 points normalizes identically."""
        expected = normalize_corners(points)

        for perm in itertools.permutations(points):
            assert normalize_corners(list(perm)) == expected

        # Normalizing a normalized quad is a no-op
        assert normalize_corners(list(expected.points)) == expected

    def test_canonical_winding(self):
        """Test TL, TR, BR, BL output for a skewed quad."""
        quad = normalize_corners([(90, 92), (12, 8), (10, 90), (88, 10)])
        assert [p.to_tuple() for p in quad.points] == [
            (12.0, 8.0),
            (88.0, 10.0),
            (90.0, 92.0),
            (10.0, 90.0),
        ]

    def test_accepts_point2d_and_arrays(self):
        """Test Point2D sequences and (4, 2) arrays."""
        as_points = [Point2D(x=0, y=0), Point2D(x=10, y=0), Point2D(x=10, y=5), Point2D(x=0, y=5)]
        as_array = np.array([[10, 5], [0, 0], [0, 5], [10, 0]], dtype=np.float64)

        assert isinstance(normalize_corners(as_points), Quadrilateral)
        assert normalize_corners(as_points) == normalize_corners(as_array)

    def test_rejects_wrong_count(self):
        """Test that anything but 4 points raises ValueError."""
        with pytest.raises(ValueError, match="Expected exactly 4 points"):
            normalize_corners([(0, 0), (1, 1), (2, 2)])
        with pytest.raises(ValueError, match="Expected exactly 4 points"):
            normalize_corners(np.zeros((5, 2)))

    def test_degenerate_points_not_repaired(self):
        """Test that collinear points are ordered but not rejected here."""
        quad = normalize_corners([(0, 50), (25, 50), (50, 50), (75, 50)])
        assert quad.area == pytest.approx(0.0)
