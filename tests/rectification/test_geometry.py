"""
Unit tests for the rectifier's geometric helpers.
"""

import numpy as np
import pytest

from docscan.rectification.geometry import (
    calculate_edge_lengths,
    compute_destination_size,
    is_convex_quadrilateral,
    polygon_area,
)


class TestEdgeLengths:
    """Test suite for calculate_edge_lengths and compute_destination_size."""

    def test_rectangle(self):
        """Test edge lengths of an axis-aligned rectangle."""
        points = np.array([[100, 100], [400, 100], [400, 200], [100, 200]])
        top, right, bottom, left = calculate_edge_lengths(points)

        assert (top, right, bottom, left) == pytest.approx((300, 100, 300, 100))

    def test_tilted_receipt(self):
        """Test side lengths of a slightly rotated receipt outline given as a list."""
        receipt = [[120, 40], [380, 60], [360, 620], [100, 600]]
        top, right, bottom, left = calculate_edge_lengths(receipt)

        assert top == pytest.approx(np.hypot(260, 20))
        assert bottom == pytest.approx(top)
        assert right == pytest.approx(np.hypot(20, 560))
        assert left == pytest.approx(right)

    def test_destination_uses_longer_opposing_edge(self):
        """Test that foreshortened edges do not shrink the output."""
        # Trapezoid: top 200, bottom 300, left/right ~100.5
        points = np.array([[50, 0], [250, 0], [300, 100], [0, 100]])
        width, height = compute_destination_size(points)

        assert width == pytest.approx(300.0)
        assert height == pytest.approx(np.hypot(50, 100))

    def test_wrong_shape(self):
        """Test that anything but (4, 2) is rejected."""
        with pytest.raises(ValueError, match="Expected 4 keypoints"):
            calculate_edge_lengths(np.zeros((3, 2)))


class TestPolygonArea:
    """Test suite for polygon_area."""

    def test_rectangle_area(self):
        """Test shoelace area for both windings."""
        rect = [[0, 0], [4, 0], [4, 3], [0, 3]]
        assert polygon_area(rect) == pytest.approx(12.0)
        assert polygon_area(rect[::-1]) == pytest.approx(12.0)

    def test_collinear_area_zero(self):
        """Test that collinear points have zero area."""
        assert polygon_area([[0, 0], [1, 1], [2, 2], [3, 3]]) == pytest.approx(0.0)


class TestConvexity:
    """Test suite for is_convex_quadrilateral."""

    def test_convex_quadrilateral_pass(self):
        """Test that convex quads pass in either winding."""
        rect = np.array([[100, 100], [200, 100], [200, 150], [100, 150]], dtype=np.float32)
        assert is_convex_quadrilateral(rect)
        assert is_convex_quadrilateral(rect[::-1])

    def test_concave_quadrilateral_reject(self):
        """Test that a dart (one point pushed inward) is rejected."""
        dart = np.array([[0, 0], [100, 0], [30, 30], [0, 100]], dtype=np.float32)
        assert not is_convex_quadrilateral(dart)

    def test_self_intersecting_reject(self):
        """Test that a bow-tie winding is rejected."""
        bow_tie = np.array([[0, 0], [100, 100], [100, 0], [0, 100]], dtype=np.float32)
        assert not is_convex_quadrilateral(bow_tie)

    def test_collinear_reject(self):
        """Test that three collinear corners are not strictly convex."""
        flat = np.array([[0, 0], [50, 0], [100, 0], [50, 50]], dtype=np.float32)
        assert not is_convex_quadrilateral(flat)
