"""
Unit tests for the OpenCV vision operations backend.
"""

import numpy as np
import pytest

from docscan.vision import OpenCVVisionOperations, VisionOperations


@pytest.fixture
def ops():
    return OpenCVVisionOperations()


class TestOpenCVVisionOperations:
    """Test suite for OpenCVVisionOperations."""

    def test_implements_interface(self, ops):
        """Test that the backend is a VisionOperations."""
        assert isinstance(ops, VisionOperations)

    def test_interface_is_abstract(self):
        """Test that the interface cannot be instantiated."""
        with pytest.raises(TypeError):
            VisionOperations()

    @pytest.mark.parametrize("shape", [(20, 30), (20, 30, 1), (20, 30, 3), (20, 30, 4)])
    def test_to_grayscale(self, ops, shape):
        """Test luminance conversion for every supported layout."""
        gray = ops.to_grayscale(np.full(shape, 100, dtype=np.uint8))
        assert gray.shape == (20, 30)
        assert gray.max() == 100

    def test_resize(self, ops):
        """Test resize takes width before height."""
        out = ops.resize(np.zeros((100, 200, 3), dtype=np.uint8), 50, 25)
        assert out.shape == (25, 50, 3)

    def test_contour_metrics(self, ops):
        """Test area, perimeter, approximation and convexity of a square."""
        square = np.array([[[0, 0]], [[10, 0]], [[10, 10]], [[0, 10]]], dtype=np.int32)

        assert ops.contour_area(square) == pytest.approx(100.0)
        assert ops.arc_length(square) == pytest.approx(40.0)
        assert len(ops.approx_polygon(square, 1.0)) == 4
        assert ops.is_convex(square)

    def test_identity_perspective_transform(self, ops):
        """Test that identical corner sets give the identity homography."""
        pts = np.array([[0, 0], [10, 0], [10, 5], [0, 5]], dtype=np.float32)
        np.testing.assert_allclose(ops.solve_perspective_transform(pts, pts), np.eye(3), atol=1e-9)

    def test_warp_border_value(self, ops):
        """Test constant border fill for every channel."""
        image = np.full((10, 10, 3), 255, dtype=np.uint8)
        shift = np.array([[1, 0, 5], [0, 1, 0], [0, 0, 1]], dtype=np.float64)

        out = ops.warp_perspective(image, shift, (10, 10), border_value=7)

        assert (out[:, :5] == 7).all()
        assert (out[:, 6:] == 255).all()

    def test_warp_unknown_interpolation(self, ops):
        """Test that an unknown interpolation name raises ValueError."""
        with pytest.raises(ValueError, match="Invalid interpolation"):
            ops.warp_perspective(np.zeros((4, 4), dtype=np.uint8), np.eye(3), (4, 4), "bicubic")
