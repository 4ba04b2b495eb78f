"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

import numpy as np
import pytest

from docscan.config_loader import ScanConfig


@pytest.fixture
def sample_quadrilateral_points():
    """Fixture providing sample 4-corner points in arbitrary order."""
    return np.array(
        [
            [300, 150],  # Top-right area
            [100, 200],  # Top-left area
            [320, 400],  # Bottom-right area
            [80, 380],  # Bottom-left area
        ],
        dtype=np.float32,
    )


@pytest.fixture
def sample_document_image():
    """Fixture providing a light document on a dark desk, slightly skewed."""
    import cv2

    # Dark background
    image = np.full((480, 640, 3), 30, dtype=np.uint8)

    # Light paper, roughly centered
    pts = np.array([[180, 110], [470, 130], [450, 380], [170, 360]], dtype=np.int32)
    cv2.fillPoly(image, [pts], (230, 230, 230))
    cv2.putText(
        image,
        "RECEIPT",
        (230, 250),
        cv2.FONT_HERSHEY_SIMPLEX,
        1.2,
        (40, 40, 40),
        2,
    )

    return image, pts.astype(np.float32)


@pytest.fixture
def cluttered_document_image():
    """
    Fixture providing a small centered document and a larger off-center
    rectangle (e.g. a book at the edge of the frame).
    """
    import cv2

    image = np.full((600, 800, 3), 25, dtype=np.uint8)

    # Large clutter rectangle in the top-right corner
    clutter = np.array([[560, 10], [790, 10], [790, 290], [560, 290]], dtype=np.int32)
    cv2.fillPoly(image, [clutter], (200, 200, 200))

    # Smaller document in the middle
    document = np.array([[300, 225], [500, 225], [500, 375], [300, 375]], dtype=np.int32)
    cv2.fillPoly(image, [document], (235, 235, 235))

    return image, document.astype(np.float32), clutter.astype(np.float32)


@pytest.fixture
def blank_image():
    """Fixture providing a uniform gray frame with no edges."""
    return np.full((480, 640, 3), 128, dtype=np.uint8)


@pytest.fixture
def patterned_image():
    """Fixture providing a deterministic 200x100 (W x H) test pattern."""
    rng = np.random.default_rng(seed=7)
    return rng.integers(0, 256, size=(100, 200, 3), dtype=np.uint8)


@pytest.fixture
def default_config():
    """Fixture providing the built-in default configuration."""
    return ScanConfig()
