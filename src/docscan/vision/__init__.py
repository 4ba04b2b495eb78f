"""
Vision operations used by detection and rectification.

The engine depends only on the ``VisionOperations`` interface; the
OpenCV backend is the default implementation.
"""

from docscan.vision.opencv_backend import INTERPOLATION_FLAGS, OpenCVVisionOperations
from docscan.vision.operations import VisionOperations

__all__ = ["VisionOperations", "OpenCVVisionOperations", "INTERPOLATION_FLAGS"]
