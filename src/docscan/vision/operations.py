"""
Vision operations capability set.

The detection pipeline and the rectifier never call an image library
directly; they receive a ``VisionOperations`` instance in their
constructor. This keeps the engine host-library-agnostic and lets tests
substitute a fake implementation.
"""

from abc import ABC, abstractmethod
from typing import List, Tuple

import numpy as np


class VisionOperations(ABC):
    """Abstract capability set used by the docscan pipeline."""

    @abstractmethod
    def to_grayscale(self, image: np.ndarray) -> np.ndarray:
        """Convert a 1/3/4-channel (BGR ordered) image to single-channel luminance."""

    @abstractmethod
    def resize(self, image: np.ndarray, width: int, height: int) -> np.ndarray:
        """Resize an image to exactly width x height."""

    @abstractmethod
    def blur(self, image: np.ndarray, kernel_size: int) -> np.ndarray:
        """Gaussian-style smoothing with a square odd kernel."""

    @abstractmethod
    def edge_detect(self, image: np.ndarray, low: float, high: float) -> np.ndarray:
        """Canny-style gradient-threshold edge detection returning a binary map."""

    @abstractmethod
    def find_contours(self, edge_map: np.ndarray) -> List[np.ndarray]:
        """Find all closed contours (list mode, no hierarchy)."""

    @abstractmethod
    def contour_area(self, contour: np.ndarray) -> float:
        """Signed or unsigned contour area; callers take the magnitude."""

    @abstractmethod
    def arc_length(self, contour: np.ndarray, closed: bool = True) -> float:
        """Perimeter of a contour."""

    @abstractmethod
    def approx_polygon(self, contour: np.ndarray, epsilon: float) -> np.ndarray:
        """Reduce a contour to a closed polygon within ``epsilon`` pixels."""

    @abstractmethod
    def is_convex(self, polygon: np.ndarray) -> bool:
        """Whether a polygon is convex."""

    @abstractmethod
    def solve_perspective_transform(
        self, src: np.ndarray, dst: np.ndarray
    ) -> np.ndarray:
        """Solve the 3x3 homography mapping 4 src points onto 4 dst points."""

    @abstractmethod
    def warp_perspective(
        self,
        image: np.ndarray,
        matrix: np.ndarray,
        size: Tuple[int, int],
        interpolation: str = "linear",
        border_value: int = 0,
    ) -> np.ndarray:
        """Resample ``image`` through ``matrix`` into a (width, height) buffer."""
