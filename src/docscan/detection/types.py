"""
Data types for the detection pipeline.

All values here are transient: they are created and discarded within a
single detection pass and never stored in session state.
"""

from dataclasses import dataclass

import numpy as np

from docscan.common.types import Quadrilateral


@dataclass
class EdgeMap:
    """
    Binary edge map of a (possibly downscaled) working copy of a frame.

    Attributes:
        data: Single-channel uint8 edge raster (H, W).
        scale: Factor applied to the source frame (<= 1.0, never upscaled).
        width: Working copy width in pixels.
        height: Working copy height in pixels.
    """

    data: np.ndarray
    scale: float
    width: int
    height: int


@dataclass
class ContourCandidate:
    """
    One closed contour and its polygonal approximation.

    Attributes:
        points: Raw contour points in working-copy pixels, shape (N, 2).
        area: Contour area magnitude in px^2.
        perimeter: Closed arc length in px.
        approx_polygon: Reduced polygon, shape (M, 2).
        is_convex: Whether the approximated polygon is convex.
    """

    points: np.ndarray
    area: float
    perimeter: float
    approx_polygon: np.ndarray
    is_convex: bool

    @property
    def vertex_count(self) -> int:
        return int(len(self.approx_polygon))


@dataclass
class ScoredCandidate:
    """
    A quadrilateral candidate that survived filtering.

    Attributes:
        quad: Canonically ordered quad in working-copy pixel space.
        score: Centrality-weighted area score.
        area_ratio: Candidate area / frame area.
        dist_from_center: Centroid distance to frame center over the
            half-diagonal, in [0, 1].
    """

    quad: Quadrilateral
    score: float
    area_ratio: float
    dist_from_center: float
