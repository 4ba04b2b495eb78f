"""
Corner Normalizer

Orders four raw points into the canonical winding
[Top-Left, Top-Right, Bottom-Right, Bottom-Left] regardless of input
order. The rectifier's destination corners use this fixed order, so any
mismatch produces a flipped or rotated output.
"""

import logging
from typing import Sequence, Union

import numpy as np

from docscan.common.types import PointLike, Quadrilateral, to_point

logger = logging.getLogger(__name__)


def order_points(
    pts: Union[np.ndarray, list], dtype: type = np.float32
) -> np.ndarray:
    """
    Order 4 points: Top-Left, Top-Right, Bottom-Right, Bottom-Left.

    The algorithm splits the points by vertical position:
    - Sort by y ascending (ties broken by x, so every permutation of the
      same point set gives the same result)
    - The first two are the top pair, the last two the bottom pair
    - Within each pair, the smaller x is the left point

    Degenerate sets (collinear or coincident points) are not detected here.

    Args:
        pts: Array of 4 points with shape (4, 2) or list of [x, y] coordinates.
        dtype: Output dtype. Pixel data uses float32, percentages float64.

    Returns:
        Ordered numpy array of shape (4, 2).

    Raises:
        ValueError: If input does not contain exactly 4 points.

    Example:
        >>> pts = np.array([[300, 150], [100, 200], [320, 400], [80, 380]])
        >>> order_points(pts)[0]
        array([100., 200.], dtype=float32)
    """
    pts = np.array(pts, dtype=np.float64)

    if pts.shape == (4, 1, 2):
        pts = pts.reshape(4, 2)
    if pts.shape != (4, 2):
        raise ValueError(
            f"Expected exactly 4 points with shape (4, 2), got shape {pts.shape}"
        )

    # lexsort uses the last key as primary: y first, then x
    by_y = pts[np.lexsort((pts[:, 0], pts[:, 1]))]
    top = by_y[:2][np.argsort(by_y[:2, 0], kind="stable")]
    bottom = by_y[2:][np.argsort(by_y[2:, 0], kind="stable")]

    rect = np.array([top[0], top[1], bottom[1], bottom[0]], dtype=dtype)

    logger.debug(
        f"Ordered points: TL={rect[0]}, TR={rect[1]}, BR={rect[2]}, BL={rect[3]}"
    )
    return rect


def normalize_corners(points: Union[Sequence[PointLike], np.ndarray]) -> Quadrilateral:
    """
    Normalize 4 points of any order into a canonical Quadrilateral.

    Args:
        points: 4 Point2D values, [x, y] pairs or an array of shape (4, 2).

    Returns:
        Quadrilateral in [TL, TR, BR, BL] order.

    Raises:
        ValueError: If input does not contain exactly 4 points.
    """
    if isinstance(points, np.ndarray):
        arr = points
    else:
        if len(points) != 4:
            raise ValueError(f"Expected exactly 4 points, got {len(points)}")
        arr = np.array([to_point(p).to_tuple() for p in points], dtype=np.float64)

    return Quadrilateral.from_numpy(order_points(arr, dtype=np.float64))
