"""
Geometric helpers for the Perspective Rectifier.

Measures the corner quadrilateral before any pixels are touched so that
degenerate inputs are rejected early.
"""

import logging
from typing import Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)


def _as_quad_array(keypoints: Union[np.ndarray, list]) -> np.ndarray:
    keypoints = np.array(keypoints, dtype=np.float64)
    if keypoints.shape != (4, 2):
        raise ValueError(
            f"Expected 4 keypoints with shape (4, 2), got {keypoints.shape}"
        )
    return keypoints


def calculate_edge_lengths(
    keypoints: Union[np.ndarray, list],
) -> Tuple[float, float, float, float]:
    """
    Measure the four sides of a document outline.

    Opposing sides of a photographed page differ under perspective; the
    rectifier keeps the longer of each pair as the output size.

    Args:
        keypoints: Corners as a (4, 2) array in TL, TR, BR, BL order.

    Returns:
        (top, right, bottom, left) side lengths in the units of ``keypoints``.

    Example:
        >>> receipt = [[120, 40], [380, 60], [360, 620], [100, 600]]
        >>> [round(side) for side in calculate_edge_lengths(receipt)]
        [261, 560, 261, 560]
    """
    tl, tr, br, bl = _as_quad_array(keypoints)

    top_edge = float(np.linalg.norm(tr - tl))
    right_edge = float(np.linalg.norm(br - tr))
    bottom_edge = float(np.linalg.norm(bl - br))
    left_edge = float(np.linalg.norm(tl - bl))

    logger.debug(
        f"Document sides: top={top_edge:.1f} right={right_edge:.1f} "
        f"bottom={bottom_edge:.1f} left={left_edge:.1f}"
    )

    return top_edge, right_edge, bottom_edge, left_edge


def compute_destination_size(
    keypoints: Union[np.ndarray, list],
) -> Tuple[float, float]:
    """
    Calculate the raw width and height of the rectified output.

    Takes the maximum of each pair of opposing edges. Averaging would
    under-size the output when foreshortening makes one edge look shorter.

    Args:
        keypoints: 4 corner points in pixels, order [TL, TR, BR, BL].

    Returns:
        Tuple of (width, height) in pixels, not yet regularized.

    Example:
        >>> points = np.array([[100, 150], [450, 100], [470, 300], [80, 320]])
        >>> width, height = compute_destination_size(points)
    """
    top, right, bottom, left = calculate_edge_lengths(keypoints)

    width = max(top, bottom)
    height = max(left, right)

    logger.debug(f"Raw destination size: {width:.1f} x {height:.1f}")
    return width, height


def polygon_area(keypoints: Union[np.ndarray, list]) -> float:
    """Absolute shoelace area of the 4-point polygon."""
    pts = _as_quad_array(keypoints)
    x, y = pts[:, 0], pts[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0)


def is_convex_quadrilateral(rect: Union[np.ndarray, list], eps: float = 1e-6) -> bool:
    """
    Check if 4 ordered points form a strictly convex quadrilateral.

    A quadrilateral is convex if all cross products of consecutive edges
    share the same sign. Mixed signs indicate concavity or
    self-intersection; a zero cross product indicates collinear corners.

    Args:
        rect: Ordered points [TL, TR, BR, BL] with shape (4, 2).
        eps: Magnitude below which a cross product counts as zero.

    Returns:
        True if the quadrilateral is convex in either winding direction.
    """
    rect = _as_quad_array(rect)
    cross_products = []

    for i in range(4):
        p1 = rect[i]
        p2 = rect[(i + 1) % 4]
        p3 = rect[(i + 2) % 4]

        v1 = p2 - p1
        v2 = p3 - p2
        cross_products.append(v1[0] * v2[1] - v1[1] * v2[0])

    is_convex = all(cp > eps for cp in cross_products) or all(
        cp < -eps for cp in cross_products
    )

    if not is_convex:
        logger.debug(f"Non-convex quadrilateral. Cross products: {cross_products}")

    return is_convex
