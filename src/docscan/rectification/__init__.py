"""
Perspective rectification and aspect-ratio regularization.

Pipeline (single pass):
1. Percentage corners -> pixel corners
2. Raw size = max of opposing edges; degenerate geometry rejected
3. Aspect regularization (ID card / passport / square snap)
4. Homography solve and bilinear warp into the regularized size
"""

from docscan.rectification.aspect import match_band, regularize
from docscan.rectification.geometry import (
    calculate_edge_lengths,
    compute_destination_size,
    is_convex_quadrilateral,
    polygon_area,
)
from docscan.rectification.rectifier import (
    PerspectiveRectifier,
    check_geometry,
    quad_to_pixels,
    rectify,
)
from docscan.rectification.types import RectifiedImage

__all__ = [
    "PerspectiveRectifier",
    "rectify",
    "regularize",
    "match_band",
    "check_geometry",
    "quad_to_pixels",
    "calculate_edge_lengths",
    "compute_destination_size",
    "is_convex_quadrilateral",
    "polygon_area",
    "RectifiedImage",
]
