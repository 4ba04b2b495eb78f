"""
Common types and errors shared across all docscan sub-packages.
"""

from docscan.common.exceptions import (
    DegenerateQuadrilateralError,
    DocScanError,
    ExtractionError,
    InvalidImageError,
    InvalidStageTransitionError,
)
from docscan.common.types import (
    CORNER_NAMES,
    Point2D,
    Quadrilateral,
    image_size,
    to_point,
    validate_image,
)

__all__ = [
    "CORNER_NAMES",
    "Point2D",
    "Quadrilateral",
    "image_size",
    "to_point",
    "validate_image",
    "DocScanError",
    "InvalidImageError",
    "DegenerateQuadrilateralError",
    "InvalidStageTransitionError",
    "ExtractionError",
]
