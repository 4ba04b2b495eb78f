"""
Common type definitions for the docscan engine.

This module provides Pydantic-based value types shared by every stage of
the pipeline: points, quadrilaterals and validated image buffers.

These types provide:
- Immutable, validated coordinates
- Conversion between pixel space and percentage-of-frame space
- Integration with numpy arrays and OpenCV
"""

import math
from typing import Sequence, Tuple, Union

import numpy as np
from pydantic import BaseModel, Field, field_validator

from docscan.common.exceptions import InvalidImageError

CORNER_NAMES = ("top-left", "top-right", "bottom-right", "bottom-left")


class Point2D(BaseModel):
    """
    Immutable 2D point (x, y).

    Session and editor values are percentage-of-frame coordinates in
    [0, 100]; the detection pipeline uses the same type for pixel
    coordinates, so no range is enforced here. Clamping is the editor's job.

    Attributes:
        x: Horizontal coordinate.
        y: Vertical coordinate.

    Example:
        >>> p = Point2D(x=12.5, y=40)
        >>> p.to_tuple()
        (12.5, 40.0)
    """

    model_config = {"frozen": True}

    x: float = Field(..., description="Horizontal coordinate")
    y: float = Field(..., description="Vertical coordinate")

    @field_validator("x", "y")
    @classmethod
    def _require_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError(f"Coordinate must be finite, got {v}")
        return v

    @classmethod
    def from_sequence(cls, coords: Sequence[float]) -> "Point2D":
        """
        Create a point from an [x, y] sequence or array.

        Raises:
            ValueError: If the sequence does not hold exactly 2 values.
        """
        if len(coords) != 2:
            raise ValueError(f"Expected 2 coordinates, got {len(coords)}")
        return cls(x=float(coords[0]), y=float(coords[1]))

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def distance_to(self, other: "Point2D") -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def clamped(self, low: float = 0.0, high: float = 100.0) -> "Point2D":
        """Return a copy with each axis clamped to [low, high]."""
        return Point2D(x=min(max(self.x, low), high), y=min(max(self.y, low), high))

    def __repr__(self) -> str:
        return f"Point2D(x={self.x:.2f}, y={self.y:.2f})"


PointLike = Union[Point2D, Sequence[float], np.ndarray]


def to_point(value: PointLike) -> Point2D:
    """Coerce a Point2D, [x, y] list or (2,) array into a Point2D."""
    if isinstance(value, Point2D):
        return value
    return Point2D.from_sequence(np.asarray(value, dtype=np.float64).ravel())


class Quadrilateral(BaseModel):
    """
    Four points in canonical winding: [top-left, top-right, bottom-right, bottom-left].

    The winding is established by the corner normalizer; this type only
    stores it. A self-intersecting point set is a precondition violation
    detected downstream by the rectifier.

    Example:
        >>> quad = Quadrilateral.default_inset(10)
        >>> quad.points[0]
        Point2D(x=10.00, y=10.00)
    """

    model_config = {"frozen": True}

    points: Tuple[Point2D, Point2D, Point2D, Point2D]

    @classmethod
    def from_points(cls, points: Sequence[PointLike]) -> "Quadrilateral":
        """
        Build a quadrilateral from 4 point-likes, keeping their order.

        Raises:
            ValueError: If the input does not contain exactly 4 points.
        """
        if len(points) != 4:
            raise ValueError(f"Expected exactly 4 points, got {len(points)}")
        return cls(points=tuple(to_point(p) for p in points))

    @classmethod
    def from_numpy(cls, arr: np.ndarray) -> "Quadrilateral":
        """Build from an array of shape (4, 2) or (4, 1, 2)."""
        arr = np.asarray(arr, dtype=np.float64)
        if arr.size != 8:
            raise ValueError(
                f"Expected exactly 4 points with shape (4, 2), got shape {arr.shape}"
            )
        return cls.from_points(arr.reshape(4, 2))

    @classmethod
    def default_inset(cls, inset_pct: float = 10.0) -> "Quadrilateral":
        """Full-frame inset box in percentage space, e.g. the 10%-90% box."""
        lo, hi = float(inset_pct), 100.0 - float(inset_pct)
        return cls.from_points([(lo, lo), (hi, lo), (hi, hi), (lo, hi)])

    def to_numpy(self, dtype: type = np.float32) -> np.ndarray:
        """Return the points as an array of shape (4, 2)."""
        return np.array([p.to_tuple() for p in self.points], dtype=dtype)

    def to_percent(self, width: float, height: float) -> "Quadrilateral":
        """Convert pixel coordinates of a width x height frame to percentages."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Frame size must be positive, got {width}x{height}")
        return Quadrilateral.from_points(
            [(p.x / width * 100.0, p.y / height * 100.0) for p in self.points]
        )

    def to_pixels(self, width: float, height: float) -> "Quadrilateral":
        """Convert percentage coordinates to pixels of a width x height frame."""
        return Quadrilateral.from_points(
            [(p.x / 100.0 * width, p.y / 100.0 * height) for p in self.points]
        )

    def replace_point(self, index: int, point: Point2D) -> "Quadrilateral":
        """Return a copy with the point at ``index`` replaced."""
        pts = list(self.points)
        pts[index] = point
        return Quadrilateral(points=tuple(pts))

    @property
    def centroid(self) -> Point2D:
        """Mean of the 4 vertices."""
        return Point2D(
            x=sum(p.x for p in self.points) / 4.0,
            y=sum(p.y for p in self.points) / 4.0,
        )

    @property
    def area(self) -> float:
        """Absolute polygon area (shoelace formula) in the quad's own units."""
        total = 0.0
        for i in range(4):
            a = self.points[i]
            b = self.points[(i + 1) % 4]
            total += a.x * b.y - b.x * a.y
        return abs(total) / 2.0


def validate_image(image: np.ndarray) -> np.ndarray:
    """
    Validate that an array is a usable image buffer.

    Accepts uint8 2D (grayscale) arrays and uint8 3D arrays with 1, 3 or 4
    channels.

    Args:
        image: Candidate image array.

    Returns:
        The same array, unchanged.

    Raises:
        InvalidImageError: If the array is None, empty, zero-sized on any
            axis, has an unsupported shape or is not uint8.
    """
    if image is None or not isinstance(image, np.ndarray):
        raise InvalidImageError(f"Invalid input image: expected numpy.ndarray, got {type(image)}")

    if image.size == 0:
        raise InvalidImageError(
            f"Invalid input image: image is empty (shape {image.shape})"
        )

    if image.ndim not in (2, 3):
        raise InvalidImageError(
            f"Invalid input image: expected 2D or 3D array, got shape {image.shape}"
        )

    if image.ndim == 3 and image.shape[2] not in (1, 3, 4):
        raise InvalidImageError(
            f"Invalid input image: expected 1, 3 or 4 channels, got {image.shape[2]}"
        )

    if image.dtype != np.uint8:
        raise InvalidImageError(
            f"Invalid input image: expected uint8 dtype, got {image.dtype}. "
            "Images should be in range [0, 255]"
        )

    return image


def image_size(image: np.ndarray) -> Tuple[int, int]:
    """Return (width, height) of a validated image."""
    validate_image(image)
    return int(image.shape[1]), int(image.shape[0])
