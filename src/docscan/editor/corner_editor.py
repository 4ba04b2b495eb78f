"""
Interactive Corner Editor

Holds the session's working quadrilateral in percentage-of-container
coordinates (0-100 on each axis, independent of pixel resolution) and
exposes the drag gestures used to refine it:

- corner drag: move one point
- edge drag: slide a whole side, both endpoints by the same delta
- peek: magnified view around the active corner or edge midpoint

All mutations are synchronous and clamp every axis to [0, 100].
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

import numpy as np

from docscan.common.types import CORNER_NAMES, Point2D, PointLike, Quadrilateral, to_point
from docscan.config_loader import EditorConfig
from docscan.vision import OpenCVVisionOperations, VisionOperations

logger = logging.getLogger(__name__)

EDGE_NAMES = ("top", "right", "bottom", "left")


class TargetKind(Enum):
    """Kind of element being dragged."""

    CORNER = "corner"
    EDGE = "edge"


@dataclass(frozen=True)
class DragTarget:
    """
    Active interaction target: a corner (0..3) or an edge (0..3).

    Edge ``i`` connects point ``i`` and point ``(i + 1) % 4``.
    """

    kind: TargetKind
    index: int

    def __post_init__(self):
        if not 0 <= self.index <= 3:
            raise ValueError(f"{self.kind.value} index must be in 0..3, got {self.index}")

    @classmethod
    def corner(cls, index: int) -> "DragTarget":
        return cls(TargetKind.CORNER, index)

    @classmethod
    def edge(cls, index: int) -> "DragTarget":
        return cls(TargetKind.EDGE, index)

    @classmethod
    def parse(cls, value: Union["DragTarget", int, str]) -> "DragTarget":
        """
        Accept a DragTarget, a corner index, or an edge id such as "e2".

        Raises:
            ValueError: If the value cannot be interpreted.
        """
        if isinstance(value, DragTarget):
            return value
        if isinstance(value, int):
            return cls.corner(value)
        if isinstance(value, str) and len(value) == 2 and value[0] == "e" and value[1].isdigit():
            return cls.edge(int(value[1]))
        raise ValueError(f"Invalid drag target: {value!r}")

    @property
    def label(self) -> str:
        if self.kind is TargetKind.CORNER:
            return CORNER_NAMES[self.index]
        return f"{EDGE_NAMES[self.index]} edge"


@dataclass
class PeekRegion:
    """
    Source-image window for a zoomed precision preview.

    Attributes:
        target: Corner or edge the window is centered on.
        center: Window center in percentage coordinates.
        center_px: Window center in source pixels (x, y).
        x0, y0, x1, y1: Pixel bounds of the window (x1/y1 exclusive),
            shifted to stay inside the image where possible.
        zoom: Magnification to apply when rendering.
    """

    target: DragTarget
    center: Point2D
    center_px: Tuple[float, float]
    x0: int
    y0: int
    x1: int
    y1: int
    zoom: float

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0

    @property
    def output_size(self) -> Tuple[int, int]:
        """(width, height) of the rendered magnified view."""
        return (
            max(1, int(round(self.width * self.zoom))),
            max(1, int(round(self.height * self.zoom))),
        )


def _clamp_axis(value: float) -> float:
    return min(max(float(value), 0.0), 100.0)


class CornerEditor:
    """
    Mutable holder of the working quadrilateral with drag operations.

    No undo stack is kept; callers can layer one on ``snapshot``/``restore``.

    Example:
        >>> editor = CornerEditor(Quadrilateral.default_inset(10), 1920, 1080)
        >>> editor.drag_corner(0, Point2D(x=-5, y=12))   # x clamped to 0
        >>> editor.drag_edge(1, 3.0, 0.0)                # slide right edge
        >>> region = editor.peek(DragTarget.corner(0))
    """

    def __init__(
        self,
        quad: Quadrilateral,
        image_width: int,
        image_height: int,
        config: Optional[EditorConfig] = None,
        ops: Optional[VisionOperations] = None,
    ):
        if image_width <= 0 or image_height <= 0:
            raise ValueError(f"Image size must be positive, got {image_width}x{image_height}")
        self.config = config or EditorConfig()
        self.ops = ops or OpenCVVisionOperations()
        self.image_width = int(image_width)
        self.image_height = int(image_height)
        self._quad = self._clamp_quad(quad)

    @staticmethod
    def _clamp_quad(quad: Quadrilateral) -> Quadrilateral:
        return Quadrilateral(points=tuple(p.clamped(0.0, 100.0) for p in quad.points))

    @property
    def quad(self) -> Quadrilateral:
        """Current working quadrilateral (percentage space)."""
        return self._quad

    def snapshot(self) -> Quadrilateral:
        """Return the current quad value (immutable, safe to keep)."""
        return self._quad

    def restore(self, quad: Quadrilateral) -> None:
        """Replace the working quad, e.g. from an undo stack or a new seed."""
        self._quad = self._clamp_quad(quad)
        logger.debug("Working quad restored")

    def drag_corner(self, index: int, new_point: PointLike) -> Quadrilateral:
        """
        Move one corner, clamping each axis to [0, 100].

        Args:
            index: Corner index 0..3 (TL, TR, BR, BL).
            new_point: New position in percentage coordinates.

        Returns:
            The updated quadrilateral.

        Raises:
            ValueError: If index is out of range.
        """
        target = DragTarget.corner(index)
        point = to_point(new_point).clamped(0.0, 100.0)
        self._quad = self._quad.replace_point(index, point)
        logger.debug(f"Dragged {target.label} to ({point.x:.2f}, {point.y:.2f})")
        return self._quad

    def drag_edge(self, edge_index: int, delta_x: float, delta_y: float) -> Quadrilateral:
        """
        Slide one side: both endpoints move by the same delta.

        Each endpoint's axes are clamped independently, so an endpoint that
        hits the border stops there while the other may keep moving.

        Args:
            edge_index: Edge 0..3; edge i joins point i and point (i+1) % 4.
            delta_x: Horizontal displacement in percentage units.
            delta_y: Vertical displacement in percentage units.

        Returns:
            The updated quadrilateral.

        Raises:
            ValueError: If edge_index is out of range.
        """
        target = DragTarget.edge(edge_index)
        quad = self._quad
        for index in (edge_index, (edge_index + 1) % 4):
            p = quad.points[index]
            quad = quad.replace_point(
                index, Point2D(x=_clamp_axis(p.x + delta_x), y=_clamp_axis(p.y + delta_y))
            )
        self._quad = quad
        logger.debug(f"Dragged {target.label} by ({delta_x:.2f}, {delta_y:.2f})")
        return self._quad

    def apply_drag(
        self, target: Union[DragTarget, int, str], position: PointLike, previous: Optional[PointLike] = None
    ) -> Quadrilateral:
        """
        Dispatch a pointer move to the right gesture.

        Corners jump to ``position``; edges move by ``position - previous``.

        Raises:
            ValueError: If an edge drag is missing its previous position.
        """
        target = DragTarget.parse(target)
        if target.kind is TargetKind.CORNER:
            return self.drag_corner(target.index, position)
        if previous is None:
            raise ValueError("Edge drag requires the previous pointer position")
        current, last = to_point(position), to_point(previous)
        return self.drag_edge(target.index, current.x - last.x, current.y - last.y)

    def target_center(self, target: Union[DragTarget, int, str]) -> Point2D:
        """Corner position, or edge midpoint, in percentage coordinates."""
        target = DragTarget.parse(target)
        points = self._quad.points
        if target.kind is TargetKind.CORNER:
            return points[target.index]
        a = points[target.index]
        b = points[(target.index + 1) % 4]
        return Point2D(x=(a.x + b.x) / 2.0, y=(a.y + b.y) / 2.0)

    def peek(self, target: Union[DragTarget, int, str]) -> PeekRegion:
        """
        Describe the source region to magnify around the active target.

        Pure read: the quad is not modified.

        Args:
            target: Active corner or edge.

        Returns:
            PeekRegion centered on the corner (or edge midpoint), shifted
            to stay inside the image.
        """
        target = DragTarget.parse(target)
        center = self.target_center(target)
        cx = center.x / 100.0 * self.image_width
        cy = center.y / 100.0 * self.image_height

        side = int(round(self.config.peek_window_fraction * min(self.image_width, self.image_height)))
        side_w = max(1, min(side, self.image_width))
        side_h = max(1, min(side, self.image_height))

        x0 = int(round(cx - side_w / 2.0))
        y0 = int(round(cy - side_h / 2.0))
        x0 = min(max(x0, 0), self.image_width - side_w)
        y0 = min(max(y0, 0), self.image_height - side_h)

        return PeekRegion(
            target=target,
            center=center,
            center_px=(cx, cy),
            x0=x0,
            y0=y0,
            x1=x0 + side_w,
            y1=y0 + side_h,
            zoom=self.config.peek_zoom,
        )

    def render_peek(self, image: np.ndarray, region: PeekRegion) -> np.ndarray:
        """
        Crop and magnify the peek region from the source image.

        Raises:
            ValueError: If the image size differs from the editor's.
        """
        if image.shape[1] != self.image_width or image.shape[0] != self.image_height:
            raise ValueError(
                f"Image size {image.shape[1]}x{image.shape[0]} does not match "
                f"editor size {self.image_width}x{self.image_height}"
            )
        crop = image[region.y0 : region.y1, region.x0 : region.x1]
        out_w, out_h = region.output_size
        return self.ops.resize(crop, out_w, out_h)
