"""
Perspective Rectifier

Maps the document quadrilateral onto an upright rectangle and resamples
the source image into it. Raw dimensions are computed and regularized
first, then the homography targets the regularized rectangle directly so
that only one resampling step happens.
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np

from docscan.common.exceptions import DegenerateQuadrilateralError
from docscan.common.types import Quadrilateral, image_size, validate_image
from docscan.config_loader import RectificationConfig
from docscan.rectification.aspect import regularize
from docscan.rectification.geometry import (
    compute_destination_size,
    is_convex_quadrilateral,
    polygon_area,
)
from docscan.rectification.types import RectifiedImage
from docscan.vision import OpenCVVisionOperations, VisionOperations

logger = logging.getLogger(__name__)


def quad_to_pixels(
    quad: Quadrilateral, source_width: int, source_height: int
) -> np.ndarray:
    """Convert a percentage-space quad to a (4, 2) float64 pixel array."""
    return quad.to_pixels(source_width, source_height).to_numpy(dtype=np.float64)


def check_geometry(pixel_quad: np.ndarray, min_area_px: float = 1.0) -> Tuple[float, float]:
    """
    Validate corner geometry and return the raw destination size.

    Raises:
        DegenerateQuadrilateralError: If the raw width or height is
            non-finite or non-positive, the polygon area is below
            ``min_area_px`` (collinear or coincident corners), or the
            winding is not convex (self-intersecting or concave).
    """
    raw_width, raw_height = compute_destination_size(pixel_quad)

    if not (math.isfinite(raw_width) and math.isfinite(raw_height)):
        raise DegenerateQuadrilateralError(
            f"Non-finite destination size: width={raw_width}, height={raw_height}"
        )
    if raw_width <= 0 or raw_height <= 0:
        raise DegenerateQuadrilateralError(
            f"Non-positive destination size: width={raw_width:.2f}, height={raw_height:.2f}. "
            "Corner points may be coincident."
        )

    area = polygon_area(pixel_quad)
    if area <= 0.0 or area < min_area_px:
        raise DegenerateQuadrilateralError(
            f"Quadrilateral area {area:.3f}px^2 is too small. "
            "Corner points may be collinear or coincident."
        )

    if not is_convex_quadrilateral(pixel_quad):
        raise DegenerateQuadrilateralError(
            "Corner points do not form a convex quadrilateral. "
            "The quad may be self-intersecting or have incorrectly ordered corners."
        )

    return raw_width, raw_height


class PerspectiveRectifier:
    """
    Rectifier + aspect regularizer in one pass.

    Example:
        >>> rectifier = PerspectiveRectifier()
        >>> quad = Quadrilateral.from_points([(12, 8), (88, 10), (90, 92), (10, 90)])
        >>> result = rectifier.rectify(cv2.imread("passport.jpg"), quad)
        >>> result.width, result.height
    """

    def __init__(
        self,
        config: Optional[RectificationConfig] = None,
        ops: Optional[VisionOperations] = None,
    ):
        self.config = config or RectificationConfig()
        self.ops = ops or OpenCVVisionOperations()

    def rectify(self, source_image: np.ndarray, quad: Quadrilateral) -> RectifiedImage:
        """
        Rectify the region bounded by ``quad`` into an upright rectangle.

        Args:
            source_image: Full-resolution source image.
            quad: Corners in percentage space, order [TL, TR, BR, BL].

        Returns:
            RectifiedImage sized to the regularized dimensions.

        Raises:
            InvalidImageError: If the source image is malformed.
            DegenerateQuadrilateralError: If the corners cannot be rectified.
        """
        validate_image(source_image)
        src_w, src_h = image_size(source_image)

        src = quad_to_pixels(quad, src_w, src_h)
        raw_width, raw_height = check_geometry(src, self.config.min_quad_area_px)

        width, height = regularize(raw_width, raw_height, self.config.aspect_snap_bands)
        out_w = int(round(width))
        out_h = int(round(height))
        if out_w < 1 or out_h < 1:
            raise DegenerateQuadrilateralError(
                f"Rectified size {out_w}x{out_h} is empty"
            )

        dst = np.array(
            [
                [0, 0],  # Top-Left
                [out_w, 0],  # Top-Right
                [out_w, out_h],  # Bottom-Right
                [0, out_h],  # Bottom-Left
            ],
            dtype=np.float32,
        )

        matrix = self.ops.solve_perspective_transform(src.astype(np.float32), dst)
        if matrix is None or not np.all(np.isfinite(matrix)):
            raise DegenerateQuadrilateralError(
                "Perspective transform is singular for the given corners"
            )

        # Bilinear resampling, constant black border outside the source
        rectified = self.ops.warp_perspective(
            source_image,
            matrix,
            (out_w, out_h),
            interpolation=self.config.interpolation,
            border_value=self.config.border_value,
        )

        logger.info(
            f"Rectified {src_w}x{src_h} source to {out_w}x{out_h} "
            f"(measured {raw_width:.1f}x{raw_height:.1f})"
        )

        return RectifiedImage(
            data=rectified,
            width=out_w,
            height=out_h,
            raw_width=raw_width,
            raw_height=raw_height,
        )


def rectify(
    source_image: np.ndarray,
    quad: Quadrilateral,
    config: Optional[RectificationConfig] = None,
    ops: Optional[VisionOperations] = None,
) -> RectifiedImage:
    """
    Convenience function for one-shot rectification.

    Example:
        >>> result = rectify(image, Quadrilateral.default_inset(10))
        >>> cv2.imwrite("rectified.jpg", result.data)
    """
    return PerspectiveRectifier(config=config, ops=ops).rectify(source_image, quad)
