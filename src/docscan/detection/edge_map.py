"""
Edge Map Builder

Converts a raw frame into a binary edge map:
downscale -> luminance -> Gaussian blur -> Canny.

The live-tracking path uses a small working size (~320 px) for speed,
the still-image path a larger one (~1000 px) for precision.
"""

import logging
from typing import Optional

import numpy as np

from docscan.common.exceptions import InvalidImageError
from docscan.common.types import validate_image
from docscan.config_loader import EdgeMapConfig
from docscan.detection.types import EdgeMap
from docscan.vision import OpenCVVisionOperations, VisionOperations

logger = logging.getLogger(__name__)


def compute_scale(width: int, height: int, target_max_dimension: int) -> float:
    """
    Scale factor that brings the longer side down to ``target_max_dimension``.

    Never upscales: the result is capped at 1.0.

    Example:
        >>> compute_scale(1920, 1080, 320)
        0.16666666666666666
        >>> compute_scale(200, 100, 320)
        1.0
    """
    return min(target_max_dimension / max(width, height), 1.0)


def build_edge_map(
    frame: np.ndarray,
    target_max_dimension: Optional[int] = None,
    config: Optional[EdgeMapConfig] = None,
    ops: Optional[VisionOperations] = None,
) -> EdgeMap:
    """
    Build a binary edge map from a frame.

    Args:
        frame: Source image (H, W) or (H, W, C) with 1, 3 or 4 channels.
        target_max_dimension: Longer side of the working copy. Overrides
            ``config.target_max_dimension`` when given.
        config: Blur and Canny parameters. Defaults to the still-image path.
        ops: Vision operations backend. Defaults to OpenCV.

    Returns:
        EdgeMap of the working copy, with the scale applied to the frame.

    Raises:
        InvalidImageError: If the frame is malformed or empty, or the
            target dimension is not positive.
    """
    config = config or EdgeMapConfig()
    ops = ops or OpenCVVisionOperations()
    target = target_max_dimension if target_max_dimension is not None else config.target_max_dimension

    validate_image(frame)
    if target <= 0:
        raise InvalidImageError(f"targetMaxDimension must be positive, got {target}")

    height, width = frame.shape[:2]
    scale = compute_scale(width, height, target)

    working = frame
    if scale < 1.0:
        work_w = max(1, int(round(width * scale)))
        work_h = max(1, int(round(height * scale)))
        working = ops.resize(frame, work_w, work_h)

    gray = ops.to_grayscale(working)
    blurred = ops.blur(gray, config.blur_kernel_size)
    edges = ops.edge_detect(blurred, config.canny_low, config.canny_high)

    edge_h, edge_w = edges.shape[:2]
    logger.debug(
        f"Edge map built: {width}x{height} -> {edge_w}x{edge_h} "
        f"(scale={scale:.3f}, canny={config.canny_low}/{config.canny_high})"
    )

    return EdgeMap(data=edges, scale=scale, width=int(edge_w), height=int(edge_h))
