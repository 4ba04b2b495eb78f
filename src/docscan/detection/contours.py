"""
Contour Extractor

Finds every closed contour in an edge map and reduces each one to a
polygonal approximation. No filtering happens here; the scorer decides.
"""

import logging
from typing import List, Optional

import numpy as np

from docscan.config_loader import ContourConfig
from docscan.detection.types import ContourCandidate, EdgeMap
from docscan.vision import OpenCVVisionOperations, VisionOperations

logger = logging.getLogger(__name__)


def extract_contours(
    edge_map: EdgeMap,
    config: Optional[ContourConfig] = None,
    ops: Optional[VisionOperations] = None,
) -> List[ContourCandidate]:
    """
    Extract all contours of an edge map as candidates.

    Contours are retrieved in list mode, so nested contours come back as
    independent entries. The approximation tolerance is proportional to
    each contour's perimeter.

    Args:
        edge_map: Output of ``build_edge_map``.
        config: Approximation tolerance settings.
        ops: Vision operations backend. Defaults to OpenCV.

    Returns:
        One ContourCandidate per contour, in retrieval order.
    """
    config = config or ContourConfig()
    ops = ops or OpenCVVisionOperations()

    candidates = []
    for contour in ops.find_contours(edge_map.data):
        area = abs(ops.contour_area(contour))
        perimeter = ops.arc_length(contour, closed=True)
        approx = ops.approx_polygon(contour, config.approx_tolerance * perimeter)
        candidates.append(
            ContourCandidate(
                points=np.asarray(contour, dtype=np.float32).reshape(-1, 2),
                area=area,
                perimeter=perimeter,
                approx_polygon=np.asarray(approx, dtype=np.float32).reshape(-1, 2),
                is_convex=ops.is_convex(approx),
            )
        )

    logger.debug(f"Extracted {len(candidates)} contours")
    return candidates
