"""
Document quadrilateral detection.

Pipeline stages:
1. Edge map (downscale, luminance, blur, Canny)
2. Contour extraction (list mode, polygon approximation)
3. Scoring & selection (convex 4-gons, centrality-weighted area)
4. Corner normalization (TL, TR, BR, BL)
"""

from docscan.detection.contours import extract_contours
from docscan.detection.edge_map import build_edge_map, compute_scale
from docscan.detection.normalizer import normalize_corners, order_points
from docscan.detection.processor import (
    DetectionMode,
    QuadrilateralDetector,
    detect_document,
)
from docscan.detection.scoring import (
    centrality_distance,
    centrality_weight,
    score_candidate,
    select_best_quadrilateral,
)
from docscan.detection.types import ContourCandidate, EdgeMap, ScoredCandidate

__all__ = [
    "QuadrilateralDetector",
    "DetectionMode",
    "detect_document",
    "build_edge_map",
    "compute_scale",
    "extract_contours",
    "score_candidate",
    "select_best_quadrilateral",
    "centrality_distance",
    "centrality_weight",
    "normalize_corners",
    "order_points",
    "EdgeMap",
    "ContourCandidate",
    "ScoredCandidate",
]
