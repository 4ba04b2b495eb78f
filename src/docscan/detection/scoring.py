"""
Quadrilateral Scorer & Selector

Filters contour candidates down to convex quadrilaterals above an area
threshold and ranks them with a centrality-weighted area heuristic.

Real frames are cluttered with equal-or-larger rectangles (keyboards,
windows, books) that are rarely centered, so pure area-based selection
picks them. The score therefore multiplies the area ratio by a bonus when
the candidate's centroid is near the frame center and by a penalty when
it is far away:

    score = area_ratio * bonus    if dist_from_center < bonus_radius
    score = area_ratio * penalty  if dist_from_center > penalty_radius
    score = area_ratio            otherwise
"""

import logging
import math
from typing import Iterable, Optional

from docscan.config_loader import ScoringConfig
from docscan.detection.normalizer import normalize_corners
from docscan.detection.types import ContourCandidate, ScoredCandidate
from docscan.common.types import Quadrilateral

logger = logging.getLogger(__name__)


def centrality_distance(
    quad: Quadrilateral, frame_width: float, frame_height: float
) -> float:
    """
    Distance from the quad's centroid to the frame center, normalized by
    the frame's half-diagonal so the result lies in [0, 1] for points
    inside the frame.
    """
    centroid = quad.centroid
    half_diagonal = math.hypot(frame_width, frame_height) / 2.0
    if half_diagonal <= 0:
        return 1.0
    return math.hypot(centroid.x - frame_width / 2.0, centroid.y - frame_height / 2.0) / half_diagonal


def centrality_weight(dist_from_center: float, config: ScoringConfig) -> float:
    """Multiplier applied to the area ratio for a given center distance."""
    if dist_from_center < config.centrality_bonus_radius:
        return config.centrality_bonus
    if dist_from_center > config.centrality_penalty_radius:
        return config.centrality_penalty
    return 1.0


def score_candidate(
    candidate: ContourCandidate,
    frame_width: float,
    frame_height: float,
    config: Optional[ScoringConfig] = None,
) -> Optional[ScoredCandidate]:
    """
    Filter and score a single contour candidate.

    Args:
        candidate: Contour from the extractor.
        frame_width: Working frame width in pixels.
        frame_height: Working frame height in pixels.
        config: Scoring parameters.

    Returns:
        ScoredCandidate, or None if the candidate is not a convex
        4-vertex polygon of at least ``min_area_fraction`` of the frame.
    """
    config = config or ScoringConfig()
    frame_area = float(frame_width) * float(frame_height)

    if candidate.vertex_count != 4:
        return None
    if not candidate.is_convex:
        return None
    if frame_area <= 0 or candidate.area < config.min_area_fraction * frame_area:
        return None

    quad = normalize_corners(candidate.approx_polygon)
    area_ratio = candidate.area / frame_area
    dist = centrality_distance(quad, frame_width, frame_height)
    score = area_ratio * centrality_weight(dist, config)

    return ScoredCandidate(
        quad=quad, score=score, area_ratio=area_ratio, dist_from_center=dist
    )


def select_best_quadrilateral(
    candidates: Iterable[ContourCandidate],
    frame_width: float,
    frame_height: float,
    min_area_fraction: Optional[float] = None,
    config: Optional[ScoringConfig] = None,
) -> Optional[Quadrilateral]:
    """
    Pick the highest-scoring quadrilateral among contour candidates.

    Only a strictly higher score replaces the current best, so on equal
    scores the first candidate in iteration order wins. The extractor
    returns contours in a deterministic retrieval order, which makes the
    tie-break deterministic for a given frame.

    Args:
        candidates: Output of ``extract_contours``.
        frame_width: Working frame width in pixels.
        frame_height: Working frame height in pixels.
        min_area_fraction: Overrides ``config.min_area_fraction`` when given.
        config: Scoring parameters.

    Returns:
        Best quad in working-copy pixel space, canonically ordered, or
        None if nothing survives filtering. None is a normal outcome; the
        caller substitutes a default inset quad.

    Example:
        >>> edge_map = build_edge_map(frame, 1000)
        >>> quad = select_best_quadrilateral(
        ...     extract_contours(edge_map), edge_map.width, edge_map.height
        ... )
    """
    config = config or ScoringConfig()
    if min_area_fraction is not None:
        config = config.model_copy(update={"min_area_fraction": min_area_fraction})

    best: Optional[ScoredCandidate] = None
    considered = 0
    for candidate in candidates:
        considered += 1
        scored = score_candidate(candidate, frame_width, frame_height, config)
        if scored is None:
            continue
        logger.debug(
            f"Candidate area_ratio={scored.area_ratio:.3f} "
            f"dist={scored.dist_from_center:.3f} score={scored.score:.3f}"
        )
        if best is None or scored.score > best.score:
            best = scored

    if best is None:
        logger.debug(f"No quadrilateral among {considered} candidates")
        return None

    logger.debug(
        f"Selected quad score={best.score:.3f} (area_ratio={best.area_ratio:.3f}, "
        f"dist={best.dist_from_center:.3f}) from {considered} candidates"
    )
    return best.quad
