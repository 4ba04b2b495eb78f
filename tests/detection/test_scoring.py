"""
Unit tests for the quadrilateral scorer and selector.

Candidates are built by hand on a 100x100 frame (half-diagonal ~70.71) so
that area ratios and center distances are exact.
"""

import numpy as np
import pytest

from docscan.config_loader import ScoringConfig
from docscan.detection.scoring import (
    centrality_distance,
    centrality_weight,
    score_candidate,
    select_best_quadrilateral,
)
from docscan.detection.types import ContourCandidate
from docscan.common.types import Quadrilateral

FRAME = 100


def square_around(cx, cy, half=10.0):
    return np.array(
        [[cx - half, cy - half], [cx + half, cy - half], [cx + half, cy + half], [cx - half, cy + half]],
        dtype=np.float32,
    )


def make_candidate(polygon, area_ratio, is_convex=True):
    """Build a candidate whose area is given as a fraction of the frame."""
    polygon = np.asarray(polygon, dtype=np.float32)
    return ContourCandidate(
        points=polygon,
        area=area_ratio * FRAME * FRAME,
        perimeter=80.0,
        approx_polygon=polygon,
        is_convex=is_convex,
    )


class TestCentrality:
    """Test centrality distance and weighting."""

    def test_distance_normalized_by_half_diagonal(self):
        """Test that a corner-centered quad is at distance ~1."""
        centered = Quadrilateral.from_numpy(square_around(50, 50))
        cornered = Quadrilateral.from_numpy(square_around(0, 0))

        assert centrality_distance(centered, FRAME, FRAME) == pytest.approx(0.0)
        assert centrality_distance(cornered, FRAME, FRAME) == pytest.approx(1.0)

    @pytest.mark.parametrize(
        "dist,expected",
        [(0.0, 3.0), (0.1, 3.0), (0.2, 1.0), (0.3, 1.0), (0.4, 1.0), (0.5, 0.1), (1.0, 0.1)],
    )
    def test_weight_bands(self, dist, expected):
        """Test bonus below 0.2, penalty above 0.4, neutral in between."""
        assert centrality_weight(dist, ScoringConfig()) == expected


class TestScoreCandidate:
    """Test filtering of single candidates."""

    def test_accepts_convex_quad(self):
        """Test scoring of a valid central candidate."""
        scored = score_candidate(make_candidate(square_around(50, 50), 0.2), FRAME, FRAME)

        assert scored is not None
        assert scored.area_ratio == pytest.approx(0.2)
        assert scored.dist_from_center == pytest.approx(0.0)
        assert scored.score == pytest.approx(0.6)

    def test_rejects_non_quad(self):
        """Test that polygons with other vertex counts are discarded."""
        triangle = make_candidate([[10, 10], [90, 10], [50, 90]], 0.3)
        pentagon = make_candidate([[50, 5], [95, 40], [80, 95], [20, 95], [5, 40]], 0.5)

        assert score_candidate(triangle, FRAME, FRAME) is None
        assert score_candidate(pentagon, FRAME, FRAME) is None

    def test_rejects_non_convex(self):
        """Test that non-convex candidates are discarded."""
        candidate = make_candidate(square_around(50, 50), 0.3, is_convex=False)
        assert score_candidate(candidate, FRAME, FRAME) is None

    def test_returns_canonical_winding(self):
        """Test that the scored quad is normalized to TL, TR, BR, BL."""
        shuffled = square_around(50, 50)[[2, 0, 3, 1]]
        scored = score_candidate(make_candidate(shuffled, 0.1), FRAME, FRAME)

        np.testing.assert_allclose(scored.quad.to_numpy(), square_around(50, 50))


class TestSelectBestQuadrilateral:
    """Test candidate selection."""

    def test_best_candidate_scenario(self):
        """
        Test the documented three-candidate scenario.

        (0.30, 0.10) scores 0.90 and (0.35, 0.50) scores 0.035, so the first
        one wins despite not being the largest. The tiny central candidate
        cannot outscore it either.
        """
        a = make_candidate(square_around(55, 55), 0.30)  # dist 0.1
        b = make_candidate(square_around(75, 75), 0.35)  # dist 0.5
        c = make_candidate(square_around(52.5, 52.5), 0.05)  # dist 0.05

        assert score_candidate(a, FRAME, FRAME).score == pytest.approx(0.90)
        assert score_candidate(b, FRAME, FRAME).score == pytest.approx(0.035)

        best = select_best_quadrilateral([b, c, a], FRAME, FRAME)
        np.testing.assert_allclose(best.to_numpy(), square_around(55, 55))

    def test_area_filtering(self):
        """Test that candidates below min_area_fraction never win."""
        small = make_candidate(square_around(50, 50), 0.03)

        assert select_best_quadrilateral([small], FRAME, FRAME) is None
        assert (
            select_best_quadrilateral([small], FRAME, FRAME, min_area_fraction=0.01)
            is not None
        )

    def test_centrality_ordering(self):
        """Test that at equal area the central candidate wins in any order."""
        central = make_candidate(square_around(50, 50), 0.2)
        off_center = make_candidate(square_around(90, 90), 0.2)

        for candidates in ([central, off_center], [off_center, central]):
            best = select_best_quadrilateral(candidates, FRAME, FRAME)
            np.testing.assert_allclose(best.to_numpy(), square_around(50, 50))

    def test_tie_goes_to_first_candidate(self):
        """Test deterministic tie-break on equal scores."""
        left = make_candidate(square_around(45, 50), 0.2)
        right = make_candidate(square_around(55, 50), 0.2)

        best = select_best_quadrilateral([left, right], FRAME, FRAME)
        np.testing.assert_allclose(best.to_numpy(), square_around(45, 50))

        best = select_best_quadrilateral([right, left], FRAME, FRAME)
        np.testing.assert_allclose(best.to_numpy(), square_around(55, 50))

    def test_no_candidates(self):
        """Test that an empty candidate list yields None."""
        assert select_best_quadrilateral([], FRAME, FRAME) is None

    def test_override_does_not_mutate_config(self):
        """Test that min_area_fraction override leaves the config untouched."""
        config = ScoringConfig()
        select_best_quadrilateral([], FRAME, FRAME, min_area_fraction=0.5, config=config)
        assert config.min_area_fraction == 0.04
