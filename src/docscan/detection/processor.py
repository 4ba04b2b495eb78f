"""
Main processor for the detection pipeline.

Orchestrates Edge Map -> Contours -> Scoring -> Normalization for one
frame and returns the document quad in percentage-of-frame coordinates.
The pipeline is stateless per invocation and safe to run on a worker
thread.
"""

import logging
from pathlib import Path
from typing import Literal, Optional

import numpy as np

from docscan.common.exceptions import InvalidImageError
from docscan.common.types import Quadrilateral
from docscan.config_loader import ScanConfig, get_default_config, load_config
from docscan.detection.contours import extract_contours
from docscan.detection.edge_map import build_edge_map
from docscan.detection.scoring import select_best_quadrilateral
from docscan.vision import OpenCVVisionOperations, VisionOperations

logger = logging.getLogger(__name__)

DetectionMode = Literal["still", "live"]


class QuadrilateralDetector:
    """
    Document quadrilateral detector.

    Example:
        >>> detector = QuadrilateralDetector()
        >>> frame = cv2.imread("receipt.jpg")
        >>> quad = detector.detect(frame)  # percentage space or None
        >>> seed = detector.detect_or_default(frame)  # never None
    """

    def __init__(
        self,
        config: Optional[ScanConfig] = None,
        ops: Optional[VisionOperations] = None,
        config_path: Optional[Path] = None,
    ):
        """
        Initialize the detector.

        Args:
            config: Pre-loaded configuration object. If None, will load from file.
            ops: Vision operations backend. Defaults to OpenCV.
            config_path: Path to config file. If None, uses bundled defaults.
        """
        if config is not None:
            self.config = config
        else:
            self.config = load_config(config_path) if config_path else get_default_config()
        self.ops = ops or OpenCVVisionOperations()

    def detect(
        self, frame: np.ndarray, mode: DetectionMode = "still"
    ) -> Optional[Quadrilateral]:
        """
        Run one detection pass.

        Args:
            frame: Source frame (H, W) or (H, W, C).
            mode: "still" for captured/loaded images, "live" for the
                downsampled preview stream.

        Returns:
            Quad in percentage-of-frame coordinates, or None if no
            candidate survived filtering.

        Raises:
            InvalidImageError: If the frame is malformed.
            ValueError: If mode is unknown.
        """
        if mode == "still":
            edge_config = self.config.edge_map.still
        elif mode == "live":
            edge_config = self.config.edge_map.live
        else:
            raise ValueError(f"Unknown detection mode: {mode}. Must be 'still' or 'live'")

        edge_map = build_edge_map(frame, config=edge_config, ops=self.ops)
        candidates = extract_contours(edge_map, config=self.config.contours, ops=self.ops)
        quad = select_best_quadrilateral(
            candidates, edge_map.width, edge_map.height, config=self.config.scoring
        )

        if quad is None:
            logger.debug(f"[{mode}] no document quadrilateral found")
            return None

        quad_pct = quad.to_percent(edge_map.width, edge_map.height)
        logger.debug(f"[{mode}] detected quad {[p.to_tuple() for p in quad_pct.points]}")
        return quad_pct

    def default_quad(self) -> Quadrilateral:
        """Fallback full-frame inset quad (10%-90% box by default)."""
        return Quadrilateral.default_inset(self.config.editor.default_inset_pct)

    def detect_or_default(
        self, frame: np.ndarray, mode: DetectionMode = "still"
    ) -> Quadrilateral:
        """
        Detect a quad, substituting the default inset quad on failure.

        Both "nothing found" and malformed input fall back to the default
        box so the user can crop manually; neither is retried.
        """
        try:
            quad = self.detect(frame, mode)
        except InvalidImageError as e:
            logger.warning(f"Detection skipped on invalid image: {e}")
            return self.default_quad()

        if quad is None:
            logger.info("No quadrilateral found, using default inset quad")
            return self.default_quad()
        return quad


def detect_document(
    frame: np.ndarray,
    mode: DetectionMode = "still",
    config: Optional[ScanConfig] = None,
) -> Optional[Quadrilateral]:
    """
    Convenience function for one-shot detection.

    Example:
        >>> quad = detect_document(cv2.imread("passport.jpg"))
    """
    return QuadrilateralDetector(config=config).detect(frame, mode)
