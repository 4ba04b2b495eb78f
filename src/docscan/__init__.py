"""
docscan: document quadrilateral detection and perspective rectification.

Sub-packages:
    detection      Edge map -> contours -> scoring -> corner normalization
    editor         Interactive corner / edge dragging with magnifier peek
    rectification  Homography warp with aspect-ratio regularization
    tracking       Live preview detection loop with backpressure
    extraction     Structured field extraction from a rectified image
    session        Capture stage machine tying the above together
"""

from docscan.common import (
    DegenerateQuadrilateralError,
    DocScanError,
    ExtractionError,
    InvalidImageError,
    InvalidStageTransitionError,
    Point2D,
    Quadrilateral,
)
from docscan.config_loader import ScanConfig, get_default_config, load_config
from docscan.detection import QuadrilateralDetector, detect_document
from docscan.editor import CornerEditor
from docscan.extraction import DocumentRecord, FieldExtractor, GeminiFieldExtractor
from docscan.rectification import PerspectiveRectifier, RectifiedImage, rectify
from docscan.session import CaptureSession, ScanStage
from docscan.tracking import LiveTracker

__version__ = "0.1.0"

__all__ = [
    "Point2D",
    "Quadrilateral",
    "ScanConfig",
    "load_config",
    "get_default_config",
    "QuadrilateralDetector",
    "detect_document",
    "CornerEditor",
    "PerspectiveRectifier",
    "RectifiedImage",
    "rectify",
    "LiveTracker",
    "FieldExtractor",
    "GeminiFieldExtractor",
    "DocumentRecord",
    "CaptureSession",
    "ScanStage",
    "DocScanError",
    "InvalidImageError",
    "DegenerateQuadrilateralError",
    "InvalidStageTransitionError",
    "ExtractionError",
]
