"""
Capture session: the stage machine tying detection, editing,
rectification and extraction together.
"""

from docscan.session.capture_session import CaptureSession
from docscan.session.types import ALLOWED_TRANSITIONS, ScanStage, is_allowed_transition

__all__ = [
    "CaptureSession",
    "ScanStage",
    "ALLOWED_TRANSITIONS",
    "is_allowed_transition",
]
