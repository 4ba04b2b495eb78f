"""
Capture session stage machine definitions.
"""

from enum import Enum


class ScanStage(Enum):
    """Stages of a capture session, in their strict forward order."""

    IDLE = "idle"
    CROPPING = "cropping"
    TRANSFORMING = "transforming"
    ANALYZING = "analyzing"
    COMPLETE = "complete"


# Forward transitions. Discard (any -> IDLE) is always allowed and is not listed.
ALLOWED_TRANSITIONS = {
    ScanStage.IDLE: {ScanStage.CROPPING},
    ScanStage.CROPPING: {ScanStage.TRANSFORMING},
    # Degenerate corners send the user back to fix them
    ScanStage.TRANSFORMING: {ScanStage.ANALYZING, ScanStage.CROPPING},
    ScanStage.ANALYZING: {ScanStage.COMPLETE},
    # User-requested extraction retry
    ScanStage.COMPLETE: {ScanStage.ANALYZING},
}


def is_allowed_transition(current: ScanStage, target: ScanStage) -> bool:
    if target is ScanStage.IDLE:
        return True
    return target in ALLOWED_TRANSITIONS[current]
