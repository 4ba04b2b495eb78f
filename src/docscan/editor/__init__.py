"""
Interactive corner editing in percentage-of-frame coordinates.
"""

from docscan.editor.corner_editor import (
    EDGE_NAMES,
    CornerEditor,
    DragTarget,
    PeekRegion,
    TargetKind,
)

__all__ = ["CornerEditor", "DragTarget", "TargetKind", "PeekRegion", "EDGE_NAMES"]
