"""
Live preview tracking (background detection at a fixed cadence).
"""

from docscan.tracking.live_loop import FrameSource, LiveTracker, QuadListener

__all__ = ["LiveTracker", "FrameSource", "QuadListener"]
