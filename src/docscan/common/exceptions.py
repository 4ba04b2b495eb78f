"""
Exception taxonomy for the docscan engine.

Only the rectifier's degenerate-geometry case and the extraction
collaborator's failure are surfaced to the session layer. Detection
errors are recovered locally by the caller (default inset quad).
"""


class DocScanError(Exception):
    """Base class for all docscan errors."""


class InvalidImageError(DocScanError, ValueError):
    """Raised for malformed, empty or zero-dimension image input."""


class DegenerateQuadrilateralError(DocScanError, ValueError):
    """
    Raised when corner points cannot be rectified.

    Covers collinear or coincident points, self-intersecting windings and
    non-finite or non-positive destination dimensions.
    """


class InvalidStageTransitionError(DocScanError, RuntimeError):
    """Raised when an operation is not allowed in the current session stage."""


class ExtractionError(DocScanError, RuntimeError):
    """Raised when the field-extraction collaborator fails or returns no data."""
