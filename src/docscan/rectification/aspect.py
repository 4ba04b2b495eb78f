"""
Aspect-Ratio Regularizer

Oblique capture angles systematically compress one dimension of the
rectified document. Snapping near-standard ratios to the canonical ratio
of known physical documents removes that artifact without 3D pose
recovery. Ratios outside every band (e.g. long receipts) are kept as
measured.

Default bands (ratio = width / height, bounds inclusive, first match wins):

    0.60 - 0.82   portrait ID / passport   height = width / 0.704
    1.25 - 1.65   landscape ID             width  = height * 1.42
    0.85 - 1.15   square                   height = width

This runs on the computed dimensions *before* the warp allocates its
buffer, so no second resampling step is needed.
"""

import logging
from typing import Optional, Sequence, Tuple

from docscan.config_loader import AspectSnapBand, RectificationConfig

logger = logging.getLogger(__name__)


def default_snap_bands() -> Sequence[AspectSnapBand]:
    return RectificationConfig().aspect_snap_bands


def match_band(
    ratio: float, bands: Sequence[AspectSnapBand]
) -> Optional[AspectSnapBand]:
    """Return the first band containing ``ratio``, or None."""
    for band in bands:
        if band.min_ratio <= ratio <= band.max_ratio:
            return band
    return None


def regularize(
    dest_width: float,
    dest_height: float,
    bands: Optional[Sequence[AspectSnapBand]] = None,
) -> Tuple[float, float]:
    """
    Snap measured output dimensions to a canonical document ratio.

    Args:
        dest_width: Raw destination width in pixels.
        dest_height: Raw destination height in pixels.
        bands: Snap table. Defaults to the ID/passport/square table.

    Returns:
        Tuple (width, height), unchanged if no band matches.

    Example:
        >>> width, height = regularize(88, 130)
        >>> round(height, 3)
        125.0
        >>> regularize(50, 200)
        (50.0, 200.0)
    """
    dest_width = float(dest_width)
    dest_height = float(dest_height)
    if dest_height <= 0:
        return dest_width, dest_height

    bands = default_snap_bands() if bands is None else bands
    ratio = dest_width / dest_height
    band = match_band(ratio, bands)

    if band is None:
        logger.debug(f"Aspect ratio {ratio:.3f} outside all snap bands, unchanged")
        return dest_width, dest_height

    if band.adjust == "height":
        width, height = dest_width, dest_width / band.target_ratio
    else:
        width, height = dest_height * band.target_ratio, dest_height

    logger.debug(
        f"Aspect ratio {ratio:.3f} snapped to {band.target_ratio} "
        f"[{band.min_ratio}, {band.max_ratio}]: "
        f"{dest_width:.1f}x{dest_height:.1f} -> {width:.1f}x{height:.1f}"
    )
    return width, height
