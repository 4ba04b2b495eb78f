"""
Data types for the rectification stage.
"""

from dataclasses import dataclass

import numpy as np


@dataclass
class RectifiedImage:
    """
    Output of the Rectifier + Regularizer pair.

    Ownership passes to the caller once produced; the engine keeps no
    reference.

    Attributes:
        data: Rectified pixel buffer (height, width[, C]).
        width: Output width in pixels (after regularization).
        height: Output height in pixels (after regularization).
        raw_width: Measured width before regularization.
        raw_height: Measured height before regularization.
    """

    data: np.ndarray
    width: int
    height: int
    raw_width: float
    raw_height: float

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height
