"""
OpenCV implementation of the vision operations capability set.
"""

from typing import List, Tuple

import cv2
import numpy as np

from docscan.vision.operations import VisionOperations


INTERPOLATION_FLAGS = {
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "nearest": cv2.INTER_NEAREST,
    "area": cv2.INTER_AREA,
    "lanczos": cv2.INTER_LANCZOS4,
}


class OpenCVVisionOperations(VisionOperations):
    """
    VisionOperations backed by OpenCV (cv2).

    Colour input is assumed to be in OpenCV's BGR / BGRA channel order.

    Example:
        >>> ops = OpenCVVisionOperations()
        >>> gray = ops.to_grayscale(cv2.imread("passport.jpg"))
    """

    def to_grayscale(self, image: np.ndarray) -> np.ndarray:
        if image.ndim == 2:
            return image
        channels = image.shape[2]
        if channels == 1:
            return image[:, :, 0]
        if channels == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)

    def resize(self, image: np.ndarray, width: int, height: int) -> np.ndarray:
        # INTER_AREA avoids aliasing when shrinking
        return cv2.resize(image, (int(width), int(height)), interpolation=cv2.INTER_AREA)

    def blur(self, image: np.ndarray, kernel_size: int) -> np.ndarray:
        return cv2.GaussianBlur(image, (kernel_size, kernel_size), 0)

    def edge_detect(self, image: np.ndarray, low: float, high: float) -> np.ndarray:
        return cv2.Canny(image, low, high, apertureSize=3)

    def find_contours(self, edge_map: np.ndarray) -> List[np.ndarray]:
        contours, _ = cv2.findContours(
            edge_map, cv2.RETR_LIST, cv2.CHAIN_APPROX_SIMPLE
        )
        return list(contours)

    def contour_area(self, contour: np.ndarray) -> float:
        return float(cv2.contourArea(contour))

    def arc_length(self, contour: np.ndarray, closed: bool = True) -> float:
        return float(cv2.arcLength(contour, closed))

    def approx_polygon(self, contour: np.ndarray, epsilon: float) -> np.ndarray:
        return cv2.approxPolyDP(contour, epsilon, True)

    def is_convex(self, polygon: np.ndarray) -> bool:
        return bool(cv2.isContourConvex(polygon))

    def solve_perspective_transform(
        self, src: np.ndarray, dst: np.ndarray
    ) -> np.ndarray:
        return cv2.getPerspectiveTransform(
            np.asarray(src, dtype=np.float32), np.asarray(dst, dtype=np.float32)
        )

    def warp_perspective(
        self,
        image: np.ndarray,
        matrix: np.ndarray,
        size: Tuple[int, int],
        interpolation: str = "linear",
        border_value: int = 0,
    ) -> np.ndarray:
        flags = INTERPOLATION_FLAGS.get(interpolation)
        if flags is None:
            raise ValueError(
                f"Invalid interpolation: {interpolation}. "
                f"Must be one of {list(INTERPOLATION_FLAGS)}"
            )
        if image.ndim == 3:
            border = (border_value,) * image.shape[2]
        else:
            border = border_value
        return cv2.warpPerspective(
            image,
            matrix,
            (int(size[0]), int(size[1])),
            flags=flags,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=border,
        )
