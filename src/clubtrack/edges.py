"""Gradient edge detection with adaptive threshold and non-maximum suppression.

A thin Canny-style detector: Sobel gradients, a threshold adapted to the
ROI's own gradient statistics, and thinning along the gradient direction.
There is no hysteresis step; the Hough stage tolerates broken edges.
"""

from typing import Tuple

import cv2
import numpy as np
from loguru import logger


def compute_gradients(gray: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """3x3 Sobel gradient magnitude and direction (radians).

    Border pixels have no full neighborhood and are left at zero.
    """
    src = gray.astype(np.float32)
    gx = cv2.Sobel(src, cv2.CV_32F, 1, 0, ksize=3)
    gy = cv2.Sobel(src, cv2.CV_32F, 0, 1, ksize=3)

    magnitude = np.sqrt(gx * gx + gy * gy)
    direction = np.arctan2(gy, gx)

    magnitude[0, :] = 0
    magnitude[-1, :] = 0
    magnitude[:, 0] = 0
    magnitude[:, -1] = 0
    return magnitude, direction


def adaptive_threshold(
    magnitude: np.ndarray,
    std_factor: float = 0.5,
    min_threshold: float = 20.0,
    max_threshold: float = 120.0,
) -> float:
    """mean + std_factor * std over nonzero magnitudes, clamped."""
    nonzero = magnitude[magnitude > 0]
    if nonzero.size == 0:
        return max_threshold
    threshold = float(nonzero.mean() + std_factor * nonzero.std())
    return min(max_threshold, max(min_threshold, threshold))


def non_max_suppression(
    magnitude: np.ndarray, direction: np.ndarray, threshold: float
) -> np.ndarray:
    """Keep pixels above threshold that are maximal along the gradient.

    The gradient direction is quantized into four bins (0, 45, 90, 135
    degrees) and each pixel is compared with its two neighbors in that bin.
    """
    padded = np.pad(magnitude, 1, mode="constant")
    h, w = magnitude.shape

    def shifted(dy: int, dx: int) -> np.ndarray:
        return padded[1 + dy:1 + dy + h, 1 + dx:1 + dx + w]

    angle = np.degrees(direction) % 180.0
    horizontal = (angle < 22.5) | (angle >= 157.5)
    diagonal_down = (angle >= 22.5) & (angle < 67.5)
    vertical = (angle >= 67.5) & (angle < 112.5)
    diagonal_up = (angle >= 112.5) & (angle < 157.5)

    # y grows downward: a 45 degree gradient points down-right
    n1 = np.select(
        [horizontal, diagonal_down, vertical, diagonal_up],
        [shifted(0, -1), shifted(-1, -1), shifted(-1, 0), shifted(-1, 1)],
    )
    n2 = np.select(
        [horizontal, diagonal_down, vertical, diagonal_up],
        [shifted(0, 1), shifted(1, 1), shifted(1, 0), shifted(1, -1)],
    )

    return (magnitude >= threshold) & (magnitude > 0) & (magnitude >= n1) & (magnitude >= n2)


def detect_edges(
    gray: np.ndarray,
    std_factor: float = 0.5,
    min_threshold: float = 20.0,
    max_threshold: float = 120.0,
) -> np.ndarray:
    """Binary edge mask for a grayscale (contrast-normalized) region.

    Args:
        gray: 2D grayscale region
        std_factor: Standard deviations above the mean for the threshold
        min_threshold: Lower clamp for the adaptive threshold
        max_threshold: Upper clamp for the adaptive threshold

    Returns:
        Boolean mask with the same shape as the input. Regions smaller than
        3x3 or without gradients give an all-False mask.
    """
    if gray.ndim != 2 or gray.shape[0] < 3 or gray.shape[1] < 3:
        return np.zeros(gray.shape[:2], dtype=bool)

    magnitude, direction = compute_gradients(gray)
    threshold = adaptive_threshold(magnitude, std_factor, min_threshold, max_threshold)
    edges = non_max_suppression(magnitude, direction, threshold)

    logger.debug(
        f"Edge detection: {int(edges.sum())} edge pixels in {gray.shape[1]}x{gray.shape[0]} "
        f"region, threshold={threshold:.1f}"
    )
    return edges
