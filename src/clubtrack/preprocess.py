"""Grayscale conversion, contrast normalization and bounds-checked pixel access."""

import cv2
import numpy as np

from .schemas import ROI


def to_grayscale(frame: np.ndarray) -> np.ndarray:
    """Convert a frame to float32 luminance.

    Args:
        frame: Grayscale (H, W), BGR (H, W, 3) or BGRA (H, W, 4) image

    Returns:
        Float32 array of shape (H, W)
    """
    if frame.ndim == 2:
        gray = frame
    elif frame.ndim == 3 and frame.shape[2] == 3:
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
    elif frame.ndim == 3 and frame.shape[2] == 4:
        gray = cv2.cvtColor(frame, cv2.COLOR_BGRA2GRAY)
    else:
        raise ValueError(f"Unsupported frame shape {frame.shape}")
    return gray.astype(np.float32)


def crop(gray: np.ndarray, roi: ROI) -> np.ndarray:
    """Cut the ROI out of a grayscale frame, clamping it to the frame first."""
    height, width = gray.shape[:2]
    x1 = min(max(roi.x, 0), width - 1)
    y1 = min(max(roi.y, 0), height - 1)
    x2 = min(max(roi.x2, x1 + 1), width)
    y2 = min(max(roi.y2, y1 + 1), height)
    return gray[y1:y2, x1:x2]


def normalize_contrast(
    gray: np.ndarray, gain: float = 1.2, scale: float = 32.0, std_floor: float = 1.0
) -> np.ndarray:
    """Normalize a region to mean 128 and a fixed spread per standard deviation.

    Makes the edge threshold behave the same on dark and bright footage.
    """
    if gray.size == 0:
        return gray.astype(np.float32)
    mean = float(gray.mean())
    std = max(float(gray.std()), std_floor)
    return ((gray - mean) / std * scale * gain + 128.0).astype(np.float32)


def get_patch(gray: np.ndarray, cx: int, cy: int, size: int) -> np.ndarray:
    """Square patch centered on (cx, cy).

    Samples outside the frame repeat the nearest edge pixel, so patches near
    the border keep their full size.
    """
    height, width = gray.shape[:2]
    half = size // 2
    ys = np.clip(np.arange(cy - half, cy - half + size), 0, height - 1)
    xs = np.clip(np.arange(cx - half, cx - half + size), 0, width - 1)
    return gray[np.ix_(ys, xs)]
