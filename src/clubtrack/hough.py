"""Hough-style line voting over a binary edge mask.

Each edge pixel votes for every (angle, distance) line passing through it.
The angle axis is the line normal in one-degree bins over [-90, 90); the
distance axis covers the region diagonal in one-pixel bins. An optional
angle constraint restricts voting to a band of line directions, which both
rejects background lines and cuts the voting cost.
"""

import math
from typing import Optional

import cv2
import numpy as np
from loguru import logger

from .config import DetectorSettings
from .schemas import Line, angle_difference


def vote_threshold(width: int, height: int, settings: DetectorSettings) -> int:
    """Minimum votes for a peak: scales with the region size."""
    return max(settings.hough_min_votes, int(min(width, height) * settings.hough_votes_ratio))


def _normal_angles(settings: DetectorSettings) -> np.ndarray:
    bins = settings.hough_angle_bins
    return np.linspace(-90.0, 90.0, bins, endpoint=False)


def _allowed_bins(normals: np.ndarray, angle_center: Optional[float], band: float) -> np.ndarray:
    if angle_center is None:
        return np.arange(len(normals))
    # A line with normal angle theta runs in direction theta + 90
    allowed = [
        i for i, theta in enumerate(normals) if angle_difference(theta + 90.0, angle_center) <= band
    ]
    return np.asarray(allowed, dtype=np.intp)


def accumulate(
    edges: np.ndarray,
    angle_center: Optional[float],
    settings: DetectorSettings,
) -> tuple[np.ndarray, np.ndarray, int]:
    """Build the vote accumulator.

    Returns:
        (accumulator of shape (angle_bins, distance_bins), normal angles in
        degrees, distance offset so that distance = bin - offset)
    """
    h, w = edges.shape
    max_rho = int(math.ceil(math.hypot(w, h)))
    rho_bins = 2 * max_rho + 1
    normals = _normal_angles(settings)
    accumulator = np.zeros((len(normals), rho_bins), dtype=np.int32)

    ys, xs = np.nonzero(edges)
    bins = _allowed_bins(normals, angle_center, settings.hough_angle_band_deg)
    if len(xs) == 0 or len(bins) == 0:
        return accumulator, normals, max_rho

    thetas = np.radians(normals[bins])
    rho = xs[:, None] * np.cos(thetas)[None, :] + ys[:, None] * np.sin(thetas)[None, :]
    rho_idx = np.floor(rho + max_rho).astype(np.int64)

    flat = (bins[None, :] * rho_bins + rho_idx).ravel()
    votes = np.bincount(flat, minlength=accumulator.size)
    accumulator += votes.reshape(accumulator.shape).astype(np.int32)
    return accumulator, normals, max_rho


def find_peaks(accumulator: np.ndarray, threshold: int, max_peaks: int) -> list[tuple[int, int]]:
    """Local maxima at or above threshold, in scan order (angle, then distance)."""
    if accumulator.size == 0 or accumulator.max() < threshold:
        return []
    acc = accumulator.astype(np.float32)
    neighborhood_max = cv2.dilate(acc, np.ones((3, 3), np.uint8))
    peaks = np.argwhere((acc >= threshold) & (acc >= neighborhood_max))
    return [(int(t), int(r)) for t, r in peaks[:max_peaks]]


def _segment_from_peak(
    xs: np.ndarray,
    ys: np.ndarray,
    theta_deg: float,
    rho: float,
    w: int,
    h: int,
    settings: DetectorSettings,
) -> Optional[Line]:
    """Turn a (theta, rho) peak into the segment its edge pixels support."""
    theta = math.radians(theta_deg)
    cos_t, sin_t = math.cos(theta), math.sin(theta)

    residual = np.abs(xs * cos_t + ys * sin_t - (rho + 0.5))
    support = residual <= settings.hough_support_distance_px
    if np.count_nonzero(support) < 2:
        return None

    # Position of each supporting pixel along the line direction
    along = np.sort(-xs[support] * sin_t + ys[support] * cos_t)

    # Longest well-populated run: split wherever the gap is too large
    splits = np.nonzero(np.diff(along) > settings.hough_max_gap_px)[0] + 1
    runs = np.split(along, splits)
    run = max(runs, key=len)
    if len(run) < 2:
        return None

    base_x, base_y = (rho + 0.5) * cos_t, (rho + 0.5) * sin_t
    start, end = float(run[0]), float(run[-1])
    x1 = min(max(base_x - start * sin_t, 0.0), w - 1.0)
    y1 = min(max(base_y + start * cos_t, 0.0), h - 1.0)
    x2 = min(max(base_x - end * sin_t, 0.0), w - 1.0)
    y2 = min(max(base_y + end * cos_t, 0.0), h - 1.0)

    line = Line.from_points(x1, y1, x2, y2)
    if line.length == 0:
        return None
    return line


def extract_lines(
    edges: np.ndarray,
    settings: DetectorSettings,
    angle_center: Optional[float] = None,
) -> list[Line]:
    """Find candidate shaft lines in an edge mask.

    Args:
        edges: Boolean edge mask of the ROI
        settings: Detector settings
        angle_center: Expected line direction in degrees; voting is limited to
            directions within the configured band around it

    Returns:
        Up to hough_max_candidates segments in ROI-local pixel coordinates,
        in accumulator scan order. Empty if no peak clears the vote threshold.
    """
    if edges.ndim != 2 or edges.size == 0 or not edges.any():
        return []

    h, w = edges.shape
    accumulator, normals, max_rho = accumulate(edges, angle_center, settings)
    threshold = vote_threshold(w, h, settings)
    peaks = find_peaks(accumulator, threshold, settings.hough_max_candidates)

    ys, xs = np.nonzero(edges)
    xs = xs.astype(np.float64)
    ys = ys.astype(np.float64)

    lines = []
    for theta_idx, rho_idx in peaks:
        line = _segment_from_peak(
            xs, ys, float(normals[theta_idx]), float(rho_idx - max_rho), w, h, settings
        )
        if line is not None:
            lines.append(line)

    logger.debug(
        f"Hough: {len(peaks)} peaks >= {threshold} votes, {len(lines)} segments"
        + (f", constrained to {angle_center:.1f}deg" if angle_center is not None else "")
    )
    return lines
