"""Pose-derived geometry: region of interest, wrist center and forearm direction.

The club is held in the hands, so the wrists and elbows bound where the shaft
can appear in the frame. The ROI keeps edge detection and Hough voting cheap
and cuts down on background lines.
"""

import math
from typing import Optional

from loguru import logger

from .config import DetectorSettings
from .schemas import Landmark, Point, PoseLandmarks, ROI


def estimate_roi(
    pose: Optional[PoseLandmarks],
    width: int,
    height: int,
    settings: DetectorSettings,
    last_head: Optional[Point] = None,
) -> Optional[ROI]:
    """Estimate the search region for the club shaft.

    Args:
        pose: Arm landmarks (normalized), or None if pose detection failed
        width: Frame width in pixels
        height: Frame height in pixels
        settings: Detector settings
        last_head: Last good club-head position (normalized), if any

    Returns:
        ROI clamped to the frame, or None if neither enough landmarks nor a
        previous club head are available
    """
    frame_scale = max(width, height)
    roi = None

    points = []
    if pose is not None:
        points = [
            lm.to_pixels(width, height)
            for lm in pose.arm_points()
            if lm is not None and lm.is_visible(settings.landmark_min_visibility)
        ]

    if len(points) >= settings.min_roi_landmarks:
        # Generous margin: the club extends well beyond the hands
        margin = frame_scale * settings.roi_margin_ratio
        roi = ROI.from_bounds(
            min(p.x for p in points) - margin,
            min(p.y for p in points) - margin,
            max(p.x for p in points) + margin,
            max(p.y for p in points) + margin,
            width,
            height,
        )

    if last_head is not None:
        # Keep the last club head in view so tracking stays stable frame to frame
        size = frame_scale * settings.roi_last_head_window_ratio
        hx = last_head.x * width
        hy = last_head.y * height
        window = ROI.from_bounds(
            hx - size / 2, hy - size / 2, hx + size / 2, hy + size / 2, width, height
        )
        roi = roi.union(window, width, height) if roi is not None else window

    if roi is None:
        logger.debug(f"No ROI: only {len(points)} usable arm landmarks and no prior club head")
    return roi


def wrist_center(
    pose: Optional[PoseLandmarks], width: int, height: int, settings: DetectorSettings
) -> Optional[Point]:
    """Mean pixel position of the visible wrists."""
    if pose is None:
        return None
    wrists = [
        lm.to_pixels(width, height)
        for lm in (pose.left_wrist, pose.right_wrist)
        if lm is not None and lm.is_visible(settings.landmark_min_visibility)
    ]
    if not wrists:
        return None
    return Point(sum(p.x for p in wrists) / len(wrists), sum(p.y for p in wrists) / len(wrists))


def _arm_usable(wrist: Optional[Landmark], elbow: Optional[Landmark], threshold: float) -> bool:
    return (
        wrist is not None
        and elbow is not None
        and wrist.is_visible(threshold)
        and elbow.is_visible(threshold)
    )


def forearm_angle(
    pose: Optional[PoseLandmarks], width: int, height: int, settings: DetectorSettings
) -> Optional[float]:
    """Elbow-to-wrist direction in degrees (pixel space) of the best visible arm.

    When both arms are usable the one with higher combined visibility wins;
    ties go to the left (lead) arm.
    """
    if pose is None:
        return None

    threshold = settings.forearm_min_visibility
    arms = []
    if _arm_usable(pose.left_wrist, pose.left_elbow, threshold):
        arms.append((pose.left_wrist, pose.left_elbow))
    if _arm_usable(pose.right_wrist, pose.right_elbow, threshold):
        arms.append((pose.right_wrist, pose.right_elbow))
    if not arms:
        return None

    wrist, elbow = max(arms, key=lambda arm: arm[0].visibility + arm[1].visibility)
    dx = (wrist.x - elbow.x) * width
    dy = (wrist.y - elbow.y) * height
    return math.degrees(math.atan2(dy, dx))
