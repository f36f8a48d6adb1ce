"""Scoring of candidate shaft lines against pose geometry and temporal history."""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from .config import DetectorSettings
from .schemas import Line, Point, ROI, angle_difference


@dataclass
class SelectionContext:
    """Everything the selector knows about the current frame besides the lines."""

    roi: ROI
    width: int
    height: int
    wrist_center: Optional[Point] = None  # Frame pixels
    forearm_angle: Optional[float] = None  # Degrees
    prior_angle: Optional[float] = None  # Angle chosen on the last edge detection
    prior_line: Optional[Line] = None  # Shaft line of the last good detection


def score_line(line: Line, context: SelectionContext, settings: DetectorSettings) -> float:
    """Weighted score of one candidate (frame coordinates). Each term is in [0, 1]."""
    frame_scale = max(context.width, context.height)

    # Longer is better, up to the ROI's smaller side
    score = min(1.0, line.length / min(context.roi.w, context.roi.h)) * settings.weight_length

    # The shaft passes through the hands
    if context.wrist_center is not None:
        max_dist = frame_scale * settings.wrist_proximity_ratio
        dist = line.distance_to_point(context.wrist_center)
        score += max(0.0, 1.0 - dist / max_dist) * settings.weight_wrist_proximity

    if context.forearm_angle is not None:
        diff = angle_difference(line.angle, context.forearm_angle)
        score += max(0.0, 1.0 - diff / settings.forearm_tolerance_deg) * settings.weight_forearm_alignment

    # Temporal consistency: the shaft does not jump between frames
    if context.prior_angle is not None:
        diff = angle_difference(line.angle, context.prior_angle)
        score += (
            max(0.0, 1.0 - diff / settings.temporal_angle_tolerance_deg)
            * settings.weight_temporal_angle
        )
    if context.prior_line is not None:
        max_dist = frame_scale * settings.temporal_position_ratio
        dist = line.midpoint.distance_to(context.prior_line.midpoint)
        score += max(0.0, 1.0 - dist / max_dist) * settings.weight_temporal_position

    return score


def select_line(
    candidates: list[Line],
    context: SelectionContext,
    settings: DetectorSettings,
) -> tuple[Optional[Line], float]:
    """Pick the best-scoring candidate.

    Returns:
        (line, score). line is None when there are no candidates or the best
        score does not exceed selection_min_score.
    """
    best_line = None
    best_score = -1.0
    for line in candidates:
        score = score_line(line, context, settings)
        if score > best_score:
            best_score = score
            best_line = line

    if best_line is None or best_score <= settings.selection_min_score:
        logger.debug(
            f"No shaft line selected from {len(candidates)} candidates "
            f"(best score {best_score:.2f})"
        )
        return None, best_score

    return best_line, best_score
