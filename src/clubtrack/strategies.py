"""Club-head detection strategies, tried in order until one succeeds.

1. Edge line  - Hough shaft line through the hands, extrapolated to the head
2. Patch      - normalized cross-correlation tracking of the last club head
3. Velocity   - constant-velocity extrapolation from the last two positions
4. Pose       - forearm direction projected past the wrist (always succeeds)

Each strategy returns a DetectionResult or None; none of them raise for
missing landmarks, empty edge maps or poor matches.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import numpy as np
from loguru import logger

from .config import DetectorSettings
from .edges import detect_edges
from .extrapolation import extrapolate_club_head
from .hough import extract_lines
from .preprocess import crop, get_patch, normalize_contrast
from .roi import estimate_roi, forearm_angle, wrist_center
from .schemas import DetectionMethod, DetectionResult, Point, PoseLandmarks
from .selection import SelectionContext, select_line
from .state import TemporalState


@dataclass
class FrameContext:
    """Inputs for one frame, shared by all strategies."""

    gray: np.ndarray  # Full-frame float32 luminance
    pose: Optional[PoseLandmarks]
    wrist_separation: float
    width: int
    height: int
    state: TemporalState
    settings: DetectorSettings


class DetectionStrategy(ABC):
    """One stage of the fallback chain."""

    method: DetectionMethod

    @abstractmethod
    def attempt(self, ctx: FrameContext) -> Optional[DetectionResult]:
        """Return a result, or None to hand over to the next strategy."""


class EdgeLineStrategy(DetectionStrategy):
    """Find the shaft as a straight edge near the hands."""

    method = DetectionMethod.EDGE_DETECTED

    def attempt(self, ctx: FrameContext) -> Optional[DetectionResult]:
        settings = ctx.settings
        state = ctx.state
        last_head = state.last_good.club_head if state.last_good else None

        roi = estimate_roi(ctx.pose, ctx.width, ctx.height, settings, last_head)
        if roi is None:
            return None

        region = normalize_contrast(
            crop(ctx.gray, roi),
            gain=settings.contrast_gain,
            scale=settings.contrast_scale,
            std_floor=settings.contrast_std_floor,
        )
        edges = detect_edges(
            region,
            std_factor=settings.edge_std_factor,
            min_threshold=settings.edge_threshold_min,
            max_threshold=settings.edge_threshold_max,
        )

        wrists = wrist_center(ctx.pose, ctx.width, ctx.height, settings)
        forearm = forearm_angle(ctx.pose, ctx.width, ctx.height, settings)
        # Prefer the last shaft angle; the forearm is only a rough guide
        angle_center = state.last_angle if state.last_angle is not None else forearm

        candidates = [
            line.translated(roi.x, roi.y)
            for line in extract_lines(edges, settings, angle_center)
        ]
        if not candidates:
            return None

        selection = SelectionContext(
            roi=roi,
            width=ctx.width,
            height=ctx.height,
            wrist_center=wrists,
            forearm_angle=forearm,
            prior_angle=state.last_angle,
            prior_line=state.last_good.shaft_line if state.last_good else None,
        )
        best, score = select_line(candidates, selection, settings)
        if best is None:
            return None

        head = extrapolate_club_head(
            best,
            ctx.wrist_separation,
            wrists,
            ctx.width,
            ctx.height,
            settings,
            state.calibration,
        )

        return DetectionResult(
            club_head=Point(head.x / ctx.width, head.y / ctx.height),
            confidence=settings.edge_confidence,
            method=self.method,
            shaft_line=best,
            debug={
                "roi": roi,
                "candidate_lines": candidates[: settings.debug_candidate_count],
                "chosen_angle_deg": best.angle,
                "score": score,
            },
        )


class PatchCorrelationStrategy(DetectionStrategy):
    """Track the last club head by patch correlation against the previous frame."""

    method = DetectionMethod.OPTICAL_FLOW

    def attempt(self, ctx: FrameContext) -> Optional[DetectionResult]:
        state = ctx.state
        settings = ctx.settings
        if state.last_good is None or state.prev_gray is None:
            return None
        if state.prev_gray.shape != ctx.gray.shape:
            return None

        cx = int(math.floor(state.last_good.club_head.x * ctx.width))
        cy = int(math.floor(state.last_good.club_head.y * ctx.height))
        size = settings.patch_size
        radius = settings.patch_search_radius
        stride = settings.patch_search_stride

        template = get_patch(state.prev_gray, cx, cy, size).astype(np.float64)
        t_std = template.std()
        template = (template - template.mean()) / (t_std if t_std > 0 else 1.0)

        # Every candidate patch within +/- radius, sampled every `stride` pixels
        search = get_patch(ctx.gray, cx, cy, 2 * radius + size).astype(np.float64)
        windows = np.lib.stride_tricks.sliding_window_view(search, (size, size))
        windows = windows[::stride, ::stride]

        means = windows.mean(axis=(2, 3))
        stds = windows.std(axis=(2, 3))
        flat = stds < settings.patch_min_std
        safe_stds = np.where(flat, 1.0, stds)
        normalized = (windows - means[..., None, None]) / safe_stds[..., None, None]
        scores = (normalized * template).mean(axis=(2, 3))
        scores[flat] = -np.inf

        iy, ix = np.unravel_index(int(np.argmax(scores)), scores.shape)
        best_score = float(scores[iy, ix])
        if best_score < settings.patch_min_score:
            logger.debug(f"Patch tracking failed: best correlation {best_score:.2f}")
            return None

        x = cx - radius + ix * stride
        y = cy - radius + iy * stride
        return DetectionResult(
            club_head=Point(x / ctx.width, y / ctx.height),
            confidence=settings.optical_flow_confidence,
            method=self.method,
            debug={"correlation": best_score},
        )


class VelocityInterpolationStrategy(DetectionStrategy):
    """Continue the last observed motion for one frame."""

    method = DetectionMethod.INTERPOLATED

    def attempt(self, ctx: FrameContext) -> Optional[DetectionResult]:
        history = ctx.state.history
        if len(history) < 2:
            return None

        last = history[-1].club_head
        before = history[-2].club_head
        step = ctx.settings.interpolation_max_step
        vx = min(step, max(-step, last.x - before.x))
        vy = min(step, max(-step, last.y - before.y))

        return DetectionResult(
            club_head=Point(last.x + vx, last.y + vy),
            confidence=ctx.settings.interpolated_confidence,
            method=self.method,
            debug={"velocity": (vx, vy)},
        )


class PoseGeometryStrategy(DetectionStrategy):
    """Extend the forearm past the wrist. Terminal stage: always returns a result."""

    method = DetectionMethod.POSE_FALLBACK

    def attempt(self, ctx: FrameContext) -> Optional[DetectionResult]:
        settings = ctx.settings
        pose = ctx.pose
        threshold = settings.forearm_min_visibility

        arms = []
        if pose is not None:
            arms = [(pose.left_wrist, pose.left_elbow), (pose.right_wrist, pose.right_elbow)]

        for wrist, elbow in arms:
            if wrist is None or elbow is None:
                continue
            if not (wrist.is_visible(threshold) and elbow.is_visible(threshold)):
                continue
            dx = wrist.x - elbow.x
            dy = wrist.y - elbow.y
            length = math.hypot(dx, dy) or 1.0
            extension = min(
                settings.pose_extension_max,
                max(
                    settings.pose_extension_min,
                    length * settings.pose_forearm_factor
                    + ctx.wrist_separation * settings.pose_wrist_factor,
                ),
            )
            return DetectionResult(
                club_head=Point(wrist.x + dx / length * extension, wrist.y + dy / length * extension),
                confidence=settings.pose_confidence,
                method=self.method,
            )

        x, y = settings.default_club_head
        return DetectionResult(
            club_head=Point(x, y),
            confidence=settings.default_confidence,
            method=self.method,
            debug={"default_position": True},
        )


def default_strategies() -> list[DetectionStrategy]:
    """The standard fallback chain, most to least trusted."""
    return [
        EdgeLineStrategy(),
        PatchCorrelationStrategy(),
        VelocityInterpolationStrategy(),
        PoseGeometryStrategy(),
    ]
