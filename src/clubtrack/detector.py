"""Per-frame club-head detector.

Usage:
    detector = ClubHeadDetector()
    detector.init(width, height)
    for frame, pose in frames:
        result = detector.detect(frame, pose, pose.wrist_separation())
        x, y = result.club_head.x, result.club_head.y  # normalized

One detector owns the temporal state of one video stream. Use one instance
per stream (or serialize calls); call reset() between unrelated clips.
"""

from collections import Counter
from typing import Optional, Sequence

import numpy as np
from loguru import logger

from . import config
from .config import DetectorSettings
from .preprocess import to_grayscale
from .schemas import DetectionResult, PoseLandmarks
from .state import TemporalState
from .strategies import DetectionStrategy, FrameContext, default_strategies


class ClubHeadDetector:
    """Locates the club head in each frame, falling back through a strategy chain."""

    def __init__(
        self,
        settings: Optional[DetectorSettings] = None,
        strategies: Optional[Sequence[DetectionStrategy]] = None,
    ):
        """Initialize the detector.

        Args:
            settings: Detector settings; defaults to the package-wide settings.
                The detector keeps its own copy, so later configure() calls
                only affect detectors created afterwards.
            strategies: Ordered fallback chain; the last one must always
                succeed. Defaults to edge -> patch -> velocity -> pose.
        """
        self.settings = (settings or config.settings).model_copy()
        self.strategies = list(strategies) if strategies is not None else default_strategies()
        if not self.strategies:
            raise ValueError("At least one detection strategy is required")
        self.width = 0
        self.height = 0
        self.state = TemporalState(self.settings)

    @property
    def is_initialized(self) -> bool:
        return self.width > 0 and self.height > 0

    def init(self, width: int, height: int) -> None:
        """Set the frame size. Must be called before the first detect() and
        whenever the frame size changes. Clears all temporal state.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Frame size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.state.reset()
        logger.info(f"Club-head detector initialized for {self.width}x{self.height} frames")

    def reset(self) -> None:
        """Forget history and calibration, e.g. before starting a new clip."""
        self.state.reset()
        logger.info("Club-head detector state reset")

    def detect(
        self,
        frame: np.ndarray,
        pose: Optional[PoseLandmarks],
        wrist_separation: float = 0.0,
    ) -> DetectionResult:
        """Locate the club head in one frame.

        Args:
            frame: Image of the initialized size (grayscale, BGR or BGRA)
            pose: Arm landmarks for this frame, or None if pose detection failed
            wrist_separation: Normalized distance between the wrists

        Returns:
            DetectionResult with club_head normalized to the unit square.
            Always returns a result; see result.method and result.confidence.

        Raises:
            RuntimeError: If init() has not been called
            ValueError: If the frame is empty or not the initialized size
        """
        if not self.is_initialized:
            raise RuntimeError("ClubHeadDetector.init(width, height) must be called before detect()")
        if frame is None or frame.size == 0:
            raise ValueError("Frame is empty")
        if frame.shape[0] != self.height or frame.shape[1] != self.width:
            raise ValueError(
                f"Frame is {frame.shape[1]}x{frame.shape[0]}, "
                f"detector initialized for {self.width}x{self.height}"
            )

        ctx = FrameContext(
            gray=to_grayscale(frame),
            pose=pose,
            wrist_separation=wrist_separation,
            width=self.width,
            height=self.height,
            state=self.state,
            settings=self.settings,
        )

        result = None
        for strategy in self.strategies:
            result = strategy.attempt(ctx)
            if result is not None:
                break

        if result is None:
            raise RuntimeError("Fallback chain ended without a result; the last strategy must always succeed")

        self.state.record(result)
        self.state.prev_gray = ctx.gray
        self.state.frames_processed += 1

        logger.debug(
            f"Frame {self.state.frames_processed}: club head "
            f"({result.club_head.x:.3f}, {result.club_head.y:.3f}) "
            f"via {result.method.value}, confidence={result.confidence:.2f}"
        )
        return result

    @property
    def history(self) -> list[DetectionResult]:
        return list(self.state.history)

    @property
    def calibrated_shaft_length(self) -> Optional[float]:
        return self.state.calibration.length

    def get_stats(self) -> dict:
        """Summary of the detector's temporal state.

        method_counts and average_confidence cover every frame since the last
        init()/reset(), pose_fallback included. The history_* figures cover
        only the bounded tracking history, which never holds pose estimates.
        """
        state = self.state
        history = state.history
        counted = sum(state.method_counts.values())
        return {
            "initialized": self.is_initialized,
            "frames_processed": state.frames_processed,
            "method_counts": dict(state.method_counts),
            "average_confidence": state.confidence_sum / counted if counted else 0.0,
            "history_length": len(history),
            "history_method_counts": dict(Counter(r.method.value for r in history)),
            "history_average_confidence": (
                sum(r.confidence for r in history) / len(history) if history else 0.0
            ),
            "calibrated_shaft_length": state.calibration.length,
            "calibration_samples": state.calibration.samples,
            "calibration_converged": state.calibration.converged,
            "last_angle": state.last_angle,
        }
