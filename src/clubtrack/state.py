"""Per-detector temporal state."""

from collections import Counter, deque
from typing import Deque, Optional

import numpy as np

from .config import DetectorSettings
from .extrapolation import ShaftCalibration
from .schemas import DetectionMethod, DetectionResult


class TemporalState:
    """Everything a detector remembers between frames.

    Owned by exactly one ClubHeadDetector; never shared between video streams.
    """

    def __init__(self, settings: DetectorSettings):
        self.history: Deque[DetectionResult] = deque(maxlen=settings.history_size)
        self.calibration = ShaftCalibration(
            max_samples=settings.calibration_frames,
            old_weight=settings.calibration_old_weight,
        )
        self.last_good: Optional[DetectionResult] = None
        self.last_angle: Optional[float] = None
        self.prev_gray: Optional[np.ndarray] = None
        self.frames_processed = 0
        # Totals over every frame since the last reset, pose estimates included
        self.method_counts: Counter = Counter()
        self.confidence_sum = 0.0

    def record(self, result: DetectionResult) -> None:
        """Update state with the result chosen for the current frame.

        Every result is counted. Pose-geometry estimates are too coarse to
        track from, so they are not kept as history.
        """
        self.method_counts[result.method.value] += 1
        self.confidence_sum += result.confidence

        if result.method == DetectionMethod.POSE_FALLBACK:
            return

        self.last_good = result
        self.history.append(result)

        if result.method == DetectionMethod.EDGE_DETECTED and result.shaft_line is not None:
            self.last_angle = result.shaft_line.angle
            self.calibration.update(result.shaft_line.length)

    def reset(self) -> None:
        self.history.clear()
        self.calibration.reset()
        self.last_good = None
        self.last_angle = None
        self.prev_gray = None
        self.frames_processed = 0
        self.method_counts.clear()
        self.confidence_sum = 0.0
