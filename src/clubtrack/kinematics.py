"""Swing kinematics from successive club-head detections.

Consumers of the detector treat confidence as first-class: low-trust
estimates (typically pose_fallback) are dropped before velocities are taken,
since a single guessed position produces a large, fake speed spike.
"""

import math
from collections import Counter
from dataclasses import dataclass
from typing import Optional

from .schemas import DetectionMethod, DetectionResult


@dataclass
class KinematicSample:
    """Club-head motion at one frame, in normalized units."""

    frame_index: int
    timestamp: float  # Seconds
    x: float
    y: float
    method: DetectionMethod
    confidence: float
    vx: float = 0.0  # Units per second
    vy: float = 0.0
    speed: float = 0.0
    ax: float = 0.0  # Units per second squared
    ay: float = 0.0
    path_angle: float = 0.0  # Direction of travel in degrees, 0 when stationary
    shaft_angle: Optional[float] = None  # From the shaft line, when one was detected


class ClubPathAnalyzer:
    """Collects detections of one swing and derives club-head motion."""

    def __init__(self, fps: float = 30.0, min_confidence: float = 0.45):
        """
        Args:
            fps: Video frame rate
            min_confidence: Results below this are ignored. The default keeps
                edge, optical-flow and interpolated results and drops pose
                estimates.
        """
        if fps <= 0:
            raise ValueError("fps must be positive")
        self.fps = fps
        self.min_confidence = min_confidence
        self._entries: list[tuple[int, DetectionResult]] = []

    def add(self, result: DetectionResult, frame_index: int) -> bool:
        """Add one frame's result. Returns False if it was below the confidence floor."""
        if result.confidence < self.min_confidence:
            return False
        self._entries.append((frame_index, result))
        return True

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def samples(self) -> list[KinematicSample]:
        """Per-frame positions with finite-difference velocity and acceleration."""
        entries = sorted(self._entries, key=lambda e: e[0])
        samples = []
        for frame_index, result in entries:
            samples.append(
                KinematicSample(
                    frame_index=frame_index,
                    timestamp=frame_index / self.fps,
                    x=result.club_head.x,
                    y=result.club_head.y,
                    method=result.method,
                    confidence=result.confidence,
                    shaft_angle=result.shaft_line.angle if result.shaft_line else None,
                )
            )

        for prev, cur in zip(samples, samples[1:]):
            dt = cur.timestamp - prev.timestamp
            if dt <= 0:
                continue
            cur.vx = (cur.x - prev.x) / dt
            cur.vy = (cur.y - prev.y) / dt
            cur.speed = math.hypot(cur.vx, cur.vy)
            if cur.speed > 0:
                cur.path_angle = math.degrees(math.atan2(cur.vy, cur.vx))

        for prev, cur in zip(samples[1:], samples[2:]):
            dt = cur.timestamp - prev.timestamp
            if dt <= 0:
                continue
            cur.ax = (cur.vx - prev.vx) / dt
            cur.ay = (cur.vy - prev.vy) / dt

        return samples

    def summary(self) -> dict:
        """Aggregate statistics for the collected swing."""
        samples = self.samples()
        if not samples:
            return {
                "frames": 0,
                "method_counts": {},
                "average_confidence": 0.0,
                "peak_speed": 0.0,
                "peak_speed_frame": None,
            }
        peak = max(samples, key=lambda s: s.speed)
        return {
            "frames": len(samples),
            "method_counts": dict(Counter(s.method.value for s in samples)),
            "average_confidence": sum(s.confidence for s in samples) / len(samples),
            "peak_speed": peak.speed,
            "peak_speed_frame": peak.frame_index if peak.speed > 0 else None,
        }


def validate_result(result: DetectionResult, min_confidence: float = 0.5) -> list[str]:
    """List the reasons a result should not be trusted for metrics. Empty if fine."""
    errors = []
    if result.confidence < min_confidence:
        errors.append(f"Low confidence ({result.confidence:.2f})")
    head = result.club_head
    if not (0.0 <= head.x <= 1.0 and 0.0 <= head.y <= 1.0):
        errors.append("Club head position out of bounds")
    if not isinstance(result.method, DetectionMethod):
        errors.append(f"Unknown detection method: {result.method}")
    if result.shaft_line is not None and result.shaft_line.length <= 0:
        errors.append("Shaft line has zero length")
    return errors
