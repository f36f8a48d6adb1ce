"""Data models for club-head detection.

These are lightweight dataclasses for detection input and output.
The host application may convert results to its own API models via to_dict().
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Sequence


@dataclass(frozen=True)
class Point:
    """A 2D point, in pixels or normalized [0, 1] units depending on context."""

    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def clamped(self) -> "Point":
        """Clamp to the unit square."""
        return Point(min(1.0, max(0.0, self.x)), min(1.0, max(0.0, self.y)))


def fold_angle(angle_deg: float) -> float:
    """Fold an angle into [-90, 90), the range of an undirected line."""
    return (angle_deg + 90.0) % 180.0 - 90.0


def angle_difference(a_deg: float, b_deg: float) -> float:
    """Smallest difference between two undirected line angles, in [0, 90]."""
    diff = abs(a_deg - b_deg) % 180.0
    return min(diff, 180.0 - diff)


@dataclass(frozen=True)
class Line:
    """A pixel-space line segment.

    angle is the segment direction in degrees, folded into [-90, 90).
    Image coordinates: positive angles point down-right.
    """

    x1: float
    y1: float
    x2: float
    y2: float
    angle: float
    length: float

    @classmethod
    def from_points(cls, x1: float, y1: float, x2: float, y2: float) -> "Line":
        dx, dy = x2 - x1, y2 - y1
        return cls(
            x1=float(x1),
            y1=float(y1),
            x2=float(x2),
            y2=float(y2),
            angle=fold_angle(math.degrees(math.atan2(dy, dx))),
            length=math.hypot(dx, dy),
        )

    @property
    def midpoint(self) -> Point:
        return Point((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2)

    def translated(self, dx: float, dy: float) -> "Line":
        """Shift the segment, e.g. from ROI-local into frame coordinates."""
        return Line(
            self.x1 + dx, self.y1 + dy, self.x2 + dx, self.y2 + dy, self.angle, self.length
        )

    def distance_to_point(self, point: Point) -> float:
        """Distance from a point to the closest point of the segment."""
        dx = self.x2 - self.x1
        dy = self.y2 - self.y1
        len_sq = dx * dx + dy * dy
        if len_sq == 0:
            return math.hypot(point.x - self.x1, point.y - self.y1)
        t = ((point.x - self.x1) * dx + (point.y - self.y1) * dy) / len_sq
        t = max(0.0, min(1.0, t))
        return math.hypot(point.x - (self.x1 + t * dx), point.y - (self.y1 + t * dy))

    def to_dict(self) -> dict:
        return {
            "x1": self.x1,
            "y1": self.y1,
            "x2": self.x2,
            "y2": self.y2,
            "angle": self.angle,
            "length": self.length,
        }


@dataclass(frozen=True)
class ROI:
    """Integer pixel rectangle (x, y, width, height)."""

    x: int
    y: int
    w: int
    h: int

    @property
    def x2(self) -> int:
        return self.x + self.w

    @property
    def y2(self) -> int:
        return self.y + self.h

    @classmethod
    def from_bounds(
        cls, x1: float, y1: float, x2: float, y2: float, width: int, height: int
    ) -> "ROI":
        """Build a rectangle from float bounds, clamped to the frame.

        The result always has at least one pixel of width and height.
        """
        # Normalized landmarks times frame size land a hair off integers
        eps = 1e-6
        left = min(width - 1, max(0, math.floor(x1 + eps)))
        top = min(height - 1, max(0, math.floor(y1 + eps)))
        right = min(width, max(left + 1, math.ceil(x2 - eps)))
        bottom = min(height, max(top + 1, math.ceil(y2 - eps)))
        return cls(left, top, right - left, bottom - top)

    def union(self, other: "ROI", width: int, height: int) -> "ROI":
        return ROI.from_bounds(
            min(self.x, other.x),
            min(self.y, other.y),
            max(self.x2, other.x2),
            max(self.y2, other.y2),
            width,
            height,
        )

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


@dataclass(frozen=True)
class Landmark:
    """A normalized pose keypoint with visibility confidence in [0, 1]."""

    x: float
    y: float
    visibility: float = 1.0

    def is_visible(self, threshold: float) -> bool:
        return self.visibility > threshold

    def to_pixels(self, width: int, height: int) -> Point:
        return Point(self.x * width, self.y * height)


# Keypoint indices of the arm landmarks: (left_elbow, right_elbow, left_wrist, right_wrist)
POSE_LAYOUTS = {
    "mediapipe": (13, 14, 15, 16),
    "coco": (7, 8, 9, 10),
}


def _to_landmark(entry: Any) -> Optional[Landmark]:
    if entry is None:
        return None
    if isinstance(entry, Landmark):
        return entry
    if isinstance(entry, Mapping):
        return Landmark(
            float(entry["x"]), float(entry["y"]), float(entry.get("visibility", 1.0))
        )
    if hasattr(entry, "x") and hasattr(entry, "y"):
        return Landmark(
            float(entry.x), float(entry.y), float(getattr(entry, "visibility", 1.0))
        )
    values = list(entry)
    visibility = float(values[2]) if len(values) > 2 else 1.0
    return Landmark(float(values[0]), float(values[1]), visibility)


@dataclass(frozen=True)
class PoseLandmarks:
    """Arm landmarks consumed by the detector. Missing points are None."""

    left_wrist: Optional[Landmark] = None
    right_wrist: Optional[Landmark] = None
    left_elbow: Optional[Landmark] = None
    right_elbow: Optional[Landmark] = None

    @classmethod
    def from_keypoints(cls, keypoints: Sequence[Any], layout: str = "mediapipe") -> "PoseLandmarks":
        """Pick the arm landmarks out of a full pose keypoint list.

        Args:
            keypoints: Keypoints as Landmark objects, objects with x/y/visibility
                attributes, mappings, or (x, y[, visibility]) tuples
            layout: "mediapipe" (BlazePose 33 points) or "coco" (17 points)
        """
        if layout not in POSE_LAYOUTS:
            raise ValueError(f"Unknown pose layout: {layout}")
        indices = POSE_LAYOUTS[layout]
        points = [
            _to_landmark(keypoints[i]) if i < len(keypoints) else None for i in indices
        ]
        left_elbow, right_elbow, left_wrist, right_wrist = points
        return cls(
            left_wrist=left_wrist,
            right_wrist=right_wrist,
            left_elbow=left_elbow,
            right_elbow=right_elbow,
        )

    def arm_points(self) -> list[Optional[Landmark]]:
        return [self.left_wrist, self.right_wrist, self.left_elbow, self.right_elbow]

    def wrist_separation(self) -> float:
        """Normalized distance between the wrists, 0 if either is missing."""
        if self.left_wrist is None or self.right_wrist is None:
            return 0.0
        return math.hypot(
            self.left_wrist.x - self.right_wrist.x, self.left_wrist.y - self.right_wrist.y
        )


class DetectionMethod(str, Enum):
    """Which stage of the fallback chain produced a result."""

    EDGE_DETECTED = "edge_detected"
    OPTICAL_FLOW = "optical_flow"
    INTERPOLATED = "interpolated"
    POSE_FALLBACK = "pose_fallback"


@dataclass
class DetectionResult:
    """Club-head location for one frame."""

    club_head: Point  # Normalized to [0, 1] x [0, 1]
    confidence: float  # Detection confidence (0-1)
    method: DetectionMethod
    shaft_line: Optional[Line] = None  # Frame pixel coordinates
    debug: dict = field(default_factory=dict)

    def __post_init__(self):
        self.club_head = self.club_head.clamped()
        self.confidence = min(1.0, max(0.0, self.confidence))

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization.

        `debug` is not included: it holds per-frame diagnostics (ROI, candidate
        lines) meant for in-process inspection, not for result files.
        """
        return {
            "club_head": {"x": self.club_head.x, "y": self.club_head.y},
            "shaft_line": self.shaft_line.to_dict() if self.shaft_line else None,
            "confidence": self.confidence,
            "method": self.method.value,
        }
