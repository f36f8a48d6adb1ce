"""Club-head localization for golf swing video."""

from .config import DetectorSettings, configure, settings
from .detector import ClubHeadDetector
from .kinematics import ClubPathAnalyzer, KinematicSample, validate_result
from .schemas import (
    DetectionMethod,
    DetectionResult,
    Landmark,
    Line,
    Point,
    PoseLandmarks,
    ROI,
)
from .video import load_poses, track_video

__all__ = [
    "ClubHeadDetector",
    "ClubPathAnalyzer",
    "DetectionMethod",
    "DetectionResult",
    "DetectorSettings",
    "KinematicSample",
    "Landmark",
    "Line",
    "Point",
    "PoseLandmarks",
    "ROI",
    "configure",
    "load_poses",
    "settings",
    "track_video",
    "validate_result",
]
