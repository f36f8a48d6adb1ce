"""Detector configuration with sensible defaults.

Every threshold used by the club-head pipeline lives here so it can be tuned
(and tested) independently of the pipeline code. Values can be overridden
from the environment with the ``CLUBTRACK_`` prefix, e.g.
``CLUBTRACK_SELECTION_MIN_SCORE=0.4``, or by the host application through
``configure()``.
"""

from pydantic_settings import BaseSettings


class DetectorSettings(BaseSettings):
    """Settings for the club-head detection pipeline."""

    # ROI estimation
    landmark_min_visibility: float = 0.1  # Landmarks at or below this are ignored
    min_roi_landmarks: int = 2
    roi_margin_ratio: float = 0.30  # Of the larger frame dimension
    roi_last_head_window_ratio: float = 0.25  # Square window around last club head

    # Preprocessing
    contrast_gain: float = 1.2
    contrast_scale: float = 32.0  # Output gray levels per standard deviation
    contrast_std_floor: float = 1.0  # Keeps flat regions from being amplified into noise

    # Edge detection
    edge_std_factor: float = 0.5  # threshold = mean + factor * std
    edge_threshold_min: float = 20.0
    edge_threshold_max: float = 120.0

    # Hough line extraction
    hough_angle_bins: int = 180
    hough_angle_band_deg: float = 35.0  # +/- band around the angle constraint
    hough_min_votes: int = 20
    hough_votes_ratio: float = 0.15  # Of min(roi width, roi height)
    hough_max_candidates: int = 20
    hough_support_distance_px: float = 1.5  # Edge pixels this close support a line
    hough_max_gap_px: float = 20.0  # Larger gaps split a line into segments

    # Line selection
    forearm_min_visibility: float = 0.2
    weight_length: float = 0.4
    weight_wrist_proximity: float = 0.4
    wrist_proximity_ratio: float = 0.30  # Of the larger frame dimension
    weight_forearm_alignment: float = 0.2
    forearm_tolerance_deg: float = 60.0
    weight_temporal_angle: float = 0.3
    temporal_angle_tolerance_deg: float = 40.0
    weight_temporal_position: float = 0.2
    temporal_position_ratio: float = 0.25  # Of the larger frame dimension
    selection_min_score: float = 0.3

    # Extrapolation and shaft-length calibration
    extension_base_ratio: float = 0.18  # Of the larger frame dimension
    extension_wrist_ratio: float = 0.35  # Times wrist separation times frame scale
    calibrated_extension_ratio: float = 0.90  # Of the calibrated shaft length
    max_extension_ratio: float = 0.45  # Of the larger frame dimension
    calibration_frames: int = 20
    calibration_old_weight: float = 0.8

    # Patch-correlation tracking
    patch_size: int = 15
    patch_search_radius: int = 20
    patch_search_stride: int = 2
    patch_min_std: float = 1e-3
    patch_min_score: float = 0.3

    # Velocity interpolation
    interpolation_max_step: float = 0.05  # Normalized units per frame, per axis

    # Pose-geometry fallback
    pose_extension_min: float = 0.10
    pose_extension_max: float = 0.28
    pose_forearm_factor: float = 0.9
    pose_wrist_factor: float = 0.6
    default_club_head: tuple[float, float] = (0.5, 0.7)

    # Confidence per detection method
    edge_confidence: float = 0.85
    optical_flow_confidence: float = 0.6
    interpolated_confidence: float = 0.5
    pose_confidence: float = 0.4
    default_confidence: float = 0.1

    # Temporal state
    history_size: int = 30
    debug_candidate_count: int = 8

    class Config:
        env_prefix = "CLUBTRACK_"
        env_file = ".env"
        extra = "ignore"


# Default settings instance - can be replaced by host application
settings = DetectorSettings()


def configure(**overrides) -> DetectorSettings:
    """Override default settings.

    Call this before constructing detectors that rely on the module default.

    Example:
        from clubtrack import configure
        configure(selection_min_score=0.4, history_size=60)
    """
    for name, value in overrides.items():
        if name not in DetectorSettings.model_fields:
            raise ValueError(f"Unknown detector setting: {name}")
        setattr(settings, name, value)
    return settings
