"""Club-head extrapolation from a shaft line, and shaft-length calibration.

The detected shaft line rarely reaches the club head itself (motion blur,
the head leaving the ROI), so the head is projected from the grip end of the
line along its direction.
"""

import math
from typing import Optional

from loguru import logger

from .config import DetectorSettings
from .schemas import Line, Point


class ShaftCalibration:
    """Running estimate of the shaft's pixel length.

    An exponential moving average over the first `max_samples` edge-based
    detections of a clip; after that it is frozen.
    """

    def __init__(self, max_samples: int = 20, old_weight: float = 0.8):
        self.max_samples = max_samples
        self.old_weight = old_weight
        self.length: Optional[float] = None
        self.samples = 0

    @property
    def converged(self) -> bool:
        return self.length is not None and self.samples >= self.max_samples

    def update(self, length_px: float) -> None:
        """Fold one measured shaft length into the estimate."""
        if self.samples >= self.max_samples:
            return
        if self.length is None:
            self.length = length_px
        else:
            self.length = self.length * self.old_weight + length_px * (1.0 - self.old_weight)
        self.samples += 1
        if self.converged:
            logger.info(f"Shaft length calibration converged at {self.length:.1f}px")

    def reset(self) -> None:
        self.length = None
        self.samples = 0


def extension_length(
    wrist_separation: float,
    width: int,
    height: int,
    settings: DetectorSettings,
    calibration: Optional[ShaftCalibration] = None,
) -> float:
    """How far beyond the grip end the club head lies, in pixels."""
    frame_scale = max(width, height)
    if calibration is not None and calibration.converged:
        return min(
            frame_scale * settings.max_extension_ratio,
            calibration.length * settings.calibrated_extension_ratio,
        )
    return (
        frame_scale * settings.extension_base_ratio
        + wrist_separation * frame_scale * settings.extension_wrist_ratio
    )


def extrapolate_club_head(
    line: Line,
    wrist_separation: float,
    wrist_center: Optional[Point],
    width: int,
    height: int,
    settings: DetectorSettings,
    calibration: Optional[ShaftCalibration] = None,
) -> Point:
    """Project the club head from the grip end of a shaft line.

    Args:
        line: Shaft line in frame pixels
        wrist_separation: Normalized distance between the wrists
        wrist_center: Wrist center in frame pixels; the line end closest to it
            is the grip. Without it the first endpoint is used.
        width: Frame width in pixels
        height: Frame height in pixels
        settings: Detector settings
        calibration: Shaft calibration, used once converged

    Returns:
        Club head position in frame pixels (not clamped)
    """
    grip_x, grip_y, far_x, far_y = line.x1, line.y1, line.x2, line.y2
    if wrist_center is not None:
        d1 = math.hypot(line.x1 - wrist_center.x, line.y1 - wrist_center.y)
        d2 = math.hypot(line.x2 - wrist_center.x, line.y2 - wrist_center.y)
        if d2 < d1:
            grip_x, grip_y, far_x, far_y = line.x2, line.y2, line.x1, line.y1

    dir_x = far_x - grip_x
    dir_y = far_y - grip_y
    norm = math.hypot(dir_x, dir_y) or 1.0
    extension = extension_length(wrist_separation, width, height, settings, calibration)

    return Point(grip_x + dir_x / norm * extension, grip_y + dir_y / norm * extension)
