"""Pytest configuration and fixtures for clubtrack tests."""

import math
import sys
from pathlib import Path

import cv2
import numpy as np
import pytest

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from clubtrack.config import DetectorSettings
from clubtrack.schemas import Landmark, PoseLandmarks

FRAME_WIDTH = 640
FRAME_HEIGHT = 480


def draw_shaft(
    frame: np.ndarray,
    start: tuple[float, float],
    angle_deg: float,
    length: float,
    thickness: int = 5,
) -> np.ndarray:
    """Draw a bright straight bar from start along angle_deg (image coordinates)."""
    end = (
        int(round(start[0] + length * math.cos(math.radians(angle_deg)))),
        int(round(start[1] + length * math.sin(math.radians(angle_deg)))),
    )
    color = 255 if frame.ndim == 2 else (255, 255, 255)
    cv2.line(frame, (int(start[0]), int(start[1])), end, color, thickness)
    return frame


@pytest.fixture
def settings() -> DetectorSettings:
    """Fresh default settings, independent of environment overrides."""
    return DetectorSettings()


@pytest.fixture
def address_pose() -> PoseLandmarks:
    """Both arms clearly visible, hands together in front of the body."""
    return PoseLandmarks(
        left_wrist=Landmark(0.40, 0.60, 0.9),
        right_wrist=Landmark(0.60, 0.60, 0.9),
        left_elbow=Landmark(0.35, 0.50, 0.9),
        right_elbow=Landmark(0.65, 0.50, 0.9),
    )


@pytest.fixture
def blank_frame() -> np.ndarray:
    return np.zeros((FRAME_HEIGHT, FRAME_WIDTH, 3), dtype=np.uint8)


@pytest.fixture
def shaft_frame() -> np.ndarray:
    """A single bright bar at 50 degrees starting at the address pose's wrist center."""
    frame = np.zeros((FRAME_HEIGHT, FRAME_WIDTH, 3), dtype=np.uint8)
    return draw_shaft(frame, (320, 288), 50.0, 300)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
