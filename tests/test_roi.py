"""Tests for ROI estimation and pose geometry."""

import pytest

from clubtrack.roi import estimate_roi, forearm_angle, wrist_center
from clubtrack.schemas import Landmark, Point, PoseLandmarks, ROI

WIDTH, HEIGHT = 640, 480


class TestEstimateROI:
    """Tests for estimate_roi."""

    def test_bounding_box_with_margin(self, address_pose, settings):
        roi = estimate_roi(address_pose, WIDTH, HEIGHT, settings)

        # Landmarks span x 224-416, y 240-288; margin is 30% of 640 = 192
        assert roi == ROI(32, 48, 576, 432)

    def test_roi_stays_inside_frame(self, settings):
        pose = PoseLandmarks(
            left_wrist=Landmark(0.02, 0.97, 0.9),
            right_wrist=Landmark(0.98, 0.99, 0.9),
        )
        roi = estimate_roi(pose, WIDTH, HEIGHT, settings)

        assert roi.x >= 0 and roi.y >= 0
        assert roi.x2 <= WIDTH and roi.y2 <= HEIGHT
        assert roi.w > 0 and roi.h > 0

    def test_low_visibility_landmarks_are_ignored(self, settings):
        pose = PoseLandmarks(
            left_wrist=Landmark(0.4, 0.6, 0.9),
            right_wrist=Landmark(0.6, 0.6, 0.05),
            left_elbow=Landmark(0.35, 0.5, 0.1),
        )
        assert estimate_roi(pose, WIDTH, HEIGHT, settings) is None

    def test_no_pose_and_no_history(self, settings):
        assert estimate_roi(None, WIDTH, HEIGHT, settings) is None

    def test_last_head_window_is_merged(self, address_pose, settings):
        roi = estimate_roi(address_pose, WIDTH, HEIGHT, settings, last_head=Point(0.02, 0.02))

        # Window of 160px centered at (12.8, 9.6) pulls the ROI to the corner
        assert roi.x == 0 and roi.y == 0
        assert roi.x2 == 608 and roi.y2 == 480

    def test_last_head_window_alone_without_pose(self, settings):
        roi = estimate_roi(None, WIDTH, HEIGHT, settings, last_head=Point(0.5, 0.5))

        assert roi == ROI(240, 160, 160, 160)


class TestPoseGeometry:
    """Tests for wrist center and forearm direction."""

    def test_wrist_center(self, address_pose, settings):
        center = wrist_center(address_pose, WIDTH, HEIGHT, settings)
        assert center.x == pytest.approx(320)
        assert center.y == pytest.approx(288)

    def test_wrist_center_single_wrist(self, settings):
        pose = PoseLandmarks(left_wrist=Landmark(0.25, 0.5, 0.9))
        center = wrist_center(pose, WIDTH, HEIGHT, settings)
        assert center == Point(160, 240)

    def test_forearm_angle_prefers_left_on_tie(self, address_pose, settings):
        # Left forearm runs (32, 48) px from elbow to wrist
        assert forearm_angle(address_pose, WIDTH, HEIGHT, settings) == pytest.approx(56.31, abs=0.01)

    def test_forearm_angle_prefers_more_visible_arm(self, settings):
        pose = PoseLandmarks(
            left_wrist=Landmark(0.40, 0.60, 0.5),
            left_elbow=Landmark(0.35, 0.50, 0.5),
            right_wrist=Landmark(0.60, 0.60, 0.9),
            right_elbow=Landmark(0.65, 0.50, 0.9),
        )
        assert forearm_angle(pose, WIDTH, HEIGHT, settings) == pytest.approx(123.69, abs=0.01)

    def test_forearm_angle_needs_wrist_and_elbow(self, settings):
        pose = PoseLandmarks(
            left_wrist=Landmark(0.4, 0.6, 0.9),
            right_wrist=Landmark(0.6, 0.6, 0.9),
            left_elbow=Landmark(0.35, 0.5, 0.15),
        )
        assert forearm_angle(pose, WIDTH, HEIGHT, settings) is None
