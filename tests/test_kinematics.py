"""Tests for swing kinematics."""

import pytest

from clubtrack.kinematics import ClubPathAnalyzer, validate_result
from clubtrack.schemas import DetectionMethod, DetectionResult, Line, Point


def _result(x, y, confidence=0.85, method=DetectionMethod.EDGE_DETECTED, line=None):
    return DetectionResult(club_head=Point(x, y), confidence=confidence, method=method, shaft_line=line)


class TestClubPathAnalyzer:
    """Tests for ClubPathAnalyzer."""

    def test_rejects_bad_fps(self):
        with pytest.raises(ValueError):
            ClubPathAnalyzer(fps=0)

    def test_drops_low_confidence(self):
        analyzer = ClubPathAnalyzer(fps=30)
        assert analyzer.add(_result(0.5, 0.5), 0)
        assert not analyzer.add(_result(0.5, 0.7, 0.4, DetectionMethod.POSE_FALLBACK), 1)
        assert len(analyzer) == 1

    def test_velocity_from_consecutive_frames(self):
        analyzer = ClubPathAnalyzer(fps=10)
        analyzer.add(_result(0.2, 0.5), 0)
        analyzer.add(_result(0.3, 0.5), 1)

        samples = analyzer.samples()

        assert samples[0].speed == 0.0
        assert samples[1].vx == pytest.approx(1.0)
        assert samples[1].vy == pytest.approx(0.0)
        assert samples[1].path_angle == pytest.approx(0.0)

    def test_gaps_use_real_time_step(self):
        analyzer = ClubPathAnalyzer(fps=10)
        analyzer.add(_result(0.2, 0.5), 0)
        analyzer.add(_result(0.4, 0.5), 4)
        assert analyzer.samples()[1].vx == pytest.approx(0.5)

    def test_samples_sorted_by_frame(self):
        analyzer = ClubPathAnalyzer(fps=10)
        analyzer.add(_result(0.4, 0.5), 2)
        analyzer.add(_result(0.2, 0.5), 0)
        assert [s.frame_index for s in analyzer.samples()] == [0, 2]

    def test_acceleration(self):
        analyzer = ClubPathAnalyzer(fps=10)
        for i, x in enumerate((0.1, 0.2, 0.4)):
            analyzer.add(_result(x, 0.5), i)
        # Velocity goes from 1.0 to 2.0 units/s over 0.1s
        assert analyzer.samples()[2].ax == pytest.approx(10.0)

    def test_path_angle_downward(self):
        analyzer = ClubPathAnalyzer(fps=10)
        analyzer.add(_result(0.5, 0.2), 0)
        analyzer.add(_result(0.5, 0.3), 1)
        assert analyzer.samples()[1].path_angle == pytest.approx(90.0)

    def test_shaft_angle_carried(self):
        analyzer = ClubPathAnalyzer()
        analyzer.add(_result(0.5, 0.5, line=Line.from_points(0, 0, 10, 10)), 0)
        analyzer.add(_result(0.5, 0.5, 0.5, DetectionMethod.INTERPOLATED), 1)
        samples = analyzer.samples()
        assert samples[0].shaft_angle == pytest.approx(45.0)
        assert samples[1].shaft_angle is None

    def test_summary(self):
        analyzer = ClubPathAnalyzer(fps=10)
        analyzer.add(_result(0.1, 0.5), 0)
        analyzer.add(_result(0.2, 0.5), 1)
        analyzer.add(_result(0.5, 0.5, 0.5, DetectionMethod.INTERPOLATED), 2)

        summary = analyzer.summary()

        assert summary["frames"] == 3
        assert summary["method_counts"] == {"edge_detected": 2, "interpolated": 1}
        assert summary["average_confidence"] == pytest.approx((0.85 * 2 + 0.5) / 3)
        assert summary["peak_speed"] == pytest.approx(3.0)
        assert summary["peak_speed_frame"] == 2

    def test_empty_summary(self):
        summary = ClubPathAnalyzer().summary()
        assert summary["frames"] == 0
        assert summary["peak_speed_frame"] is None

    def test_clear(self):
        analyzer = ClubPathAnalyzer()
        analyzer.add(_result(0.1, 0.5), 0)
        analyzer.clear()
        assert len(analyzer) == 0


class TestValidateResult:
    """Tests for validate_result."""

    def test_good_result(self):
        assert validate_result(_result(0.5, 0.5)) == []

    def test_low_confidence(self):
        errors = validate_result(_result(0.5, 0.5, 0.1, DetectionMethod.POSE_FALLBACK))
        assert len(errors) == 1
        assert "confidence" in errors[0].lower()

    def test_custom_threshold(self):
        assert validate_result(_result(0.5, 0.5, 0.4, DetectionMethod.POSE_FALLBACK), min_confidence=0.3) == []
