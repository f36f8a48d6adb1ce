"""Run the club-head detector over a video file.

Pose landmarks come from an external pose estimator and are supplied per
frame, either directly or as a JSON file (see load_poses).
"""

import json
from pathlib import Path
from typing import Iterator, Optional, Sequence, Union

import cv2
from loguru import logger

from .detector import ClubHeadDetector
from .schemas import DetectionResult, PoseLandmarks


def get_video_info(video_path: Path) -> dict:
    """Get video metadata using OpenCV."""
    cap = cv2.VideoCapture(str(video_path))
    if not cap.isOpened():
        raise ValueError(f"Could not open video: {video_path}")

    try:
        fps = cap.get(cv2.CAP_PROP_FPS)
        width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        frame_count = int(cap.get(cv2.CAP_PROP_FRAME_COUNT))
    finally:
        cap.release()

    if width <= 0 or height <= 0:
        raise ValueError(f"Video has no readable frames: {video_path}")
    if fps <= 0:
        logger.warning(f"Video reports fps={fps}, assuming 30")
        fps = 30.0

    return {
        "width": width,
        "height": height,
        "fps": fps,
        "frame_count": frame_count,
        "duration": frame_count / fps,
    }


def load_poses(poses_path: Path, layout: str = "mediapipe") -> list[Optional[PoseLandmarks]]:
    """Load per-frame poses from JSON.

    The file holds a list with one entry per frame: either null (no pose) or
    a list of keypoints, each {"x", "y", "visibility"} or [x, y, visibility],
    in the given keypoint layout.
    """
    with open(poses_path) as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of per-frame poses in {poses_path}")

    poses = [
        PoseLandmarks.from_keypoints(frame, layout=layout) if frame else None for frame in data
    ]
    logger.info(f"Loaded {len(poses)} poses from {poses_path}")
    return poses


def track_video(
    video_path: Path,
    poses: Sequence[Optional[PoseLandmarks]],
    wrist_separation: Optional[Union[float, Sequence[float]]] = None,
    detector: Optional[ClubHeadDetector] = None,
) -> Iterator[tuple[int, DetectionResult]]:
    """Detect the club head in every frame of a video.

    Args:
        video_path: Path to the video file
        poses: One pose (or None) per frame; frames past the end get None
        wrist_separation: Constant or per-frame wrist separation; derived
            from each pose when not given
        detector: Detector to use; a new one is created if not given. It is
            (re)initialized for the video's frame size.

    Yields:
        (frame_index, DetectionResult) for each decoded frame
    """
    info = get_video_info(video_path)
    detector = detector or ClubHeadDetector()
    detector.init(info["width"], info["height"])

    logger.info(
        f"Tracking club head in {video_path} "
        f"({info['width']}x{info['height']} @ {info['fps']:.1f}fps, {info['frame_count']} frames)"
    )

    cap = cv2.VideoCapture(str(video_path))
    if not cap.isOpened():
        raise ValueError(f"Could not open video: {video_path}")

    frame_index = 0
    missing_poses = 0
    try:
        while True:
            ret, frame = cap.read()
            if not ret:
                break

            pose = poses[frame_index] if frame_index < len(poses) else None
            if pose is None:
                missing_poses += 1

            if wrist_separation is None:
                separation = pose.wrist_separation() if pose is not None else 0.0
            elif isinstance(wrist_separation, (int, float)):
                separation = float(wrist_separation)
            else:
                separation = (
                    wrist_separation[frame_index] if frame_index < len(wrist_separation) else 0.0
                )

            yield frame_index, detector.detect(frame, pose, separation)
            frame_index += 1
    finally:
        cap.release()

    if missing_poses:
        logger.warning(f"{missing_poses} of {frame_index} frames had no pose")
    logger.info(f"Finished tracking {frame_index} frames: {detector.get_stats()['method_counts']}")
