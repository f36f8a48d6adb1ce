"""Track the club head through a golf video using precomputed poses."""

import json
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from clubtrack import ClubHeadDetector, ClubPathAnalyzer, load_poses, track_video
from clubtrack.video import get_video_info


def main():
    # Usage:
    #   python scripts/track_club_video.py <video_path> <poses.json> [output.json] [layout]
    if len(sys.argv) < 3:
        print("Usage: python scripts/track_club_video.py <video_path> <poses.json> [output.json] [mediapipe|coco]")
        return
    video_path = Path(sys.argv[1])
    poses_path = Path(sys.argv[2])
    output_path = Path(sys.argv[3]) if len(sys.argv) > 3 else None
    layout = sys.argv[4] if len(sys.argv) > 4 else "mediapipe"

    if not video_path.exists():
        print(f"Video not found: {video_path}")
        return
    if not poses_path.exists():
        print(f"Poses not found: {poses_path}")
        return

    print(f"Tracking club head in: {video_path}")
    print("-" * 50)

    info = get_video_info(video_path)
    print(f"   Resolution: {info['width']}x{info['height']}")
    print(f"   FPS: {info['fps']:.2f}")
    print(f"   Frame count: {info['frame_count']}")

    poses = load_poses(poses_path, layout=layout)
    detector = ClubHeadDetector()
    analyzer = ClubPathAnalyzer(fps=info["fps"])

    results = []
    for frame_index, result in track_video(video_path, poses, detector=detector):
        analyzer.add(result, frame_index)
        results.append({"frame": frame_index, **result.to_dict()})
        print(f"   Frame {frame_index}: {result.method.value}", end="\r")
    print()

    stats = detector.get_stats()
    summary = analyzer.summary()
    print("\nResults:")
    print(f"   Frames processed: {stats['frames_processed']}")
    print(f"   Methods: {stats['method_counts']}")
    print(f"   Calibrated shaft length: {stats['calibrated_shaft_length']}")
    print(f"   Frames used for kinematics: {summary['frames']}")
    print(f"   Peak club-head speed: {summary['peak_speed']:.2f} normalized units/s "
          f"(frame {summary['peak_speed_frame']})")

    if output_path:
        with open(output_path, "w") as f:
            json.dump({"video": str(video_path), "info": info, "results": results}, f, indent=2)
        print(f"\nWrote {len(results)} results to {output_path}")


if __name__ == "__main__":
    main()
