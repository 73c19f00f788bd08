"""Sanity check for the counting pipeline.

Synthesizes a knee-flexion keypoint stream (three squats with noisy dead-band
frames and a few dropped landmarks), records it to JSONL, and replays it.
"""

import math
import random
import sys
from pathlib import Path

# Allow running this script directly without installing the package.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from reptrack.session import ExerciseSession  # noqa: E402
from reptrack.vision.keypoints import KeypointFrame, Landmark  # noqa: E402
from reptrack.vision.recording import load_keypoint_frames, save_keypoint_frames  # noqa: E402


def knee_frame(angle: float, index: int, drop_ankle: bool = False) -> KeypointFrame:
    points = [None] * 33
    points[Landmark.LEFT_SHOULDER] = (700.0, 600.0, 0.95)
    points[Landmark.RIGHT_HIP] = (540.0, 1000.0, 0.9)
    points[Landmark.RIGHT_KNEE] = (540.0, 1300.0, 0.9)
    phi = math.radians(-90.0 + angle)
    if not drop_ankle:
        points[Landmark.RIGHT_ANKLE] = (540.0 + 300 * math.cos(phi), 1300.0 + 300 * math.sin(phi), 0.9)
    return KeypointFrame.from_points(points, frame_index=index, timestamp=index / 20, width=1080, height=1920)


def synthesize(reps: int = 3, frames_per_rep: int = 40, seed: int = 7):
    rng = random.Random(seed)
    index = 0
    for _ in range(reps):
        for step in range(frames_per_rep):
            # Cosine sweep between ~175 (standing) and ~70 (deep squat).
            angle = 122.5 + 52.5 * math.cos(2 * math.pi * step / frames_per_rep) + rng.uniform(-3, 3)
            yield knee_frame(angle, index, drop_ankle=rng.random() < 0.05)
            index += 1


def main() -> None:
    path = Path("examples/_tmp_knee_stream.jsonl")
    save_keypoint_frames(path, synthesize())

    session = ExerciseSession("knee")
    session.subscribe(lambda event: print(f"rep {event.count} at frame {event.frame_index}"))
    for frame in load_keypoint_frames(path):
        session.process_frame(frame)

    assert session.count == 3, f"expected 3 reps, counted {session.count}"
    print("Counting checks passed.")


if __name__ == "__main__":
    main()
