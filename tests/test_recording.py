import json
import tempfile
import unittest
from pathlib import Path

from reptrack.vision import recording
from reptrack.vision.keypoints import Keypoint, KeypointFrame


class RecordingTests(unittest.TestCase):
    def test_roundtrip_preserves_absent_landmarks(self) -> None:
        frames = [
            KeypointFrame(
                keypoints=(Keypoint(1.0, 2.0, 0.9, "nose"), None, Keypoint(3.0, 4.0, 0.4)),
                frame_index=0,
                timestamp=0.0,
                width=1080,
                height=1920,
            ),
            KeypointFrame(keypoints=(None, Keypoint(5.0, 6.0)), frame_index=1, timestamp=0.05),
        ]
        path = Path(tempfile.mkdtemp()) / "nested" / "stream.jsonl"
        recording.save_keypoint_frames(path, frames)
        self.assertEqual(list(recording.load_keypoint_frames(path)), frames)

    def test_refuses_to_overwrite_when_asked(self) -> None:
        path = Path(tempfile.mkdtemp()) / "stream.jsonl"
        recording.save_keypoint_frames(path, [])
        with self.assertRaises(FileExistsError):
            recording.save_keypoint_frames(path, [], overwrite=False)

    def test_load_skips_blank_lines_and_defaults_metadata(self) -> None:
        path = Path(tempfile.mkdtemp()) / "stream.jsonl"
        line = json.dumps({"keypoints": [{"x": 1, "y": 2, "score": 0.7}]})
        path.write_text(f"{line}\n\n", encoding="utf-8")
        (frame,) = list(recording.load_keypoint_frames(path))
        self.assertEqual(frame.frame_index, 0)
        self.assertIsNone(frame.width)
        self.assertEqual(frame.keypoints[0].score, 0.7)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
