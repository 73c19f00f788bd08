import contextlib
import io
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from reptrack import cli
from reptrack.vision.keypoints import KeypointFrame, Landmark
from reptrack.vision.recording import save_keypoint_frames


def _shoulder_frame(wrist, index: int) -> KeypointFrame:
    points = [None] * 33
    points[Landmark.RIGHT_SHOULDER] = (0.0, 0.0, 0.9)
    points[Landmark.RIGHT_ELBOW] = (100.0, 0.0, 0.9)
    points[Landmark.RIGHT_WRIST] = (*wrist, 0.9)
    return KeypointFrame.from_points(points, frame_index=index)


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.path = Path(tempfile.mkdtemp()) / "stream.jsonl"
        straight, bent = (200.0, 0.0), (30.0, 70.0)
        frames = [_shoulder_frame(w, i) for i, w in enumerate([straight, bent, straight, bent])]
        frames.append(KeypointFrame(keypoints=(), frame_index=4))
        save_keypoint_frames(self.path, frames)

    def _run(self, argv, env=None):
        out, err = io.StringIO(), io.StringIO()
        with mock.patch.dict("os.environ", env or {}, clear=True):
            with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
                code = cli.main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_replay_prints_repetitions_and_summary(self) -> None:
        code, out, _ = self._run(["replay", str(self.path), "--exercise", "shoulder"])
        self.assertEqual(code, 0)
        self.assertIn("rep 1 at frame 1", out)
        self.assertIn("rep 2 at frame 3", out)
        self.assertIn("frames: 5 (skipped 1)", out)
        self.assertIn("angle range: 45.0 - 180.0 deg", out)
        self.assertIn("repetitions: 2", out)

    def test_unknown_exercise_exits_with_error(self) -> None:
        code, _, err = self._run(["replay", str(self.path), "--exercise", "plank"])
        self.assertEqual(code, 2)
        self.assertIn("plank", err)

    def test_missing_recording_exits_with_error(self) -> None:
        code, _, err = self._run(["replay", str(self.path.with_name("nope.jsonl"))])
        self.assertEqual(code, 2)
        self.assertIn("nope.jsonl", err)

    def test_invalid_environment_exits_with_error(self) -> None:
        code, out, err = self._run(
            ["replay", str(self.path)], env={"REPTRACK_HISTORY_DEPTH": "abc"}
        )
        self.assertEqual(code, 2)
        self.assertEqual(out, "")
        self.assertIn("error: invalid configuration", err)
        self.assertIn("abc", err)

    def test_out_of_range_confidence_exits_with_error(self) -> None:
        code, _, err = self._run(["replay", str(self.path), "--min-confidence", "1.5"])
        self.assertEqual(code, 2)
        self.assertIn("min_confidence", err)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
