import unittest

from reptrack.config import KNEE, SHOULDER, ExerciseDefinition, PositionGate
from reptrack.repdetect.baseline import RepetitionDetector
from reptrack.repdetect.history import AngleHistory
from reptrack.vision.keypoints import KeypointFrame, Landmark


def _gate_frame(shoulder_x: float, score: float = 0.9, width=None) -> KeypointFrame:
    points = [None] * 33
    points[Landmark.LEFT_SHOULDER] = (shoulder_x, 400.0, score)
    return KeypointFrame.from_points(points, width=width)


def _observe_all(detector, angles, frame=None):
    return [detector.observe(angle, frame) for angle in angles]


class AngleHistoryTests(unittest.TestCase):
    def test_newest_first_and_bounded(self) -> None:
        history = AngleHistory(depth=2)
        self.assertIsNone(history.head)
        for angle in (10.0, 20.0, 30.0):
            history.push(angle)
        self.assertEqual(history.head, 30.0)
        self.assertEqual(history.to_list(), [30.0, 20.0])
        self.assertEqual(len(history), 2)

    def test_rejects_zero_depth(self) -> None:
        with self.assertRaises(ValueError):
            AngleHistory(depth=0)


class RepetitionDetectorTests(unittest.TestCase):
    def test_shoulder_sequence_counts_each_extended_to_flexed_edge(self) -> None:
        detector = RepetitionDetector(SHOULDER)
        events = _observe_all(detector, [175, 178, 85, 171, 88])
        self.assertEqual(detector.count, 2)
        self.assertEqual([i for i, e in enumerate(events) if e is not None], [2, 4])
        self.assertEqual([e.count for e in events if e is not None], [1, 2])

    def test_sample_equal_to_threshold_is_not_extended(self) -> None:
        detector = RepetitionDetector(SHOULDER)
        events = _observe_all(detector, [175, 178, 85, 170, 88])
        self.assertEqual(detector.count, 1)
        self.assertIsNone(events[4])
        self.assertIsNone(detector.observe(90.0))
        self.assertEqual(detector.history.head, 88.0)

    def test_dead_band_stream_never_counts_or_records(self) -> None:
        detector = RepetitionDetector(SHOULDER)
        for _ in range(50):
            self.assertIsNone(detector.observe(120.0))
        self.assertEqual(detector.count, 0)
        self.assertEqual(len(detector.history), 0)

    def test_dead_band_frames_between_extremes_do_not_break_edge(self) -> None:
        detector = RepetitionDetector(SHOULDER)
        _observe_all(detector, [175, 160, 140, 120, 100, 80])
        self.assertEqual(detector.count, 1)

    def test_sustained_flexed_hold_counts_once(self) -> None:
        detector = RepetitionDetector(SHOULDER)
        _observe_all(detector, [175] + [60] * 20)
        self.assertEqual(detector.count, 1)

    def test_first_sample_flexed_does_not_count(self) -> None:
        detector = RepetitionDetector(SHOULDER)
        self.assertIsNone(detector.observe(45.0))
        self.assertEqual(detector.count, 0)

    def test_none_angle_is_a_no_op(self) -> None:
        detector = RepetitionDetector(SHOULDER)
        detector.observe(175.0)
        self.assertIsNone(detector.observe(None))
        self.assertEqual(detector.history.to_list(), [175.0])

    def test_count_is_monotonic(self) -> None:
        detector = RepetitionDetector(SHOULDER)
        angles = [175, 60, 120, 179, 30, 95, 171, 172, 10, 10, 175, 150, 80, 171, 89]
        previous = 0
        for angle in angles:
            detector.observe(angle)
            self.assertGreaterEqual(detector.count, previous)
            previous = detector.count
        self.assertEqual(detector.count, 5)

    def test_knee_gate_blocks_count_when_shoulder_left_of_threshold(self) -> None:
        detector = RepetitionDetector(KNEE)
        detector.observe(170.0, _gate_frame(700.0))
        self.assertIsNone(detector.observe(80.0, _gate_frame(600.0)))
        self.assertEqual(detector.count, 0)
        # The flexed sample is still recorded, so a new extension is required.
        self.assertEqual(detector.history.head, 80.0)
        self.assertIsNone(detector.observe(80.0, _gate_frame(700.0)))
        self.assertEqual(detector.count, 0)

    def test_knee_gate_passes_when_shoulder_right_of_threshold(self) -> None:
        detector = RepetitionDetector(KNEE)
        detector.observe(170.0, _gate_frame(700.0))
        event = detector.observe(80.0, _gate_frame(700.0))
        self.assertIsNotNone(event)
        self.assertEqual(event.exercise, "knee")
        self.assertEqual(detector.count, 1)

    def test_knee_gate_fails_without_frame_or_confident_landmark(self) -> None:
        detector = RepetitionDetector(KNEE)
        detector.observe(170.0)
        self.assertIsNone(detector.observe(80.0))
        detector.observe(170.0)
        self.assertIsNone(detector.observe(80.0, _gate_frame(700.0, score=0.1)))
        self.assertEqual(detector.count, 0)

    def test_relative_gate_scales_with_frame_width(self) -> None:
        definition = ExerciseDefinition(
            name="knee_relative",
            triplet=KNEE.triplet,
            extended_min=150.0,
            flexed_max=90.0,
            gate=PositionGate(landmark=Landmark.LEFT_SHOULDER, min_x=0.6, relative=True),
        )
        detector = RepetitionDetector(definition)
        detector.observe(170.0)
        self.assertIsNone(detector.observe(80.0, _gate_frame(650.0, width=1280)))
        detector.observe(170.0)
        self.assertIsNotNone(detector.observe(80.0, _gate_frame(650.0, width=1000)))
        detector.observe(170.0)
        self.assertIsNone(detector.observe(80.0, _gate_frame(650.0)))
        self.assertEqual(detector.count, 1)

    def test_event_carries_frame_metadata(self) -> None:
        detector = RepetitionDetector(SHOULDER)
        detector.observe(175.0)
        frame = KeypointFrame(keypoints=(), frame_index=42, timestamp=2.1)
        event = detector.observe(60.0, frame)
        self.assertEqual(event.frame_index, 42)
        self.assertAlmostEqual(event.timestamp, 2.1)
        self.assertEqual(event.angle, 60.0)

    def test_reset_clears_count_and_history(self) -> None:
        detector = RepetitionDetector(SHOULDER)
        _observe_all(detector, [175, 60])
        detector.reset()
        self.assertEqual(detector.count, 0)
        self.assertEqual(len(detector.history), 0)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
