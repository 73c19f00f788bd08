"""Exercise session: the single owner of counting state.

A session binds the active :class:`ExerciseDefinition` to a fresh
:class:`RepetitionDetector`, pulls the relevant triplet out of each incoming
keypoint frame, and forwards the resulting angle. Frames must be fed from one
call path at a time; the session does no locking of its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional

from reptrack.config import EXERCISES, ExerciseDefinition, SessionConfig, get_exercise
from reptrack.overlay import Overlay, build_overlay
from reptrack.quality.failures import SkipReason, classify_landmarks
from reptrack.repdetect.baseline import RepetitionDetector, RepetitionEvent
from reptrack.repdetect.history import AngleHistory
from reptrack.signals.kinematics import calculate_angle
from reptrack.vision.keypoints import KeypointFrame

logger = logging.getLogger(__name__)

RepetitionListener = Callable[[RepetitionEvent], None]


@dataclass(frozen=True)
class FrameResult:
    """Outcome of processing one frame."""

    frame_index: Optional[int]
    count: int
    angle: Optional[float] = None
    event: Optional[RepetitionEvent] = None
    skipped: Optional[SkipReason] = None

    @property
    def counted(self) -> bool:
        return self.event is not None


class ExerciseSession:
    def __init__(
        self,
        exercise: str = "knee",
        config: Optional[SessionConfig] = None,
        *,
        exercises: Mapping[str, ExerciseDefinition] = EXERCISES,
    ) -> None:
        self.config = config or SessionConfig()
        self._exercises = exercises
        self._listeners: List[RepetitionListener] = []
        self.detector = self._build_detector(get_exercise(exercise, exercises))

    def _build_detector(self, definition: ExerciseDefinition) -> RepetitionDetector:
        return RepetitionDetector(
            definition,
            min_confidence=self.config.min_confidence,
            history_depth=self.config.history_depth,
        )

    @property
    def definition(self) -> ExerciseDefinition:
        return self.detector.definition

    @property
    def exercise(self) -> str:
        return self.definition.name

    @property
    def count(self) -> int:
        return self.detector.count

    @property
    def history(self) -> AngleHistory:
        return self.detector.history

    def subscribe(self, listener: RepetitionListener) -> None:
        """Register a callback invoked for every counted repetition."""
        self._listeners.append(listener)

    def switch_exercise(self, name: str) -> None:
        """Activate ``name`` with a fresh detector; counts are never carried over."""
        definition = get_exercise(name, self._exercises)
        self.detector = self._build_detector(definition)
        logger.info("Switched exercise to %s", definition.name)

    def restart(self) -> None:
        """Reset the active detector to count 0 with an empty history."""
        self.detector.reset()
        logger.info("Restarted %s session", self.exercise)

    def skip(self, frame_index: Optional[int], reason: SkipReason) -> FrameResult:
        """Record a frame that never reached the detector."""
        logger.debug("Skipping frame %s: %s", frame_index, reason.value)
        return FrameResult(frame_index=frame_index, count=self.count, skipped=reason)

    def process_frame(self, frame: KeypointFrame) -> FrameResult:
        """Evaluate one keypoint frame against the active exercise."""
        definition = self.definition
        reason = classify_landmarks(
            frame, definition.required_landmarks, self.config.min_confidence
        )
        if reason is not None:
            return self.skip(frame.frame_index, reason)

        a, b, c = (frame.keypoint(index) for index in definition.triplet)
        angle = calculate_angle(a, b, c)
        if angle is None:
            return self.skip(frame.frame_index, SkipReason.DEGENERATE_GEOMETRY)

        event = self.detector.observe(angle, frame)
        if event is not None:
            for listener in self._listeners:
                listener(event)
        return FrameResult(
            frame_index=frame.frame_index,
            count=self.count,
            angle=angle,
            event=event,
        )

    def overlay(self, frame: KeypointFrame, *, scale: float = 1.0) -> Overlay:
        return build_overlay(
            frame,
            min_confidence=self.config.min_confidence,
            mirror=self.config.mirror,
            scale=scale,
        )
