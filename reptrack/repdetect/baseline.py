"""Threshold-based repetition detector.

A repetition is an extended -> flexed transition of the tracked joint angle.
Only samples outside the dead band between the two thresholds are evaluated
and recorded, so the "previous" sample is always the last extreme one. This
makes the edge check immune to the many in-between frames of a repetition and
to a sustained flexed hold, which never produces a fresh extended sample.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from reptrack.config import DEFAULT_HISTORY_DEPTH, DEFAULT_MIN_CONFIDENCE, ExerciseDefinition
from reptrack.repdetect.history import AngleHistory
from reptrack.vision.keypoints import KeypointFrame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepetitionEvent:
    """Emitted once per counted repetition."""

    exercise: str
    count: int
    angle: float
    frame_index: Optional[int] = None
    timestamp: Optional[float] = None


class RepetitionDetector:
    """Counts extended -> flexed transitions for one exercise definition."""

    def __init__(
        self,
        definition: ExerciseDefinition,
        *,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
        history_depth: int = DEFAULT_HISTORY_DEPTH,
    ) -> None:
        self.definition = definition
        self.min_confidence = min_confidence
        self.history = AngleHistory(history_depth)
        self._count = 0

    @property
    def count(self) -> int:
        return self._count

    def is_extreme(self, angle: float) -> bool:
        """True when ``angle`` lies outside the dead band."""
        return angle > self.definition.extended_min or angle < self.definition.flexed_max

    def _gate_passes(self, frame: Optional[KeypointFrame]) -> bool:
        gate = self.definition.gate
        if gate is None:
            return True
        return gate.passes(frame, self.min_confidence)

    def observe(
        self, angle: Optional[float], frame: Optional[KeypointFrame] = None
    ) -> Optional[RepetitionEvent]:
        """Feed one angle sample; return an event if it completes a repetition.

        ``angle`` is None when the frame could not be resolved, in which case
        nothing changes.
        """
        if angle is None or not self.is_extreme(angle):
            return None

        previous = self.history.head
        event = None
        if (
            previous is not None
            and previous > self.definition.extended_min
            and angle < self.definition.flexed_max
            and self._gate_passes(frame)
        ):
            self._count += 1
            event = RepetitionEvent(
                exercise=self.definition.name,
                count=self._count,
                angle=angle,
                frame_index=frame.frame_index if frame is not None else None,
                timestamp=frame.timestamp if frame is not None else None,
            )
            logger.info(
                "%s repetition %d (%.1f -> %.1f deg)",
                self.definition.name,
                self._count,
                previous,
                angle,
            )

        self.history.push(angle)
        return event

    def reset(self) -> None:
        self._count = 0
        self.history.clear()
