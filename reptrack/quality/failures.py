"""Failure taxonomy for the counting pipeline.

Nothing here is fatal to a session: frames that cannot be evaluated are
reported with a :class:`SkipReason` and the detector state is left untouched.
Exceptions are reserved for caller mistakes (unknown exercise, using a
stopped session) and for wrapping upstream pose-estimation failures.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence

from reptrack.vision.keypoints import KeypointFrame


class ReptrackError(Exception):
    """Base class for errors raised by reptrack."""


class UnknownExerciseError(ReptrackError, KeyError):
    """Raised when an exercise name is not in the registry."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown exercise: {self.name!r}"


class PoseEstimationError(ReptrackError, RuntimeError):
    """Raised by pose estimators when inference fails for a frame."""


class SessionStoppedError(ReptrackError, RuntimeError):
    """Raised when frames are submitted to a runner that has been stopped."""


class SkipReason(str, Enum):
    """Why a frame did not reach the repetition detector."""

    MISSING_LANDMARK = "missing_landmark"
    LOW_CONFIDENCE = "low_confidence"
    DEGENERATE_GEOMETRY = "degenerate_geometry"
    INFERENCE_FAILED = "inference_failed"


def classify_landmarks(
    frame: KeypointFrame, indices: Sequence[int], min_confidence: float
) -> Optional[SkipReason]:
    """Return the reason the landmarks are unusable, or None if all resolve.

    An absent landmark takes precedence over a low-confidence one so the
    reported reason reflects the more severe problem.
    """
    low_confidence = False
    for index in indices:
        keypoint = frame.keypoint(index)
        if keypoint is None:
            return SkipReason.MISSING_LANDMARK
        if keypoint.score < min_confidence:
            low_confidence = True
    return SkipReason.LOW_CONFIDENCE if low_confidence else None
