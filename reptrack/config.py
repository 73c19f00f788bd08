"""Shared configuration and exercise definitions used across the pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from reptrack.quality.failures import UnknownExerciseError
from reptrack.vision.keypoints import KeypointFrame, Landmark

DEFAULT_MIN_CONFIDENCE = 0.5
DEFAULT_FRAME_RATE = 20.0
DEFAULT_HISTORY_DEPTH = 2
DEFAULT_SESSION_TTL = 600.0
DEFAULT_MAX_SESSIONS = 256

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class PositionGate:
    """Auxiliary positional check on a fourth landmark.

    The gate passes when ``landmark`` is confidently present and its x
    coordinate is strictly greater than ``min_x``. With ``relative`` set,
    ``min_x`` is a fraction of the frame width and frames without a known
    width fail the gate.
    """

    landmark: int
    min_x: float
    relative: bool = False

    def threshold_for(self, frame: KeypointFrame) -> Optional[float]:
        if not self.relative:
            return self.min_x
        if not frame.width:
            return None
        return self.min_x * frame.width

    def passes(self, frame: Optional[KeypointFrame], min_confidence: float) -> bool:
        if frame is None:
            return False
        keypoint = frame.get(self.landmark, min_confidence)
        threshold = self.threshold_for(frame)
        if keypoint is None or threshold is None:
            return False
        return keypoint.x > threshold


@dataclass(frozen=True)
class ExerciseDefinition:
    """Static description of one countable exercise.

    Attributes:
        name: Registry key, e.g. ``"knee"``.
        triplet: (proximal, vertex, distal) landmark indices forming the angle.
        extended_min: Angles strictly above this count as extended.
        flexed_max: Angles strictly below this count as flexed.
        gate: Optional positional gate evaluated on the flexing frame.
    """

    name: str
    triplet: Tuple[int, int, int]
    extended_min: float
    flexed_max: float
    gate: Optional[PositionGate] = None

    def __post_init__(self) -> None:
        if len(self.triplet) != 3:
            raise ValueError("triplet must name exactly three landmarks")
        if not self.flexed_max < self.extended_min:
            raise ValueError(
                f"flexed_max ({self.flexed_max}) must be below extended_min ({self.extended_min})"
            )

    @property
    def required_landmarks(self) -> Tuple[int, ...]:
        return tuple(self.triplet)


KNEE = ExerciseDefinition(
    name="knee",
    triplet=(Landmark.RIGHT_HIP, Landmark.RIGHT_KNEE, Landmark.RIGHT_ANKLE),
    extended_min=150.0,
    flexed_max=90.0,
    gate=PositionGate(landmark=Landmark.LEFT_SHOULDER, min_x=650.0),
)

SHOULDER = ExerciseDefinition(
    name="shoulder",
    triplet=(Landmark.RIGHT_SHOULDER, Landmark.RIGHT_ELBOW, Landmark.RIGHT_WRIST),
    extended_min=170.0,
    flexed_max=90.0,
)

# Read-only built-in definitions. Owners that add exercises work on a copy
# from default_exercises().
EXERCISES: Mapping[str, ExerciseDefinition] = MappingProxyType(
    {
        KNEE.name: KNEE,
        SHOULDER.name: SHOULDER,
    }
)


def default_exercises() -> Dict[str, ExerciseDefinition]:
    """Return a fresh, mutable registry seeded with the built-in exercises."""
    return dict(EXERCISES)


def register_exercise(
    definition: ExerciseDefinition, registry: Dict[str, ExerciseDefinition]
) -> ExerciseDefinition:
    """Add or replace an exercise in an owned registry."""
    registry[definition.name] = definition
    return definition


def get_exercise(
    name: str, registry: Mapping[str, ExerciseDefinition] = EXERCISES
) -> ExerciseDefinition:
    """Look up an exercise by name, raising :class:`UnknownExerciseError`."""
    try:
        return registry[name]
    except KeyError:
        raise UnknownExerciseError(name) from None


def _parse_bool(value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


@dataclass(frozen=True)
class SessionConfig:
    """Runtime settings for an exercise session.

    Attributes:
        min_confidence: Keypoints scoring below this are treated as missing,
            both for counting and for overlay visibility.
        mirror: Flip overlay x coordinates for selfie-style display. Angle
            math is unaffected.
        frame_rate: Target evaluations per second for the frame loop.
        history_depth: Number of extreme angles retained per detector.
        session_ttl: Seconds a hosted session may sit idle before it is
            evicted.
        max_sessions: Upper bound on concurrently hosted sessions; the
            least recently active one is evicted to make room.
    """

    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    mirror: bool = False
    frame_rate: float = DEFAULT_FRAME_RATE
    history_depth: int = DEFAULT_HISTORY_DEPTH
    session_ttl: float = DEFAULT_SESSION_TTL
    max_sessions: int = DEFAULT_MAX_SESSIONS

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError("min_confidence must be within [0, 1]")
        if self.frame_rate <= 0:
            raise ValueError("frame_rate must be positive")
        if self.history_depth < 1:
            raise ValueError("history_depth must be at least 1")
        if self.session_ttl <= 0:
            raise ValueError("session_ttl must be positive")
        if self.max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")

    @property
    def frame_interval(self) -> float:
        """Seconds between frame evaluations at the target rate."""
        return 1.0 / self.frame_rate

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SessionConfig":
        """Build a config from ``REPTRACK_*`` environment variables."""
        env = os.environ if environ is None else environ
        kwargs = {}
        if "REPTRACK_MIN_CONFIDENCE" in env:
            kwargs["min_confidence"] = float(env["REPTRACK_MIN_CONFIDENCE"])
        if "REPTRACK_MIRROR" in env:
            kwargs["mirror"] = _parse_bool(env["REPTRACK_MIRROR"])
        if "REPTRACK_FRAME_RATE" in env:
            kwargs["frame_rate"] = float(env["REPTRACK_FRAME_RATE"])
        if "REPTRACK_HISTORY_DEPTH" in env:
            kwargs["history_depth"] = int(env["REPTRACK_HISTORY_DEPTH"])
        if "REPTRACK_SESSION_TTL" in env:
            kwargs["session_ttl"] = float(env["REPTRACK_SESSION_TTL"])
        if "REPTRACK_MAX_SESSIONS" in env:
            kwargs["max_sessions"] = int(env["REPTRACK_MAX_SESSIONS"])
        return cls(**kwargs)
