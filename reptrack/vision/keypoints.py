"""Keypoint frames in the BlazePose 33-landmark topology.

Pose inference itself happens upstream (in the browser, a MediaPipe process,
or any other estimator); this module only defines the frame representation
the counting pipeline consumes and the fixed skeleton adjacency used for the
overlay.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Optional, Sequence, Tuple


class Landmark(IntEnum):
    """BlazePose landmark indices."""

    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


NUM_LANDMARKS = len(Landmark)

# Connected landmark pairs, matching the pose-detection BlazePose skeleton.
BLAZEPOSE_ADJACENT_PAIRS: Tuple[Tuple[int, int], ...] = (
    (0, 1), (0, 4), (1, 2), (2, 3), (3, 7), (4, 5), (5, 6), (6, 8),
    (9, 10), (11, 12), (11, 13), (11, 23), (12, 14), (14, 16), (12, 24),
    (13, 15), (15, 17), (16, 18), (16, 20), (15, 19), (15, 21), (16, 22),
    (17, 19), (18, 20), (23, 25), (23, 24), (24, 26), (25, 27), (26, 28),
    (27, 29), (28, 30), (27, 31), (28, 32), (29, 31), (30, 32),
)


@dataclass(frozen=True)
class Keypoint:
    """Single landmark position in source-frame pixels with a confidence score."""

    x: float
    y: float
    score: float = 1.0
    name: Optional[str] = None

    @property
    def point(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class KeypointFrame:
    """Keypoints for one processed frame.

    Attributes:
        keypoints: Landmarks addressed by :class:`Landmark` index. A slot holds
            None when the estimator did not report that landmark.
        frame_index: Arrival order of the frame within the stream.
        timestamp: Optional capture time in seconds.
        width: Optional source-frame width in pixels.
        height: Optional source-frame height in pixels.
    """

    keypoints: Tuple[Optional[Keypoint], ...]
    frame_index: int = 0
    timestamp: Optional[float] = None
    width: Optional[int] = None
    height: Optional[int] = None

    @classmethod
    def from_points(
        cls,
        points: Iterable[Optional[Sequence[float]]],
        **kwargs,
    ) -> "KeypointFrame":
        """Build a frame from ``(x, y)`` or ``(x, y, score)`` tuples."""
        keypoints = []
        for point in points:
            if point is None:
                keypoints.append(None)
            else:
                keypoints.append(Keypoint(*point))
        return cls(keypoints=tuple(keypoints), **kwargs)

    def keypoint(self, index: int) -> Optional[Keypoint]:
        """Return the raw keypoint at ``index`` regardless of confidence."""
        if index < 0 or index >= len(self.keypoints):
            return None
        return self.keypoints[index]

    def get(self, index: int, min_confidence: float = 0.0) -> Optional[Keypoint]:
        """Return the keypoint at ``index`` if present and confident enough."""
        keypoint = self.keypoint(index)
        if keypoint is None or keypoint.score < min_confidence:
            return None
        return keypoint

    def triplet(
        self, indices: Sequence[int], min_confidence: float = 0.0
    ) -> Optional[Tuple[Keypoint, Keypoint, Keypoint]]:
        """Resolve three landmarks, or None if any is absent or low-confidence."""
        resolved = [self.get(index, min_confidence) for index in indices]
        if len(resolved) != 3 or any(kp is None for kp in resolved):
            return None
        return (resolved[0], resolved[1], resolved[2])
