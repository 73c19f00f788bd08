"""Joint-angle computation from keypoints.

Angles are measured at the vertex of a (proximal, vertex, distal) triplet and
reported in degrees within [0, 180].
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence, Tuple, Union

import numpy as np

from reptrack.vision.keypoints import Keypoint, KeypointFrame

PointLike = Union[Keypoint, Tuple[float, float], Sequence[float]]


def _xy(point: PointLike) -> Tuple[float, float]:
    if isinstance(point, Keypoint):
        return (point.x, point.y)
    return (float(point[0]), float(point[1]))


def calculate_angle(a: PointLike, b: PointLike, c: PointLike) -> Optional[float]:
    """Return the angle ABC in degrees, or None for degenerate geometry.

    The difference of the two ray directions can exceed 180 degrees when the
    rays straddle the atan2 wraparound; such reflex results are folded back to
    the interior angle. A zero-length ray (``a == b`` or ``c == b``) has no
    direction, so None is returned instead of an arbitrary angle.
    """
    ax, ay = _xy(a)
    bx, by = _xy(b)
    cx, cy = _xy(c)
    if (ax == bx and ay == by) or (cx == bx and cy == by):
        return None

    radians = math.atan2(ay - by, ax - bx) - math.atan2(cy - by, cx - bx)
    angle = abs(math.degrees(radians))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def triplet_angle(
    frame: KeypointFrame, triplet: Sequence[int], min_confidence: float = 0.0
) -> Optional[float]:
    """Angle for a landmark triplet, or None if unresolved or degenerate."""
    resolved = frame.triplet(triplet, min_confidence)
    if resolved is None:
        return None
    return calculate_angle(*resolved)


def angle_series(
    frames: Iterable[KeypointFrame], triplet: Sequence[int], min_confidence: float = 0.0
) -> np.ndarray:
    """Per-frame angles as a float array, NaN where the frame is unusable."""
    values = []
    for frame in frames:
        angle = triplet_angle(frame, triplet, min_confidence)
        values.append(np.nan if angle is None else angle)
    return np.asarray(values, dtype=float)
