"""Skeleton overlay data for a renderer.

The counting pipeline never depends on this module; it only describes what
to draw: one segment per skeleton edge and one marker per keypoint, each
flagged visible when its keypoints are present and confident.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from reptrack.config import DEFAULT_MIN_CONFIDENCE
from reptrack.vision.keypoints import BLAZEPOSE_ADJACENT_PAIRS, Keypoint, KeypointFrame

Point = Tuple[float, float]


@dataclass(frozen=True)
class Segment:
    start: Optional[Point]
    end: Optional[Point]
    visible: bool


@dataclass(frozen=True)
class Marker:
    point: Optional[Point]
    visible: bool


@dataclass(frozen=True)
class Overlay:
    segments: List[Segment]
    markers: List[Marker]

    def visible_segments(self) -> List[Segment]:
        return [segment for segment in self.segments if segment.visible]

    def visible_markers(self) -> List[Marker]:
        return [marker for marker in self.markers if marker.visible]


def _project(
    keypoint: Optional[Keypoint], width: Optional[int], mirror: bool, scale: float
) -> Optional[Point]:
    if keypoint is None:
        return None
    x = keypoint.x
    if mirror and width:
        x = width - x
    return (x * scale, keypoint.y * scale)


def build_overlay(
    frame: KeypointFrame,
    *,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    mirror: bool = False,
    scale: float = 1.0,
    pairs: Sequence[Tuple[int, int]] = BLAZEPOSE_ADJACENT_PAIRS,
) -> Overlay:
    """Build segments and markers for ``frame``.

    ``mirror`` flips x around the frame width and is ignored when the width
    is unknown. ``scale`` maps source pixels onto the display surface.
    """
    segments = []
    for index_a, index_b in pairs:
        kp_a = frame.keypoint(index_a)
        kp_b = frame.keypoint(index_b)
        visible = (
            frame.get(index_a, min_confidence) is not None
            and frame.get(index_b, min_confidence) is not None
        )
        segments.append(
            Segment(
                start=_project(kp_a, frame.width, mirror, scale),
                end=_project(kp_b, frame.width, mirror, scale),
                visible=visible,
            )
        )

    markers = [
        Marker(
            point=_project(keypoint, frame.width, mirror, scale),
            visible=keypoint is not None and keypoint.score >= min_confidence,
        )
        for keypoint in frame.keypoints
    ]
    return Overlay(segments=segments, markers=markers)
