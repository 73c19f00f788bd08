"""JSONL recordings of keypoint streams.

A recording holds one :class:`KeypointFrame` per line so a session can be
replayed offline without re-running pose estimation. Absent landmarks are
stored as ``null`` to keep landmark indices aligned.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Iterable, Iterator

from reptrack.vision.keypoints import Keypoint, KeypointFrame


def _frame_to_json(frame: KeypointFrame) -> str:
    payload = {
        "frame_index": frame.frame_index,
        "timestamp": frame.timestamp,
        "width": frame.width,
        "height": frame.height,
        "keypoints": [asdict(kp) if kp is not None else None for kp in frame.keypoints],
    }
    return json.dumps(payload)


def _frame_from_obj(obj: dict) -> KeypointFrame:
    keypoints = tuple(Keypoint(**kp) if kp is not None else None for kp in obj["keypoints"])
    return KeypointFrame(
        keypoints=keypoints,
        frame_index=obj.get("frame_index", 0),
        timestamp=obj.get("timestamp"),
        width=obj.get("width"),
        height=obj.get("height"),
    )


def save_keypoint_frames(
    path: Path, frames: Iterable[KeypointFrame], *, overwrite: bool = True
) -> Path:
    """Write keypoint frames to a JSONL recording.

    Args:
        path: Destination path for the JSONL file.
        frames: Iterable of KeypointFrame instances, in arrival order.
        overwrite: Whether to overwrite an existing file.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise FileExistsError(f"Recording already exists: {path}")

    with path.open("w", encoding="utf-8") as fh:
        for frame in frames:
            fh.write(_frame_to_json(frame))
            fh.write("\n")
    return path


def load_keypoint_frames(path: Path) -> Iterator[KeypointFrame]:
    """Read keypoint frames from a JSONL recording."""
    with path.open("r", encoding="utf-8") as fh:
        for line in fh:
            if not line.strip():
                continue
            yield _frame_from_obj(json.loads(line))
