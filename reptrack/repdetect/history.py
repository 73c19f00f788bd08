"""Bounded newest-first buffer of extreme angle samples."""

from __future__ import annotations

from collections import deque
from typing import Deque, Iterator, List, Optional

from reptrack.config import DEFAULT_HISTORY_DEPTH


class AngleHistory:
    """Most-recent-first angle samples for one tracked triplet.

    Only the head is consulted by the detector, so the buffer keeps a small
    fixed number of samples and drops the oldest on overflow.
    """

    def __init__(self, depth: int = DEFAULT_HISTORY_DEPTH) -> None:
        if depth < 1:
            raise ValueError("depth must be at least 1")
        self._samples: Deque[float] = deque(maxlen=depth)

    @property
    def depth(self) -> int:
        return self._samples.maxlen or 0

    @property
    def head(self) -> Optional[float]:
        """Newest sample, or None when nothing has been recorded."""
        return self._samples[0] if self._samples else None

    def push(self, angle: float) -> None:
        self._samples.appendleft(float(angle))

    def clear(self) -> None:
        self._samples.clear()

    def to_list(self) -> List[float]:
        return list(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[float]:
        return iter(self._samples)

    def __repr__(self) -> str:
        return f"AngleHistory({self.to_list()!r}, depth={self.depth})"
