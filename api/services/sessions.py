"""
In-memory registry of live exercise sessions.

Each session carries its own asyncio lock so frame callbacks for one session
are applied one at a time and in arrival order, while different sessions
proceed independently. Sessions left idle past `session_ttl` are evicted, and
the least recently active one makes room once `max_sessions` is reached.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Optional
from uuid import uuid4

from fastapi import HTTPException

from api.schemas import (
    CreateSessionRequest,
    FramePayload,
    FrameResponse,
    MarkerModel,
    SegmentModel,
    SessionState,
)
from reptrack.config import ExerciseDefinition, SessionConfig, default_exercises
from reptrack.quality.failures import SkipReason, UnknownExerciseError
from reptrack.session import ExerciseSession, FrameResult
from reptrack.vision.keypoints import Keypoint, KeypointFrame

logger = logging.getLogger(__name__)


@dataclass
class SessionHandle:
    session_id: str
    session: ExerciseSession
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    frames: int = 0
    closed: bool = False
    last_active: float = 0.0

    def state(self) -> SessionState:
        return SessionState(
            session_id=self.session_id,
            exercise=self.session.exercise,
            count=self.session.count,
            frames=self.frames,
        )


def _to_frame(payload: FramePayload, default_index: int) -> KeypointFrame:
    keypoints = tuple(
        Keypoint(x=kp.x, y=kp.y, score=kp.score, name=kp.name) if kp is not None else None
        for kp in payload.keypoints or ()
    )
    return KeypointFrame(
        keypoints=keypoints,
        frame_index=payload.frame_index if payload.frame_index is not None else default_index,
        timestamp=payload.timestamp,
        width=payload.width,
        height=payload.height,
    )


def _to_response(result: FrameResult, session: ExerciseSession, frame: Optional[KeypointFrame]) -> FrameResponse:
    response = FrameResponse(
        count=result.count,
        counted=result.counted,
        angle=result.angle,
        skipped=result.skipped.value if result.skipped is not None else None,
    )
    if frame is not None:
        overlay = session.overlay(frame)
        response.segments = [
            SegmentModel(
                start=list(segment.start) if segment.start else None,
                end=list(segment.end) if segment.end else None,
                visible=segment.visible,
            )
            for segment in overlay.segments
        ]
        response.markers = [
            MarkerModel(point=list(marker.point) if marker.point else None, visible=marker.visible)
            for marker in overlay.markers
        ]
    return response


class SessionStore:
    def __init__(
        self,
        base_config: Optional[SessionConfig] = None,
        *,
        exercises: Optional[Dict[str, ExerciseDefinition]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.base_config = base_config or SessionConfig.from_env()
        self.exercises = exercises if exercises is not None else default_exercises()
        self._clock = clock
        self._sessions: Dict[str, SessionHandle] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def _expired(self, handle: SessionHandle, now: float) -> bool:
        return now - handle.last_active > self.base_config.session_ttl

    def _evict(self, handle: SessionHandle, why: str) -> None:
        handle.closed = True
        self._sessions.pop(handle.session_id, None)
        logger.info(
            "Evicted %s session %s at %d reps", why, handle.session_id, handle.session.count
        )

    def evict_idle(self) -> int:
        """Drop sessions idle longer than the configured TTL."""
        now = self._clock()
        expired = [h for h in self._sessions.values() if self._expired(h, now)]
        for handle in expired:
            self._evict(handle, "idle")
        return len(expired)

    def create(self, request: CreateSessionRequest) -> SessionHandle:
        overrides = {}
        if request.min_confidence is not None:
            overrides["min_confidence"] = request.min_confidence
        if request.mirror is not None:
            overrides["mirror"] = request.mirror
        config = replace(self.base_config, **overrides)

        try:
            session = ExerciseSession(request.exercise, config, exercises=self.exercises)
        except UnknownExerciseError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        self.evict_idle()
        while len(self._sessions) >= self.base_config.max_sessions:
            oldest = min(self._sessions.values(), key=lambda h: h.last_active)
            self._evict(oldest, "least recently active")

        handle = SessionHandle(session_id=uuid4().hex, session=session, last_active=self._clock())
        self._sessions[handle.session_id] = handle
        logger.info("Created session %s (%s)", handle.session_id, session.exercise)
        return handle

    def get(self, session_id: str) -> SessionHandle:
        handle = self._sessions.get(session_id)
        if handle is not None and not handle.closed and self._expired(handle, self._clock()):
            self._evict(handle, "idle")
        if handle is None or handle.closed:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        return handle

    def _touch(self, handle: SessionHandle) -> None:
        handle.last_active = self._clock()

    async def submit_frame(self, session_id: str, payload: FramePayload) -> FrameResponse:
        handle = self.get(session_id)
        async with handle.lock:
            if handle.closed:
                raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
            self._touch(handle)
            frame_index = handle.frames
            handle.frames += 1
            session = handle.session

            if payload.keypoints is None:
                logger.warning(
                    "Session %s: pose estimation failed for frame %d: %s",
                    session_id,
                    frame_index,
                    payload.error or "no keypoints",
                )
                result = session.skip(frame_index, SkipReason.INFERENCE_FAILED)
                return _to_response(result, session, None)

            frame = _to_frame(payload, frame_index)
            result = session.process_frame(frame)
            return _to_response(result, session, frame)

    async def switch_exercise(self, session_id: str, exercise: str) -> SessionState:
        handle = self.get(session_id)
        async with handle.lock:
            try:
                handle.session.switch_exercise(exercise)
            except UnknownExerciseError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc
            self._touch(handle)
            return handle.state()

    async def restart(self, session_id: str) -> SessionState:
        handle = self.get(session_id)
        async with handle.lock:
            handle.session.restart()
            self._touch(handle)
            return handle.state()

    async def close(self, session_id: str) -> SessionState:
        handle = self.get(session_id)
        async with handle.lock:
            handle.closed = True
            self._sessions.pop(session_id, None)
            logger.info("Closed session %s at %d reps", session_id, handle.session.count)
            return handle.state()
