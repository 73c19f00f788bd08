from __future__ import annotations

from typing import List

from fastapi import APIRouter, Request

from api.schemas import (
    CreateSessionRequest,
    ExerciseModel,
    FramePayload,
    FrameResponse,
    SessionState,
    SwitchExerciseRequest,
)
from api.services.sessions import SessionStore

router = APIRouter(tags=["sessions"])


def _store(request: Request) -> SessionStore:
    return request.app.state.sessions


@router.get("/exercises", response_model=List[ExerciseModel])
async def list_exercises(request: Request) -> List[ExerciseModel]:
    return [
        ExerciseModel.from_definition(definition)
        for definition in _store(request).exercises.values()
    ]


@router.post("/sessions", response_model=SessionState, status_code=201)
async def create_session(payload: CreateSessionRequest, request: Request) -> SessionState:
    return _store(request).create(payload).state()


@router.get("/sessions/{session_id}", response_model=SessionState)
async def get_session(session_id: str, request: Request) -> SessionState:
    return _store(request).get(session_id).state()


@router.post("/sessions/{session_id}/frames", response_model=FrameResponse)
async def submit_frame(session_id: str, payload: FramePayload, request: Request) -> FrameResponse:
    """
    Count one frame of client-side keypoints and return the running count together with
    the overlay segments and markers for drawing.
    """
    return await _store(request).submit_frame(session_id, payload)


@router.put("/sessions/{session_id}/exercise", response_model=SessionState)
async def switch_exercise(
    session_id: str, payload: SwitchExerciseRequest, request: Request
) -> SessionState:
    return await _store(request).switch_exercise(session_id, payload.exercise)


@router.post("/sessions/{session_id}/restart", response_model=SessionState)
async def restart_session(session_id: str, request: Request) -> SessionState:
    return await _store(request).restart(session_id)


@router.delete("/sessions/{session_id}", response_model=SessionState)
async def close_session(session_id: str, request: Request) -> SessionState:
    return await _store(request).close(session_id)
