import math
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from reptrack.config import ExerciseDefinition


class KeypointModel(BaseModel):
    x: float
    y: float
    score: float = Field(1.0, ge=0.0, le=1.0, description="Landmark confidence in [0, 1].")
    name: Optional[str] = None

    @field_validator("x", "y")
    @classmethod
    def coordinates_are_finite(cls, v: float) -> float:
        if math.isnan(v) or math.isinf(v):
            raise ValueError("keypoint coordinates must be finite")
        return v


class FramePayload(BaseModel):
    """
    One frame of keypoints estimated client side. `keypoints` is null when
    inference failed for the frame; the frame is then logged and dropped.
    """
    keypoints: Optional[List[Optional[KeypointModel]]] = Field(
        ..., description="Landmarks in BlazePose index order; null entries mark absent landmarks."
    )
    frame_index: Optional[int] = Field(None, ge=0, description="Client frame counter.")
    timestamp: Optional[float] = Field(None, ge=0, description="Capture time in seconds.")
    width: Optional[int] = Field(None, gt=0, description="Source frame width in pixels.")
    height: Optional[int] = Field(None, gt=0, description="Source frame height in pixels.")
    error: Optional[str] = Field(None, description="Inference error reported by the client.")


class CreateSessionRequest(BaseModel):
    exercise: str = Field("knee", description="Exercise to count.")
    min_confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    mirror: Optional[bool] = None


class SwitchExerciseRequest(BaseModel):
    exercise: str


class SessionState(BaseModel):
    session_id: str
    exercise: str
    count: int
    frames: int = Field(0, description="Frames received so far.")


class SegmentModel(BaseModel):
    start: Optional[List[float]]
    end: Optional[List[float]]
    visible: bool


class MarkerModel(BaseModel):
    point: Optional[List[float]]
    visible: bool


class FrameResponse(BaseModel):
    count: int
    counted: bool = False
    angle: Optional[float] = None
    skipped: Optional[str] = Field(None, description="Skip reason when the frame was not evaluated.")
    segments: List[SegmentModel] = Field(default_factory=list)
    markers: List[MarkerModel] = Field(default_factory=list)


class ExerciseModel(BaseModel):
    name: str
    triplet: List[int]
    extended_min: float
    flexed_max: float
    gate_landmark: Optional[int] = None
    gate_min_x: Optional[float] = None
    gate_relative: bool = False

    @classmethod
    def from_definition(cls, definition: ExerciseDefinition) -> "ExerciseModel":
        gate = definition.gate
        return cls(
            name=definition.name,
            triplet=[int(i) for i in definition.triplet],
            extended_min=definition.extended_min,
            flexed_max=definition.flexed_max,
            gate_landmark=int(gate.landmark) if gate else None,
            gate_min_x=gate.min_x if gate else None,
            gate_relative=gate.relative if gate else False,
        )
