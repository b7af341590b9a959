# path: route-playback-api/app/models/route_models.py

from __future__ import annotations

from typing import List, Optional, Tuple
from pydantic import BaseModel, Field, field_validator

from app.models.geometry import CameraPose
from app.models.playback_state import DriverState


class RouteEvent(BaseModel):
    geometry: str = Field(min_length=1, description="Encoded polyline, precision 1e5")
    duration_seconds: float = Field(ge=0)

    @field_validator("geometry")
    @classmethod
    def strip_geometry(cls, value: str) -> str:
        # Encoded polylines never contain whitespace; clients sometimes add a trailing newline.
        value = value.strip()
        if not value:
            raise ValueError("geometry must not be blank")
        return value


class FrameRequest(BaseModel):
    timestamp_ms: float = Field(ge=0)


class BBoxWGS84(BaseModel):
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float


class PositionModel(BaseModel):
    lon: float
    lat: float
    altitude_m: float


class LookAtModel(BaseModel):
    lon: float
    lat: float


class CameraPoseModel(BaseModel):
    position: PositionModel
    look_at: LookAtModel
    pitch_deg: float = Field(ge=0, le=90)
    bearing_deg: float = Field(ge=0, le=360)

    @classmethod
    def from_pose(cls, pose: Optional[CameraPose]) -> Optional["CameraPoseModel"]:
        if pose is None:
            return None
        return cls.model_validate(pose.to_dict())


class RoutePreview(BaseModel):
    route_id: str
    point_count: int = Field(ge=2)
    target: List[Tuple[float, float]]  # (lon, lat)
    camera: List[Tuple[float, float]]  # (lon, lat)
    target_length_km: float = Field(ge=0)
    camera_length_km: float = Field(ge=0)
    bbox_wgs84: BBoxWGS84
    eta_minutes: float = Field(ge=0)


class PlaybackStatus(BaseModel):
    state: DriverState
    generation: int
    route_id: Optional[str] = None
    overlay: List[Tuple[float, float]] = Field(default_factory=list)  # (lon, lat)
    eta_minutes: Optional[float] = None
    pose: Optional[CameraPoseModel] = None


class FrameResponse(BaseModel):
    state: DriverState
    generation: int
    phase: Optional[float] = None
    pose: Optional[CameraPoseModel] = None
