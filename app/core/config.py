# path: route-playback-api/app/core/config.py
# All tuneable settings in one place.
# The geometry/animation core only ever sees PlaybackConfig.

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Tuple
import os

from dotenv import load_dotenv


DEFAULT_STYLE_URL = "mapbox://styles/mapbox/streets-v11"
DEFAULT_CENTER: Tuple[float, float] = (-74.5, 40.0)  # (lon, lat)
DEFAULT_ZOOM = 9.0


class RoutingProfile(str, Enum):
    DRIVING = "driving"
    DRIVING_TRAFFIC = "driving-traffic"
    WALKING = "walking"
    CYCLING = "cycling"


class Units(str, Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"


class ControlPosition(str, Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"


@dataclass(frozen=True)
class PlaybackConfig:
    # Animation loop
    cycle_duration_ms: float = 110_000.0
    restart_delay_ms: float = 1_500.0

    # Camera pose
    camera_altitude_m: float = 50.0
    camera_pitch_deg: float = 75.0
    bearing_trim_deg: float = 10.0     # added to the camera->target bearing

    # Camera path synthesis
    camera_offset_km: float = 0.01     # ~10 m behind each vertex

    def __post_init__(self):
        if self.cycle_duration_ms <= 0:
            raise ValueError(f"cycle_duration_ms must be > 0: {self.cycle_duration_ms}")
        if self.restart_delay_ms < 0:
            raise ValueError(f"restart_delay_ms must be >= 0: {self.restart_delay_ms}")
        if not (0.0 <= self.camera_pitch_deg <= 90.0):
            raise ValueError(f"camera_pitch_deg out of range [0,90]: {self.camera_pitch_deg}")
        if self.camera_offset_km < 0:
            raise ValueError(f"camera_offset_km must be >= 0: {self.camera_offset_km}")


@dataclass(frozen=True)
class MapSettings:
    """Settings of the external map/routing collaborator (never read by the core)."""
    access_token: Optional[str] = None
    style_url: str = DEFAULT_STYLE_URL
    center: Tuple[float, float] = DEFAULT_CENTER
    zoom: float = DEFAULT_ZOOM
    navigation_control_position: ControlPosition = ControlPosition.TOP_RIGHT
    profile: RoutingProfile = RoutingProfile.DRIVING_TRAFFIC
    units: Units = Units.METRIC

    def public_dict(self) -> dict:
        return {
            "access_token": self.access_token,
            "style_url": self.style_url,
            "center": list(self.center),
            "zoom": self.zoom,
            "navigation_control_position": self.navigation_control_position.value,
            "profile": self.profile.value,
            "units": self.units.value,
        }


@dataclass(frozen=True)
class Settings:
    map: MapSettings = field(default_factory=MapSettings)
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)
    log_level: str = "INFO"


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}")


def _center(raw: Optional[str]) -> Tuple[float, float]:
    if not raw:
        return DEFAULT_CENTER
    parts = [p.strip() for p in raw.split(",")]
    if len(parts) != 2:
        raise ValueError(f"MAP_CENTER must be 'lon,lat', got {raw!r}")
    lon, lat = float(parts[0]), float(parts[1])
    if not (-180.0 <= lon <= 180.0) or not (-90.0 <= lat <= 90.0):
        raise ValueError(f"MAP_CENTER out of range: {raw!r}")
    return (lon, lat)


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    A .env file in the working directory is loaded first when reading the
    process environment; pass an explicit mapping to bypass both.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    map_settings = MapSettings(
        access_token=env.get("MAPBOX_ACCESS_TOKEN") or None,
        style_url=env.get("MAP_STYLE_URL") or DEFAULT_STYLE_URL,
        center=_center(env.get("MAP_CENTER")),
        zoom=_float(env, "MAP_ZOOM", DEFAULT_ZOOM),
        profile=RoutingProfile(env.get("ROUTING_PROFILE") or RoutingProfile.DRIVING_TRAFFIC.value),
        units=Units(env.get("ROUTING_UNITS") or Units.METRIC.value),
    )

    defaults = PlaybackConfig()
    playback = PlaybackConfig(
        cycle_duration_ms=_float(env, "PLAYBACK_CYCLE_DURATION_MS", defaults.cycle_duration_ms),
        restart_delay_ms=_float(env, "PLAYBACK_RESTART_DELAY_MS", defaults.restart_delay_ms),
        camera_altitude_m=_float(env, "CAMERA_ALTITUDE_M", defaults.camera_altitude_m),
        camera_pitch_deg=_float(env, "CAMERA_PITCH_DEG", defaults.camera_pitch_deg),
        bearing_trim_deg=_float(env, "CAMERA_BEARING_TRIM_DEG", defaults.bearing_trim_deg),
        camera_offset_km=_float(env, "CAMERA_OFFSET_KM", defaults.camera_offset_km),
    )

    return Settings(map=map_settings, playback=playback, log_level=env.get("LOG_LEVEL") or "INFO")
