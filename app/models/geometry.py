# path: route-playback-api/app/models/geometry.py
# Core value types shared by the geometry service, camera synthesis and the driver.

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class GeoPoint:
    """Immutable geographic coordinate in (lon, lat) order."""
    longitude: float
    latitude: float

    def __post_init__(self):
        if not (-180.0 <= self.longitude <= 180.0):
            raise ValueError(f"lon out of range [-180,180]: {self.longitude}")
        if not (-90.0 <= self.latitude <= 90.0):
            raise ValueError(f"lat out of range [-90,90]: {self.latitude}")

    def lonlat(self) -> Tuple[float, float]:
        return (self.longitude, self.latitude)


# Ordered, index-addressable; index order = traversal order.
Path = Tuple[GeoPoint, ...]


@dataclass(frozen=True)
class RouteGeometry:
    """Target route plus the synthesized chase-camera path; read-only once built."""
    target: Path
    camera: Path

    def __post_init__(self):
        if len(self.target) != len(self.camera):
            raise ValueError(
                f"target and camera paths differ in length: {len(self.target)} != {len(self.camera)}"
            )


@dataclass(frozen=True)
class CameraPose:
    position: GeoPoint
    altitude_m: float
    look_at: GeoPoint
    pitch_deg: float
    bearing_deg: float

    def to_dict(self) -> dict:
        return {
            "position": {
                "lon": self.position.longitude,
                "lat": self.position.latitude,
                "altitude_m": self.altitude_m,
            },
            "look_at": {"lon": self.look_at.longitude, "lat": self.look_at.latitude},
            "pitch_deg": self.pitch_deg,
            "bearing_deg": self.bearing_deg,
        }
