# path: route-playback-api/app/services/route_normalizer.py

from __future__ import annotations

from typing import List, Sequence, Tuple
import hashlib
import json
import logging

from app.core.errors import DecodeError, DegenerateRouteError
from app.models.geometry import GeoPoint, Path, RouteGeometry
from app.services.camera_path import DEFAULT_OFFSET_KM, synthesize
from app.utils.polyline import decode

logger = logging.getLogger(__name__)

MIN_ROUTE_POINTS = 2


def stable_json_sha256(obj) -> str:
    data = json.dumps(obj, separators=(",", ":"), sort_keys=True).encode("utf-8")
    return "sha256:" + hashlib.sha256(data).hexdigest()


def normalize(points_latlon: Sequence[Tuple[float, float]]) -> Path:
    """(lat, lon) pairs -> GeoPoints in (lon, lat) order. 1:1, order preserved."""
    try:
        return tuple(GeoPoint(longitude=lon, latitude=lat) for (lat, lon) in points_latlon)
    except ValueError as e:
        raise DecodeError(str(e)) from e


def decode_path(encoded: str) -> Path:
    return normalize(decode(encoded))


def ensure_animatable(path: Sequence[GeoPoint]) -> None:
    if len(path) < MIN_ROUTE_POINTS:
        raise DegenerateRouteError(
            f"Route has {len(path)} point(s); at least {MIN_ROUTE_POINTS} are required",
            points=path,
        )


def build_route_geometry(encoded: str, offset_km: float = DEFAULT_OFFSET_KM) -> RouteGeometry:
    """
    encoded route -> decode -> normalize -> target path -> synthesize -> camera path.

    Raises DecodeError or DegenerateRouteError; nothing is built on failure.
    """
    target = decode_path(encoded)
    ensure_animatable(target)
    camera = synthesize(target, offset_km)
    logger.debug(f"Built route geometry with {len(target)} points (camera offset {offset_km} km).")
    return RouteGeometry(target=target, camera=camera)


def estimated_minutes(duration_seconds: float) -> float:
    return round(duration_seconds / 60.0, 2)


def overlay_coordinates(path: Sequence[GeoPoint]) -> List[List[float]]:
    return [list(p.lonlat()) for p in path]
