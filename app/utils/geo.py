# path: route-playback-api/app/utils/geo.py
# Spherical-earth geometry. Every operation here uses the same mean radius so
# target and camera cursors stay comparable.

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple, Dict
import bisect
import math

from app.models.geometry import GeoPoint


EARTH_RADIUS_KM = 6371.0088


def bbox_wgs84(points_lonlat: Iterable[Tuple[float, float]]) -> Dict[str, float]:
    points_lonlat = list(points_lonlat)
    lons = [p[0] for p in points_lonlat]
    lats = [p[1] for p in points_lonlat]
    return {
        "min_lat": min(lats),
        "min_lon": min(lons),
        "max_lat": max(lats),
        "max_lon": max(lons),
    }


def haversine_km(a_lon: float, a_lat: float, b_lon: float, b_lat: float) -> float:
    phi1 = math.radians(a_lat)
    phi2 = math.radians(b_lat)
    dphi = math.radians(b_lat - a_lat)
    dlmb = math.radians(b_lon - a_lon)

    s = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(s)))


def bearing_deg_true(a_lon: float, a_lat: float, b_lon: float, b_lat: float) -> float:
    # Initial bearing (forward azimuth), degrees true, [0,360)
    phi1 = math.radians(a_lat)
    phi2 = math.radians(b_lat)
    dlmb = math.radians(b_lon - a_lon)

    y = math.sin(dlmb) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlmb)
    brng = math.degrees(math.atan2(y, x))
    return (brng + 360.0) % 360.0


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    return haversine_km(a.longitude, a.latitude, b.longitude, b.latitude)


def bearing_between(a: GeoPoint, b: GeoPoint) -> float:
    return bearing_deg_true(a.longitude, a.latitude, b.longitude, b.latitude)


def destination_point(origin: GeoPoint, distance_km: float, bearing_deg: float) -> GeoPoint:
    """
    Great-circle projection of `origin` by `distance_km` along `bearing_deg`.
    Longitude of the result is wrapped into [-180, 180).
    """
    delta = distance_km / EARTH_RADIUS_KM
    theta = math.radians(bearing_deg)
    phi1 = math.radians(origin.latitude)
    lmb1 = math.radians(origin.longitude)

    sin_phi2 = math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta)
    phi2 = math.asin(max(-1.0, min(1.0, sin_phi2)))
    lmb2 = lmb1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )

    lon = (math.degrees(lmb2) + 540.0) % 360.0 - 180.0
    lat = max(-90.0, min(90.0, math.degrees(phi2)))
    return GeoPoint(longitude=lon, latitude=lat)


def segment_lengths_km(path: Sequence[GeoPoint]) -> List[float]:
    return [distance_km(path[i - 1], path[i]) for i in range(1, len(path))]


def path_length_km(path: Sequence[GeoPoint]) -> float:
    return sum(segment_lengths_km(path))


def cumulative_lengths_km(path: Sequence[GeoPoint]) -> List[float]:
    """Distance from path[0] to each vertex; first entry 0.0, last entry the path length."""
    out = [0.0] if path else []
    for seg_len in segment_lengths_km(path):
        out.append(out[-1] + seg_len)
    return out


def point_at_distance(
    path: Sequence[GeoPoint],
    distance: float,
    cumulative: Optional[Sequence[float]] = None,
) -> GeoPoint:
    """
    Point `distance` km along `path`, clamped to [0, length].

    `cumulative` is the path's cumulative_lengths_km(); pass it in when the
    same path is queried repeatedly. The endpoints are returned as-is (no
    projection round-off), and a zero-length path yields its first point for
    every distance.
    """
    if not path:
        raise ValueError("Path must contain at least 1 point")
    if cumulative is None:
        cumulative = cumulative_lengths_km(path)
    elif len(cumulative) != len(path):
        raise ValueError(f"cumulative lengths ({len(cumulative)}) do not match path ({len(path)})")

    total = cumulative[-1]
    if total <= 0.0 or distance <= 0.0:
        return path[0]
    if distance >= total:
        return path[-1]

    # First vertex at or beyond `distance`; the segment ending there is never zero-length.
    i = bisect.bisect_left(cumulative, distance)
    a, b = path[i - 1], path[i]
    remaining = distance - cumulative[i - 1]
    if remaining >= cumulative[i] - cumulative[i - 1]:
        return b
    return destination_point(a, remaining, bearing_between(a, b))
