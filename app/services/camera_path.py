# path: route-playback-api/app/services/camera_path.py

from __future__ import annotations

from typing import Optional, Sequence

from app.models.geometry import GeoPoint, Path
from app.utils.geo import bearing_between, destination_point


DEFAULT_OFFSET_KM = 0.01


def synthesize(target: Sequence[GeoPoint], offset_km: float = DEFAULT_OFFSET_KM) -> Path:
    """
    Chase-camera path: each vertex i >= 1 is the predecessor target[i-1]
    pushed `offset_km` along the bearing target[i-1] -> target[i], so the
    camera trails the route. The first vertex is copied unchanged.

    A zero-length segment has no bearing of its own; it reuses the last valid
    bearing, or 0 degrees when no segment so far had one.
    """
    if not target:
        return ()

    out = [target[0]]
    last_bearing: Optional[float] = None
    for i in range(1, len(target)):
        prev, cur = target[i - 1], target[i]
        if prev == cur:
            bearing = last_bearing if last_bearing is not None else 0.0
        else:
            bearing = bearing_between(prev, cur)
            last_bearing = bearing
        out.append(destination_point(prev, offset_km, bearing))
    return tuple(out)
