# path: route-playback-api/app/api/routes/routes.py

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from app.models.route_models import BBoxWGS84, RouteEvent, RoutePreview
from app.services.route_normalizer import (
    build_route_geometry,
    estimated_minutes,
    overlay_coordinates,
    stable_json_sha256,
)
from app.utils.geo import bbox_wgs84, path_length_km

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("", response_model=RoutePreview)
def preview_route(event: RouteEvent, request: Request) -> RoutePreview:
    # Stateless: decode and synthesize only, nothing is bound or animated.
    offset_km = request.app.state.settings.playback.camera_offset_km
    try:
        geometry = build_route_geometry(event.geometry, offset_km)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    target = overlay_coordinates(geometry.target)
    return RoutePreview(
        route_id=stable_json_sha256(event.model_dump(mode="json")),
        point_count=len(geometry.target),
        target=target,
        camera=overlay_coordinates(geometry.camera),
        target_length_km=path_length_km(geometry.target),
        camera_length_km=path_length_km(geometry.camera),
        bbox_wgs84=BBoxWGS84(**bbox_wgs84(target)),
        eta_minutes=estimated_minutes(event.duration_seconds),
    )
