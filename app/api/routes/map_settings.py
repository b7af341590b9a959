# path: route-playback-api/app/api/routes/map_settings.py

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(prefix="/map", tags=["map"])


@router.get("/settings")
def get_map_settings(request: Request) -> dict:
    # Initial view, style and routing options for the front-end map.
    return request.app.state.settings.map.public_dict()
