# path: route-playback-api/app/api/routes/playback.py

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from app.core.errors import PlaybackNotBoundError
from app.models.route_models import (
    CameraPoseModel,
    FrameRequest,
    FrameResponse,
    PlaybackStatus,
    RouteEvent,
)
from app.services.route_player import RoutePlayer, ViewState

router = APIRouter(prefix="/playback", tags=["playback"])


def get_player(request: Request) -> RoutePlayer:
    return request.app.state.player


def _status(player: RoutePlayer) -> PlaybackStatus:
    view: ViewState = player.view
    with player.lock:
        return PlaybackStatus(
            state=player.state,
            generation=player.generation,
            route_id=player.route_id,
            overlay=view.overlay,
            eta_minutes=view.eta_minutes,
            pose=CameraPoseModel.from_pose(player.driver.last_pose) if player.driver is not None else None,
        )


@router.post("", response_model=PlaybackStatus)
def bind_route(event: RouteEvent, player: RoutePlayer = Depends(get_player)) -> PlaybackStatus:
    try:
        player.bind_route(event.geometry, event.duration_seconds)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _status(player)


@router.get("", response_model=PlaybackStatus)
def get_status(player: RoutePlayer = Depends(get_player)) -> PlaybackStatus:
    return _status(player)


@router.post("/frames", response_model=FrameResponse)
def deliver_frame(frame: FrameRequest, player: RoutePlayer = Depends(get_player)) -> FrameResponse:
    try:
        result = player.frame(frame.timestamp_ms)
    except PlaybackNotBoundError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        # Timestamp older than the last delivered frame.
        raise HTTPException(status_code=400, detail=str(e))
    return FrameResponse(
        state=result.state,
        generation=player.generation,
        phase=result.phase,
        pose=CameraPoseModel.from_pose(result.pose),
    )


@router.delete("", response_model=PlaybackStatus)
def teardown(player: RoutePlayer = Depends(get_player)) -> PlaybackStatus:
    player.teardown()
    return _status(player)
