# path: route-playback-api/app/main.py

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from app.api.routes.map_settings import router as map_settings_router
from app.api.routes.playback import router as playback_router
from app.api.routes.routes import router as routes_router
from app.core.config import Settings, load_settings
from app.core.logging_config import configure_logging
from app.services.frame_clock import FrameClock
from app.services.route_player import RoutePlayer, ViewState


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="route-playback-api")
    app.state.settings = settings
    app.state.player = RoutePlayer(clock=FrameClock(), view=ViewState(), config=settings.playback)

    app.include_router(routes_router)
    app.include_router(playback_router)
    app.include_router(map_settings_router)

    @app.get("/health", tags=["health"])
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
