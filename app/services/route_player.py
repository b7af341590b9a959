# path: route-playback-api/app/services/route_player.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol
import logging
import threading

from app.core.config import PlaybackConfig
from app.core.errors import DecodeError, DegenerateRouteError, PlaybackNotBoundError
from app.models.geometry import CameraPose, RouteGeometry
from app.models.playback_state import DriverState
from app.services.animation_driver import AnimationDriver
from app.services.frame_clock import FrameClock
from app.services.route_normalizer import (
    build_route_geometry,
    estimated_minutes,
    overlay_coordinates,
    stable_json_sha256,
)

logger = logging.getLogger(__name__)


class RouteView(Protocol):
    """External rendering/camera collaborator."""

    def set_overlay(self, coordinates: List[List[float]]) -> None: ...

    def set_eta_minutes(self, minutes: Optional[float]) -> None: ...

    def set_pose(self, pose: CameraPose) -> None: ...


@dataclass
class ViewState:
    """In-memory RouteView; what a front-end would read back."""
    overlay: List[List[float]] = field(default_factory=list)
    eta_minutes: Optional[float] = None
    pose: Optional[CameraPose] = None
    pose_count: int = 0

    def set_overlay(self, coordinates: List[List[float]]) -> None:
        # Replace, never append.
        self.overlay = [list(c) for c in coordinates]

    def set_eta_minutes(self, minutes: Optional[float]) -> None:
        self.eta_minutes = minutes

    def set_pose(self, pose: CameraPose) -> None:
        self.pose = pose
        self.pose_count += 1


@dataclass
class FrameResult:
    state: DriverState
    phase: Optional[float]
    pose: Optional[CameraPose]


class RoutePlayer:
    """
    Owns the single active AnimationDriver and binds route events to it.

    Every bind bumps `generation`; the pose sink handed to a driver remembers
    the generation it was created for and drops poses once it is superseded.

    The API serves requests from a threadpool, so bind_route, frame and
    teardown hold `lock`; a frame never sees a half-replaced route. Readers
    of several fields at once should hold it too.

    Args:
        clock:  Host clock shared by every driver this player creates.
        view:   Rendering/camera collaborator.
        config: Playback parameters for new drivers.
    """

    def __init__(
        self,
        clock: Optional[FrameClock] = None,
        view: Optional[RouteView] = None,
        config: Optional[PlaybackConfig] = None,
    ) -> None:
        self.clock = clock or FrameClock()
        self.view = view if view is not None else ViewState()
        self.config = config or PlaybackConfig()

        self.generation = 0
        self.driver: Optional[AnimationDriver] = None
        self.route_id: Optional[str] = None
        self.eta_minutes: Optional[float] = None
        self._frame_poses: List[CameraPose] = []
        self.lock = threading.RLock()

    @property
    def state(self) -> DriverState:
        return self.driver.state if self.driver is not None else DriverState.IDLE

    @property
    def geometry(self) -> Optional[RouteGeometry]:
        return self.driver.geometry if self.driver is not None else None

    # ------------------------------------------------------------------
    # Route events
    # ------------------------------------------------------------------

    def bind_route(self, encoded: str, duration_seconds: float) -> AnimationDriver:
        """
        Replace the bound route with a new one and start animating it.

        On DecodeError / DegenerateRouteError the current route and animation
        are left as they were. A degenerate route still shows its single
        point as overlay when nothing else is bound.
        """
        try:
            geometry = build_route_geometry(encoded, self.config.camera_offset_km)
        except DegenerateRouteError as e:
            logger.warning(f"Rejected degenerate route: {e}")
            with self.lock:
                if self.driver is None and e.points:
                    self.view.set_overlay(overlay_coordinates(e.points))
            raise
        except DecodeError as e:
            logger.warning(f"Rejected undecodable route: {e}")
            raise

        with self.lock:
            return self._replace(geometry, encoded, duration_seconds)

    def _replace(self, geometry: RouteGeometry, encoded: str, duration_seconds: float) -> AnimationDriver:
        self._retire()

        self.generation += 1
        generation = self.generation
        self.route_id = stable_json_sha256({"geometry": encoded, "duration_seconds": duration_seconds})
        self.eta_minutes = estimated_minutes(duration_seconds)

        self.view.set_overlay(overlay_coordinates(geometry.target))
        self.view.set_eta_minutes(self.eta_minutes)

        self.driver = AnimationDriver(
            geometry,
            self.clock,
            emit=lambda pose: self._emit(generation, pose),
            config=self.config,
            generation=generation,
        )
        logger.info(
            f"Bound route {self.route_id[:19]} as generation {generation} "
            f"({len(geometry.target)} points, eta {self.eta_minutes} min)."
        )
        self.driver.start()
        return self.driver

    def teardown(self) -> None:
        """Owning view goes away: stop animating and clear what was published."""
        with self.lock:
            self._retire()
            self.generation += 1
            self.route_id = None
            self.eta_minutes = None
            self.view.set_overlay([])
            self.view.set_eta_minutes(None)

    def _retire(self) -> None:
        if self.driver is not None:
            self.driver.teardown()
            self.driver = None

    def _emit(self, generation: int, pose: CameraPose) -> None:
        if generation != self.generation or self.driver is None:
            logger.debug(f"Dropped pose from superseded generation {generation}.")
            return
        self._frame_poses.append(pose)
        self.view.set_pose(pose)

    # ------------------------------------------------------------------
    # Host frames
    # ------------------------------------------------------------------

    def frame(self, timestamp_ms: float) -> FrameResult:
        """Deliver one host frame and report what it produced."""
        with self.lock:
            if self.driver is None:
                raise PlaybackNotBoundError("No route is bound to the playback session")
            self._frame_poses = []
            self.clock.advance(timestamp_ms)
            pose = self._frame_poses[-1] if self._frame_poses else None
            phase = self.driver.last_phase if self.driver is not None else None
            return FrameResult(state=self.state, phase=phase, pose=pose)
