# path: route-playback-api/app/services/animation_driver.py
"""
Frame-driven chase-camera animation over one RouteGeometry.

The driver never blocks: it does work only inside a frame callback, a restart
callback, or an explicit start/teardown call, and it talks to time only through
the injected HostClock. Each callback captures the driver's token at request
time and no-ops once teardown has moved the token on.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional
import logging

from app.core.config import PlaybackConfig
from app.models.geometry import CameraPose, RouteGeometry
from app.models.playback_state import DriverState
from app.services.frame_clock import HostClock
from app.utils.geo import bearing_between, cumulative_lengths_km, point_at_distance

logger = logging.getLogger(__name__)


@dataclass
class AnimationState:
    cycle_duration_ms: float
    restart_delay_ms: float
    start_time: Optional[float] = None
    running: bool = False


class AnimationDriver:
    """
    Advances a target cursor and a camera cursor by the same distance fraction
    of their own path lengths and emits one CameraPose per frame.

    Args:
        geometry:   Target and camera paths (at least 2 points each).
        clock:      Host clock used for frame requests and the restart delay.
        emit:       Pose sink, called once per emitted frame.
        config:     Fixed animation and camera parameters.
        generation: Identifier of this run, assigned by the owner.
    """

    def __init__(
        self,
        geometry: RouteGeometry,
        clock: HostClock,
        emit: Callable[[CameraPose], None],
        config: Optional[PlaybackConfig] = None,
        generation: int = 0,
    ) -> None:
        self.config = config or PlaybackConfig()
        self.geometry: Optional[RouteGeometry] = geometry
        self.generation = generation
        self.clock = clock
        self._emit = emit

        # Per-vertex cumulative distances, computed once per route.
        self._target_cumulative = cumulative_lengths_km(geometry.target)
        self._camera_cumulative = cumulative_lengths_km(geometry.camera)
        self.target_length_km = self._target_cumulative[-1]
        self.camera_length_km = self._camera_cumulative[-1]

        self.anim = AnimationState(
            cycle_duration_ms=self.config.cycle_duration_ms,
            restart_delay_ms=self.config.restart_delay_ms,
        )
        self.state = DriverState.IDLE
        self.last_phase: Optional[float] = None
        self.last_pose: Optional[CameraPose] = None
        self.cycles_completed = 0

        self._token = 0
        self._frame_handle: Optional[int] = None
        self._restart_handle: Optional[int] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self.geometry is None:
            raise RuntimeError("Driver was torn down; build a new one for the next route")
        if self.state != DriverState.IDLE:
            return
        self.anim.start_time = None
        self.anim.running = True
        self.state = DriverState.RUNNING
        logger.info(
            f"Generation {self.generation}: animation started "
            f"(target {self.target_length_km:.3f} km, camera {self.camera_length_km:.3f} km)."
        )
        self._request_frame()

    def teardown(self) -> None:
        """Cancel pending callbacks and release the geometry. Idempotent."""
        self._token += 1
        if self._frame_handle is not None:
            self.clock.cancel(self._frame_handle)
            self._frame_handle = None
        if self._restart_handle is not None:
            self.clock.cancel(self._restart_handle)
            self._restart_handle = None
        if self.geometry is not None:
            logger.info(f"Generation {self.generation}: animation torn down.")
        self.geometry = None
        self.anim.running = False
        self.anim.start_time = None
        self.state = DriverState.IDLE

    # ------------------------------------------------------------------
    # Host callbacks
    # ------------------------------------------------------------------

    def _request_frame(self) -> None:
        # At most one outstanding frame request per driver.
        if self._frame_handle is not None:
            self.clock.cancel(self._frame_handle)
        token = self._token
        self._frame_handle = self.clock.request_frame(lambda t: self._on_frame(token, t))

    def _on_frame(self, token: int, timestamp: float) -> None:
        if token != self._token:
            logger.debug(f"Generation {self.generation}: dropped stale frame at {timestamp}.")
            return
        self._frame_handle = None
        self.tick(timestamp)

    def _on_restart(self, token: int) -> None:
        if token != self._token:
            logger.debug(f"Generation {self.generation}: dropped stale restart.")
            return
        self._restart_handle = None
        self.anim.start_time = None
        self.anim.running = True
        self.state = DriverState.RUNNING
        logger.debug(f"Generation {self.generation}: restarting cycle {self.cycles_completed + 1}.")
        self._request_frame()

    # ------------------------------------------------------------------
    # Per-frame step
    # ------------------------------------------------------------------

    def phase_at(self, timestamp: float) -> float:
        if self.anim.start_time is None:
            return 0.0
        return max(0.0, (timestamp - self.anim.start_time) / self.anim.cycle_duration_ms)

    def tick(self, timestamp: float) -> Optional[CameraPose]:
        """
        Run one frame at host time `timestamp` (ms).

        Returns the emitted pose, or None when nothing was emitted (not
        running, or the cycle just completed and a restart was scheduled).
        """
        if self.state != DriverState.RUNNING or self.geometry is None:
            return None

        if self.anim.start_time is None:
            self.anim.start_time = timestamp
        phase = self.phase_at(timestamp)
        self.last_phase = phase

        if phase > 1.0:
            self._pause()
            return None

        pose = self.pose_at(phase)
        self.last_pose = pose
        self._emit(pose)
        self._request_frame()
        return pose

    def pose_at(self, phase: float) -> CameraPose:
        geometry = self.geometry
        if geometry is None:
            raise RuntimeError("Driver has no geometry bound")
        target_point = point_at_distance(
            geometry.target, phase * self.target_length_km, self._target_cumulative
        )
        camera_point = point_at_distance(
            geometry.camera, phase * self.camera_length_km, self._camera_cumulative
        )
        bearing = bearing_between(camera_point, target_point)
        return CameraPose(
            position=camera_point,
            altitude_m=self.config.camera_altitude_m,
            look_at=target_point,
            pitch_deg=self.config.camera_pitch_deg,
            bearing_deg=(bearing + self.config.bearing_trim_deg) % 360.0,
        )

    def _pause(self) -> None:
        self.state = DriverState.PAUSED
        self.anim.running = False
        self.anim.start_time = None
        self.cycles_completed += 1
        logger.debug(
            f"Generation {self.generation}: cycle {self.cycles_completed} complete, "
            f"restarting in {self.anim.restart_delay_ms} ms."
        )
        token = self._token
        self._restart_handle = self.clock.schedule(
            self.anim.restart_delay_ms, lambda: self._on_restart(token)
        )
