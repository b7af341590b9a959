# path: route-playback-api/app/models/playback_state.py

from enum import Enum


class DriverState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
