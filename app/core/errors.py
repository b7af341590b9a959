# path: route-playback-api/app/core/errors.py

from __future__ import annotations


class DecodeError(ValueError):
    """Malformed encoded path: truncated varint, bad character or out-of-range coordinate."""


class DegenerateRouteError(ValueError):
    """Route has fewer than 2 points and cannot be animated."""

    def __init__(self, message: str, points=None):
        super().__init__(message)
        # Whatever did decode; still usable as a single-point overlay.
        self.points = list(points or [])


class PlaybackNotBoundError(RuntimeError):
    """Frame delivered while no route is bound to the playback session."""
