# path: route-playback-api/app/services/frame_clock.py
"""
Host clock driven by externally supplied frame timestamps.

Frame callbacks run on the next delivered frame; deferred callbacks run on the
first frame whose timestamp reaches their due time, before that frame's frame
callbacks. Time only moves when a frame is delivered, so the same clock serves
the HTTP playback session and deterministic tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Protocol
import itertools


FrameCallback = Callable[[float], None]
DeferredCallback = Callable[[], None]


class HostClock(Protocol):
    def request_frame(self, callback: FrameCallback) -> int: ...

    def schedule(self, delay_ms: float, callback: DeferredCallback) -> int: ...

    def cancel(self, handle: int) -> None: ...


@dataclass
class _Timer:
    handle: int
    due_ms: float
    callback: DeferredCallback


@dataclass
class FrameClock:
    now_ms: Optional[float] = None
    _frames: Dict[int, FrameCallback] = field(default_factory=dict)
    _timers: Dict[int, _Timer] = field(default_factory=dict)
    _batch: Dict[int, FrameCallback] = field(default_factory=dict)
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._frames[handle] = callback
        return handle

    def schedule(self, delay_ms: float, callback: DeferredCallback) -> int:
        handle = next(self._ids)
        base = self.now_ms if self.now_ms is not None else 0.0
        self._timers[handle] = _Timer(handle=handle, due_ms=base + max(0.0, delay_ms), callback=callback)
        return handle

    def cancel(self, handle: int) -> None:
        self._frames.pop(handle, None)
        self._batch.pop(handle, None)
        self._timers.pop(handle, None)

    @property
    def pending_frames(self) -> int:
        return len(self._frames)

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    def advance(self, timestamp_ms: float) -> None:
        """Deliver one frame at `timestamp_ms`."""
        if self.now_ms is not None and timestamp_ms < self.now_ms:
            raise ValueError(f"Frame timestamp went backwards: {timestamp_ms} < {self.now_ms}")
        self.now_ms = timestamp_ms

        due: List[_Timer] = sorted(
            (t for t in self._timers.values() if t.due_ms <= timestamp_ms),
            key=lambda t: (t.due_ms, t.handle),
        )
        for timer in due:
            # A timer may have been cancelled by an earlier one in this batch.
            if self._timers.pop(timer.handle, None) is not None:
                timer.callback()

        # Requests made from inside these callbacks wait for the next frame.
        self._batch, self._frames = self._frames, {}
        try:
            for handle in sorted(self._batch):
                callback = self._batch.pop(handle, None)
                if callback is not None:
                    callback(timestamp_ms)
        finally:
            # Callbacks not reached because one raised stay queued for the next frame.
            if self._batch:
                self._frames.update(self._batch)
                self._batch = {}
