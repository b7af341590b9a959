import pytest

from app.utils.polyline import encode


# (lat, lon), as a routing service would return them
ISLAMABAD_LATLON = [(33.6844, 73.0479), (33.70, 73.05), (33.72, 73.06)]


@pytest.fixture
def islamabad_latlon():
    return list(ISLAMABAD_LATLON)


@pytest.fixture
def islamabad_encoded():
    return encode(ISLAMABAD_LATLON)


class RecordingClock:
    """Host clock that keeps every callback and ignores cancel()."""

    def __init__(self):
        self.frames = []
        self.timers = []
        self.cancelled = []

    def request_frame(self, callback):
        self.frames.append(callback)
        return len(self.frames)

    def schedule(self, delay_ms, callback):
        self.timers.append((delay_ms, callback))
        return -len(self.timers)

    def cancel(self, handle):
        self.cancelled.append(handle)


@pytest.fixture
def recording_clock():
    return RecordingClock()
