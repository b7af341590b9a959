import pytest

from app.core.config import PlaybackConfig
from app.models.geometry import GeoPoint, RouteGeometry
from app.services.animation_driver import AnimationDriver, DriverState
from app.services.camera_path import synthesize
from app.services.frame_clock import FrameClock
from app.services.route_normalizer import normalize
from app.utils.geo import bearing_between, point_at_distance

T0 = 10_000.0


@pytest.fixture
def config():
    return PlaybackConfig(cycle_duration_ms=1000, restart_delay_ms=1500)


@pytest.fixture
def geometry(islamabad_latlon):
    target = normalize(islamabad_latlon)
    return RouteGeometry(target=target, camera=synthesize(target, 0.01))


@pytest.fixture
def clock():
    return FrameClock()


@pytest.fixture
def emitted():
    return []


@pytest.fixture
def driver(geometry, clock, emitted, config):
    d = AnimationDriver(geometry, clock, emit=emitted.append, config=config)
    d.start()
    return d


def assert_same_point(a: GeoPoint, b: GeoPoint):
    assert a.longitude == pytest.approx(b.longitude, abs=1e-12)
    assert a.latitude == pytest.approx(b.latitude, abs=1e-12)


def test_start_requests_a_frame(driver, clock):
    assert driver.state == DriverState.RUNNING
    assert driver.anim.running is True
    assert driver.anim.start_time is None
    assert clock.pending_frames == 1


def test_first_tick_is_phase_zero(driver, clock, emitted, geometry, config):
    clock.advance(T0)
    assert driver.anim.start_time == T0
    assert driver.last_phase == 0.0
    assert len(emitted) == 1
    pose = emitted[0]
    assert pose.look_at == geometry.target[0]
    assert pose.position == geometry.camera[0]
    assert pose.altitude_m == config.camera_altitude_m
    assert pose.pitch_deg == config.camera_pitch_deg


def test_half_cycle_is_half_way_along_both_paths(driver, clock, emitted, geometry):
    clock.advance(T0)
    clock.advance(T0 + 500)
    assert driver.last_phase == pytest.approx(0.5)
    pose = emitted[-1]
    assert_same_point(pose.look_at, point_at_distance(geometry.target, 0.5 * driver.target_length_km))
    assert_same_point(pose.position, point_at_distance(geometry.camera, 0.5 * driver.camera_length_km))


def test_bearing_includes_trim(driver, clock, emitted, config):
    clock.advance(T0)
    clock.advance(T0 + 300)
    pose = emitted[-1]
    expected = (bearing_between(pose.position, pose.look_at) + config.bearing_trim_deg) % 360.0
    assert pose.bearing_deg == pytest.approx(expected)
    assert 0.0 <= pose.bearing_deg < 360.0


def test_phase_one_reaches_last_point(driver, clock, emitted, geometry):
    clock.advance(T0)
    clock.advance(T0 + 1000)
    assert driver.state == DriverState.RUNNING
    assert emitted[-1].look_at == geometry.target[-1]
    assert emitted[-1].position == geometry.camera[-1]


def test_completed_cycle_pauses_without_pose(driver, clock, emitted):
    clock.advance(T0)
    clock.advance(T0 + 500)
    clock.advance(T0 + 1001)
    assert len(emitted) == 2
    assert driver.state == DriverState.PAUSED
    assert driver.anim.start_time is None
    assert driver.anim.running is False
    assert driver.cycles_completed == 1
    assert clock.pending_frames == 0
    assert clock.pending_timers == 1


def test_restart_after_delay_loops_from_start(driver, clock, emitted, geometry):
    clock.advance(T0)
    clock.advance(T0 + 1001)

    # Restart not yet due.
    clock.advance(T0 + 2000)
    assert driver.state == DriverState.PAUSED
    assert len(emitted) == 1

    clock.advance(T0 + 2600)
    assert driver.state == DriverState.RUNNING
    assert driver.anim.start_time == T0 + 2600
    assert driver.last_phase == 0.0
    assert len(emitted) == 2
    assert emitted[-1].look_at == geometry.target[0]

    clock.advance(T0 + 3100)
    assert driver.last_phase == pytest.approx(0.5)


def test_teardown_cancels_pending_callbacks(driver, clock, emitted):
    clock.advance(T0)
    driver.teardown()
    assert driver.state == DriverState.IDLE
    assert driver.geometry is None
    assert clock.pending_frames == 0
    clock.advance(T0 + 100)
    assert len(emitted) == 1


def test_teardown_cancels_pending_restart(driver, clock, emitted):
    clock.advance(T0)
    clock.advance(T0 + 1001)
    driver.teardown()
    assert clock.pending_timers == 0
    clock.advance(T0 + 5000)
    assert len(emitted) == 1


def test_stale_callbacks_do_nothing_after_teardown(geometry, recording_clock, emitted, config):
    d = AnimationDriver(geometry, recording_clock, emit=emitted.append, config=config)
    d.start()
    stale_frame = recording_clock.frames[-1]
    d.teardown()
    stale_frame(T0)
    assert emitted == []


def test_stale_restart_does_nothing_after_teardown(geometry, recording_clock, emitted, config):
    d = AnimationDriver(geometry, recording_clock, emit=emitted.append, config=config)
    d.start()
    recording_clock.frames[-1](T0)
    recording_clock.frames[-1](T0 + 1001)
    assert d.state == DriverState.PAUSED
    _, restart = recording_clock.timers[-1]
    frames_before = len(recording_clock.frames)

    d.teardown()
    restart()
    assert d.state == DriverState.IDLE
    assert len(recording_clock.frames) == frames_before


def test_tick_while_idle_emits_nothing(geometry, clock, emitted, config):
    d = AnimationDriver(geometry, clock, emit=emitted.append, config=config)
    assert d.tick(T0) is None
    assert emitted == []


def test_start_after_teardown_raises(driver):
    driver.teardown()
    with pytest.raises(RuntimeError):
        driver.start()


def test_ticks_reuse_cached_segment_lengths(geometry, clock, emitted, config, monkeypatch):
    from app.utils import geo

    d = AnimationDriver(geometry, clock, emit=emitted.append, config=config)
    calls = []
    original = geo.segment_lengths_km

    def counting(path):
        calls.append(path)
        return original(path)

    monkeypatch.setattr(geo, "segment_lengths_km", counting)
    d.start()
    clock.advance(T0)
    clock.advance(T0 + 250)
    clock.advance(T0 + 750)
    assert len(emitted) == 3
    assert calls == []
