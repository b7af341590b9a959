import pytest

from app.core.config import PlaybackConfig, RoutingProfile, Units, load_settings


def test_defaults_from_empty_env():
    settings = load_settings({})
    assert settings.playback == PlaybackConfig()
    assert settings.playback.cycle_duration_ms == 110_000.0
    assert settings.playback.restart_delay_ms == 1_500.0
    assert settings.map.access_token is None
    assert settings.map.profile == RoutingProfile.DRIVING_TRAFFIC
    assert settings.log_level == "INFO"


def test_env_overrides():
    settings = load_settings({
        "MAPBOX_ACCESS_TOKEN": "pk.abc",
        "MAP_CENTER": "73.0479, 33.6844",
        "MAP_ZOOM": "12",
        "ROUTING_PROFILE": "walking",
        "ROUTING_UNITS": "imperial",
        "PLAYBACK_CYCLE_DURATION_MS": "60000",
        "CAMERA_PITCH_DEG": "60",
        "CAMERA_OFFSET_KM": "0.02",
        "LOG_LEVEL": "debug",
    })
    assert settings.map.access_token == "pk.abc"
    assert settings.map.center == (73.0479, 33.6844)
    assert settings.map.zoom == 12.0
    assert settings.map.profile == RoutingProfile.WALKING
    assert settings.map.units == Units.IMPERIAL
    assert settings.playback.cycle_duration_ms == 60_000.0
    assert settings.playback.camera_pitch_deg == 60.0
    assert settings.playback.camera_offset_km == 0.02
    assert settings.log_level == "debug"


@pytest.mark.parametrize("env", [
    {"PLAYBACK_CYCLE_DURATION_MS": "fast"},
    {"PLAYBACK_CYCLE_DURATION_MS": "0"},
    {"PLAYBACK_RESTART_DELAY_MS": "-1"},
    {"CAMERA_PITCH_DEG": "95"},
    {"MAP_CENTER": "1,2,3"},
    {"MAP_CENTER": "200,0"},
    {"ROUTING_PROFILE": "flying"},
])
def test_invalid_env_raises(env):
    with pytest.raises(ValueError):
        load_settings(env)
