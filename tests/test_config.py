from __future__ import annotations

import pytest

from aistrack.config import CoordinateOrder, TrackerConfig
from aistrack.exceptions import AisConfigError

_ENV_KEYS = (
    "AIS_MMSI",
    "AIS_STREAM_KEY",
    "AIS_STREAM_URL",
    "CMS_HOST_URL",
    "CMS_EMAIL",
    "CMS_PASSWORD",
    "CMS_LOGIN_PATH",
    "CMS_COLLECTION_PATH",
    "CMS_CREATED_AT_OPERATOR",
    "AIS_KEEPALIVE_INTERVAL",
    "AIS_INACTIVITY_INTERVAL",
    "AIS_RECONNECT_BASE_DELAY",
    "AIS_RECONNECT_MAX_DELAY",
    "PORT",
    "AIS_COORDINATE_ORDER",
    "AIS_HEALTH_ENABLED",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AIS_MMSI", " 308015000 ")

    config = TrackerConfig.from_env()

    assert config.mmsi == "308015000"
    assert config.stream_api_key is None
    assert config.stream_url == "wss://stream.aisstream.io/v0/stream"
    assert config.cms_host_url is None
    assert config.login_url is None
    assert config.collection_url is None
    assert not config.has_cms_credentials
    assert config.created_at_operator == "gte"
    assert config.coordinate_order is CoordinateOrder.LAT_LON
    assert config.port == 3000
    assert config.health_enabled is True
    assert config.keepalive_interval == 25
    assert config.inactivity_interval == 300
    assert (config.reconnect_base_delay, config.reconnect_max_delay) == (1, 30)


def test_from_env_reads_all_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AIS_MMSI", "308015000")
    monkeypatch.setenv("AIS_STREAM_KEY", "key")
    monkeypatch.setenv("CMS_HOST_URL", "https://cms.example.com")
    monkeypatch.setenv("CMS_EMAIL", "ops@example.com")
    monkeypatch.setenv("CMS_PASSWORD", "secret")
    monkeypatch.setenv("CMS_CREATED_AT_OPERATOR", "greater_than_equal")
    monkeypatch.setenv("AIS_RECONNECT_BASE_DELAY", "0.5")
    monkeypatch.setenv("AIS_RECONNECT_MAX_DELAY", "10")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("AIS_COORDINATE_ORDER", "LON_LAT")
    monkeypatch.setenv("AIS_HEALTH_ENABLED", "off")

    config = TrackerConfig.from_env()

    assert config.stream_api_key == "key"
    assert config.login_url == "https://cms.example.com/api/users/login"
    assert config.collection_url == "https://cms.example.com/api/collections/ais-logs"
    assert config.has_cms_credentials
    assert config.created_at_operator == "greater_than_equal"
    assert (config.reconnect_base_delay, config.reconnect_max_delay) == (0.5, 10.0)
    assert config.port == 8080
    assert config.coordinate_order is CoordinateOrder.LON_LAT
    assert config.health_enabled is False


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AIS_MMSI", "111")
    monkeypatch.setenv("PORT", "8080")

    config = TrackerConfig.from_env(mmsi="222", port=9000)

    assert config.mmsi == "222"
    assert config.port == 9000


def test_blank_variables_count_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AIS_MMSI", "308015000")
    monkeypatch.setenv("CMS_HOST_URL", "   ")

    assert TrackerConfig.from_env().cms_host_url is None


def test_missing_mmsi_raises() -> None:
    with pytest.raises(AisConfigError, match="AIS_MMSI"):
        TrackerConfig.from_env()


@pytest.mark.parametrize(
    ("key", "value"),
    [("PORT", "http"), ("AIS_COORDINATE_ORDER", "north_first"), ("AIS_RECONNECT_MAX_DELAY", "soon")],
)
def test_invalid_values_raise_config_error(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv("AIS_MMSI", "308015000")
    monkeypatch.setenv(key, value)

    with pytest.raises(AisConfigError):
        TrackerConfig.from_env()


def test_host_with_base_path_is_joined() -> None:
    config = TrackerConfig(mmsi="1", cms_host_url="https://cms.example.com/", collection_path="/api/ais")
    assert config.collection_url == "https://cms.example.com/api/ais"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"mmsi": " "},
        {"mmsi": "1", "keepalive_interval": 0},
        {"mmsi": "1", "reconnect_base_delay": 5, "reconnect_max_delay": 1},
    ],
)
def test_invalid_construction_raises(kwargs: dict[str, object]) -> None:
    with pytest.raises(AisConfigError):
        TrackerConfig(**kwargs)  # type: ignore[arg-type]
