"""Tracker configuration for aistrack."""

from __future__ import annotations

import dataclasses
import enum
import os
from typing import Any
from urllib.parse import urljoin

from aistrack import _constants
from aistrack.exceptions import AisConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_optional(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class CoordinateOrder(enum.StrEnum):
    """Component order of the ``location`` pair exchanged with the store.

    The same order is used to write new entries and to compare stored
    entries against incoming reports.
    """

    LAT_LON = "lat_lon"
    LON_LAT = "lon_lat"

    def pair(self, latitude: float, longitude: float) -> tuple[float, float]:
        if self is CoordinateOrder.LON_LAT:
            return (longitude, latitude)
        return (latitude, longitude)


@dataclasses.dataclass(frozen=True)
class TrackerConfig:
    """Tracker configuration.

    Parameters
    ----------
    mmsi : str
        MMSI of the single tracked vessel.
    stream_api_key : str or None
        aisstream.io API key. Without it the stream connects but no
        subscription is sent.
    stream_url : str
        Websocket endpoint of the AIS stream.
    cms_host_url : str or None
        Base URL of the document store. Without it persistence is disabled.
    cms_email : str or None
        Store login email.
    cms_password : str or None
        Store login password.
    login_path : str
        Path of the login endpoint, joined onto ``cms_host_url``.
    collection_path : str
        Path of the AIS log collection, joined onto ``cms_host_url``.
    created_at_operator : str
        Query operator used for the ``createdAt`` lower bound.
    coordinate_order : CoordinateOrder
        Order of the ``location`` pair written to and compared against the store.
    port : int
        Port of the health endpoint.
    health_enabled : bool
        Serve the health endpoint from :class:`aistrack.tracker.AisTracker`.
    keepalive_interval : float
        Seconds between websocket pings while the connection is open.
    inactivity_interval : float
        Seconds between inactivity heartbeat logs.
    reconnect_base_delay : float
        Reconnect delay in seconds for the first attempt.
    reconnect_max_delay : float
        Upper bound for the reconnect delay in seconds.
    """

    mmsi: str
    stream_api_key: str | None = None
    stream_url: str = _constants.STREAM_URL
    cms_host_url: str | None = None
    cms_email: str | None = None
    cms_password: str | None = None
    login_path: str = _constants.LOGIN_PATH
    collection_path: str = _constants.COLLECTION_PATH
    created_at_operator: str = _constants.CREATED_AT_OPERATOR
    coordinate_order: CoordinateOrder = CoordinateOrder.LAT_LON
    port: int = _constants.DEFAULT_PORT
    health_enabled: bool = True
    keepalive_interval: float = _constants.KEEPALIVE_INTERVAL_S
    inactivity_interval: float = _constants.INACTIVITY_INTERVAL_S
    reconnect_base_delay: float = _constants.RECONNECT_BASE_DELAY_S
    reconnect_max_delay: float = _constants.RECONNECT_MAX_DELAY_S

    def __post_init__(self) -> None:
        if not str(self.mmsi).strip():
            raise AisConfigError("mmsi must not be empty")
        if self.keepalive_interval <= 0 or self.inactivity_interval <= 0:
            raise AisConfigError("keepalive_interval and inactivity_interval must be positive")
        if self.reconnect_base_delay < 0 or self.reconnect_max_delay < self.reconnect_base_delay:
            raise AisConfigError("reconnect delays must satisfy 0 <= base <= max")

    @property
    def login_url(self) -> str | None:
        if not self.cms_host_url:
            return None
        return urljoin(self.cms_host_url, self.login_path)

    @property
    def collection_url(self) -> str | None:
        if not self.cms_host_url:
            return None
        return urljoin(self.cms_host_url, self.collection_path)

    @property
    def has_cms_credentials(self) -> bool:
        return bool(self.cms_email and self.cms_password)

    @classmethod
    def from_env(cls, **overrides: Any) -> TrackerConfig:
        """Create configuration from environment variables.

        Reads ``AIS_MMSI`` (required) and the optional ``AIS_*``, ``CMS_*``
        and ``PORT`` variables. Explicit keyword arguments override
        environment values.

        Raises
        ------
        AisConfigError
            When no tracked MMSI is available or a numeric variable is invalid.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "AIS_MMSI": "mmsi",
            "AIS_STREAM_KEY": "stream_api_key",
            "AIS_STREAM_URL": "stream_url",
            "CMS_HOST_URL": "cms_host_url",
            "CMS_EMAIL": "cms_email",
            "CMS_PASSWORD": "cms_password",
            "CMS_LOGIN_PATH": "login_path",
            "CMS_COLLECTION_PATH": "collection_path",
            "CMS_CREATED_AT_OPERATOR": "created_at_operator",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = _env_optional(env.get(env_key))
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "AIS_KEEPALIVE_INTERVAL": "keepalive_interval",
            "AIS_INACTIVITY_INTERVAL": "inactivity_interval",
            "AIS_RECONNECT_BASE_DELAY": "reconnect_base_delay",
            "AIS_RECONNECT_MAX_DELAY": "reconnect_max_delay",
        }
        try:
            for env_key, field_name in _ENV_FLOAT_MAP.items():
                val = _env_optional(env.get(env_key))
                if val is not None:
                    config_kwargs[field_name] = float(val)

            port_env = _env_optional(env.get("PORT"))
            if port_env is not None:
                config_kwargs["port"] = int(port_env)

            order_env = _env_optional(env.get("AIS_COORDINATE_ORDER"))
            if order_env is not None:
                config_kwargs["coordinate_order"] = CoordinateOrder(order_env.lower())
        except ValueError as exc:
            raise AisConfigError(f"Invalid environment configuration: {exc}") from exc

        config_kwargs["health_enabled"] = _env_bool(env.get("AIS_HEALTH_ENABLED"), True)

        config_kwargs.update(overrides)

        if not config_kwargs.get("mmsi"):
            raise AisConfigError("AIS_MMSI is required (MMSI of the tracked vessel)")

        return cls(**config_kwargs)
