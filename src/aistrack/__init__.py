"""aistrack - Resilient AIS stream tracker persisting one vessel's positions."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("aistrack")
except PackageNotFoundError:
    __version__ = "0+local"
from aistrack.backoff import ReconnectScheduler, reconnect_delay
from aistrack.config import CoordinateOrder, TrackerConfig
from aistrack.dedup import DuplicateLogPolicy
from aistrack.exceptions import (
    AisAuthenticationError,
    AisConfigError,
    AisError,
    AisMessageError,
    AisSessionError,
    AisTransportError,
)
from aistrack.inactivity import InactivityMonitor
from aistrack.lifecycle import ConnectionState, Effect, StreamEvent, Transition, next_transition
from aistrack.models import Credential, LogRecord, LoginResponse, PositionReport, StoredLogEntry, Subscription
from aistrack.persistence import PositionLogWriter
from aistrack.runtime import RuntimeContext
from aistrack.session import SessionManager
from aistrack.stream import StreamConnectionManager
from aistrack.tracker import AisTracker

__all__ = [
    "__version__",
    "AisAuthenticationError",
    "AisConfigError",
    "AisError",
    "AisMessageError",
    "AisSessionError",
    "AisTracker",
    "AisTransportError",
    "ConnectionState",
    "CoordinateOrder",
    "Credential",
    "DuplicateLogPolicy",
    "Effect",
    "InactivityMonitor",
    "LogRecord",
    "LoginResponse",
    "PositionLogWriter",
    "PositionReport",
    "ReconnectScheduler",
    "RuntimeContext",
    "SessionManager",
    "StoredLogEntry",
    "StreamConnectionManager",
    "StreamEvent",
    "Subscription",
    "Transition",
    "TrackerConfig",
    "next_transition",
    "reconnect_delay",
]
