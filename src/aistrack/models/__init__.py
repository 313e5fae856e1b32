"""Pydantic models for stream messages and store documents."""

from aistrack.models.log_entry import LogRecord, StoredLogEntry
from aistrack.models.position import PositionReport
from aistrack.models.subscription import Subscription
from aistrack.models.token import Credential, LoginResponse

__all__ = [
    "Credential",
    "LogRecord",
    "LoginResponse",
    "PositionReport",
    "StoredLogEntry",
    "Subscription",
]
