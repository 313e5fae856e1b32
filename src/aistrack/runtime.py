"""Process-wide mutable state, held in an explicitly constructed context."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from aistrack.lifecycle import ConnectionState
from aistrack.models.token import Credential

_logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class RuntimeContext:
    """Shared state of one tracker instance.

    Components receive the context at construction time instead of reading
    module globals, so independent trackers (and tests) never share state.

    Attributes
    ----------
    connection_state : ConnectionState
        Current lifecycle state; only the connection manager writes it.
    reconnect_attempts : int
        Reconnects fired since the last successful open.
    last_message_at : datetime or None
        Receive time of the last decodable stream message.
    credential : Credential or None
        Cached bearer credential; ``None`` when absent or invalidated.
    pending_login : asyncio.Task or None
        The single in-flight login, awaited by every concurrent caller.
    """

    connection_state: ConnectionState = ConnectionState.DISCONNECTED
    reconnect_attempts: int = 0
    last_message_at: datetime | None = None
    credential: Credential | None = None
    pending_login: asyncio.Task[Credential] | None = None
    _warned: set[str] = field(default_factory=set, repr=False)

    @property
    def is_connected(self) -> bool:
        return self.connection_state is ConnectionState.OPEN

    def warn_once(self, category: str, message: str, *args: object, logger: logging.Logger | None = None) -> bool:
        """Log a warning the first time *category* is seen; return whether it was logged."""
        if category in self._warned:
            return False
        self._warned.add(category)
        (logger or _logger).warning(message, *args)
        return True

    def has_warned(self, category: str) -> bool:
        return category in self._warned
