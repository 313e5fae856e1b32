"""Reconnect backoff scheduling."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from aistrack._constants import RECONNECT_BASE_DELAY_S, RECONNECT_MAX_DELAY_S
from aistrack.runtime import RuntimeContext

_logger = logging.getLogger(__name__)


def reconnect_delay(
    attempts: int,
    *,
    base_delay: float = RECONNECT_BASE_DELAY_S,
    max_delay: float = RECONNECT_MAX_DELAY_S,
) -> float:
    """Seconds to wait before reconnect number ``attempts + 1``.

    ``min(max_delay, base_delay * 2 ** attempts)``: 1, 2, 4, 8, 16, then 30
    for every later attempt with the defaults.
    """
    if attempts < 0:
        raise ValueError(f"attempts must be non-negative, got {attempts}")
    # Cap the exponent so huge attempt counts do not build huge floats.
    return min(max_delay, base_delay * 2 ** min(attempts, 32))


class ReconnectScheduler:
    """Holds at most one pending reconnect timer.

    When the timer fires, ``reconnect_attempts`` in the runtime context is
    incremented and *on_due* is awaited. The attempt counter is reset by the
    connection manager on a successful open, not here.
    """

    def __init__(
        self,
        context: RuntimeContext,
        on_due: Callable[[], Awaitable[None]],
        *,
        base_delay: float = RECONNECT_BASE_DELAY_S,
        max_delay: float = RECONNECT_MAX_DELAY_S,
    ) -> None:
        self._context = context
        self._on_due = on_due
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._task: asyncio.Task[None] | None = None

    @property
    def is_pending(self) -> bool:
        return self._task is not None

    def next_delay(self) -> float:
        return reconnect_delay(
            self._context.reconnect_attempts,
            base_delay=self._base_delay,
            max_delay=self._max_delay,
        )

    def schedule(self) -> bool:
        """Arrange the next reconnect; return ``False`` if one is already pending."""
        if self._task is not None:
            return False

        delay = self.next_delay()
        _logger.warning("AIS stream disconnected. Reconnecting in %.1fs...", delay)
        self._task = asyncio.create_task(self._fire_after(delay))
        return True

    def cancel(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()

    async def _fire_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self._task = None
        self._context.reconnect_attempts += 1
        await self._on_due()
