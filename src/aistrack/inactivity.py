"""Inactivity heartbeat for the AIS stream."""

from __future__ import annotations

import asyncio
import logging

from aistrack._constants import INACTIVITY_INTERVAL_S

_logger = logging.getLogger(__name__)


class InactivityMonitor:
    """Logs how long the stream has been silent.

    Every ``interval`` seconds the elapsed counter grows by ``interval`` and a
    heartbeat is logged in whole minutes (the default five-minute period gives
    5, 10, 15, ...). :meth:`reset` zeroes the counter; :meth:`stop` cancels the
    timer. :meth:`start` always replaces a running timer, so at most one exists.
    """

    def __init__(self, interval: float = INACTIVITY_INTERVAL_S) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._interval = interval
        self._elapsed = 0.0
        self._task: asyncio.Task[None] | None = None

    @property
    def elapsed(self) -> float:
        """Seconds counted since the last reset."""
        return self._elapsed

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        self.stop()
        self._elapsed = 0.0
        self._task = asyncio.create_task(self._run())

    def stop(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()

    def reset(self) -> None:
        self._elapsed = 0.0

    def tick(self) -> None:
        self._elapsed += self._interval
        _logger.info("%d minutes since last message...", int(self._elapsed // 60))

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.tick()
