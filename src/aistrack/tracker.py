"""Top-level tracker wiring the stream, session and persistence layers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

import aiohttp

from aistrack._transport import AiohttpStreamTransport, RestTransport, StreamTransport, Transport
from aistrack.config import TrackerConfig
from aistrack.dedup import DuplicateLogPolicy
from aistrack.exceptions import AisError
from aistrack.health import HealthServer
from aistrack.persistence import PositionLogWriter
from aistrack.runtime import RuntimeContext, utc_now
from aistrack.session import SessionManager
from aistrack.stream import StreamConnectionManager

_logger = logging.getLogger(__name__)


class AisTracker:
    """Follows one vessel on the AIS stream and logs its positions to the store.

    Usage::

        async with AisTracker(TrackerConfig.from_env()) as tracker:
            await tracker.run_forever()

    Transports can be injected for testing; by default both are built on one
    shared :class:`aiohttp.ClientSession`.
    """

    def __init__(
        self,
        config: TrackerConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        rest_transport: Transport | None = None,
        stream_transport: StreamTransport | None = None,
        context: RuntimeContext | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._rest_transport = rest_transport
        self._stream_transport = stream_transport
        self._context = context or RuntimeContext()
        self._clock = clock
        self._sessions: SessionManager | None = None
        self._writer: PositionLogWriter | None = None
        self._stream: StreamConnectionManager | None = None
        self._health: HealthServer | None = None
        self._stopped = asyncio.Event()

    @property
    def context(self) -> RuntimeContext:
        return self._context

    @property
    def stream(self) -> StreamConnectionManager:
        if self._stream is None:
            raise AisError("Tracker not initialized. Use 'async with AisTracker(...) as tracker:'")
        return self._stream

    @property
    def sessions(self) -> SessionManager:
        if self._sessions is None:
            raise AisError("Tracker not initialized. Use 'async with AisTracker(...) as tracker:'")
        return self._sessions

    @property
    def writer(self) -> PositionLogWriter:
        if self._writer is None:
            raise AisError("Tracker not initialized. Use 'async with AisTracker(...) as tracker:'")
        return self._writer

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> AisTracker:
        if (self._rest_transport is None or self._stream_transport is None) and self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        if self._rest_transport is None:
            assert self._http_session is not None  # noqa: S101
            self._rest_transport = RestTransport(self._http_session)
        if self._stream_transport is None:
            assert self._http_session is not None  # noqa: S101
            self._stream_transport = AiohttpStreamTransport(self._http_session)

        self._sessions = SessionManager(self._config, self._context, self._rest_transport)
        policy = DuplicateLogPolicy(
            self._config,
            self._context,
            self._sessions,
            self._rest_transport,
            clock=self._clock,
        )
        self._writer = PositionLogWriter(
            self._config,
            self._context,
            self._sessions,
            policy,
            self._rest_transport,
        )
        self._stream = StreamConnectionManager(
            self._config,
            self._context,
            self._stream_transport,
            self._writer.persist,
            clock=self._clock,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the health endpoint (if enabled) and connect to the stream."""
        if self._config.health_enabled and self._health is None:
            self._health = HealthServer(self._context, self._config.port)
            await self._health.start()
        await self.stream.start()

    async def run_forever(self) -> None:
        """Start and keep running until :meth:`stop` is called or the task is cancelled."""
        await self.start()
        await self._stopped.wait()

    async def stop(self) -> None:
        if self._stream is not None:
            await self._stream.stop()
        pending_login = self._context.pending_login
        if pending_login is not None and not pending_login.done():
            pending_login.cancel()
        if self._health is not None:
            await self._health.stop()
            self._health = None
        self._stopped.set()
