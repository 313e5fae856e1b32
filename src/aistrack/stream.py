"""AIS stream connection manager."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from aistrack._api.stream import build_subscription, decode_stream_message, extract_position_report
from aistrack._constants import WARN_MISSING_STREAM_KEY
from aistrack._redact import redact_for_log
from aistrack._transport import StreamConnection, StreamTransport
from aistrack.backoff import ReconnectScheduler
from aistrack.config import TrackerConfig
from aistrack.exceptions import AisMessageError, AisTransportError
from aistrack.inactivity import InactivityMonitor
from aistrack.lifecycle import ConnectionState, Effect, StreamEvent, next_transition
from aistrack.models.position import PositionReport
from aistrack.runtime import RuntimeContext, utc_now

_logger = logging.getLogger(__name__)

ReportHandler = Callable[[PositionReport], Awaitable[object]]


class StreamConnectionManager:
    """Owns the single websocket connection to the AIS stream.

    Every socket event is turned into a :class:`~aistrack.lifecycle.StreamEvent`
    and passed through :func:`~aistrack.lifecycle.next_transition`; this class
    only executes the resulting effects. Messages are handled one at a time in
    arrival order, each including its *on_report* call.
    """

    def __init__(
        self,
        config: TrackerConfig,
        context: RuntimeContext,
        transport: StreamTransport,
        on_report: ReportHandler | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._config = config
        self._context = context
        self._transport = transport
        self._on_report = on_report
        self._clock = clock
        self._monitor = InactivityMonitor(config.inactivity_interval)
        self._scheduler = ReconnectScheduler(
            context,
            self._on_reconnect_due,
            base_delay=config.reconnect_base_delay,
            max_delay=config.reconnect_max_delay,
        )
        self._connection: StreamConnection | None = None
        self._connection_task: asyncio.Task[None] | None = None
        self._keepalive_task: asyncio.Task[None] | None = None

    @property
    def state(self) -> ConnectionState:
        return self._context.connection_state

    @property
    def monitor(self) -> InactivityMonitor:
        return self._monitor

    @property
    def scheduler(self) -> ReconnectScheduler:
        return self._scheduler

    @property
    def keepalive_running(self) -> bool:
        return self._keepalive_task is not None and not self._keepalive_task.done()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        await self.dispatch(StreamEvent.START)

    async def stop(self) -> None:
        """Cancel timers and the connection task, then close the socket."""
        self._scheduler.cancel()
        self._monitor.stop()
        self._stop_keepalive()

        task = self._connection_task
        self._connection_task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        connection = self._connection
        self._connection = None
        if connection is not None and not connection.closed:
            await connection.close()
        self._context.connection_state = ConnectionState.DISCONNECTED

    async def dispatch(self, event: StreamEvent) -> None:
        """Apply *event* to the current state and run the resulting effects."""
        state = self._context.connection_state
        transition = next_transition(state, event)
        if transition is None:
            _logger.debug("Ignoring stream event %s in state %s", event, state)
            return

        self._context.connection_state = transition.state
        if transition.state is not state:
            _logger.debug("Stream state %s -> %s (%s)", state, transition.state, event)

        for effect in transition.effects:
            await self._apply(effect)

    async def _apply(self, effect: Effect) -> None:
        if effect is Effect.OPEN_TRANSPORT:
            self._open_transport()
        elif effect is Effect.RESET_COUNTERS:
            self._context.reconnect_attempts = 0
            self._context.last_message_at = self._clock()
            self._monitor.reset()
        elif effect is Effect.START_KEEPALIVE:
            self._start_keepalive()
        elif effect is Effect.STOP_KEEPALIVE:
            self._stop_keepalive()
        elif effect is Effect.SEND_SUBSCRIPTION:
            await self._send_subscription()
        elif effect is Effect.START_MONITOR:
            self._monitor.start()
        elif effect is Effect.STOP_MONITOR:
            self._monitor.stop()
        elif effect is Effect.SCHEDULE_RECONNECT:
            self._scheduler.schedule()

    async def _on_reconnect_due(self) -> None:
        await self.dispatch(StreamEvent.RECONNECT_DUE)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _open_transport(self) -> None:
        if self._connection is not None or (self._connection_task is not None and not self._connection_task.done()):
            _logger.warning("AIS stream connection already active; not opening another")
            return
        self._connection_task = asyncio.create_task(self._run_connection())

    async def _run_connection(self) -> None:
        _logger.info("Connecting to AIS stream...")
        try:
            connection = await self._transport.connect(self._config.stream_url)
        except AisTransportError as exc:
            _logger.error("AIS stream websocket error: %s", exc)
            await self.dispatch(StreamEvent.ERROR)
            return

        self._connection = connection
        _logger.info("AIS stream websocket connected")
        await self.dispatch(StreamEvent.OPENED)

        event = StreamEvent.CLOSED
        try:
            async for raw in connection:
                await self.handle_message(raw)
        except AisTransportError as exc:
            _logger.error("AIS stream websocket error: %s", exc)
            event = StreamEvent.ERROR

        self._connection = None
        if not connection.closed:
            await connection.close()
        if event is StreamEvent.CLOSED:
            _logger.warning("AIS stream websocket closed (code %s).", connection.close_code)
        await self.dispatch(event)

    async def _send_subscription(self) -> None:
        api_key = self._config.stream_api_key
        if not api_key:
            self._context.warn_once(
                WARN_MISSING_STREAM_KEY,
                "Missing aisstream.io API key; stream subscription not sent",
                logger=_logger,
            )
            return

        connection = self._connection
        if connection is None or connection.closed:
            _logger.warning("WebSocket not ready; unable to subscribe")
            return

        payload = build_subscription(api_key, self._config.mmsi)
        _logger.debug("Sending subscription %s", redact_for_log(payload))
        try:
            await connection.send_text(json.dumps(payload))
        except AisTransportError as exc:
            _logger.error("Failed to send AIS subscription: %s", exc)
            return
        self._monitor.reset()

    def _start_keepalive(self) -> None:
        self._stop_keepalive()
        connection = self._connection
        if connection is None:
            return
        self._keepalive_task = asyncio.create_task(self._keepalive(connection))

    def _stop_keepalive(self) -> None:
        task = self._keepalive_task
        self._keepalive_task = None
        if task is not None and not task.done():
            task.cancel()

    async def _keepalive(self, connection: StreamConnection) -> None:
        while True:
            await asyncio.sleep(self._config.keepalive_interval)
            if connection.closed:
                return
            try:
                await connection.ping()
            except AisTransportError as exc:
                _logger.warning("AIS stream keepalive ping failed; closing connection: %s", exc)
                # Ends the receive loop, which dispatches the close.
                await connection.close()
                return

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    async def handle_message(self, raw: str | bytes) -> None:
        """Decode one inbound frame and hand a valid report to *on_report*.

        Malformed frames are logged and dropped. Exceptions raised by the
        report handler are logged and never reach the connection.
        """
        try:
            payload = decode_stream_message(raw)
        except AisMessageError as exc:
            _logger.warning("Discarding AIS message: %s", exc)
            return

        self._context.last_message_at = self._clock()
        self._monitor.reset()

        try:
            report = extract_position_report(payload)
        except AisMessageError as exc:
            _logger.warning("Discarding AIS message: %s", exc)
            return

        if report.mmsi is not None and report.mmsi != self._config.mmsi:
            _logger.debug("Ignoring position report for untracked MMSI %s", report.mmsi)
            return

        _logger.info(
            "AIS position report lat=%s lon=%s sog=%s",
            report.latitude,
            report.longitude,
            report.sog,
        )
        if self._on_report is None:
            return
        try:
            await self._on_report(report)
        except Exception:
            _logger.exception("Position report handler failed")
