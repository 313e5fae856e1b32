"""Connection lifecycle state machine.

The transition table is pure: ``next_transition(state, event)`` returns the
next state plus the side effects to run, and knows nothing about sockets or
timers. :class:`aistrack.stream.StreamConnectionManager` executes the effects.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class ConnectionState(enum.StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class StreamEvent(enum.StrEnum):
    START = "start"
    OPENED = "opened"
    CLOSED = "closed"
    ERROR = "error"
    RECONNECT_DUE = "reconnect_due"


class Effect(enum.StrEnum):
    OPEN_TRANSPORT = "open_transport"
    RESET_COUNTERS = "reset_counters"
    START_KEEPALIVE = "start_keepalive"
    STOP_KEEPALIVE = "stop_keepalive"
    SEND_SUBSCRIPTION = "send_subscription"
    START_MONITOR = "start_monitor"
    STOP_MONITOR = "stop_monitor"
    SCHEDULE_RECONNECT = "schedule_reconnect"


@dataclass(frozen=True)
class Transition:
    state: ConnectionState
    effects: tuple[Effect, ...] = ()


_OPEN_EFFECTS = (
    Effect.RESET_COUNTERS,
    Effect.START_KEEPALIVE,
    Effect.SEND_SUBSCRIPTION,
    Effect.START_MONITOR,
)
_TEARDOWN_EFFECTS = (
    Effect.STOP_MONITOR,
    Effect.STOP_KEEPALIVE,
    Effect.SCHEDULE_RECONNECT,
)

_TRANSITIONS: dict[tuple[ConnectionState, StreamEvent], Transition] = {
    (ConnectionState.DISCONNECTED, StreamEvent.START): Transition(ConnectionState.CONNECTING, (Effect.OPEN_TRANSPORT,)),
    (ConnectionState.CLOSED, StreamEvent.RECONNECT_DUE): Transition(
        ConnectionState.CONNECTING, (Effect.OPEN_TRANSPORT,)
    ),
    (ConnectionState.CONNECTING, StreamEvent.OPENED): Transition(ConnectionState.OPEN, _OPEN_EFFECTS),
    (ConnectionState.OPEN, StreamEvent.CLOSED): Transition(ConnectionState.CLOSED, _TEARDOWN_EFFECTS),
    (ConnectionState.OPEN, StreamEvent.ERROR): Transition(ConnectionState.CLOSED, _TEARDOWN_EFFECTS),
    (ConnectionState.CONNECTING, StreamEvent.CLOSED): Transition(
        ConnectionState.CLOSED, (Effect.SCHEDULE_RECONNECT,)
    ),
    (ConnectionState.CONNECTING, StreamEvent.ERROR): Transition(ConnectionState.CLOSED, (Effect.SCHEDULE_RECONNECT,)),
    # A close following an error: the scheduler ignores the duplicate request.
    (ConnectionState.CLOSED, StreamEvent.CLOSED): Transition(ConnectionState.CLOSED, (Effect.SCHEDULE_RECONNECT,)),
    (ConnectionState.CLOSED, StreamEvent.ERROR): Transition(ConnectionState.CLOSED, (Effect.SCHEDULE_RECONNECT,)),
}


def next_transition(state: ConnectionState, event: StreamEvent) -> Transition | None:
    """Return the transition for *event* in *state*, or ``None`` when the event is ignored."""
    return _TRANSITIONS.get((state, event))
