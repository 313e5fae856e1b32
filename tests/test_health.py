from __future__ import annotations

import pytest
from aiohttp import test_utils

from aistrack.health import build_health_app
from aistrack.lifecycle import ConnectionState
from aistrack.runtime import RuntimeContext


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("state", "status", "body"),
    [
        (ConnectionState.OPEN, 200, {"websocket": "connected"}),
        (ConnectionState.CONNECTING, 503, {"websocket": "disconnected"}),
        (ConnectionState.CLOSED, 503, {"websocket": "disconnected"}),
        (ConnectionState.DISCONNECTED, 503, {"websocket": "disconnected"}),
    ],
)
async def test_health_reflects_connection_state(
    context: RuntimeContext,
    state: ConnectionState,
    status: int,
    body: dict[str, str],
) -> None:
    context.connection_state = state

    async with test_utils.TestClient(test_utils.TestServer(build_health_app(context))) as client:
        response = await client.get("/health")
        assert response.status == status
        assert await response.json() == body


@pytest.mark.asyncio
async def test_health_reads_live_state(context: RuntimeContext) -> None:
    async with test_utils.TestClient(test_utils.TestServer(build_health_app(context))) as client:
        assert (await client.get("/health")).status == 503
        context.connection_state = ConnectionState.OPEN
        assert (await client.get("/health")).status == 200
