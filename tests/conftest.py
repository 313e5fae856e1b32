from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import pytest

from aistrack._transport import RestResponse
from aistrack.config import TrackerConfig
from aistrack.exceptions import AisTransportError
from aistrack.runtime import RuntimeContext

CMS_HOST = "https://cms.example.com"
LOGIN_URL = f"{CMS_HOST}/api/users/login"
COLLECTION_URL = f"{CMS_HOST}/api/collections/ais-logs"
MMSI = "308015000"
NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def _json_response(status: int, body: Any, url: str) -> RestResponse:
    return RestResponse(status=status, reason="OK" if status < 400 else "Error", text=json.dumps(body), url=url)


@dataclass
class RecordedCall:
    method: str
    url: str
    headers: dict[str, str]
    params: dict[str, str]
    json_body: Any


@dataclass
class FakeCmsBackend:
    """In-memory stand-in for the store's REST API."""

    clock: Callable[[], datetime] = lambda: NOW
    login_status: int = 200
    login_body: dict[str, Any] | None = None
    login_gate: asyncio.Event | None = None
    history_docs: list[dict[str, Any]] = field(default_factory=list)
    history_status: int = 200
    history_text: str | None = None
    create_status: int = 201
    # Statuses returned (once each, in order) before normal handling, keyed by HTTP method.
    rejections: dict[str, list[int]] = field(default_factory=dict)
    failures: dict[str, Exception] = field(default_factory=dict)
    calls: list[RecordedCall] = field(default_factory=list)
    created: list[dict[str, Any]] = field(default_factory=list)
    logins: int = 0

    def count(self, method: str, url: str | None = None) -> int:
        return sum(1 for call in self.calls if call.method == method and (url is None or call.url == url))

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Any = None,
        params: Any = None,
        json_body: Any = None,
    ) -> RestResponse:
        self.calls.append(RecordedCall(method, url, dict(headers or {}), dict(params or {}), json_body))

        if url == LOGIN_URL:
            if self.login_gate is not None:
                await self.login_gate.wait()
            self.logins += 1
            if self.login_status >= 300:
                return _json_response(self.login_status, {"errors": [{"message": "bad credentials"}]}, url)
            body = self.login_body if self.login_body is not None else {"token": f"token-{self.logins}"}
            return _json_response(self.login_status, body, url)

        if url != COLLECTION_URL:
            raise AssertionError(f"Unexpected URL in fake backend: {url}")

        if method in self.failures:
            raise self.failures[method]

        pending = self.rejections.get(method)
        if pending:
            return _json_response(pending.pop(0), {"errors": [{"message": "unauthorized"}]}, url)

        if method == "GET":
            if self.history_text is not None:
                return RestResponse(status=self.history_status, reason="OK", text=self.history_text, url=url)
            return _json_response(self.history_status, {"docs": list(self.history_docs)}, url)

        if method == "POST":
            if self.create_status >= 300:
                return _json_response(self.create_status, {"errors": [{"message": "invalid"}]}, url)
            doc = {**json_body, "createdAt": self.clock().isoformat().replace("+00:00", "Z")}
            self.created.append(json_body)
            self.history_docs.insert(0, doc)
            return _json_response(self.create_status, {"doc": doc}, url)

        raise AssertionError(f"Unexpected method in fake backend: {method}")


_CLOSE = object()


class FakeStreamConnection:
    """Scriptable websocket: feed frames, then drop or fail the connection."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False
        self.close_code: int | None = None
        self.sent: list[dict[str, Any]] = []
        self.pings = 0
        self.ping_error: Exception | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    async def send_text(self, data: str) -> None:
        if self._closed:
            raise AisTransportError("send on closed websocket")
        self.sent.append(json.loads(data))

    async def ping(self) -> None:
        if self.ping_error is not None:
            raise self.ping_error
        self.pings += 1

    async def close(self) -> None:
        if self.close_code is None:
            self.close_code = 1000
        self._closed = True
        self._queue.put_nowait(_CLOSE)

    def feed(self, raw: str | bytes | dict[str, Any]) -> None:
        self._queue.put_nowait(json.dumps(raw) if isinstance(raw, dict) else raw)

    def drop(self, code: int = 1006) -> None:
        self.close_code = code
        self._queue.put_nowait(_CLOSE)

    def fail(self, exc: Exception) -> None:
        self._queue.put_nowait(exc)

    async def __aiter__(self) -> AsyncIterator[str | bytes]:
        while True:
            item = await self._queue.get()
            if item is _CLOSE:
                self._closed = True
                return
            if isinstance(item, Exception):
                self._closed = True
                raise item
            yield item


class FakeStreamTransport:
    def __init__(self) -> None:
        self.connections: list[FakeStreamConnection] = []
        self.urls: list[str] = []
        self.refuse_next = 0
        # Connections opened while positive fail every keepalive ping.
        self.unresponsive_next = 0

    @property
    def latest(self) -> FakeStreamConnection:
        return self.connections[-1]

    async def connect(self, url: str) -> FakeStreamConnection:
        self.urls.append(url)
        if self.refuse_next > 0:
            self.refuse_next -= 1
            raise AisTransportError(f"connection to {url} refused", endpoint=url)
        connection = FakeStreamConnection()
        if self.unresponsive_next > 0:
            self.unresponsive_next -= 1
            connection.ping_error = AisTransportError("ping timed out")
        self.connections.append(connection)
        return connection


def position_message(
    latitude: float = 43.2965,
    longitude: float = 5.3698,
    *,
    mmsi: str | int = MMSI,
    sog: float = 11.4,
) -> dict[str, Any]:
    return {
        "MessageType": "PositionReport",
        "MetaData": {"MMSI": int(mmsi), "time_utc": "2026-01-01 11:59:58.123456789 +0000 UTC"},
        "Message": {
            "PositionReport": {
                "UserID": int(mmsi),
                "Latitude": latitude,
                "Longitude": longitude,
                "Sog": sog,
                "NavigationalStatus": 0,
                "RateOfTurn": -2,
                "TrueHeading": 187,
            }
        },
    }


@pytest.fixture
def config() -> TrackerConfig:
    return TrackerConfig(
        mmsi=MMSI,
        stream_api_key="stream-key-123",
        cms_host_url=CMS_HOST,
        cms_email="ops@example.com",
        cms_password="secret",
        health_enabled=False,
        keepalive_interval=0.01,
        inactivity_interval=60.0,
        reconnect_base_delay=0.001,
        reconnect_max_delay=0.004,
    )


@pytest.fixture
def context() -> RuntimeContext:
    return RuntimeContext()


@pytest.fixture
def backend() -> FakeCmsBackend:
    return FakeCmsBackend()


@pytest.fixture
def stream_transport() -> FakeStreamTransport:
    return FakeStreamTransport()


@pytest.fixture
def wait_until() -> Callable[..., Any]:
    async def _wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not reached before timeout")
            await asyncio.sleep(0.001)

    return _wait_until
