"""HTTP and websocket transports over aiohttp."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import aiohttp

from aistrack.exceptions import AisTransportError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RestResponse:
    """Fully read HTTP response.

    The body is consumed inside the aiohttp response context so callers can
    inspect status and payload after the connection has been released.
    """

    status: int
    reason: str
    text: str
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        try:
            return json.loads(self.text)
        except json.JSONDecodeError as exc:
            raise AisTransportError(
                f"Invalid JSON from {self.url}: {self.text[:200]}",
                status_code=self.status,
                endpoint=self.url,
            ) from exc

    def describe(self) -> str:
        return f"{self.status} {self.reason} - {self.text[:200]}"


class Transport(Protocol):
    """Structural REST transport used by the session manager and endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`RestTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> RestResponse:
        ...


class RestTransport:
    """REST transport backed by a shared :class:`aiohttp.ClientSession`.

    Relies on the session's default client timeout; requests are not bounded
    separately.
    """

    def __init__(self, http_session: aiohttp.ClientSession) -> None:
        self._http = http_session

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> RestResponse:
        request_headers: dict[str, str] = {"accept": "application/json"}
        if headers:
            request_headers.update(headers)

        _logger.debug("%s %s", method, url)

        try:
            async with self._http.request(
                method,
                url,
                headers=request_headers,
                params=params,
                json=json_body,
            ) as resp:
                # Undecodable bytes become U+FFFD; the JSON parse then decides.
                text = await resp.text(errors="replace")
                return RestResponse(
                    status=resp.status,
                    reason=resp.reason or "",
                    text=text,
                    url=url,
                )
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise AisTransportError(f"Request to {url} failed: {exc!r}", endpoint=url) from exc


class StreamConnection(Protocol):
    """A single open websocket connection yielding raw message payloads."""

    @property
    def closed(self) -> bool:
        ...

    @property
    def close_code(self) -> int | None:
        ...

    async def send_text(self, data: str) -> None:
        ...

    async def ping(self) -> None:
        ...

    async def close(self) -> None:
        ...

    def __aiter__(self) -> AsyncIterator[str | bytes]:
        ...


class StreamTransport(Protocol):
    """Factory for websocket connections."""

    async def connect(self, url: str) -> StreamConnection:
        ...


class AiohttpStreamConnection:
    """:class:`StreamConnection` over :class:`aiohttp.ClientWebSocketResponse`."""

    def __init__(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        self._ws = ws

    @property
    def closed(self) -> bool:
        return self._ws.closed

    @property
    def close_code(self) -> int | None:
        return self._ws.close_code

    async def send_text(self, data: str) -> None:
        try:
            await self._ws.send_str(data)
        except (aiohttp.ClientError, ConnectionError) as exc:
            raise AisTransportError(f"Websocket send failed: {exc}") from exc

    async def ping(self) -> None:
        try:
            await self._ws.ping()
        except (aiohttp.ClientError, ConnectionError) as exc:
            raise AisTransportError(f"Websocket ping failed: {exc}") from exc

    async def close(self) -> None:
        await self._ws.close()

    async def __aiter__(self) -> AsyncIterator[str | bytes]:
        async for msg in self._ws:
            if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                yield msg.data
            elif msg.type == aiohttp.WSMsgType.ERROR:
                raise AisTransportError(f"Websocket error: {self._ws.exception()}")


class AiohttpStreamTransport:
    """Opens websocket connections from a shared :class:`aiohttp.ClientSession`."""

    def __init__(self, http_session: aiohttp.ClientSession) -> None:
        self._http = http_session

    async def connect(self, url: str) -> StreamConnection:
        try:
            # autoping answers server pings; client pings come from the keepalive loop.
            ws = await self._http.ws_connect(url, autoping=True)
        except (aiohttp.ClientError, OSError) as exc:
            raise AisTransportError(f"Websocket connect to {url} failed: {exc}", endpoint=url) from exc
        return AiohttpStreamConnection(ws)
