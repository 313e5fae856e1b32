"""HTTP health endpoint reporting the stream connection state."""

from __future__ import annotations

import logging

from aiohttp import web

from aistrack.runtime import RuntimeContext

_logger = logging.getLogger(__name__)

CONTEXT_KEY: web.AppKey[RuntimeContext] = web.AppKey("aistrack_context", RuntimeContext)


async def health_handler(request: web.Request) -> web.Response:
    """``200 {"websocket": "connected"}`` while the stream is open, else ``503``."""
    context = request.app[CONTEXT_KEY]
    connected = context.is_connected
    return web.json_response(
        {"websocket": "connected" if connected else "disconnected"},
        status=200 if connected else 503,
    )


def build_health_app(context: RuntimeContext) -> web.Application:
    app = web.Application()
    app[CONTEXT_KEY] = context
    app.router.add_get("/health", health_handler)
    return app


class HealthServer:
    """Runs :func:`build_health_app` on ``host:port`` until :meth:`stop`."""

    def __init__(self, context: RuntimeContext, port: int, *, host: str = "0.0.0.0") -> None:  # noqa: S104
        self._app = build_health_app(context)
        self._port = port
        self._host = host
        self._runner: web.AppRunner | None = None

    @property
    def running(self) -> bool:
        return self._runner is not None

    async def start(self) -> None:
        if self._runner is not None:
            return
        runner = web.AppRunner(self._app)
        await runner.setup()
        site = web.TCPSite(runner, self._host, self._port)
        await site.start()
        self._runner = runner
        _logger.info("Health endpoint listening on port %s", self._port)

    async def stop(self) -> None:
        runner = self._runner
        self._runner = None
        if runner is not None:
            await runner.cleanup()
