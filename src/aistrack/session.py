"""Authenticated session management for the document store."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from aistrack._api.login import build_login_body, parse_login_response
from aistrack._constants import AUTH_FAILURE_STATUSES, WARN_MISSING_CMS_CREDENTIALS, WARN_MISSING_CMS_HOST
from aistrack._transport import RestResponse, Transport
from aistrack.config import TrackerConfig
from aistrack.exceptions import AisConfigError, AisError, AisSessionError
from aistrack.models.token import Credential
from aistrack.runtime import RuntimeContext

_logger = logging.getLogger(__name__)

RequestFactory = Callable[[Credential], Awaitable[RestResponse]]


class SessionManager:
    """Keeps at most one bearer credential and one in-flight login.

    Usage::

        manager = SessionManager(config, context, transport)
        response = await manager.perform_authorized_request(
            lambda cred: transport.request("GET", url, headers=cred.authorization_header())
        )
    """

    def __init__(self, config: TrackerConfig, context: RuntimeContext, transport: Transport) -> None:
        self._config = config
        self._context = context
        self._transport = transport

    @property
    def credential(self) -> Credential | None:
        return self._context.credential

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def ensure_session(self) -> Credential:
        """Return the cached credential, logging in once if there is none.

        Concurrent callers share a single login and receive the same
        credential or the same exception.

        Raises
        ------
        AisConfigError
            When the store host or its credentials are not configured.
            No request is made.
        AisAuthenticationError
            When the login is rejected or returns no token.
        AisTransportError
            When the login request fails at the network level.
        """
        if self._context.credential is not None:
            return self._context.credential

        pending = self._context.pending_login
        if pending is None:
            self._require_login_config()
            pending = asyncio.create_task(self._login())
            self._context.pending_login = pending
            pending.add_done_callback(self._clear_pending_login)

        # Shielded so one cancelled caller does not abort the shared login.
        return await asyncio.shield(pending)

    def invalidate_session(self) -> None:
        """Drop the cached credential (the next call logs in again)."""
        if self._context.credential is not None:
            _logger.debug("Invalidating cached store credential")
        self._context.credential = None

    async def perform_authorized_request(self, factory: RequestFactory) -> RestResponse:
        """Run *factory* with a valid credential, re-authenticating once on 401/403.

        The factory is called at most twice. Whatever the second call returns,
        including another 401/403, is handed back to the caller.

        Raises
        ------
        AisSessionError
            When re-authentication produces no credential.
        """
        credential = await self.ensure_session()
        response = await factory(credential)

        if response.status not in AUTH_FAILURE_STATUSES:
            return response

        _logger.info("Store rejected credential (HTTP %s); re-authenticating", response.status)
        self.invalidate_session()
        try:
            credential = await self.ensure_session()
        except AisError as exc:
            raise AisSessionError(
                "Missing auth token after re-authentication; cannot complete request",
                status_code=response.status,
                body=response.text,
            ) from exc

        return await factory(credential)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_login_config(self) -> None:
        if not self._config.login_url:
            self._context.warn_once(
                WARN_MISSING_CMS_HOST,
                "Missing CMS_HOST_URL; skipping store persistence",
                logger=_logger,
            )
            raise AisConfigError("Cannot authenticate without a store host URL")
        if not self._config.has_cms_credentials:
            self._context.warn_once(
                WARN_MISSING_CMS_CREDENTIALS,
                "Missing CMS_EMAIL or CMS_PASSWORD; skipping store persistence",
                logger=_logger,
            )
            raise AisConfigError("Cannot authenticate without store credentials")

    async def _login(self) -> Credential:
        login_url = self._config.login_url
        assert login_url is not None  # noqa: S101
        response = await self._transport.request(
            "POST",
            login_url,
            json_body=build_login_body(self._config),
        )
        token = parse_login_response(response)
        credential = Credential(token=token)
        self._context.credential = credential
        _logger.info("Authenticated with store REST API")
        return credential

    def _clear_pending_login(self, task: asyncio.Task[Credential]) -> None:
        if self._context.pending_login is task:
            self._context.pending_login = None
        # Mark the outcome retrieved; awaiting callers receive it via the shield.
        if not task.cancelled():
            task.exception()
