"""Custom exception hierarchy for aistrack."""

from __future__ import annotations


class AisError(Exception):
    """Base exception for all aistrack errors."""


class AisConfigError(AisError):
    """Invalid or missing configuration."""


class AisMessageError(AisError):
    """Inbound stream message could not be decoded or has an unexpected shape."""


class AisTransportError(AisError):
    """HTTP or websocket level failure (network, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class AisAuthenticationError(AisError):
    """Login against the document store failed or produced no token."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class AisSessionError(AisAuthenticationError):
    """No bearer token could be obtained after forced re-authentication.

    Raised by :meth:`aistrack.session.SessionManager.perform_authorized_request`
    instead of retrying again when the refreshed login yields nothing.
    """
