"""Login endpoint.

Endpoint:
  - POST <host>/api/users/login  (path configurable)
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from aistrack._redact import redact_for_log
from aistrack._transport import RestResponse
from aistrack.config import TrackerConfig
from aistrack.exceptions import AisAuthenticationError, AisTransportError
from aistrack.models.token import LoginResponse

_logger = logging.getLogger(__name__)


def build_login_body(config: TrackerConfig) -> dict[str, Any]:
    """Build the JSON body for the login endpoint."""
    body = {"email": config.cms_email, "password": config.cms_password}
    _logger.debug("Login request body=%s", redact_for_log(body))
    return body


def parse_login_response(response: RestResponse) -> str:
    """Extract the bearer token from a login response.

    Raises
    ------
    AisAuthenticationError
        On a non-2xx status, a non-JSON body, or when neither ``token``
        nor ``jwt`` is present.
    """
    if not response.ok:
        raise AisAuthenticationError(
            f"Store login failed: {response.describe()}",
            status_code=response.status,
            body=response.text,
        )

    try:
        payload = response.json()
        parsed = LoginResponse.model_validate(payload)
    except (AisTransportError, ValidationError) as exc:
        raise AisAuthenticationError(
            f"Store login response is not a valid login object: {response.text[:200]}",
            status_code=response.status,
            body=response.text,
        ) from exc

    token = parsed.bearer
    if not token:
        raise AisAuthenticationError(
            "Store login response missing token",
            status_code=response.status,
            body=response.text,
        )
    return token
