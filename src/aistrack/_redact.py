"""Masking of credentials in outbound payloads before DEBUG logging.

Three payloads carry secrets: the stream subscription (``APIKey``), the
store login body (``password``) and authorized request headers
(``Authorization: Bearer ...``). Vessel data (MMSI, filters, coordinates)
is left readable.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_SECRET_FIELDS: frozenset[str] = frozenset({"apikey", "password", "token", "jwt", "authorization"})

_BEARER_PREFIX = "Bearer "


def mask_secret(value: Any) -> str:
    """Replace *value* with a marker that keeps only its length."""
    text = str(value)
    if text.startswith(_BEARER_PREFIX):
        return f"{_BEARER_PREFIX}<redacted:{len(text) - len(_BEARER_PREFIX)}>"
    return f"<redacted:{len(text)}>"


def redact_for_log(payload: Any) -> Any:
    """Return a copy of *payload* with secret fields masked.

    Field names match case-insensitively at any depth. Missing secrets
    (``None``) stay ``None`` so a log line still shows the value was absent.
    """
    if isinstance(payload, Mapping):
        return {
            key: (
                mask_secret(item)
                if item is not None and str(key).lower() in _SECRET_FIELDS
                else redact_for_log(item)
            )
            for key, item in payload.items()
        }
    if isinstance(payload, (list, tuple)):
        return [redact_for_log(item) for item in payload]
    return payload
