"""AIS log collection endpoints.

Endpoints:
  - GET  <host>/api/collections/ais-logs  (recent history query)
  - POST <host>/api/collections/ais-logs  (create entry)
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from pydantic import ValidationError

from aistrack._constants import HISTORY_LIMIT, HISTORY_WINDOW_HOURS
from aistrack._transport import RestResponse
from aistrack.exceptions import AisTransportError
from aistrack.models.log_entry import StoredLogEntry


def _iso_utc(value: datetime) -> str:
    # Millisecond precision with a Z suffix, matching the store's createdAt values.
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_recent_logs_query(
    mmsi: str,
    now: datetime,
    *,
    created_at_operator: str,
    window: timedelta = timedelta(hours=HISTORY_WINDOW_HOURS),
    limit: int = HISTORY_LIMIT,
) -> dict[str, str]:
    """Query parameters selecting the newest entries for *mmsi* inside *window*."""
    return {
        "limit": str(limit),
        "sort": "-createdAt",
        "where[mmsi][equals]": mmsi,
        f"where[createdAt][{created_at_operator}]": _iso_utc(now - window),
    }


def parse_recent_logs(response: RestResponse) -> list[StoredLogEntry]:
    """Parse a history query response into entries.

    A body without a ``docs`` list yields no entries; documents that are not
    objects are skipped.

    Raises
    ------
    AisTransportError
        On a non-2xx status or a non-JSON body.
    """
    if not response.ok:
        raise AisTransportError(
            f"Store history query failed: {response.describe()}",
            status_code=response.status,
            endpoint=response.url,
        )

    payload = response.json()
    docs = payload.get("docs") if isinstance(payload, dict) else None
    if not isinstance(docs, list):
        return []

    entries: list[StoredLogEntry] = []
    for doc in docs:
        if not isinstance(doc, dict):
            continue
        try:
            entries.append(StoredLogEntry.model_validate(doc))
        except ValidationError:
            continue
    return entries


def ensure_created(response: RestResponse) -> dict[str, Any]:
    """Validate a create response, returning its JSON object when it has one.

    Raises
    ------
    AisTransportError
        On a non-2xx status.
    """
    if not response.ok:
        raise AisTransportError(
            f"Store create failed: {response.describe()}",
            status_code=response.status,
            endpoint=response.url,
        )
    try:
        payload = response.json()
    except AisTransportError:
        return {}
    return payload if isinstance(payload, dict) else {}
