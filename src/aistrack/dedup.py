"""Duplicate detection for AIS log entries."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta

from aistrack._api.logs import build_recent_logs_query, parse_recent_logs
from aistrack._constants import HISTORY_LIMIT, HISTORY_WINDOW_HOURS, RECENT_WINDOW_HOURS, WARN_MISSING_CMS_HOST
from aistrack._transport import RestResponse, Transport
from aistrack.config import TrackerConfig
from aistrack.exceptions import AisError
from aistrack.models.log_entry import StoredLogEntry
from aistrack.models.position import PositionReport
from aistrack.models.token import Credential
from aistrack.runtime import RuntimeContext, utc_now
from aistrack.session import SessionManager

_logger = logging.getLogger(__name__)


def find_duplicate_reason(
    entries: Sequence[StoredLogEntry],
    location: tuple[float, float],
    now: datetime,
    *,
    recent_window: timedelta = timedelta(hours=RECENT_WINDOW_HOURS),
) -> str | None:
    """Return why *location* duplicates *entries*, or ``None`` when it does not.

    Recency wins over location: any entry newer than ``now - recent_window``
    rejects the report. Otherwise an entry at exactly the same coordinates
    (already restricted to the query window) rejects it.
    """
    threshold = now - recent_window
    if any(entry.created_since(threshold) for entry in entries):
        return f"entry exists within last {recent_window.total_seconds() / 3600:g} hours"
    if any(entry.has_location(location) for entry in entries):
        return f"identical location already stored within last {HISTORY_WINDOW_HOURS} hours"
    return None


class DuplicateLogPolicy:
    """Decides per report whether a new log entry should be written.

    The policy fails open: when the history cannot be read, or no credential
    is cached yet, the report is allowed.
    """

    def __init__(
        self,
        config: TrackerConfig,
        context: RuntimeContext,
        sessions: SessionManager,
        transport: Transport,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._config = config
        self._context = context
        self._sessions = sessions
        self._transport = transport
        self._clock = clock

    async def should_persist(self, report: PositionReport) -> bool:
        collection_url = self._config.collection_url
        if not collection_url:
            self._context.warn_once(
                WARN_MISSING_CMS_HOST,
                "Missing CMS_HOST_URL; skipping store persistence",
                logger=_logger,
            )
            return False

        if self._sessions.credential is None:
            _logger.warning("Skipping duplicate check; missing auth token")
            return True

        now = self._clock()
        params = build_recent_logs_query(
            self._config.mmsi,
            now,
            created_at_operator=self._config.created_at_operator,
            limit=HISTORY_LIMIT,
        )

        async def fetch_recent_logs(credential: Credential) -> RestResponse:
            return await self._transport.request(
                "GET",
                collection_url,
                headers=credential.authorization_header(),
                params=params,
            )

        try:
            response = await self._sessions.perform_authorized_request(fetch_recent_logs)
            entries = parse_recent_logs(response)
        except AisError as exc:
            _logger.error("Failed to query recent AIS logs; allowing persistence: %s", exc)
            return True

        location = self._config.coordinate_order.pair(report.latitude, report.longitude)
        reason = find_duplicate_reason(entries, location, now)
        if reason is not None:
            _logger.info("Skipping AIS log: %s", reason)
            return False
        return True
