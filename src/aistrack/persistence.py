"""Persistence of accepted position reports."""

from __future__ import annotations

import logging

from aistrack._api.logs import ensure_created
from aistrack._constants import WARN_MISSING_CMS_CREDENTIALS, WARN_MISSING_CMS_HOST
from aistrack._redact import redact_for_log
from aistrack._transport import RestResponse, Transport
from aistrack.config import TrackerConfig
from aistrack.dedup import DuplicateLogPolicy
from aistrack.exceptions import AisError
from aistrack.models.log_entry import LogRecord
from aistrack.models.position import PositionReport
from aistrack.models.token import Credential
from aistrack.runtime import RuntimeContext
from aistrack.session import SessionManager

_logger = logging.getLogger(__name__)


class PositionLogWriter:
    """Writes position reports to the store's AIS log collection.

    :meth:`persist` never raises :class:`~aistrack.exceptions.AisError`; every
    failure is logged and the report is dropped.
    """

    def __init__(
        self,
        config: TrackerConfig,
        context: RuntimeContext,
        sessions: SessionManager,
        policy: DuplicateLogPolicy,
        transport: Transport,
    ) -> None:
        self._config = config
        self._context = context
        self._sessions = sessions
        self._policy = policy
        self._transport = transport

    async def persist(self, report: PositionReport) -> bool:
        """Persist *report* unless it is a duplicate; return whether it was written."""
        collection_url = self._config.collection_url
        if not collection_url or not self._config.login_url:
            self._context.warn_once(
                WARN_MISSING_CMS_HOST,
                "Missing CMS_HOST_URL; skipping store persistence",
                logger=_logger,
            )
            return False

        if not self._config.has_cms_credentials:
            self._context.warn_once(
                WARN_MISSING_CMS_CREDENTIALS,
                "Missing CMS_EMAIL or CMS_PASSWORD; skipping store persistence",
                logger=_logger,
            )
            return False

        try:
            await self._sessions.ensure_session()
        except AisError as exc:
            _logger.error("Failed to authenticate with store REST API: %s", exc)
            return False

        try:
            should_persist = await self._policy.should_persist(report)
        except AisError as exc:
            _logger.error("Failed to evaluate AIS log duplication rules: %s", exc)
            return False

        if not should_persist:
            return False

        record = LogRecord.from_report(report, mmsi=self._config.mmsi, order=self._config.coordinate_order)
        payload = record.to_payload()

        async def post_log(credential: Credential) -> RestResponse:
            return await self._transport.request(
                "POST",
                collection_url,
                headers=credential.authorization_header(),
                json_body=payload,
            )

        try:
            response = await self._sessions.perform_authorized_request(post_log)
            ensure_created(response)
        except AisError as exc:
            _logger.error("Failed to persist AIS log via store REST API: %s", exc)
            return False

        _logger.info("Stored AIS log location=%s", payload["location"])
        _logger.debug("Stored AIS log payload=%s", redact_for_log(payload))
        return True
