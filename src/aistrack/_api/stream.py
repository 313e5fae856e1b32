"""aisstream.io message decoding and subscription building."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from aistrack._constants import POSITION_REPORT_TYPE
from aistrack.exceptions import AisMessageError
from aistrack.models.position import PositionReport
from aistrack.models.subscription import Subscription


def build_subscription(api_key: str, mmsi: str) -> dict[str, Any]:
    """Subscription payload for a single vessel."""
    return Subscription.for_vessel(api_key, mmsi).to_payload()


def decode_stream_message(raw: str | bytes) -> dict[str, Any]:
    """Decode a raw text or binary frame into a JSON object.

    Raises
    ------
    AisMessageError
        When the frame is not UTF-8 JSON or not a JSON object.
    """
    try:
        text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
        payload = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise AisMessageError(f"Stream message is not JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise AisMessageError("Stream message is not a JSON object")
    return payload


def extract_position_report(payload: Mapping[str, Any]) -> PositionReport:
    """Build a :class:`PositionReport` from a decoded stream message.

    ``MetaData.MMSI`` and ``MetaData.time_utc`` take precedence over the
    report's own ``UserID`` and the receive time.

    Raises
    ------
    AisMessageError
        When ``Message.PositionReport`` is missing or lacks numeric coordinates.
    """
    message = payload.get("Message")
    report = message.get(POSITION_REPORT_TYPE) if isinstance(message, Mapping) else None
    if not isinstance(report, Mapping):
        raise AisMessageError("Unexpected AIS report shape")

    fields: dict[str, Any] = dict(report)
    metadata = payload.get("MetaData")
    if isinstance(metadata, Mapping):
        if metadata.get("MMSI") is not None:
            fields["MMSI"] = metadata["MMSI"]
        if metadata.get("time_utc") is not None:
            fields["time_utc"] = metadata["time_utc"]
    fields["raw"] = dict(report)

    try:
        return PositionReport.model_validate(fields)
    except ValidationError as exc:
        raise AisMessageError(f"Invalid AIS position report: {exc.error_count()} field error(s)") from exc
