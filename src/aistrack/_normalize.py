"""Normalization helpers.

Centralizes defensive parsing of values coming from the stream and the store.
"""

from __future__ import annotations

import math
import re
from datetime import UTC, datetime
from typing import Any

# aisstream.io MetaData.time_utc, e.g. "2024-03-01 10:15:02.318353 +0000 UTC".
_AIS_TIME_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[ T](?P<time>\d{2}:\d{2}:\d{2})(?:\.(?P<frac>\d+))?\s*(?P<offset>[+-]\d{4})?"
)


def safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def parse_utc_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 or aisstream.io timestamp into an aware UTC datetime.

    Naive values are taken to be UTC. Returns ``None`` for anything unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            parsed_ais = _parse_ais_time(text)
            if parsed_ais is None:
                return None
            parsed = parsed_ais
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _parse_ais_time(text: str) -> datetime | None:
    match = _AIS_TIME_RE.match(text)
    if match is None:
        return None
    # Go timestamps carry nanoseconds; datetime only holds microseconds.
    frac = (match.group("frac") or "0")[:6].ljust(6, "0")
    offset = match.group("offset") or "+0000"
    try:
        return datetime.strptime(
            f"{match.group('date')} {match.group('time')}.{frac} {offset}",
            "%Y-%m-%d %H:%M:%S.%f %z",
        )
    except ValueError:
        return None
