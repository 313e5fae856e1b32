"""Stored and outbound AIS log models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from aistrack._normalize import parse_utc_datetime, safe_float, safe_str
from aistrack.config import CoordinateOrder
from aistrack.models.position import PositionReport


class StoredLogEntry(BaseModel):
    """AIS log document as returned by the store.

    Parsing is lenient: an unparseable ``createdAt`` or ``location`` becomes
    ``None`` and the entry then never matches a duplicate rule.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    mmsi: str | None = None
    location: tuple[float, float] | None = None
    created_at: datetime | None = Field(default=None, validation_alias=AliasChoices("createdAt", "created_at"))
    raw: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        merged = dict(values)
        merged.setdefault("raw", values)
        return merged

    @field_validator("mmsi", mode="before")
    @classmethod
    def _coerce_mmsi(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("location", mode="before")
    @classmethod
    def _coerce_location(cls, value: Any) -> tuple[float, float] | None:
        if not isinstance(value, (list, tuple)) or len(value) < 2:
            return None
        first, second = safe_float(value[0]), safe_float(value[1])
        if first is None or second is None:
            return None
        return (first, second)

    @field_validator("created_at", mode="before")
    @classmethod
    def _coerce_created_at(cls, value: Any) -> datetime | None:
        return parse_utc_datetime(value)

    def created_since(self, threshold: datetime) -> bool:
        return self.created_at is not None and self.created_at >= threshold

    def has_location(self, location: tuple[float, float]) -> bool:
        """Exact numeric match, no tolerance."""
        return self.location is not None and self.location == location


class LogRecord(BaseModel):
    """Body of a new AIS log entry posted to the store."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    mmsi: str
    location: tuple[float, float]
    sog: float | None = None
    navigational_status: int | None = None
    rate_of_turn: int | None = None
    true_heading: int | None = None

    @classmethod
    def from_report(cls, report: PositionReport, *, mmsi: str, order: CoordinateOrder) -> LogRecord:
        return cls(
            mmsi=mmsi,
            location=order.pair(report.latitude, report.longitude),
            sog=report.sog,
            navigational_status=report.navigational_status,
            rate_of_turn=report.rate_of_turn,
            true_heading=report.true_heading,
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
