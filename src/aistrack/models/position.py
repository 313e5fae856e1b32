"""Position report model."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from aistrack._normalize import parse_utc_datetime, safe_float, safe_int, safe_str


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class PositionReport(BaseModel):
    """Normalized AIS position report for the tracked vessel.

    Built from the ``Message.PositionReport`` object of a stream message,
    optionally merged with its ``MetaData``. Only latitude and longitude are
    required; the remaining numeric fields are ``None`` when absent or
    unparseable.

    Parameters
    ----------
    mmsi : str or None
        Reporting vessel (``MetaData.MMSI`` or ``PositionReport.UserID``).
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    sog : float or None
        Speed over ground in knots.
    navigational_status : int or None
        AIS navigational status code.
    rate_of_turn : int or None
        AIS rate of turn indicator.
    true_heading : int or None
        True heading in degrees (511 means not available).
    observed_at : datetime
        ``MetaData.time_utc`` when present, otherwise the receive time.
    raw : dict
        The original ``PositionReport`` object.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    mmsi: str | None = Field(default=None, validation_alias=AliasChoices("mmsi", "MMSI", "UserID"))
    latitude: float = Field(validation_alias=AliasChoices("latitude", "Latitude"))
    longitude: float = Field(validation_alias=AliasChoices("longitude", "Longitude"))
    sog: float | None = Field(default=None, validation_alias=AliasChoices("sog", "Sog"))
    navigational_status: int | None = Field(
        default=None,
        validation_alias=AliasChoices("navigational_status", "NavigationalStatus"),
    )
    rate_of_turn: int | None = Field(default=None, validation_alias=AliasChoices("rate_of_turn", "RateOfTurn"))
    true_heading: int | None = Field(default=None, validation_alias=AliasChoices("true_heading", "TrueHeading"))
    observed_at: datetime = Field(
        default_factory=_utc_now,
        validation_alias=AliasChoices("observed_at", "time_utc"),
    )
    raw: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        merged = dict(values)
        merged.setdefault("raw", values)
        return merged

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _require_coordinate(cls, value: Any) -> float:
        parsed = safe_float(value)
        if parsed is None:
            raise ValueError(f"coordinate is not numeric: {value!r}")
        return parsed

    @field_validator("sog", mode="before")
    @classmethod
    def _coerce_float(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("navigational_status", "rate_of_turn", "true_heading", mode="before")
    @classmethod
    def _coerce_int(cls, value: Any) -> int | None:
        return safe_int(value)

    @field_validator("mmsi", mode="before")
    @classmethod
    def _coerce_mmsi(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("observed_at", mode="before")
    @classmethod
    def _coerce_observed_at(cls, value: Any) -> datetime:
        return parse_utc_datetime(value) or _utc_now()
