"""Stream subscription message model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from aistrack._constants import POSITION_REPORT_TYPE, WORLD_BOUNDING_BOX

BoundingBox = tuple[tuple[float, float], tuple[float, float]]


class Subscription(BaseModel):
    """Filter message sent once after every successful stream open.

    Serializes to the aisstream.io wire names (``APIKey``,
    ``BoundingBoxes``, ``FiltersShipMMSI``, ``FilterMessageTypes``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_key: str = Field(alias="APIKey")
    filters_ship_mmsi: tuple[str, ...] = Field(alias="FiltersShipMMSI")
    bounding_boxes: tuple[BoundingBox, ...] = Field(default=(WORLD_BOUNDING_BOX,), alias="BoundingBoxes")
    filter_message_types: tuple[str, ...] = Field(default=(POSITION_REPORT_TYPE,), alias="FilterMessageTypes")

    @classmethod
    def for_vessel(cls, api_key: str, mmsi: str) -> Subscription:
        return cls(api_key=api_key, filters_ship_mmsi=(mmsi,))

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
