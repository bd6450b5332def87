"""Pydantic models describing Foursquare Places search payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class FoursquareBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CategoryPayload(FoursquareBaseModel):
    id: int | None = None
    name: str


class GeocodePoint(FoursquareBaseModel):
    latitude: float
    longitude: float


class GeocodesPayload(FoursquareBaseModel):
    main: GeocodePoint | None = None


class LocationPayload(FoursquareBaseModel):
    address: str | None = None
    formatted_address: str | None = None
    locality: str | None = None
    region: str | None = None
    postcode: str | None = None
    country: str | None = None
    neighborhood: list[str] = Field(default_factory=list)

    _normalize_text = field_validator(
        "address", "formatted_address", "locality", "region", "postcode", "country", mode="before"
    )(_blank_to_none)


class StatsPayload(FoursquareBaseModel):
    total_photos: int | None = None
    total_ratings: int | None = None


class PlacePayload(FoursquareBaseModel):
    fsq_id: str
    name: str
    location: LocationPayload = Field(default_factory=LocationPayload)
    categories: list[CategoryPayload] = Field(default_factory=list)
    geocodes: GeocodesPayload | None = None
    link: str | None = None
    website: str | None = None
    tel: str | None = None
    description: str | None = None
    rating: float | None = None
    price: int | None = None
    stats: StatsPayload | None = None

    _normalize_text = field_validator("website", "tel", "description", mode="before")(
        _blank_to_none
    )


class SearchResponse(FoursquareBaseModel):
    # results stay raw so one malformed place is skipped, not the whole page
    results: list[dict[str, Any]] = Field(default_factory=list)
