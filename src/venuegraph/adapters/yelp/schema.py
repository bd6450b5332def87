"""Pydantic models describing Yelp Fusion business search payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class YelpBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CategoryPayload(YelpBaseModel):
    alias: str
    title: str | None = None


class CoordinatesPayload(YelpBaseModel):
    latitude: float | None = None
    longitude: float | None = None


class LocationPayload(YelpBaseModel):
    address1: str | None = None
    city: str | None = None
    zip_code: str | None = None
    state: str | None = None
    display_address: list[str] = Field(default_factory=list)


class BusinessPayload(YelpBaseModel):
    id: str
    alias: str | None = None
    name: str
    image_url: str | None = None
    url: str | None = None
    review_count: int | None = None
    categories: list[CategoryPayload] = Field(default_factory=list)
    rating: float | None = None
    coordinates: CoordinatesPayload = Field(default_factory=CoordinatesPayload)
    location: LocationPayload = Field(default_factory=LocationPayload)
    phone: str | None = None
    display_phone: str | None = None
    price: str | None = None
    is_closed: bool = False

    _normalize_text = field_validator(
        "image_url", "url", "phone", "display_phone", "price", mode="before"
    )(_blank_to_none)


class SearchResponse(YelpBaseModel):
    # businesses stay raw so one malformed entry is skipped, not the whole page
    businesses: list[dict[str, Any]] = Field(default_factory=list)
    total: int | None = None
