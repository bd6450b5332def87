"""Translate Foursquare places into raw venue sightings."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Final

from venuegraph.domain.model.enums import SourceType
from venuegraph.domain.model.records import RawVenue

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .schema import PlacePayload

FOURSQUARE_CONFIDENCE: Final[float] = 0.95
FOURSQUARE_VENUE_URL: Final[str] = "https://foursquare.com/v"
# Foursquare rates on 0-10, canonical ratings are 0-5
RATING_SCALE_DIVISOR: Final[float] = 2.0

_WHITESPACE = re.compile(r"\s+")


def category_tag(name: str) -> str:
    return _WHITESPACE.sub("_", name.strip().lower())


def translate_place(place: PlacePayload, *, city: str, payload: Mapping[str, Any]) -> RawVenue:
    main = place.geocodes.main if place.geocodes is not None else None
    location = place.location
    return RawVenue(
        source=SourceType.FOURSQUARE,
        source_external_id=place.fsq_id,
        source_url=f"{FOURSQUARE_VENUE_URL}/{place.fsq_id}",
        raw_payload=dict(payload),
        confidence=FOURSQUARE_CONFIDENCE,
        raw_name=place.name,
        lat=main.latitude if main is not None else None,
        lon=main.longitude if main is not None else None,
        address=location.address or location.formatted_address,
        neighborhood=location.neighborhood[0] if location.neighborhood else None,
        city=city,
        categories=tuple(category_tag(category.name) for category in place.categories),
        price_level=place.price,
        rating=place.rating / RATING_SCALE_DIVISOR if place.rating is not None else None,
        review_count=place.stats.total_ratings if place.stats is not None else None,
        website=place.website,
        phone=place.tel,
        description=place.description,
    )
