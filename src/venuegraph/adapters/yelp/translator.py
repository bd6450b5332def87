"""Translate Yelp businesses into raw venue sightings."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from venuegraph.domain.model.enums import SourceType
from venuegraph.domain.model.records import RawVenue

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .schema import BusinessPayload

YELP_CONFIDENCE: Final[float] = 0.9


def translate_business(
    business: BusinessPayload,
    *,
    city: str,
    payload: Mapping[str, Any],
) -> RawVenue:
    coordinates = business.coordinates
    located = coordinates.latitude is not None and coordinates.longitude is not None
    display_address = [part for part in business.location.display_address if part.strip()]
    return RawVenue(
        source=SourceType.YELP,
        source_external_id=business.id,
        source_url=business.url,
        raw_payload=dict(payload),
        confidence=YELP_CONFIDENCE,
        raw_name=business.name,
        lat=coordinates.latitude if located else None,
        lon=coordinates.longitude if located else None,
        address=", ".join(display_address) if display_address else business.location.address1,
        city=city,
        categories=tuple(category.alias for category in business.categories),
        price_level=business.price.count("$") if business.price else None,
        rating=business.rating,
        review_count=business.review_count,
        website=business.url,
        phone=business.phone or business.display_phone,
        image_url=business.image_url,
    )
