"""Public interface for the Foursquare Places adapter."""

from __future__ import annotations

from .client import FoursquareFetcher
from .schema import PlacePayload, SearchResponse
from .translator import category_tag, translate_place

__all__ = [
    "FoursquareFetcher",
    "PlacePayload",
    "SearchResponse",
    "category_tag",
    "translate_place",
]
