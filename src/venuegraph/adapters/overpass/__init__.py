"""Public interface for the OpenStreetMap Overpass adapter."""

from __future__ import annotations

from .client import OverpassFetcher, build_overpass_query
from .schema import OverpassElement, OverpassResponse
from .translator import extract_categories, translate_element

__all__ = [
    "OverpassElement",
    "OverpassFetcher",
    "OverpassResponse",
    "build_overpass_query",
    "extract_categories",
    "translate_element",
]
