"""Public interface for the Yelp Fusion adapter."""

from __future__ import annotations

from .client import YelpFetcher
from .schema import BusinessPayload, SearchResponse
from .translator import translate_business

__all__ = ["BusinessPayload", "SearchResponse", "YelpFetcher", "translate_business"]
