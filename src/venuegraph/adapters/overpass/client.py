"""HTTP client for the OpenStreetMap Overpass API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx

from venuegraph.adapters.http_resilience import ResilientClient, default_client_factory
from venuegraph.config.overpass import OverpassConfig, get_overpass_config
from venuegraph.domain.geo import bbox_to_overpass
from venuegraph.domain.ports.fetching import SourceFetchError, VenueFetcher, VenueFetchResult

from .schema import OverpassElement, OverpassResponse
from .translator import translate_element

if TYPE_CHECKING:
    from collections.abc import Callable

    from venuegraph.config.http_resilience import ResilienceConfig
    from venuegraph.domain.model.city import CityConfig
    from venuegraph.domain.model.enums import RunType
    from venuegraph.domain.model.records import RawVenue

log = getLogger(__name__)

# tag filters, each queried for both nodes and ways
VENUE_SELECTORS: Final[tuple[str, ...]] = (
    '["amenity"="bar"]',
    '["amenity"="nightclub"]',
    '["amenity"="pub"]',
    '["amenity"="music_venue"]',
    '["amenity"="theatre"]',
    '["tourism"="museum"]',
    '["tourism"="gallery"]',
    '["amenity"="arts_centre"]',
    '["leisure"="fitness_centre"]',
    '["leisure"="sports_centre"]',
    '["amenity"="studio"]["studio"="dance"]',
    '["amenity"="marketplace"]',
    '["shop"="marketplace"]',
    '["amenity"="coworking_space"]',
    '["amenity"="community_centre"]',
    '["amenity"="conference_centre"]',
    '["leisure"="park"]',
)


def build_overpass_query(bbox: str, *, timeout_seconds: int) -> str:
    """Overpass QL selecting named venue nodes and ways inside ``bbox``."""

    statements = "\n".join(
        f"  {element}{selector}({bbox});"
        for selector in VENUE_SELECTORS
        for element in ("node", "way")
    )
    return f"[out:json][timeout:{timeout_seconds}];\n(\n{statements}\n);\nout center;"


@dataclass(slots=True)
class OverpassFetcher:
    """Single-request source: one query per city, no paging."""

    config: OverpassConfig = field(default_factory=get_overpass_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=default_client_factory
    )
    name: str = "OSMAgent"
    source_label: str = "OSM"

    @property
    def available(self) -> bool:
        return True

    @property
    def unavailable_reason(self) -> str | None:
        return None

    def __call__(self, city: CityConfig, *, run_type: RunType) -> VenueFetchResult:  # noqa: ARG002
        return asyncio.run(self._fetch_venues_async(city))

    async def _fetch_venues_async(self, city: CityConfig) -> VenueFetchResult:
        query = build_overpass_query(
            bbox_to_overpass(city.bbox), timeout_seconds=self.config.query_timeout_seconds
        )
        try:
            async with self.client_factory(self.config.resilience) as client:
                response = await client.post(self.config.url, data={"data": query})
                response.raise_for_status()
                payload = OverpassResponse.model_validate(response.json())
        except httpx.HTTPStatusError as exc:
            raise SourceFetchError(
                f"Overpass API error: {exc.response.status_code} {exc.response.reason_phrase}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceFetchError(f"Overpass API request failed: {exc}") from exc
        except ValueError as exc:
            raise SourceFetchError(f"Unexpected Overpass response payload: {exc}") from exc

        log.info(f"Received {len(payload.elements)} elements from Overpass for {city.name}")
        venues: list[RawVenue] = []
        skipped = 0
        for raw_element in payload.elements:
            try:
                element = OverpassElement.model_validate(raw_element)
                venue = translate_element(element, city=city.name, payload=raw_element)
            except ValueError:
                log.debug("Skipping malformed Overpass element %r", raw_element.get("id"))
                skipped += 1
                continue
            if venue is not None:
                venues.append(venue)
        return VenueFetchResult(venues=venues, skipped=skipped)


if TYPE_CHECKING:
    _fetcher_check: VenueFetcher = OverpassFetcher()
