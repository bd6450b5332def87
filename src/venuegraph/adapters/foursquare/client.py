"""HTTP client for the Foursquare Places search API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx

from venuegraph.adapters.http_resilience import ResilientClient, default_client_factory
from venuegraph.config.foursquare import FoursquareConfig, get_foursquare_config
from venuegraph.config.pipeline import DEFAULT_PAGE_DELAY_SECONDS
from venuegraph.domain.geo import bbox_center, bbox_radius_meters
from venuegraph.domain.model.enums import RunType
from venuegraph.domain.ports.fetching import SourceFetchError, VenueFetcher, VenueFetchResult

from .schema import PlacePayload, SearchResponse
from .translator import translate_place

if TYPE_CHECKING:
    from collections.abc import Callable

    from venuegraph.config.http_resilience import ResilienceConfig
    from venuegraph.domain.model.city import CityConfig
    from venuegraph.domain.model.records import RawVenue

log = getLogger(__name__)

PAGE_SIZE: Final[int] = 50
MAX_RADIUS_METERS: Final[int] = 100_000
MAX_RESULTS: Final[dict[RunType, int]] = {RunType.FULL: 500, RunType.INCREMENTAL: 100}
CATEGORY_IDS: Final[tuple[str, ...]] = (
    "10032",  # nightlife
    "10040",  # live music venue
    "10001",  # arts and entertainment
    "10003",  # fitness center
    "10056",  # performing arts
    "13003",  # restaurant
    "13065",  # food market
    "13383",  # coworking space
)


@dataclass(slots=True)
class FoursquareFetcher:
    config: FoursquareConfig = field(default_factory=get_foursquare_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=default_client_factory
    )
    page_delay_seconds: float = DEFAULT_PAGE_DELAY_SECONDS
    name: str = "FoursquareAgent"
    source_label: str = "FOURSQUARE"

    @property
    def available(self) -> bool:
        return self.config.is_configured

    @property
    def unavailable_reason(self) -> str | None:
        if self.available:
            return None
        return "API key not configured, skipping Foursquare source"

    def __call__(self, city: CityConfig, *, run_type: RunType) -> VenueFetchResult:
        return asyncio.run(self._fetch_venues_async(city, run_type=run_type))

    async def _fetch_venues_async(self, city: CityConfig, *, run_type: RunType) -> VenueFetchResult:
        lat, lon = bbox_center(city.bbox)
        radius = min(int(bbox_radius_meters(city.bbox)), MAX_RADIUS_METERS)
        max_results = MAX_RESULTS[run_type]

        venues: list[RawVenue] = []
        skipped = 0
        offset = 0
        async with self.client_factory(self.config.resilience) as client:
            while offset < max_results:
                if offset:
                    await asyncio.sleep(self.page_delay_seconds)
                params = httpx.QueryParams(
                    {
                        "ll": f"{lat},{lon}",
                        "radius": radius,
                        "categories": ",".join(CATEGORY_IDS),
                        "limit": PAGE_SIZE,
                        "offset": offset,
                    }
                )
                try:
                    page = await self._request_page(client, params)
                except SourceFetchError as exc:
                    raise SourceFetchError(str(exc), partial=venues, skipped=skipped) from exc

                log.info(f"Fetched {len(page.results)} Foursquare places (offset {offset})")
                if not page.results:
                    break
                for raw_place in page.results:
                    try:
                        place = PlacePayload.model_validate(raw_place)
                        venues.append(translate_place(place, city=city.name, payload=raw_place))
                    except ValueError:
                        log.debug("Skipping malformed Foursquare place %r", raw_place.get("fsq_id"))
                        skipped += 1
                offset += PAGE_SIZE

        return VenueFetchResult(venues=venues[:max_results], skipped=skipped)

    async def _request_page(
        self, client: ResilientClient, params: httpx.QueryParams
    ) -> SearchResponse:
        headers = {"Authorization": self.config.api_key or "", "Accept": "application/json"}
        try:
            response = await client.get(self.config.base_url, params=params, headers=headers)
            response.raise_for_status()
            return SearchResponse.model_validate(response.json())
        except httpx.HTTPStatusError as exc:
            raise SourceFetchError(
                f"Foursquare API error: {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceFetchError(f"Foursquare API request failed: {exc}") from exc
        except ValueError as exc:
            raise SourceFetchError(f"Unexpected Foursquare response payload: {exc}") from exc


if TYPE_CHECKING:
    _fetcher_check: VenueFetcher = FoursquareFetcher()
