"""HTTP client for the Yelp Fusion business search API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx

from venuegraph.adapters.http_resilience import ResilientClient, default_client_factory
from venuegraph.config.pipeline import DEFAULT_PAGE_DELAY_SECONDS
from venuegraph.config.yelp import YelpConfig, get_yelp_config
from venuegraph.domain.geo import bbox_center, bbox_radius_meters
from venuegraph.domain.model.enums import RunType
from venuegraph.domain.ports.fetching import SourceFetchError, VenueFetcher, VenueFetchResult

from .schema import BusinessPayload, SearchResponse
from .translator import translate_business

if TYPE_CHECKING:
    from collections.abc import Callable

    from venuegraph.config.http_resilience import ResilienceConfig
    from venuegraph.domain.model.city import CityConfig
    from venuegraph.domain.model.records import RawVenue

log = getLogger(__name__)

PAGE_SIZE: Final[int] = 50
MAX_RADIUS_METERS: Final[int] = 40_000
# Yelp pages per category, so the cap applies to each category separately
MAX_RESULTS_PER_CATEGORY: Final[dict[RunType, int]] = {
    RunType.FULL: 200,
    RunType.INCREMENTAL: 50,
}
CATEGORIES: Final[tuple[str, ...]] = (
    "nightlife",
    "arts",
    "active",
    "restaurants",
    "eventservices",
)


@dataclass(slots=True)
class YelpFetcher:
    config: YelpConfig = field(default_factory=get_yelp_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=default_client_factory
    )
    page_delay_seconds: float = DEFAULT_PAGE_DELAY_SECONDS
    name: str = "YelpAgent"
    source_label: str = "YELP"

    @property
    def available(self) -> bool:
        return self.config.is_configured

    @property
    def unavailable_reason(self) -> str | None:
        if self.available:
            return None
        return "API key not configured, skipping Yelp source"

    def __call__(self, city: CityConfig, *, run_type: RunType) -> VenueFetchResult:
        return asyncio.run(self._fetch_venues_async(city, run_type=run_type))

    async def _fetch_venues_async(self, city: CityConfig, *, run_type: RunType) -> VenueFetchResult:
        lat, lon = bbox_center(city.bbox)
        radius = min(int(bbox_radius_meters(city.bbox)), MAX_RADIUS_METERS)
        max_results = MAX_RESULTS_PER_CATEGORY[run_type]

        venues: list[RawVenue] = []
        skipped = 0
        errors: list[str] = []
        first_request = True
        async with self.client_factory(self.config.resilience) as client:
            for category in CATEGORIES:
                offset = 0
                while offset < max_results:
                    if not first_request:
                        await asyncio.sleep(self.page_delay_seconds)
                    first_request = False
                    params = httpx.QueryParams(
                        {
                            "latitude": lat,
                            "longitude": lon,
                            "radius": radius,
                            "categories": category,
                            "limit": PAGE_SIZE,
                            "offset": offset,
                        }
                    )
                    try:
                        page = await self._request_page(client, params)
                    except SourceFetchError as exc:
                        message = f"{exc} (category {category})"
                        log.warning(f"{message}, continuing with the next category")
                        errors.append(message)
                        break

                    if not page.businesses:
                        break
                    for raw_business in page.businesses:
                        try:
                            business = BusinessPayload.model_validate(raw_business)
                            venues.append(
                                translate_business(business, city=city.name, payload=raw_business)
                            )
                        except ValueError:
                            log.debug("Skipping malformed Yelp business %r", raw_business.get("id"))
                            skipped += 1
                    offset += PAGE_SIZE
                log.info(f"Fetched Yelp category {category}: {len(venues)} venues so far")

        if len(errors) == len(CATEGORIES):
            raise SourceFetchError("; ".join(errors), partial=venues, skipped=skipped)
        return VenueFetchResult(venues=venues, skipped=skipped, errors=errors)

    async def _request_page(
        self, client: ResilientClient, params: httpx.QueryParams
    ) -> SearchResponse:
        headers = {
            "Authorization": f"Bearer {self.config.api_key or ''}",
            "Accept": "application/json",
        }
        try:
            response = await client.get(self.config.base_url, params=params, headers=headers)
            response.raise_for_status()
            return SearchResponse.model_validate(response.json())
        except httpx.HTTPStatusError as exc:
            raise SourceFetchError(f"Yelp API error: {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise SourceFetchError(f"Yelp API request failed: {exc}") from exc
        except ValueError as exc:
            raise SourceFetchError(f"Unexpected Yelp response payload: {exc}") from exc


if TYPE_CHECKING:
    _fetcher_check: VenueFetcher = YelpFetcher()
