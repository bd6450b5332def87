"""Social heat source.

Not wired to any platform yet: the fetcher runs as a no-op so the pipeline
keeps its shape. The intended contract:

* for each canonical venue, search TikTok, Instagram, Snapchat and Reddit by
  venue name and coordinates;
* aggregate mentions, engagement and check-ins over a rolling 7 day window,
  weighted by recency;
* normalize the result to a 0-100 heat score;
* store it as a weekly ``SOCIAL_HEAT`` :class:`~venuegraph.domain.model.VenueSignal`
  (see :func:`venuegraph.app.record_venue_signal`), which the heat index
  consumes at 30 points.

The fetcher itself never emits raw venues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from venuegraph.domain.ports.fetching import VenueFetcher, VenueFetchResult

if TYPE_CHECKING:
    from venuegraph.domain.model.city import CityConfig
    from venuegraph.domain.model.enums import RunType, SourceType

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SocialHeat:
    heat_score: float
    sources: tuple[SourceType, ...] = ()
    meta: dict[str, Any] = field(default_factory=dict[str, Any])


def social_heat_for_venue(
    venue_name: str,  # noqa: ARG001
    *,
    lat: float | None = None,  # noqa: ARG001
    lon: float | None = None,  # noqa: ARG001
    city: str | None = None,  # noqa: ARG001
) -> SocialHeat:
    return SocialHeat(
        heat_score=0.0,
        meta={
            "reason": "stub_implementation",
            "message": "Social signal fetching not yet implemented",
        },
    )


@dataclass(slots=True)
class SocialSignalFetcher:
    name: str = "SocialSignalsAgent"
    source_label: str = "SOCIAL"

    @property
    def available(self) -> bool:
        return True

    @property
    def unavailable_reason(self) -> str | None:
        return None

    def __call__(self, city: CityConfig, *, run_type: RunType) -> VenueFetchResult:  # noqa: ARG002
        log.info(f"Social signal ingestion is not implemented, no signals for {city.name}")
        return VenueFetchResult()


if TYPE_CHECKING:
    _fetcher_check: VenueFetcher = SocialSignalFetcher()
