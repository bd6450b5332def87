"""Venues inferred from the events already scraped for a city."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from sqlalchemy.exc import SQLAlchemyError

from venuegraph.domain.model.entity import utcnow
from venuegraph.domain.model.enums import SourceType
from venuegraph.domain.model.records import RawVenue
from venuegraph.domain.ports.fetching import SourceFetchError, VenueFetchResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from venuegraph.domain.ingest_pipeline.run_log import UnitOfWorkFactory
    from venuegraph.domain.model.city import CityConfig
    from venuegraph.domain.model.enums import RunType
    from venuegraph.domain.ports.fetching import EventVenueSighting

log = getLogger(__name__)

EVENT_VENUE_CATEGORY: Final[str] = "event_venue"
MIN_EVENT_COUNT: Final[int] = 2
BASE_CONFIDENCE: Final[float] = 0.7
CONFIDENCE_PER_EVENT: Final[float] = 0.05
MAX_CONFIDENCE: Final[float] = 0.95

# checked in order against the event's source domain
PLATFORM_DOMAINS: Final[tuple[tuple[str, SourceType], ...]] = (
    ("eventbrite", SourceType.EVENTBRITE),
    ("meetup", SourceType.MEETUP),
    ("fever", SourceType.FEVER),
    ("dice", SourceType.DICE),
    ("residentadvisor", SourceType.RA),
)


def platform_for_domain(domain: str | None) -> SourceType | None:
    if not domain:
        return None
    lowered = domain.lower()
    for needle, platform in PLATFORM_DOMAINS:
        if needle in lowered:
            return platform
    return None


def event_venue_confidence(event_count: int) -> float:
    return min(BASE_CONFIDENCE + CONFIDENCE_PER_EVENT * event_count, MAX_CONFIDENCE)


@dataclass(slots=True)
class _EventVenueTally:
    platform: SourceType
    first: EventVenueSighting
    event_count: int = 0


def venues_from_event_sightings(
    sightings: Iterable[EventVenueSighting],
    *,
    city: str,
) -> list[RawVenue]:
    """Emit one sighting per venue seen under at least two platform events.

    Only events from a recognised platform count. The first platform event
    seen for a venue supplies its platform, URL, address and coordinates.
    """

    tallies: dict[str, _EventVenueTally] = {}
    for sighting in sightings:
        name = sighting.venue_name.strip()
        platform = platform_for_domain(sighting.source_domain)
        if not name or platform is None:
            continue
        tally = tallies.setdefault(name.casefold(), _EventVenueTally(platform, sighting))
        tally.event_count += 1

    venues: list[RawVenue] = []
    for tally in tallies.values():
        if tally.event_count < MIN_EVENT_COUNT:
            continue
        first = tally.first
        name = first.venue_name.strip()
        located = first.lat is not None and first.lon is not None
        venues.append(
            RawVenue(
                source=tally.platform,
                source_external_id=f"venue:{name}",
                source_url=first.source_url,
                raw_payload={
                    "venue_name": name,
                    "platform": tally.platform.value,
                    "event_count": tally.event_count,
                },
                confidence=event_venue_confidence(tally.event_count),
                raw_name=name,
                lat=first.lat if located else None,
                lon=first.lon if located else None,
                address=first.address,
                city=city,
                categories=(EVENT_VENUE_CATEGORY,),
            )
        )
    return venues


@dataclass(slots=True)
class EventSiteVenueFetcher:
    """Reads upcoming events from the relational store; needs no credentials."""

    unit_of_work_factory: UnitOfWorkFactory
    clock: Callable[[], datetime] = field(default=utcnow)
    name: str = "EventSitesAgent"
    source_label: str = "EVENT_PLATFORMS"

    @property
    def available(self) -> bool:
        return True

    @property
    def unavailable_reason(self) -> str | None:
        return None

    def __call__(self, city: CityConfig, *, run_type: RunType) -> VenueFetchResult:  # noqa: ARG002
        try:
            with self.unit_of_work_factory() as uow:
                sightings = uow.repositories.event_venues.upcoming_event_venues(
                    city.name, now=self.clock()
                )
        except SQLAlchemyError as exc:
            raise SourceFetchError(f"Could not read upcoming events: {exc}") from exc

        log.info(f"Found {len(sightings)} upcoming events with venue names in {city.name}")
        venues = venues_from_event_sightings(sightings, city=city.name)
        log.info(f"Extracted {len(venues)} venues from event platforms")
        return VenueFetchResult(venues=venues)
