"""Ports for fetching venue sightings from external and internal sources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from venuegraph.domain.model.records import RawVenue

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from venuegraph.domain.model.city import CityConfig
    from venuegraph.domain.model.enums import RunType


class SourceFetchError(RuntimeError):
    """Raised by a fetcher when its source cannot be read (network, status, payload).

    ``partial`` holds whatever was collected before the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        partial: Sequence[RawVenue] = (),
        skipped: int = 0,
    ) -> None:
        super().__init__(message)
        self.partial = tuple(partial)
        self.skipped = skipped


@dataclass(slots=True)
class VenueFetchResult:
    """Sightings returned by one source, plus the number of records it had to skip.

    ``errors`` lists request failures the fetcher recovered from, such as one
    query out of several failing while the rest still answered.
    """

    venues: list[RawVenue] = field(default_factory=list[RawVenue])
    skipped: int = 0
    errors: list[str] = field(default_factory=list[str])


@runtime_checkable
class VenueFetcher(Protocol):
    """Callable port for one venue source.

    ``available`` is the capability flag: a fetcher lacking credentials or its
    backing dependency stays in the pipeline but reports itself unavailable.
    """

    name: str
    source_label: str

    @property
    def available(self) -> bool: ...

    @property
    def unavailable_reason(self) -> str | None: ...

    def __call__(self, city: CityConfig, *, run_type: RunType) -> VenueFetchResult: ...


@dataclass(frozen=True, slots=True)
class EventVenueSighting:
    """A venue name recorded against one upcoming event."""

    venue_name: str
    source_domain: str | None = None
    source_url: str | None = None
    address: str | None = None
    lat: float | None = None
    lon: float | None = None


@runtime_checkable
class EventVenueReader(Protocol):
    """Read access to the events table maintained by the event scraper."""

    def upcoming_event_venues(self, city: str, *, now: datetime) -> list[EventVenueSighting]: ...


__all__ = [
    "EventVenueReader",
    "EventVenueSighting",
    "SourceFetchError",
    "VenueFetchResult",
    "VenueFetcher",
]
