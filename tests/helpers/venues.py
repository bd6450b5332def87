"""Reusable fakes and builders for venue ingestion tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from venuegraph.domain.model import (
    NormalizedVenueCandidate,
    RawVenue,
    SourceType,
    Venue,
    VenueCategory,
)
from venuegraph.domain.normalization import normalize_name
from venuegraph.domain.ports.fetching import SourceFetchError, VenueFetchResult

if TYPE_CHECKING:
    from venuegraph.domain.model import CityConfig, RunType
    from venuegraph.domain.ports.graph_store import VenueGraphRecord

FIXED_NOW = datetime(2026, 3, 14, 18, 0, tzinfo=UTC)


def make_raw_venue(  # noqa: PLR0913
    name: str = "Blue Note",
    *,
    source: SourceType = SourceType.OSM,
    external_id: str | None = None,
    city: str = "New York",
    confidence: float = 0.9,
    lat: float | None = 40.7309,
    lon: float | None = -74.0006,
    categories: tuple[str, ...] = ("jazz_club",),
    **extra: Any,
) -> RawVenue:
    return RawVenue(
        source=source,
        source_external_id=external_id or f"{source.value.lower()}:{normalize_name(name)}",
        raw_name=name,
        city=city,
        confidence=confidence,
        lat=lat,
        lon=lon,
        categories=categories,
        **extra,
    )


def make_candidate(
    name: str = "Blue Note",
    *,
    city: str = "New York",
    lat: float | None = 40.7309,
    lon: float | None = -74.0006,
    category: VenueCategory = VenueCategory.MUSIC,
    **extra: Any,
) -> NormalizedVenueCandidate:
    return NormalizedVenueCandidate(
        canonical_name=name,
        normalized_name=normalize_name(name),
        city=city,
        lat=lat,
        lon=lon,
        primary_category=category,
        **extra,
    )


def make_venue(
    name: str = "Blue Note",
    *,
    city: str = "New York",
    created_at: datetime = FIXED_NOW,
    **extra: Any,
) -> Venue:
    return Venue.from_candidate(make_candidate(name, city=city, **extra), now=created_at)


@dataclass(slots=True)
class FakeVenueFetcher:
    """In-memory implementation of the venue fetcher port."""

    venues: list[RawVenue] = field(default_factory=list)
    name: str = "FakeAgent"
    source_label: str = "FAKE"
    available: bool = True
    unavailable_reason: str | None = None
    error: SourceFetchError | None = None
    skipped: int = 0
    recovered_errors: list[str] = field(default_factory=list)
    calls: list[tuple[str, RunType]] = field(default_factory=list)

    def __call__(self, city: CityConfig, *, run_type: RunType) -> VenueFetchResult:
        self.calls.append((city.name, run_type))
        if self.error is not None:
            raise self.error
        return VenueFetchResult(
            venues=list(self.venues), skipped=self.skipped, errors=list(self.recovered_errors)
        )


@dataclass(slots=True)
class RecordingGraphStore:
    """Graph store fake that remembers its lifecycle and every upsert."""

    available: bool = True
    fail_on: frozenset[str] = frozenset()
    records: list[VenueGraphRecord] = field(default_factory=list)
    opened: int = 0
    closed: int = 0

    def open(self) -> None:
        self.opened += 1

    def close(self) -> None:
        self.closed += 1

    def upsert_venue(self, record: VenueGraphRecord) -> None:
        if record.name in self.fail_on:
            raise ConnectionError(f"graph store down for {record.name}")
        self.records.append(record)
