"""In-flight records produced and consumed within a single ingestion run.

None of these are persisted directly: raw records survive only as provenance
payloads, candidates become (or update) canonical venues.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from venuegraph.domain.model.enums import PriceBand, SourceType, VenueCategory

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(frozen=True, slots=True, kw_only=True)
class RawVenue:
    """One sighting of a venue as reported by a single source."""

    source: SourceType
    source_external_id: str
    raw_name: str
    city: str
    confidence: float
    source_url: str | None = None
    raw_payload: Mapping[str, object] = field(default_factory=dict[str, object])
    aliases: tuple[str, ...] = ()
    lat: float | None = None
    lon: float | None = None
    address: str | None = None
    neighborhood: str | None = None
    categories: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    price_level: int | None = None
    capacity: int | None = None
    rating: float | None = None
    review_count: int | None = None
    website: str | None = None
    phone: str | None = None
    description: str | None = None
    image_url: str | None = None
    hours: Mapping[str, str] | None = None
    accessibility: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")
        if not self.raw_name.strip():
            raise ValueError("raw_name must not be blank")
        if (self.lat is None) != (self.lon is None):
            raise ValueError("lat and lon must be provided together")

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None

    @property
    def provenance_key(self) -> tuple[SourceType, str]:
        return (self.source, self.source_external_id)


@dataclass(frozen=True, slots=True, kw_only=True)
class NormalizedVenueCandidate:
    """Merged view of the raw records judged to describe the same place."""

    canonical_name: str
    normalized_name: str
    city: str
    primary_category: VenueCategory = VenueCategory.UNCLASSIFIED
    subcategories: tuple[str, ...] = ()
    aliases: tuple[str, ...] = ()
    lat: float | None = None
    lon: float | None = None
    address: str | None = None
    neighborhood: str | None = None
    price_band: PriceBand | None = None
    capacity: int | None = None
    rating: float | None = None
    website: str | None = None
    phone: str | None = None
    description: str | None = None
    image_url: str | None = None
    is_active: bool = True
    sources: tuple[RawVenue, ...] = ()

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None


@dataclass(frozen=True, slots=True)
class MatchCandidate:
    """A candidate paired with exactly one outcome: matched to a venue, or new."""

    candidate: NormalizedVenueCandidate
    matched_venue_id: UUID | None = None
    match_confidence: float | None = None
    ambiguous: bool = False

    def __post_init__(self) -> None:
        if (self.matched_venue_id is None) != (self.match_confidence is None):
            raise ValueError("matched_venue_id and match_confidence must be set together")
        if self.ambiguous and self.matched_venue_id is None:
            raise ValueError("only matched candidates can be ambiguous")

    @property
    def is_new(self) -> bool:
        return self.matched_venue_id is None

    @classmethod
    def new(cls, candidate: NormalizedVenueCandidate) -> MatchCandidate:
        return cls(candidate=candidate)

    @classmethod
    def matched(
        cls,
        candidate: NormalizedVenueCandidate,
        venue_id: UUID,
        confidence: float,
        *,
        ambiguous: bool = False,
    ) -> MatchCandidate:
        return cls(
            candidate=candidate,
            matched_venue_id=venue_id,
            match_confidence=confidence,
            ambiguous=ambiguous,
        )
