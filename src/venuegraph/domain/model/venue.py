"""Canonical venues and their append-only satellites."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from venuegraph.domain.model.entity import Entity, utcnow
from venuegraph.domain.model.enums import (
    PriceBand,
    SignalType,
    SignalWindow,
    SourceType,
    VenueCategory,
)

if TYPE_CHECKING:
    from venuegraph.domain.model.records import NormalizedVenueCandidate, RawVenue

DEFAULT_ALIAS_SOURCE = "ingestion"

# fields copied from a candidate onto a venue when the candidate carries a value
_FILLABLE_FIELDS: tuple[str, ...] = (
    "lat",
    "lon",
    "address",
    "neighborhood",
    "price_band",
    "capacity",
    "website",
    "phone",
    "description",
    "image_url",
)


@dataclass(eq=False, kw_only=True)
class VenueSource(Entity):
    source: SourceType
    source_external_id: str
    confidence: float
    venue_id: UUID | None = None
    source_url: str | None = None
    raw_payload: dict[str, Any] = field(default_factory=dict[str, Any])
    first_seen_at: datetime = field(default_factory=utcnow)
    last_seen_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_raw(cls, raw: RawVenue, *, seen_at: datetime) -> VenueSource:
        return cls(
            source=raw.source,
            source_external_id=raw.source_external_id,
            source_url=raw.source_url,
            raw_payload=dict(raw.raw_payload),
            confidence=raw.confidence,
            first_seen_at=seen_at,
            last_seen_at=seen_at,
        )

    def touch(self, seen_at: datetime) -> None:
        self.last_seen_at = seen_at


@dataclass(eq=False, kw_only=True)
class VenueAlias(Entity):
    alias: str
    alias_normalized: str
    venue_id: UUID | None = None
    source: str | None = DEFAULT_ALIAS_SOURCE
    created_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class Venue(Entity):
    """Long-lived canonical venue; absent fields never blank populated ones."""

    canonical_name: str
    normalized_name: str
    city: str
    lat: float | None = None
    lon: float | None = None
    address: str | None = None
    neighborhood: str | None = None
    primary_category: VenueCategory = VenueCategory.UNCLASSIFIED
    subcategories: list[str] = field(default_factory=list[str])
    price_band: PriceBand | None = None
    capacity: int | None = None
    website: str | None = None
    phone: str | None = None
    description: str | None = None
    image_url: str | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    sources: list[VenueSource] = field(default_factory=list[VenueSource])
    aliases: list[VenueAlias] = field(default_factory=list[VenueAlias])

    @classmethod
    def from_candidate(cls, candidate: NormalizedVenueCandidate, *, now: datetime) -> Venue:
        return cls(
            canonical_name=candidate.canonical_name,
            normalized_name=candidate.normalized_name,
            city=candidate.city,
            lat=candidate.lat,
            lon=candidate.lon,
            address=candidate.address,
            neighborhood=candidate.neighborhood,
            primary_category=candidate.primary_category,
            subcategories=list(candidate.subcategories),
            price_band=candidate.price_band,
            capacity=candidate.capacity,
            website=candidate.website,
            phone=candidate.phone,
            description=candidate.description,
            image_url=candidate.image_url,
            is_active=candidate.is_active,
            created_at=now,
            updated_at=now,
        )

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None

    @property
    def alias_keys(self) -> frozenset[str]:
        return frozenset(alias.alias_normalized for alias in self.aliases)

    def add_alias(
        self,
        alias: str,
        alias_normalized: str,
        *,
        source: str | None = DEFAULT_ALIAS_SOURCE,
        now: datetime | None = None,
    ) -> VenueAlias | None:
        """Attach ``alias`` unless a variant with the same normalized text exists."""

        if not alias_normalized or alias_normalized in self.alias_keys:
            return None
        entry = VenueAlias(
            alias=alias,
            alias_normalized=alias_normalized,
            source=source,
            created_at=now or utcnow(),
        )
        self.aliases.append(entry)
        return entry

    def add_source(self, source: VenueSource) -> None:
        self.sources.append(source)

    def fill_from(self, candidate: NormalizedVenueCandidate, *, now: datetime) -> list[str]:
        """Apply the candidate's populated fields; absent fields never blank existing ones.

        Returns the names of the fields that changed.
        """

        changed: list[str] = []
        for name in _FILLABLE_FIELDS:
            incoming = getattr(candidate, name)
            if incoming is None or getattr(self, name) == incoming:
                continue
            setattr(self, name, incoming)
            changed.append(name)

        if not self.primary_category.is_classified and candidate.primary_category.is_classified:
            self.primary_category = candidate.primary_category
            changed.append("primary_category")

        merged = list(self.subcategories)
        merged.extend(tag for tag in candidate.subcategories if tag not in merged)
        if merged != list(self.subcategories):
            self.subcategories = merged
            changed.append("subcategories")

        if changed:
            self.updated_at = now
        return changed


@dataclass(eq=False, kw_only=True)
class VenueSignal(Entity):
    venue_id: UUID
    signal_type: SignalType
    value: float
    window: SignalWindow = SignalWindow.WEEKLY
    meta: dict[str, Any] | None = None
    computed_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class VenueHeatIndex:
    """Current heat score of one venue; overwritten on every run."""

    venue_id: UUID
    composite_score: float
    last_computed_at: datetime = field(default_factory=utcnow)
