"""Run context threaded through the ingestion stages.

The context is immutable: every stage receives one and returns a new one built
with :meth:`IngestionContext.evolve` (or the narrower helpers), so a stage can be
exercised in isolation by handing it a hand-built context.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields, replace
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final, Self

from venuegraph.domain.model.entity import utcnow

if TYPE_CHECKING:
    from uuid import UUID

    from venuegraph.domain.model.city import CityConfig
    from venuegraph.domain.model.enums import RunStatus, RunType
    from venuegraph.domain.model.records import (
        MatchCandidate,
        NormalizedVenueCandidate,
        RawVenue,
    )
    from venuegraph.domain.quality import QualityCheckResult

SYSTEM_SOURCE: Final[str] = "SYSTEM"


class ErrorKind(StrEnum):
    SOURCE_UNAVAILABLE = "source_unavailable"
    PERSISTENCE = "persistence"
    ANOMALY = "anomaly"
    STAGE_FAILURE = "stage_failure"


class SourceCounter(StrEnum):
    """Run statistics field each source agent reports its record count into."""

    OSM = "osm_venues"
    FOURSQUARE = "foursquare_venues"
    YELP = "yelp_venues"
    EVENT_SITES = "event_site_venues"
    SOCIAL = "social_signals"


@dataclass(frozen=True, slots=True, kw_only=True)
class RunStats:
    osm_venues: int = 0
    foursquare_venues: int = 0
    yelp_venues: int = 0
    event_site_venues: int = 0
    social_signals: int = 0
    raw_total: int = 0
    skipped_records: int = 0
    normalized_total: int = 0
    matched: int = 0
    new_venues: int = 0
    updated_venues: int = 0
    ambiguous_matches: int = 0
    write_failures: int = 0
    graph_mirror_failures: int = 0
    heat_indexed: int = 0
    venues_with_coords: int = 0
    venues_with_category: int = 0
    venues_with_website: int = 0
    coverage_score: int | None = None
    quality_score: int | None = None
    completeness_score: int | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    duration_ms: int | None = None

    def count_for(self, counter: SourceCounter) -> int:
        return getattr(self, counter.value)

    def to_payload(self) -> dict[str, Any]:
        payload = asdict(self)
        for key, value in payload.items():
            if isinstance(value, datetime):
                payload[key] = value.isoformat()
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> Self:
        """Rebuild stats persisted by an earlier run, ignoring unknown or malformed keys."""

        if not payload:
            return cls()
        values: dict[str, Any] = {}
        for stat_field in fields(cls):
            raw = payload.get(stat_field.name)
            if raw is None:
                continue
            if stat_field.name in {"started_at", "finished_at"}:
                if isinstance(raw, str):
                    try:
                        values[stat_field.name] = datetime.fromisoformat(raw)
                    except ValueError:
                        continue
                continue
            if isinstance(raw, bool) or not isinstance(raw, int | float):
                continue
            values[stat_field.name] = int(raw)
        return cls(**values)


@dataclass(frozen=True, slots=True, kw_only=True)
class IngestionErrorEntry:
    agent_name: str
    source: str
    message: str
    kind: ErrorKind
    payload: Mapping[str, Any] | None = None
    timestamp: datetime = field(default_factory=utcnow)


@dataclass(frozen=True, slots=True, kw_only=True)
class IngestionContext:
    """Everything one (city, run type) invocation has produced so far."""

    city: CityConfig
    run_type: RunType
    started_at: datetime = field(default_factory=utcnow)
    run_id: UUID | None = None
    raw_venues: tuple[RawVenue, ...] = ()
    candidates: tuple[NormalizedVenueCandidate, ...] = ()
    matches: tuple[MatchCandidate, ...] = ()
    stats: RunStats = field(default_factory=RunStats)
    errors: tuple[IngestionErrorEntry, ...] = ()
    quality: QualityCheckResult | None = None
    status: RunStatus | None = None

    def evolve(self, **changes: Any) -> IngestionContext:
        return replace(self, **changes)

    def with_stats(self, **changes: Any) -> IngestionContext:
        return replace(self, stats=replace(self.stats, **changes))

    def with_error(
        self,
        *,
        agent_name: str,
        source: str,
        message: str,
        kind: ErrorKind,
        payload: Mapping[str, Any] | None = None,
    ) -> IngestionContext:
        entry = IngestionErrorEntry(
            agent_name=agent_name,
            source=source,
            message=message,
            kind=kind,
            payload=payload,
        )
        return replace(self, errors=(*self.errors, entry))

    def errors_of(self, kind: ErrorKind) -> tuple[IngestionErrorEntry, ...]:
        return tuple(error for error in self.errors if error.kind is kind)
