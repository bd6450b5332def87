"""Graph writer stage: persist canonical venues, then mirror them into the graph store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from venuegraph.domain.ingest_pipeline.context import ErrorKind
from venuegraph.domain.ingest_pipeline.orchestrator import PipelinePhase
from venuegraph.domain.model.entity import utcnow
from venuegraph.domain.model.enums import SignalType, SignalWindow
from venuegraph.domain.model.venue import Venue, VenueSignal, VenueSource
from venuegraph.domain.normalization import normalize_alias
from venuegraph.domain.ports.graph_store import VenueGraphRecord

if TYPE_CHECKING:
    from venuegraph.domain.ingest_pipeline.context import IngestionContext
    from venuegraph.domain.ingest_pipeline.run_log import UnitOfWorkFactory
    from venuegraph.domain.model.records import MatchCandidate, NormalizedVenueCandidate
    from venuegraph.domain.ports.graph_store import GraphStore
    from venuegraph.domain.ports.unit_of_work import IngestionUnitOfWork

log = logging.getLogger(__name__)

RATING_SIGNAL_SOURCE = "ingestion"


def graph_record_for(venue: Venue) -> VenueGraphRecord:
    return VenueGraphRecord(
        venue_id=venue.id,
        name=venue.canonical_name,
        city=venue.city,
        category=venue.primary_category.value,
        lat=venue.lat,
        lon=venue.lon,
        neighborhood=venue.neighborhood,
    )


@dataclass(slots=True)
class _WriteOutcome:
    record: VenueGraphRecord
    changed: bool


@dataclass(slots=True)
class GraphWritePhase(PipelinePhase):
    """Write every match in its own unit of work.

    A failed venue write is rolled back and recorded without touching the
    others. The graph mirror is best effort: its failures are only logged and
    counted, never recorded as run errors.
    """

    unit_of_work_factory: UnitOfWorkFactory
    graph_store: GraphStore
    clock: Callable[[], datetime] = utcnow
    name: str = "GraphWriter"

    def run(self, context: IngestionContext) -> IngestionContext:
        log.info("[%s] Writing %s venues for %s", self.name, len(context.matches), context.city.name)
        if not self.graph_store.available:
            log.info("[%s] Graph store not configured, skipping graph mirror", self.name)

        updated = failures = mirror_failures = 0
        for match in context.matches:
            try:
                outcome = self._write(match)
            except Exception as exc:  # noqa: BLE001
                failures += 1
                log.error(  # noqa: TRY400
                    "[%s] Failed to write venue %r: %s",
                    self.name,
                    match.candidate.canonical_name,
                    exc,
                )
                context = context.with_error(
                    agent_name=self.name,
                    source=_primary_source(match.candidate),
                    message=f"Failed to write venue {match.candidate.canonical_name}: {exc}",
                    kind=ErrorKind.PERSISTENCE,
                    payload={"venue": match.candidate.canonical_name},
                )
                continue

            if outcome.changed and not match.is_new:
                updated += 1
            if not self._mirror(outcome.record):
                mirror_failures += 1

        log.info(
            "[%s] Wrote %s venues (%s updated, %s failed, %s graph mirror failures)",
            self.name,
            len(context.matches) - failures,
            updated,
            failures,
            mirror_failures,
        )
        return context.with_stats(
            updated_venues=updated,
            write_failures=failures,
            graph_mirror_failures=mirror_failures,
        )

    def _write(self, match: MatchCandidate) -> _WriteOutcome:
        now = self.clock()
        candidate = match.candidate
        with self.unit_of_work_factory() as uow:
            if match.matched_venue_id is None:
                venue = Venue.from_candidate(candidate, now=now)
                changed = True
            else:
                existing = uow.repositories.venues.get(match.matched_venue_id)
                if existing is None:
                    raise LookupError(f"Matched venue {match.matched_venue_id} not found")
                venue = existing
                changed = bool(venue.fill_from(candidate, now=now))

            changed |= self._attach_sources(uow, venue, candidate, now)
            changed |= self._attach_aliases(venue, candidate, now)
            if match.is_new:
                uow.repositories.venues.add(venue)
            if candidate.rating is not None:
                uow.repositories.signals.add(
                    VenueSignal(
                        venue_id=venue.id,
                        signal_type=SignalType.RATING,
                        value=candidate.rating,
                        window=SignalWindow.WEEKLY,
                        meta={"source": RATING_SIGNAL_SOURCE},
                        computed_at=now,
                    )
                )
            if changed and not match.is_new:
                venue.updated_at = now
            uow.commit()
            return _WriteOutcome(record=graph_record_for(venue), changed=changed)

    @staticmethod
    def _attach_sources(
        uow: IngestionUnitOfWork,
        venue: Venue,
        candidate: NormalizedVenueCandidate,
        now: datetime,
    ) -> bool:
        """Record provenance for unseen (source, external id) pairs; touch the rest."""

        added = False
        seen: set[tuple[str, str]] = set()
        for raw in candidate.sources:
            key = raw.provenance_key
            if key in seen:
                continue
            seen.add(key)
            existing = uow.repositories.venue_sources.get(raw.source, raw.source_external_id)
            if existing is not None:
                existing.touch(now)
                continue
            venue.add_source(VenueSource.from_raw(raw, seen_at=now))
            added = True
        return added

    @staticmethod
    def _attach_aliases(venue: Venue, candidate: NormalizedVenueCandidate, now: datetime) -> bool:
        added = False
        for alias in candidate.aliases:
            if venue.add_alias(alias, normalize_alias(alias), now=now) is not None:
                added = True
        return added

    def _mirror(self, record: VenueGraphRecord) -> bool:
        if not self.graph_store.available:
            return True
        try:
            self.graph_store.upsert_venue(record)
        except Exception as exc:  # noqa: BLE001
            log.warning("[%s] Graph mirror failed for %s: %s", self.name, record.venue_id, exc)
            return False
        return True


def _primary_source(candidate: NormalizedVenueCandidate) -> str:
    if not candidate.sources:
        return "UNKNOWN"
    return candidate.sources[0].source.value
