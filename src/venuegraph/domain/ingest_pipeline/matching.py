"""Matcher stage: attach each candidate to an existing canonical venue or mark it new."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from venuegraph.domain.ingest_pipeline.orchestrator import PipelinePhase
from venuegraph.domain.matching import (
    DEFAULT_MATCH_THRESHOLD,
    ExistingVenue,
    MatchProfile,
    find_best_match,
)
from venuegraph.domain.model.records import MatchCandidate

if TYPE_CHECKING:
    from venuegraph.domain.ingest_pipeline.context import IngestionContext
    from venuegraph.domain.ingest_pipeline.run_log import UnitOfWorkFactory

log = logging.getLogger(__name__)


@dataclass(slots=True)
class MatchingPhase(PipelinePhase):
    """Score every candidate against the city's active venues.

    Candidates are matched against the venues as they were before this run;
    two candidates of the same run never match each other.
    """

    unit_of_work_factory: UnitOfWorkFactory
    threshold: float = DEFAULT_MATCH_THRESHOLD
    name: str = "Matcher"

    def run(self, context: IngestionContext) -> IngestionContext:
        with self.unit_of_work_factory() as uow:
            venues = uow.repositories.venues.list_active(context.city.name)
            existing = [ExistingVenue.from_venue(venue) for venue in venues]

        log.info(
            "[%s] Matching %s candidates against %s existing venues",
            self.name,
            len(context.candidates),
            len(existing),
        )

        matches: list[MatchCandidate] = []
        matched = ambiguous = 0
        for candidate in context.candidates:
            decision = find_best_match(
                MatchProfile.from_candidate(candidate), existing, threshold=self.threshold
            )
            if decision.venue_id is None:
                matches.append(MatchCandidate.new(candidate))
                continue
            matched += 1
            if decision.ambiguous:
                ambiguous += 1
            matches.append(
                MatchCandidate.matched(
                    candidate, decision.venue_id, decision.score, ambiguous=decision.ambiguous
                )
            )

        new_venues = len(matches) - matched
        log.info(
            "[%s] Matched: %s, New: %s, Ambiguous: %s", self.name, matched, new_venues, ambiguous
        )
        return context.evolve(matches=tuple(matches)).with_stats(
            matched=matched,
            new_venues=new_venues,
            ambiguous_matches=ambiguous,
        )
