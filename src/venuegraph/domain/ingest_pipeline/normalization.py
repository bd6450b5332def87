"""Normalizer stage: group the run's raw sightings into merged candidates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from venuegraph.domain.ingest_pipeline.orchestrator import PipelinePhase
from venuegraph.domain.normalization import normalize_raw_venues

if TYPE_CHECKING:
    from venuegraph.domain.ingest_pipeline.context import IngestionContext

log = logging.getLogger(__name__)


@dataclass(slots=True)
class NormalizationPhase(PipelinePhase):
    name: str = "Normalizer"

    def run(self, context: IngestionContext) -> IngestionContext:
        summary = normalize_raw_venues(context.raw_venues, city=context.city.name)
        log.info(
            "[%s] Normalized %s raw venues into %s candidates for %s",
            self.name,
            len(context.raw_venues),
            len(summary.candidates),
            context.city.name,
        )
        return context.evolve(candidates=tuple(summary.candidates)).with_stats(
            normalized_total=len(summary.candidates),
            venues_with_coords=summary.with_coordinates,
            venues_with_category=summary.with_category,
            venues_with_website=summary.with_website,
        )
