"""Static stage list of the venue ingestion pipeline and its entry point."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from venuegraph.domain.ingest_pipeline.context import IngestionContext, SourceCounter
from venuegraph.domain.ingest_pipeline.graph_write import GraphWritePhase
from venuegraph.domain.ingest_pipeline.heat_index import HeatIndexPhase
from venuegraph.domain.ingest_pipeline.matching import MatchingPhase
from venuegraph.domain.ingest_pipeline.normalization import NormalizationPhase
from venuegraph.domain.ingest_pipeline.orchestrator import IngestionPipeline
from venuegraph.domain.ingest_pipeline.quality_check import QualityCheckPhase
from venuegraph.domain.ingest_pipeline.run_log import (
    DEFAULT_RUN_LOCK_TTL,
    FinalizeRunPhase,
    RecordRunPhase,
)
from venuegraph.domain.ingest_pipeline.sources import SourceFetchPhase
from venuegraph.domain.matching import DEFAULT_MATCH_THRESHOLD

if TYPE_CHECKING:
    from datetime import datetime, timedelta

    from venuegraph.domain.ingest_pipeline.run_log import UnitOfWorkFactory
    from venuegraph.domain.model.city import CityConfig
    from venuegraph.domain.model.enums import RunType
    from venuegraph.domain.ports.fetching import VenueFetcher
    from venuegraph.domain.ports.graph_store import GraphStore

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VenueSources:
    """One fetcher per source agent slot; unavailable fetchers still take their slot."""

    osm: VenueFetcher
    foursquare: VenueFetcher
    yelp: VenueFetcher
    event_sites: VenueFetcher
    social: VenueFetcher


def build_ingestion_pipeline(
    *,
    sources: VenueSources,
    unit_of_work_factory: UnitOfWorkFactory,
    graph_store: GraphStore,
    match_threshold: float = DEFAULT_MATCH_THRESHOLD,
    run_lock_ttl: timedelta = DEFAULT_RUN_LOCK_TTL,
) -> IngestionPipeline:
    """Assemble the pipeline; the driver opens and closes ``graph_store`` around the run."""

    phases = (
        RecordRunPhase(unit_of_work_factory, lock_ttl=run_lock_ttl),
        SourceFetchPhase(sources.osm, SourceCounter.OSM),
        SourceFetchPhase(sources.foursquare, SourceCounter.FOURSQUARE),
        SourceFetchPhase(sources.yelp, SourceCounter.YELP),
        SourceFetchPhase(sources.event_sites, SourceCounter.EVENT_SITES),
        SourceFetchPhase(sources.social, SourceCounter.SOCIAL),
        NormalizationPhase(),
        MatchingPhase(unit_of_work_factory, threshold=match_threshold),
        GraphWritePhase(unit_of_work_factory, graph_store),
        HeatIndexPhase(unit_of_work_factory),
        QualityCheckPhase(unit_of_work_factory),
        FinalizeRunPhase(unit_of_work_factory),
    )
    return IngestionPipeline(phases=phases, resources=(graph_store,))


def run_city_pipeline(
    pipeline: IngestionPipeline,
    city: CityConfig,
    run_type: RunType,
    *,
    started_at: datetime | None = None,
) -> IngestionContext:
    """Run ``pipeline`` once for ``city`` and return the final context."""

    context = IngestionContext(city=city, run_type=run_type)
    if started_at is not None:
        context = context.evolve(started_at=started_at)

    log.info("=== Venue ingestion: %s (%s) ===", city.name, run_type)
    result = pipeline.run(context)
    stats = result.stats
    log.info(
        "=== Ingestion complete: %s, raw %s, normalized %s, new %s, updated %s, errors %s ===",
        result.status,
        stats.raw_total,
        stats.normalized_total,
        stats.new_venues,
        stats.updated_venues,
        len(result.errors),
    )
    return result
