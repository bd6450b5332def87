"""Application orchestration entry points."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Any

from venuegraph.adapters.event_sites import EventSiteVenueFetcher
from venuegraph.adapters.foursquare import FoursquareFetcher
from venuegraph.adapters.neo4j import build_graph_store
from venuegraph.adapters.overpass import OverpassFetcher
from venuegraph.adapters.social import SocialSignalFetcher
from venuegraph.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyIngestionUnitOfWork,
    is_started,
    startup,
)
from venuegraph.adapters.yelp import YelpFetcher
from venuegraph.config import get_city_config, get_pipeline_config
from venuegraph.domain.ingest_pipeline.runner import (
    VenueSources,
    build_ingestion_pipeline,
    run_city_pipeline,
)
from venuegraph.domain.model import RunType, SignalWindow, VenueSignal, utcnow

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from venuegraph.config import PipelineConfig
    from venuegraph.domain.ingest_pipeline.context import IngestionContext
    from venuegraph.domain.ingest_pipeline.run_log import UnitOfWorkFactory
    from venuegraph.domain.model import RunStatus, SignalType
    from venuegraph.domain.ports.graph_store import GraphStore


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CityRunOutcome:
    city: str
    context: IngestionContext | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.context is not None

    @property
    def status(self) -> RunStatus | None:
        return self.context.status if self.context is not None else None


def _ensure_started() -> None:
    if not is_started():
        startup()


def build_venue_sources(
    unit_of_work_factory: UnitOfWorkFactory,
    *,
    pipeline_config: PipelineConfig,
) -> VenueSources:
    """Default source agents; sources without credentials report themselves unavailable."""

    return VenueSources(
        osm=OverpassFetcher(),
        foursquare=FoursquareFetcher(page_delay_seconds=pipeline_config.page_delay_seconds),
        yelp=YelpFetcher(page_delay_seconds=pipeline_config.page_delay_seconds),
        event_sites=EventSiteVenueFetcher(unit_of_work_factory),
        social=SocialSignalFetcher(),
    )


def run_venue_ingestion(
    city_name: str,
    run_type: RunType = RunType.FULL,
    *,
    sources: VenueSources | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    graph_store: GraphStore | None = None,
    pipeline_config: PipelineConfig | None = None,
) -> IngestionContext:
    """Run the venue ingestion pipeline for one city using the configured adapters."""

    city = get_city_config(city_name)
    effective_config = pipeline_config or get_pipeline_config()
    if unit_of_work_factory is None:
        _ensure_started()
        unit_of_work_factory = SqlAlchemyIngestionUnitOfWork
    effective_sources = sources or build_venue_sources(
        unit_of_work_factory, pipeline_config=effective_config
    )

    pipeline = build_ingestion_pipeline(
        sources=effective_sources,
        unit_of_work_factory=unit_of_work_factory,
        graph_store=graph_store or build_graph_store(),
        match_threshold=effective_config.match_threshold,
        run_lock_ttl=timedelta(seconds=effective_config.run_lock_ttl_seconds),
    )
    return run_city_pipeline(pipeline, city, run_type)


def run_venue_ingestion_for_all_cities(
    run_type: RunType = RunType.FULL,
    *,
    cities: Sequence[str] | None = None,
    pipeline_config: PipelineConfig | None = None,
    sleep: Callable[[float], None] = time.sleep,
    **overrides: Any,
) -> list[CityRunOutcome]:
    """Run every configured city in turn; a failing city does not stop the others.

    ``overrides`` are passed through to :func:`run_venue_ingestion`.
    """

    effective_config = pipeline_config or get_pipeline_config()
    city_names = tuple(cities) if cities is not None else effective_config.cities
    outcomes: list[CityRunOutcome] = []

    for index, city_name in enumerate(city_names):
        if index > 0 and effective_config.city_delay_seconds > 0:
            sleep(effective_config.city_delay_seconds)
        try:
            context = run_venue_ingestion(
                city_name,
                run_type,
                pipeline_config=effective_config,
                **overrides,
            )
        except Exception as exc:  # noqa: BLE001
            log.exception("Ingestion failed for %s", city_name)
            outcomes.append(CityRunOutcome(city=city_name, error=f"{type(exc).__name__}: {exc}"))
            continue
        outcomes.append(CityRunOutcome(city=city_name, context=context))

    succeeded = sum(1 for outcome in outcomes if outcome.succeeded)
    log.info(f"Finished ingestion for {succeeded}/{len(outcomes)} cities")
    return outcomes


def record_venue_signal(
    venue_id: UUID,
    signal_type: SignalType,
    value: float,
    *,
    window: SignalWindow = SignalWindow.WEEKLY,
    meta: dict[str, Any] | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> VenueSignal:
    """Append one signal row; the next heat index pass picks it up."""

    if unit_of_work_factory is None:
        _ensure_started()
        unit_of_work_factory = SqlAlchemyIngestionUnitOfWork

    signal = VenueSignal(
        venue_id=venue_id,
        signal_type=signal_type,
        value=value,
        window=window,
        meta=meta,
        computed_at=utcnow(),
    )
    with unit_of_work_factory() as uow:
        if uow.repositories.venues.get(venue_id) is None:
            raise LookupError(f"Unknown venue: {venue_id}")
        uow.repositories.signals.add(signal)
        uow.commit()
    log.info("Recorded %s signal %.3f for venue %s", signal_type, value, venue_id)
    return signal
