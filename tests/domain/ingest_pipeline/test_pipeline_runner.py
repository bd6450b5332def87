from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from venuegraph.domain.ingest_pipeline.context import ErrorKind
from venuegraph.domain.ingest_pipeline.orchestrator import RunInProgressError
from venuegraph.domain.ingest_pipeline.runner import (
    VenueSources,
    build_ingestion_pipeline,
    run_city_pipeline,
)
from venuegraph.domain.model import IngestionRun, RunStatus, RunType, SourceType
from tests.helpers.venues import (
    FIXED_NOW,
    FakeVenueFetcher,
    RecordingGraphStore,
    make_raw_venue,
)

if TYPE_CHECKING:
    from venuegraph.domain.ingest_pipeline.run_log import UnitOfWorkFactory
    from venuegraph.domain.model import CityConfig


def _sources(*, foursquare_available: bool = True) -> VenueSources:
    return VenueSources(
        osm=FakeVenueFetcher(
            venues=[
                make_raw_venue("Blue Note", external_id="node/1"),
                make_raw_venue("Village Vanguard", external_id="node/2", lat=40.7359, lon=-74.0014),
            ],
            name="OSMAgent",
            source_label="OSM",
        ),
        foursquare=FakeVenueFetcher(
            name="FoursquareAgent",
            source_label="FOURSQUARE",
            available=foursquare_available,
        ),
        yelp=FakeVenueFetcher(
            venues=[make_raw_venue("Blue Note", source=SourceType.YELP, confidence=0.8)],
            name="YelpAgent",
            source_label="YELP",
        ),
        event_sites=FakeVenueFetcher(name="EventSiteAgent", source_label="EVENT_SITES"),
        social=FakeVenueFetcher(name="SocialAgent", source_label="SOCIAL"),
    )


def test_full_run_writes_venues_and_finalizes(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    store = RecordingGraphStore()
    pipeline = build_ingestion_pipeline(
        sources=_sources(), unit_of_work_factory=sqlite_unit_of_work, graph_store=store
    )

    result = run_city_pipeline(pipeline, new_york, RunType.FULL, started_at=FIXED_NOW)

    assert result.status is RunStatus.SUCCESS
    assert result.errors == ()
    assert result.stats.raw_total == 3
    assert result.stats.osm_venues == 2
    assert result.stats.yelp_venues == 1
    assert result.stats.new_venues == 2
    assert result.stats.heat_indexed == 2
    assert (store.opened, store.closed) == (1, 1)
    assert len(store.records) == 2
    assert result.run_id is not None
    with sqlite_unit_of_work() as uow:
        run = uow.repositories.runs.get(result.run_id)
    assert isinstance(run, IngestionRun)
    assert run.status is RunStatus.SUCCESS


def test_missing_credentials_make_the_run_partial(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    pipeline = build_ingestion_pipeline(
        sources=_sources(foursquare_available=False),
        unit_of_work_factory=sqlite_unit_of_work,
        graph_store=RecordingGraphStore(),
    )

    result = run_city_pipeline(pipeline, new_york, RunType.FULL, started_at=FIXED_NOW)

    assert result.status is RunStatus.PARTIAL
    (error,) = result.errors
    assert error.kind is ErrorKind.SOURCE_UNAVAILABLE
    assert error.agent_name == "FoursquareAgent"
    assert result.stats.new_venues == 2


def test_concurrent_run_is_refused_before_any_stage(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.runs.add(
            IngestionRun(run_type=RunType.FULL, city="New York", started_at=FIXED_NOW)
        )
        uow.commit()
    sources = _sources()
    store = RecordingGraphStore()
    pipeline = build_ingestion_pipeline(
        sources=sources, unit_of_work_factory=sqlite_unit_of_work, graph_store=store
    )

    with pytest.raises(RunInProgressError):
        run_city_pipeline(pipeline, new_york, RunType.FULL, started_at=FIXED_NOW)

    assert isinstance(sources.osm, FakeVenueFetcher)
    assert sources.osm.calls == []
    assert store.closed == 1
