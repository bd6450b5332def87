from __future__ import annotations

from typing import TYPE_CHECKING

from venuegraph.domain.ingest_pipeline.context import (
    SYSTEM_SOURCE,
    ErrorKind,
    IngestionContext,
    RunStats,
)
from venuegraph.domain.ingest_pipeline.quality_check import QualityCheckPhase
from venuegraph.domain.ingest_pipeline.run_log import derive_run_status
from venuegraph.domain.model import IngestionRun, RunStatus, RunType
from tests.helpers.venues import FIXED_NOW

if TYPE_CHECKING:
    from venuegraph.domain.ingest_pipeline.run_log import UnitOfWorkFactory
    from venuegraph.domain.model import CityConfig


def _healthy_stats(**changes: int) -> RunStats:
    values = {
        "osm_venues": 60,
        "yelp_venues": 40,
        "raw_total": 100,
        "normalized_total": 80,
        "venues_with_coords": 80,
        "venues_with_category": 80,
        "venues_with_website": 40,
    }
    values.update(changes)
    return RunStats(**values)


def _seed_previous(uow_factory: UnitOfWorkFactory, stats: RunStats) -> None:
    run = IngestionRun(run_type=RunType.FULL, city="New York", started_at=FIXED_NOW)
    run.finish(status=RunStatus.SUCCESS, stats=stats.to_payload(), finished_at=FIXED_NOW)
    with uow_factory() as uow:
        uow.repositories.runs.add(run)
        uow.commit()


def test_healthy_run_has_scores_and_no_errors(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    context = IngestionContext(city=new_york, run_type=RunType.FULL, stats=_healthy_stats())

    result = QualityCheckPhase(sqlite_unit_of_work).run(context)

    assert result.errors == ()
    assert result.quality is not None
    assert result.quality.passed
    assert result.stats.coverage_score == 100
    assert result.stats.quality_score == 90
    assert result.stats.completeness_score == 50


def test_source_that_worked_last_time_becomes_an_anomaly(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    _seed_previous(sqlite_unit_of_work, _healthy_stats())
    context = IngestionContext(
        city=new_york, run_type=RunType.FULL, stats=_healthy_stats(yelp_venues=0, raw_total=60)
    )

    result = QualityCheckPhase(sqlite_unit_of_work).run(context)

    (anomaly,) = result.errors
    assert anomaly.kind is ErrorKind.ANOMALY
    assert anomaly.source == SYSTEM_SOURCE
    assert anomaly.agent_name == "QualityChecker"
    assert anomaly.message == "Yelp returned 0 venues (expected >0)"
    assert derive_run_status(result) is RunStatus.PARTIAL


def test_raw_count_drop_against_previous_run(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    _seed_previous(sqlite_unit_of_work, _healthy_stats())
    context = IngestionContext(
        city=new_york,
        run_type=RunType.FULL,
        stats=_healthy_stats(osm_venues=20, yelp_venues=20, raw_total=40),
    )

    result = QualityCheckPhase(sqlite_unit_of_work).run(context)

    assert [error.message for error in result.errors] == [
        "Raw venue count dropped significantly: 40 vs 100 in the last successful run"
    ]


def test_warnings_are_not_recorded_as_errors(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    context = IngestionContext(
        city=new_york,
        run_type=RunType.FULL,
        stats=_healthy_stats(venues_with_coords=10, venues_with_category=10),
    )

    result = QualityCheckPhase(sqlite_unit_of_work).run(context)

    assert result.errors == ()
    assert result.quality is not None
    assert len(result.quality.warnings) == 2
