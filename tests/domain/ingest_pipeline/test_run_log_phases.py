from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from venuegraph.config import get_city_config
from venuegraph.domain.ingest_pipeline.context import ErrorKind, IngestionContext
from venuegraph.domain.ingest_pipeline.orchestrator import RunInProgressError, RunRecordError
from venuegraph.domain.ingest_pipeline.run_log import (
    FinalizeRunPhase,
    RecordRunPhase,
    derive_run_status,
)
from venuegraph.domain.model import IngestionRun, RunStatus, RunType
from tests.helpers.venues import FIXED_NOW

if TYPE_CHECKING:
    from venuegraph.domain.ingest_pipeline.run_log import UnitOfWorkFactory
    from venuegraph.domain.model import CityConfig


def _context(city: CityConfig) -> IngestionContext:
    return IngestionContext(city=city, run_type=RunType.FULL, started_at=FIXED_NOW)


def test_record_run_opens_a_running_record(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    result = RecordRunPhase(sqlite_unit_of_work).run(_context(new_york))

    assert result.run_id is not None
    assert result.stats.started_at == FIXED_NOW
    with sqlite_unit_of_work() as uow:
        run = uow.repositories.runs.get(result.run_id)
        assert run is not None
        assert run.status is RunStatus.RUNNING
        assert run.city == "New York"
        assert run.started_at == FIXED_NOW


def test_second_run_is_refused_while_the_first_is_live(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    phase = RecordRunPhase(sqlite_unit_of_work)
    phase.run(_context(new_york))

    with pytest.raises(RunInProgressError, match="New York"):
        phase.run(_context(new_york).evolve(started_at=FIXED_NOW + timedelta(minutes=5)))


def test_abandoned_run_no_longer_holds_the_lock(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    phase = RecordRunPhase(sqlite_unit_of_work, lock_ttl=timedelta(hours=1))
    phase.run(_context(new_york))

    result = phase.run(_context(new_york).evolve(started_at=FIXED_NOW + timedelta(hours=2)))

    assert result.run_id is not None


def test_other_cities_are_not_locked(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    phase = RecordRunPhase(sqlite_unit_of_work)
    phase.run(_context(new_york))

    assert phase.run(_context(get_city_config("Austin"))).run_id is not None


def test_record_failure_is_fatal(new_york: CityConfig) -> None:
    def _broken_factory() -> object:
        raise ConnectionError("database unreachable")

    with pytest.raises(RunRecordError):
        RecordRunPhase(_broken_factory).run(_context(new_york))  # type: ignore[arg-type]


def test_derive_run_status(new_york: CityConfig) -> None:
    context = _context(new_york)
    partial = context.with_error(
        agent_name="QualityChecker", source="SYSTEM", message="m", kind=ErrorKind.ANOMALY
    )
    failed = partial.with_error(
        agent_name="Matcher", source="SYSTEM", message="m", kind=ErrorKind.STAGE_FAILURE
    )

    assert derive_run_status(context) is RunStatus.SUCCESS
    assert derive_run_status(partial) is RunStatus.PARTIAL
    assert derive_run_status(failed) is RunStatus.FAILED


def test_finalize_persists_status_stats_and_errors(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    context = RecordRunPhase(sqlite_unit_of_work).run(_context(new_york))
    context = context.with_stats(raw_total=5).with_error(
        agent_name="YelpAgent",
        source="YELP",
        message="API key not configured, skipping YELP source",
        kind=ErrorKind.SOURCE_UNAVAILABLE,
    )
    finished = FIXED_NOW + timedelta(seconds=90)

    result = FinalizeRunPhase(sqlite_unit_of_work, clock=lambda: finished).run(context)

    assert result.status is RunStatus.PARTIAL
    assert result.stats.duration_ms == 90_000
    assert result.run_id is not None
    with sqlite_unit_of_work() as uow:
        run = uow.repositories.runs.get(result.run_id)
        errors = uow.repositories.run_errors.list_for_run(result.run_id)
    assert run is not None
    assert run.status is RunStatus.PARTIAL
    assert run.finished_at == finished
    assert run.stats_json is not None
    assert run.stats_json["raw_total"] == 5
    assert run.stats_json["duration_ms"] == 90_000
    (error,) = errors
    assert error.agent_name == "YelpAgent"
    assert error.source == "YELP"
    assert error.payload == {"kind": "source_unavailable"}


def test_finalize_requires_a_recorded_run(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    with pytest.raises(RuntimeError, match="run recorder"):
        FinalizeRunPhase(sqlite_unit_of_work).run(_context(new_york))


def test_finalized_run_releases_the_lock(
    sqlite_unit_of_work: UnitOfWorkFactory, new_york: CityConfig
) -> None:
    recorder = RecordRunPhase(sqlite_unit_of_work)
    context = recorder.run(_context(new_york))
    FinalizeRunPhase(sqlite_unit_of_work, clock=lambda: FIXED_NOW).run(context)

    again = recorder.run(_context(new_york).evolve(started_at=FIXED_NOW + timedelta(minutes=1)))

    assert again.run_id != context.run_id
    with sqlite_unit_of_work() as uow:
        previous = uow.repositories.runs.latest_successful("New York", exclude=again.run_id)
    assert isinstance(previous, IngestionRun)
    assert previous.id == context.run_id
