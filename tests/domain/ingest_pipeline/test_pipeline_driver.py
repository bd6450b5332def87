from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pytest

from venuegraph.domain.ingest_pipeline.context import (
    SYSTEM_SOURCE,
    ErrorKind,
    IngestionContext,
)
from venuegraph.domain.ingest_pipeline.orchestrator import (
    FatalPipelineError,
    IngestionPipeline,
)
from venuegraph.domain.model import RunType

if TYPE_CHECKING:
    from venuegraph.domain.model import CityConfig


@dataclass(slots=True)
class _CountingPhase:
    name: str
    journal: list[str]

    def run(self, context: IngestionContext) -> IngestionContext:
        self.journal.append(self.name)
        return context.with_stats(raw_total=context.stats.raw_total + 1)


@dataclass(slots=True)
class _ExplodingPhase:
    error: Exception
    name: str = "Exploder"

    def run(self, context: IngestionContext) -> IngestionContext:
        raise self.error


@dataclass(slots=True)
class _Resource:
    journal: list[str] = field(default_factory=list)

    def open(self) -> None:
        self.journal.append("open")

    def close(self) -> None:
        self.journal.append("close")


def test_phases_run_in_order(new_york: CityConfig) -> None:
    journal: list[str] = []
    pipeline = IngestionPipeline(
        phases=(_CountingPhase("first", journal), _CountingPhase("second", journal))
    ).with_phase(_CountingPhase("third", journal))

    result = pipeline.run(IngestionContext(city=new_york, run_type=RunType.FULL))

    assert journal == ["first", "second", "third"]
    assert result.stats.raw_total == 3


def test_stage_failure_is_recorded_and_later_stages_still_run(new_york: CityConfig) -> None:
    journal: list[str] = []
    pipeline = IngestionPipeline(
        phases=(
            _CountingPhase("before", journal),
            _ExplodingPhase(ValueError("bad payload")),
            _CountingPhase("after", journal),
        )
    )

    result = pipeline.run(IngestionContext(city=new_york, run_type=RunType.FULL))

    assert journal == ["before", "after"]
    assert result.stats.raw_total == 2
    (failure,) = result.errors_of(ErrorKind.STAGE_FAILURE)
    assert failure.agent_name == "Exploder"
    assert failure.source == SYSTEM_SOURCE
    assert failure.message == "ValueError: bad payload"


def test_fatal_errors_escape_and_resources_are_closed(new_york: CityConfig) -> None:
    resource = _Resource()
    pipeline = IngestionPipeline(
        phases=(_ExplodingPhase(FatalPipelineError("no run record")),),
        resources=(resource,),
    )

    with pytest.raises(FatalPipelineError, match="no run record"):
        pipeline.run(IngestionContext(city=new_york, run_type=RunType.FULL))

    assert resource.journal == ["open", "close"]


def test_resources_wrap_the_whole_run(new_york: CityConfig) -> None:
    resource = _Resource()
    journal = resource.journal
    pipeline = IngestionPipeline(
        phases=(_CountingPhase("stage", journal),),
        resources=(resource,),
    )

    pipeline.run(IngestionContext(city=new_york, run_type=RunType.INCREMENTAL))

    assert journal == ["open", "stage", "close"]
