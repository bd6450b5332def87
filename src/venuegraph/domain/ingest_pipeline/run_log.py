"""Stages that open and close the persisted ingestion run record."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Final

from venuegraph.domain.ingest_pipeline.context import ErrorKind
from venuegraph.domain.ingest_pipeline.orchestrator import (
    PipelinePhase,
    RunInProgressError,
    RunRecordError,
)
from venuegraph.domain.model.entity import utcnow
from venuegraph.domain.model.enums import RunStatus
from venuegraph.domain.model.run import IngestionError, IngestionRun

if TYPE_CHECKING:
    from venuegraph.domain.ingest_pipeline.context import IngestionContext
    from venuegraph.domain.ports.unit_of_work import IngestionUnitOfWork

log = logging.getLogger(__name__)

type UnitOfWorkFactory = Callable[[], IngestionUnitOfWork]

DEFAULT_RUN_LOCK_TTL: Final[timedelta] = timedelta(hours=6)


def derive_run_status(context: IngestionContext) -> RunStatus:
    """A crashed stage fails the run; any other recorded error makes it partial."""

    if context.errors_of(ErrorKind.STAGE_FAILURE):
        return RunStatus.FAILED
    if context.errors:
        return RunStatus.PARTIAL
    return RunStatus.SUCCESS


@dataclass(slots=True)
class RecordRunPhase(PipelinePhase):
    """Open a ``RUNNING`` run record, refusing while another run for the city is live.

    Runs older than ``lock_ttl`` that were never finalized are treated as
    abandoned and no longer hold the lock.
    """

    unit_of_work_factory: UnitOfWorkFactory
    lock_ttl: timedelta = DEFAULT_RUN_LOCK_TTL
    name: str = "RunRecorder"

    def run(self, context: IngestionContext) -> IngestionContext:
        city = context.city.name
        holder: IngestionRun | None = None
        run = IngestionRun(run_type=context.run_type, city=city, started_at=context.started_at)
        try:
            with self.unit_of_work_factory() as uow:
                runs = uow.repositories.runs
                holder = runs.find_running(city, started_after=context.started_at - self.lock_ttl)
                if holder is None:
                    runs.add(run)
                    uow.commit()
        except Exception as exc:
            raise RunRecordError(f"Could not create ingestion run for {city}") from exc

        if holder is not None:
            raise RunInProgressError(
                f"Run {holder.id} for {city} has been running since {holder.started_at.isoformat()}"
            )

        log.info("Created %s ingestion run %s for %s", context.run_type, run.id, city)
        return context.evolve(run_id=run.id).with_stats(started_at=context.started_at)


@dataclass(slots=True)
class FinalizeRunPhase(PipelinePhase):
    """Close the run: status, end time, statistics blob and one row per error."""

    unit_of_work_factory: UnitOfWorkFactory
    clock: Callable[[], datetime] = utcnow
    name: str = "RunFinalizer"

    def run(self, context: IngestionContext) -> IngestionContext:
        if context.run_id is None:
            raise RuntimeError("The run recorder must run before the run finalizer")

        finished_at = self.clock()
        duration = finished_at - context.started_at
        context = context.with_stats(
            finished_at=finished_at,
            duration_ms=max(int(duration.total_seconds() * 1000), 0),
        )
        status = derive_run_status(context)

        with self.unit_of_work_factory() as uow:
            run = uow.repositories.runs.get(context.run_id)
            if run is None:
                raise RuntimeError(f"Ingestion run {context.run_id} disappeared")
            run.finish(status=status, stats=context.stats.to_payload(), finished_at=finished_at)
            for entry in context.errors:
                uow.repositories.run_errors.add(
                    IngestionError(
                        run_id=run.id,
                        agent_name=entry.agent_name,
                        source=entry.source,
                        message=entry.message,
                        payload={"kind": entry.kind.value, **(entry.payload or {})},
                        created_at=entry.timestamp,
                    )
                )
            uow.commit()

        log.info(
            "Run %s for %s finalized with status %s in %sms (%s errors)",
            context.run_id,
            context.city.name,
            status,
            context.stats.duration_ms,
            len(context.errors),
        )
        return context.evolve(status=status)
