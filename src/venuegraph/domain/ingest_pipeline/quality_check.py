"""Quality checker stage."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from venuegraph.domain.ingest_pipeline.context import SYSTEM_SOURCE, ErrorKind, RunStats
from venuegraph.domain.ingest_pipeline.orchestrator import PipelinePhase
from venuegraph.domain.quality import evaluate_run_quality

if TYPE_CHECKING:
    from venuegraph.domain.ingest_pipeline.context import IngestionContext
    from venuegraph.domain.ingest_pipeline.run_log import UnitOfWorkFactory

log = logging.getLogger(__name__)


@dataclass(slots=True)
class QualityCheckPhase(PipelinePhase):
    """Compare the run's statistics with fixed thresholds and the last successful run.

    Anomalies become run errors (so the run ends ``PARTIAL``); warnings are
    only logged.
    """

    unit_of_work_factory: UnitOfWorkFactory
    name: str = "QualityChecker"

    def run(self, context: IngestionContext) -> IngestionContext:
        with self.unit_of_work_factory() as uow:
            previous_run = uow.repositories.runs.latest_successful(
                context.city.name, exclude=context.run_id
            )
            previous_payload = previous_run.stats_json if previous_run is not None else None
        previous = RunStats.from_payload(previous_payload) if previous_payload else None

        result = evaluate_run_quality(context.stats, previous)
        for warning in result.warnings:
            log.warning("[%s] %s", self.name, warning)
        for anomaly in result.anomalies:
            log.error("[%s] %s", self.name, anomaly)
            context = context.with_error(
                agent_name=self.name,
                source=SYSTEM_SOURCE,
                message=anomaly,
                kind=ErrorKind.ANOMALY,
            )

        log.info(
            "[%s] Coverage %s, quality %s, completeness %s (%s warnings, %s anomalies)",
            self.name,
            result.coverage_score,
            result.quality_score,
            result.completeness_score,
            len(result.warnings),
            len(result.anomalies),
        )
        return context.evolve(quality=result).with_stats(
            coverage_score=result.coverage_score,
            quality_score=result.quality_score,
            completeness_score=result.completeness_score,
        )
