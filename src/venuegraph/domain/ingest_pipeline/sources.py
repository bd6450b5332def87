"""Source agent stage: one instance per fetcher, all sharing the same contract."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from venuegraph.domain.ingest_pipeline.context import ErrorKind
from venuegraph.domain.ingest_pipeline.orchestrator import PipelinePhase
from venuegraph.domain.ports.fetching import SourceFetchError

if TYPE_CHECKING:
    from venuegraph.domain.ingest_pipeline.context import IngestionContext, SourceCounter
    from venuegraph.domain.model.records import RawVenue
    from venuegraph.domain.ports.fetching import VenueFetcher

log = logging.getLogger(__name__)


def unavailable_message(source_label: str) -> str:
    return f"API key not configured, skipping {source_label} source"


@dataclass(slots=True)
class SourceFetchPhase(PipelinePhase):
    """Run one venue fetcher in degraded mode.

    An unavailable fetcher or a failing request never raises: the stage
    records one error for the source and keeps whatever records the fetcher
    managed to collect (usually none).
    """

    fetcher: VenueFetcher
    counter: SourceCounter
    name: str = field(init=False)

    def __post_init__(self) -> None:
        self.name = self.fetcher.name

    def run(self, context: IngestionContext) -> IngestionContext:
        label = self.fetcher.source_label
        if not self.fetcher.available:
            message = self.fetcher.unavailable_reason or unavailable_message(label)
            log.warning("[%s] %s", self.name, message)
            return self._record(context, ()).with_error(
                agent_name=self.name,
                source=label,
                message=message,
                kind=ErrorKind.SOURCE_UNAVAILABLE,
            )

        log.info("[%s] Fetching %s venues for %s", self.name, label, context.city.name)
        try:
            result = self.fetcher(context.city, run_type=context.run_type)
        except SourceFetchError as exc:
            log.error(  # noqa: TRY400
                "[%s] %s fetch failed after %s records: %s", self.name, label, len(exc.partial), exc
            )
            context = self._record(context, exc.partial, skipped=exc.skipped)
            return context.with_error(
                agent_name=self.name,
                source=label,
                message=str(exc),
                kind=ErrorKind.SOURCE_UNAVAILABLE,
                payload={"partial_records": len(exc.partial)},
            )

        if result.skipped:
            log.warning("[%s] Skipped %s unparseable %s records", self.name, result.skipped, label)
        log.info("[%s] Found %s venues from %s", self.name, len(result.venues), label)
        context = self._record(context, result.venues, skipped=result.skipped)
        for message in result.errors:
            context = context.with_error(
                agent_name=self.name,
                source=label,
                message=message,
                kind=ErrorKind.SOURCE_UNAVAILABLE,
            )
        return context

    def _record(
        self,
        context: IngestionContext,
        venues: tuple[RawVenue, ...] | list[RawVenue],
        *,
        skipped: int = 0,
    ) -> IngestionContext:
        raw_venues = (*context.raw_venues, *venues)
        return context.evolve(raw_venues=raw_venues).with_stats(
            **{self.counter.value: len(venues)},
            raw_total=len(raw_venues),
            skipped_records=context.stats.skipped_records + skipped,
        )
