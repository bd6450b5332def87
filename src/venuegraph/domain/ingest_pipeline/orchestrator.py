"""Phase-based driver for the venue ingestion pipeline."""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from venuegraph.domain.ingest_pipeline.context import SYSTEM_SOURCE, ErrorKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from venuegraph.domain.ingest_pipeline.context import IngestionContext

log = logging.getLogger(__name__)


class FatalPipelineError(RuntimeError):
    """The only error class allowed to escape :meth:`IngestionPipeline.run`."""


class RunRecordError(FatalPipelineError):
    """The run record could not be created, so nothing can be logged against it."""


class RunInProgressError(FatalPipelineError):
    """Another run for the same city still holds the run lock."""


class PipelinePhase(Protocol):
    """Contract implemented by each ingestion stage."""

    name: str

    def run(self, context: IngestionContext) -> IngestionContext: ...


@runtime_checkable
class PipelineResource(Protocol):
    """Something the driver opens before the first stage and closes after the last."""

    def open(self) -> None: ...

    def close(self) -> None: ...


@dataclass(slots=True)
class IngestionPipeline:
    """Compose and execute the ordered pipeline phases.

    A phase that raises anything other than :class:`FatalPipelineError` is
    recorded as a stage failure on the context and the next phase runs with
    the context as it was before the failing phase.
    """

    phases: Sequence[PipelinePhase] = field(default_factory=tuple)
    resources: Sequence[PipelineResource] = field(default_factory=tuple)

    def with_phase(self, phase: PipelinePhase) -> IngestionPipeline:
        """Return a new pipeline appending ``phase`` at the end."""

        return IngestionPipeline(phases=(*self.phases, phase), resources=self.resources)

    def extend(self, phases: Iterable[PipelinePhase]) -> IngestionPipeline:
        """Return a new pipeline with the provided ``phases`` concatenated."""

        return IngestionPipeline(phases=(*self.phases, *tuple(phases)), resources=self.resources)

    def run(self, context: IngestionContext) -> IngestionContext:
        """Execute the configured phases in order, folding ``context`` through them."""

        with ExitStack() as stack:
            for resource in self.resources:
                resource.open()
                stack.callback(resource.close)
            for phase in self.phases:
                context = self._run_phase(phase, context)
        return context

    @staticmethod
    def _run_phase(phase: PipelinePhase, context: IngestionContext) -> IngestionContext:
        try:
            return phase.run(context)
        except FatalPipelineError:
            raise
        except Exception as exc:
            log.exception("Stage %s failed for %s", phase.name, context.city.name)
            return context.with_error(
                agent_name=phase.name,
                source=SYSTEM_SOURCE,
                message=f"{type(exc).__name__}: {exc}",
                kind=ErrorKind.STAGE_FAILURE,
            )
