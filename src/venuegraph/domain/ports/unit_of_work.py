"""Transaction boundary used by the ingestion stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from venuegraph.domain.ports.fetching import EventVenueReader
    from venuegraph.domain.ports.persistence import (
        HeatIndexRepository,
        IngestionErrorRepository,
        IngestionRunRepository,
        VenueRepository,
        VenueSignalRepository,
        VenueSourceRepository,
    )


@dataclass(slots=True)
class IngestionRepositories:
    """Repositories the venue ingestion stages read and write."""

    venues: VenueRepository
    venue_sources: VenueSourceRepository
    signals: VenueSignalRepository
    heat_index: HeatIndexRepository
    runs: IngestionRunRepository
    run_errors: IngestionErrorRepository
    event_venues: EventVenueReader


@runtime_checkable
class IngestionUnitOfWork(Protocol):
    """Transaction boundary around the ingestion repositories."""

    @property
    def repositories(self) -> IngestionRepositories: ...

    def __enter__(self) -> IngestionUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

