"""Ports for persisting venues, their satellites and run bookkeeping."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from venuegraph.domain.model import (
    IngestionError,
    IngestionRun,
    Venue,
    VenueHeatIndex,
    VenueSignal,
)

if TYPE_CHECKING:
    from collections.abc import Collection
    from datetime import datetime
    from uuid import UUID

    from venuegraph.domain.model import SignalType, SignalWindow, SourceType, VenueSource


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class VenueRepository(Repository[Venue], Protocol):
    def get(self, venue_id: UUID) -> Venue | None: ...

    def list_active(self, city: str) -> list[Venue]: ...


@runtime_checkable
class VenueSourceRepository(Protocol):
    def get(self, source: SourceType, source_external_id: str) -> VenueSource | None: ...


@runtime_checkable
class VenueSignalRepository(Repository[VenueSignal], Protocol):
    def latest_values(
        self,
        venue_ids: Collection[UUID],
        *,
        window: SignalWindow,
        since: datetime,
    ) -> dict[UUID, dict[SignalType, float]]:
        """Most recent value per (venue, signal type) computed at or after ``since``."""
        ...


@runtime_checkable
class HeatIndexRepository(Protocol):
    def upsert(self, entry: VenueHeatIndex) -> None: ...

    def get(self, venue_id: UUID) -> VenueHeatIndex | None: ...


@runtime_checkable
class IngestionRunRepository(Repository[IngestionRun], Protocol):
    def get(self, run_id: UUID) -> IngestionRun | None: ...

    def latest_successful(self, city: str, *, exclude: UUID | None = None) -> IngestionRun | None:
        ...

    def find_running(self, city: str, *, started_after: datetime) -> IngestionRun | None: ...


@runtime_checkable
class IngestionErrorRepository(Repository[IngestionError], Protocol):
    def list_for_run(self, run_id: UUID) -> list[IngestionError]: ...
