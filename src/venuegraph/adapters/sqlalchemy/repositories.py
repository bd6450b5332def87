"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from venuegraph.adapters.sqlalchemy.mappings import (
    event_table,
    ingestion_error_table,
    ingestion_run_table,
    venue_signal_table,
    venue_source_table,
    venue_table,
)
from venuegraph.domain.model import (
    IngestionError,
    IngestionRun,
    RunStatus,
    Venue,
    VenueHeatIndex,
    VenueSignal,
    VenueSource,
)
from venuegraph.domain.ports.fetching import EventVenueSighting

if TYPE_CHECKING:
    from collections.abc import Collection
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy.orm import Session

    from venuegraph.domain.model import SignalType, SignalWindow, SourceType

# keeps IN lists below the bound-parameter limit of older SQLite builds
_ID_CHUNK_SIZE = 500


class SqlAlchemyVenueRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Venue) -> None:
        self.session.add(entity)

    def get(self, venue_id: UUID) -> Venue | None:
        return self.session.get(Venue, venue_id)

    def list_active(self, city: str) -> list[Venue]:
        stmt = (
            select(Venue)
            .where(venue_table.c.city == city)
            .where(venue_table.c.is_active.is_(True))
            .order_by(venue_table.c.created_at, venue_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyVenueSourceRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, source: SourceType, source_external_id: str) -> VenueSource | None:
        stmt = (
            select(VenueSource)
            .where(venue_source_table.c.source == source)
            .where(venue_source_table.c.source_external_id == source_external_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyVenueSignalRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: VenueSignal) -> None:
        self.session.add(entity)

    def latest_values(
        self,
        venue_ids: Collection[UUID],
        *,
        window: SignalWindow,
        since: datetime,
    ) -> dict[UUID, dict[SignalType, float]]:
        ids = list(venue_ids)
        latest: dict[UUID, dict[SignalType, float]] = {}
        for start in range(0, len(ids), _ID_CHUNK_SIZE):
            chunk = ids[start : start + _ID_CHUNK_SIZE]
            stmt = (
                select(
                    venue_signal_table.c.venue_id,
                    venue_signal_table.c.signal_type,
                    venue_signal_table.c.value,
                )
                .where(venue_signal_table.c.venue_id.in_(chunk))
                .where(venue_signal_table.c.window == window)
                .where(venue_signal_table.c.computed_at >= since)
                .order_by(venue_signal_table.c.computed_at)
            )
            # ascending order: later rows overwrite earlier ones
            for venue_id, signal_type, value in self.session.execute(stmt):
                latest.setdefault(venue_id, {})[signal_type] = value
        return latest


class SqlAlchemyHeatIndexRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, venue_id: UUID) -> VenueHeatIndex | None:
        return self.session.get(VenueHeatIndex, venue_id)

    def upsert(self, entry: VenueHeatIndex) -> None:
        existing = self.get(entry.venue_id)
        if existing is None:
            self.session.add(entry)
            return
        existing.composite_score = entry.composite_score
        existing.last_computed_at = entry.last_computed_at


class SqlAlchemyIngestionRunRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: IngestionRun) -> None:
        self.session.add(entity)

    def get(self, run_id: UUID) -> IngestionRun | None:
        return self.session.get(IngestionRun, run_id)

    def latest_successful(self, city: str, *, exclude: UUID | None = None) -> IngestionRun | None:
        stmt = (
            select(IngestionRun)
            .where(ingestion_run_table.c.city == city)
            .where(ingestion_run_table.c.status == RunStatus.SUCCESS)
        )
        if exclude is not None:
            stmt = stmt.where(ingestion_run_table.c.id != exclude)
        stmt = stmt.order_by(ingestion_run_table.c.started_at.desc()).limit(1)
        return self.session.execute(stmt).scalar_one_or_none()

    def find_running(self, city: str, *, started_after: datetime) -> IngestionRun | None:
        stmt = (
            select(IngestionRun)
            .where(ingestion_run_table.c.city == city)
            .where(ingestion_run_table.c.status == RunStatus.RUNNING)
            .where(ingestion_run_table.c.started_at >= started_after)
            .order_by(ingestion_run_table.c.started_at.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyIngestionErrorRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: IngestionError) -> None:
        self.session.add(entity)

    def list_for_run(self, run_id: UUID) -> list[IngestionError]:
        stmt = (
            select(IngestionError)
            .where(ingestion_error_table.c.run_id == run_id)
            .order_by(ingestion_error_table.c.created_at)
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyEventVenueReader:
    """Reads venue sightings from the events table written by the event scraper."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def upcoming_event_venues(self, city: str, *, now: datetime) -> list[EventVenueSighting]:
        stmt = (
            select(
                event_table.c.venue_name,
                event_table.c.source_domain,
                event_table.c.source_url,
                event_table.c.address,
                event_table.c.lat,
                event_table.c.lon,
            )
            .where(event_table.c.city == city)
            .where(event_table.c.venue_name.is_not(None))
            .where(event_table.c.start_time >= now)
            .order_by(event_table.c.start_time)
        )
        return [
            EventVenueSighting(
                venue_name=row.venue_name,
                source_domain=row.source_domain,
                source_url=row.source_url,
                address=row.address,
                lat=row.lat,
                lon=row.lon,
            )
            for row in self.session.execute(stmt)
        ]


if TYPE_CHECKING:
    from venuegraph.domain.ports.fetching import EventVenueReader
    from venuegraph.domain.ports.persistence import (
        HeatIndexRepository,
        IngestionErrorRepository,
        IngestionRunRepository,
        VenueRepository,
        VenueSignalRepository,
        VenueSourceRepository,
    )

    def _check(session: Session) -> None:
        _venues: VenueRepository = SqlAlchemyVenueRepository(session)
        _sources: VenueSourceRepository = SqlAlchemyVenueSourceRepository(session)
        _signals: VenueSignalRepository = SqlAlchemyVenueSignalRepository(session)
        _heat: HeatIndexRepository = SqlAlchemyHeatIndexRepository(session)
        _runs: IngestionRunRepository = SqlAlchemyIngestionRunRepository(session)
        _errors: IngestionErrorRepository = SqlAlchemyIngestionErrorRepository(session)
        _events: EventVenueReader = SqlAlchemyEventVenueReader(session)
