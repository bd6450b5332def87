"""Session handling for the relational venue store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from venuegraph.adapters.sqlalchemy.mappings import start_mappers
from venuegraph.adapters.sqlalchemy.migrations import upgrade_head
from venuegraph.adapters.sqlalchemy.repositories import (
    SqlAlchemyEventVenueReader,
    SqlAlchemyHeatIndexRepository,
    SqlAlchemyIngestionErrorRepository,
    SqlAlchemyIngestionRunRepository,
    SqlAlchemyVenueRepository,
    SqlAlchemyVenueSignalRepository,
    SqlAlchemyVenueSourceRepository,
)
from venuegraph.config.storage import get_database_config
from venuegraph.domain.ports.unit_of_work import IngestionRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """The venue store was used before ``startup()`` or reconfigured without ``force``."""


_engine: Engine | None = None
_sessions: sessionmaker[Session] | None = None


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the venue store to an engine and bring its schema to the latest revision."""

    global _engine, _sessions  # noqa: PLW0603

    if _engine is not None and not force:
        raise StartupError("Venue store already started. Pass force=True to rebind it.")

    bound = engine or create_engine(database_uri or get_database_config().uri, future=True)
    log.info(f"Opening venue store at {bound.url.render_as_string()}")
    start_mappers()
    upgrade_head(engine=bound)

    _engine = bound
    _sessions = sessionmaker(bind=bound, expire_on_commit=False)


def configured_engine() -> Engine | None:
    return _engine


def is_started() -> bool:
    return _engine is not None


def shutdown() -> None:
    """Dispose the engine; the next unit of work needs a fresh ``startup()``."""

    global _engine, _sessions  # noqa: PLW0603

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _sessions = None


class SqlAlchemyIngestionUnitOfWork:
    """One transaction over the venue, signal, heat and run-log tables.

    Leaving the block with an exception rolls back; anything not committed
    explicitly is discarded when the session closes.
    """

    def __init__(self) -> None:
        if _sessions is None:
            raise StartupError(
                "Venue store not started. Call "
                "venuegraph.adapters.sqlalchemy.unit_of_work.startup() first."
            )
        self._sessions = _sessions
        self._session: Session | None = None
        self._repositories: IngestionRepositories | None = None

    def __enter__(self) -> SqlAlchemyIngestionUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        session = self._sessions()
        self._session = session
        self._repositories = IngestionRepositories(
            venues=SqlAlchemyVenueRepository(session),
            venue_sources=SqlAlchemyVenueSourceRepository(session),
            signals=SqlAlchemyVenueSignalRepository(session),
            heat_index=SqlAlchemyHeatIndexRepository(session),
            runs=SqlAlchemyIngestionRunRepository(session),
            run_errors=SqlAlchemyIngestionErrorRepository(session),
            event_venues=SqlAlchemyEventVenueReader(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        if exc_type is not None:
            session.rollback()
        session.close()
        self._session = None
        self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def repositories(self) -> IngestionRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from venuegraph.domain.ports.unit_of_work import IngestionUnitOfWork

    _uow_check: IngestionUnitOfWork = SqlAlchemyIngestionUnitOfWork()
