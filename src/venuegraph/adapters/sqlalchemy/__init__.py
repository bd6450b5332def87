"""SQLAlchemy adapter package for venuegraph."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyEventVenueReader,
    SqlAlchemyHeatIndexRepository,
    SqlAlchemyIngestionErrorRepository,
    SqlAlchemyIngestionRunRepository,
    SqlAlchemyVenueRepository,
    SqlAlchemyVenueSignalRepository,
    SqlAlchemyVenueSourceRepository,
)
from .unit_of_work import (
    SqlAlchemyIngestionUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyEventVenueReader",
    "SqlAlchemyHeatIndexRepository",
    "SqlAlchemyIngestionErrorRepository",
    "SqlAlchemyIngestionRunRepository",
    "SqlAlchemyIngestionUnitOfWork",
    "SqlAlchemyVenueRepository",
    "SqlAlchemyVenueSignalRepository",
    "SqlAlchemyVenueSourceRepository",
    "StartupError",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
