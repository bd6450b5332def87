from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from venuegraph.adapters.sqlalchemy import start_mappers
from venuegraph.adapters.sqlalchemy.migrations import upgrade_head
from venuegraph.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyIngestionUnitOfWork,
    shutdown,
    startup,
)
from venuegraph.config import get_city_config

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator

    from venuegraph.domain.ingest_pipeline.run_log import UnitOfWorkFactory
    from venuegraph.domain.model import CityConfig


@pytest.fixture
def new_york() -> CityConfig:
    return get_city_config("New York")


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_unit_of_work(sqlite_engine: Engine) -> Iterator[UnitOfWorkFactory]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield SqlAlchemyIngestionUnitOfWork
    finally:
        shutdown()
