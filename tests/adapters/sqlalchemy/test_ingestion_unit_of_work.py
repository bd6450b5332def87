from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from venuegraph.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyIngestionUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from tests.helpers.venues import make_venue

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyIngestionUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b
    assert is_started()


def test_repositories_require_an_open_unit_of_work(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    uow = SqlAlchemyIngestionUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_commit_persists_and_exception_rolls_back(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    kept = make_venue("Blue Note")
    dropped = make_venue("Smalls")

    with SqlAlchemyIngestionUnitOfWork() as uow:
        uow.repositories.venues.add(kept)
        uow.commit()

    with pytest.raises(RuntimeError, match="boom"), SqlAlchemyIngestionUnitOfWork() as uow:
        uow.repositories.venues.add(dropped)
        uow.session.flush()
        raise RuntimeError("boom")

    with SqlAlchemyIngestionUnitOfWork() as uow:
        names = [venue.canonical_name for venue in uow.repositories.venues.list_active("New York")]
    assert names == ["Blue Note"]
