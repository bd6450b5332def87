"""Alembic revisions for the venue store and a helper to apply them."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from venuegraph.config.storage import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Apply every pending revision.

    With an engine the upgrade runs on one of its connections, which is
    what keeps in-memory SQLite databases usable from the tests.
    """

    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    if engine is None:
        config.set_main_option("sqlalchemy.url", database_uri or get_database_config().uri)
        command.upgrade(config, "head")
        return
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
