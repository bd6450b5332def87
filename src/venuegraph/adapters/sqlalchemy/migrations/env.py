"""Alembic environment for the venue store."""

from __future__ import annotations

import logging
from typing import Any

from alembic import context
from sqlalchemy import create_engine, pool

from venuegraph.adapters.sqlalchemy.mappings import mapper_registry, start_mappers
from venuegraph.config.storage import get_database_config

log = logging.getLogger("alembic.env")

start_mappers()

config = context.config
target_metadata = mapper_registry.metadata

# SQLite cannot ALTER most constraints, so every revision runs in batch mode
MIGRATION_OPTIONS: dict[str, Any] = {
    "target_metadata": target_metadata,
    "render_as_batch": True,
    "compare_type": True,
}


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_config().uri


def run_migrations_offline() -> None:
    context.configure(url=_database_url(), literal_binds=True, **MIGRATION_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connection = config.attributes.get("connection")
    if connection is not None:
        context.configure(connection=connection, **MIGRATION_OPTIONS)
        with context.begin_transaction():
            context.run_migrations()
        return

    engine = create_engine(_database_url(), poolclass=pool.NullPool, future=True)
    try:
        with engine.connect() as owned:
            context.configure(connection=owned, **MIGRATION_OPTIONS)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    log.info("Rendering venue store migrations as SQL")
    run_migrations_offline()
else:
    run_migrations_online()
