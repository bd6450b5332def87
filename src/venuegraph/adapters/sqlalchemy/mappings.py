"""SQLAlchemy mapping metadata for the venue domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers, relationship

from venuegraph.domain.model import (
    IngestionError,
    IngestionRun,
    PriceBand,
    RunStatus,
    RunType,
    SignalType,
    SignalWindow,
    SourceType,
    Venue,
    VenueAlias,
    VenueCategory,
    VenueHeatIndex,
    VenueSignal,
    VenueSource,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Venue tables ----------------------------------------------------------------

venue_table = Table(
    "venues",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("canonical_name", String, nullable=False),
    Column("normalized_name", String, nullable=False),
    Column("city", String, nullable=False),
    Column("lat", Float, nullable=True),
    Column("lon", Float, nullable=True),
    Column("address", String, nullable=True),
    Column("neighborhood", String, nullable=True),
    Column(
        "primary_category",
        Enum(VenueCategory, native_enum=False),
        nullable=False,
        default=VenueCategory.UNCLASSIFIED,
    ),
    Column("subcategories", JSON, nullable=False, default=list),
    Column("price_band", Enum(PriceBand, native_enum=False), nullable=True),
    Column("capacity", Integer, nullable=True),
    Column("website", String, nullable=True),
    Column("phone", String, nullable=True),
    Column("description", Text, nullable=True),
    Column("image_url", String, nullable=True),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    Index("ix_venues_city_active", "city", "is_active"),
    Index("ix_venues_normalized_name", "normalized_name"),
)

venue_source_table = Table(
    "venue_sources",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "venue_id", UUIDColumnType, ForeignKey("venues.id", ondelete="CASCADE"), nullable=False
    ),
    Column("source", Enum(SourceType, native_enum=False), nullable=False),
    Column("source_external_id", String, nullable=False),
    Column("source_url", String, nullable=True),
    Column("raw_payload", JSON, nullable=False, default=dict),
    Column("confidence", Float, nullable=False),
    Column("first_seen_at", UTCDateTime(), nullable=False),
    Column("last_seen_at", UTCDateTime(), nullable=False),
    UniqueConstraint("source", "source_external_id", name="uq_venue_sources_source_external_id"),
)

venue_alias_table = Table(
    "venue_aliases",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "venue_id", UUIDColumnType, ForeignKey("venues.id", ondelete="CASCADE"), nullable=False
    ),
    Column("alias", String, nullable=False),
    Column("alias_normalized", String, nullable=False),
    Column("source", String, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    UniqueConstraint("venue_id", "alias_normalized", name="uq_venue_aliases_venue_alias"),
)

venue_signal_table = Table(
    "venue_signals",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "venue_id", UUIDColumnType, ForeignKey("venues.id", ondelete="CASCADE"), nullable=False
    ),
    Column("signal_type", Enum(SignalType, native_enum=False), nullable=False),
    Column("value", Float, nullable=False),
    Column("signal_window", Enum(SignalWindow, native_enum=False), key="window", nullable=False),
    Column("meta", JSON, nullable=True),
    Column("computed_at", UTCDateTime(), nullable=False),
    Index("ix_venue_signals_venue_window_computed", "venue_id", "window", "computed_at"),
)

venue_heat_index_table = Table(
    "venue_heat_index",
    mapper_registry.metadata,
    Column(
        "venue_id", UUIDColumnType, ForeignKey("venues.id", ondelete="CASCADE"), primary_key=True
    ),
    Column("composite_score", Float, nullable=False),
    Column("last_computed_at", UTCDateTime(), nullable=False),
)

# Run bookkeeping -------------------------------------------------------------

ingestion_run_table = Table(
    "ingestion_runs",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("run_type", Enum(RunType, native_enum=False), nullable=False),
    Column("city", String, nullable=False),
    Column("started_at", UTCDateTime(), nullable=False),
    Column("finished_at", UTCDateTime(), nullable=True),
    Column("status", Enum(RunStatus, native_enum=False), nullable=False),
    Column("stats_json", JSON, nullable=True),
    Index("ix_ingestion_runs_city_status_started", "city", "status", "started_at"),
)

ingestion_error_table = Table(
    "ingestion_errors",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "run_id",
        UUIDColumnType,
        ForeignKey("ingestion_runs.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("agent_name", String, nullable=False),
    Column("source", String, nullable=False),
    Column("message", Text, nullable=False),
    Column("payload", JSON, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
)

# Owned by the event scraper; read here, never written ---------------------------

event_table = Table(
    "events",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("title", String, nullable=True),
    Column("city", String, nullable=False),
    Column("venue_name", String, nullable=True),
    Column("address", String, nullable=True),
    Column("lat", Float, nullable=True),
    Column("lon", Float, nullable=True),
    Column("start_time", UTCDateTime(), nullable=False),
    Column("source_url", String, nullable=True),
    Column("source_domain", String, nullable=True),
    Index("ix_events_city_start_time", "city", "start_time"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(
        Venue,
        venue_table,
        properties={
            "sources": relationship(
                VenueSource,
                cascade="all, delete-orphan",
                lazy="selectin",
                order_by=venue_source_table.c.first_seen_at,
            ),
            "aliases": relationship(
                VenueAlias,
                cascade="all, delete-orphan",
                lazy="selectin",
                order_by=venue_alias_table.c.created_at,
            ),
        },
    )

    mapper_registry.map_imperatively(VenueSource, venue_source_table)
    mapper_registry.map_imperatively(VenueAlias, venue_alias_table)
    mapper_registry.map_imperatively(VenueSignal, venue_signal_table)
    mapper_registry.map_imperatively(VenueHeatIndex, venue_heat_index_table)
    mapper_registry.map_imperatively(IngestionRun, ingestion_run_table)
    mapper_registry.map_imperatively(IngestionError, ingestion_error_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
