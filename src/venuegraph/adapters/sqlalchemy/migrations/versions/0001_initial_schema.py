"""Initial venue schema: venues, provenance, signals, heat index, run log.

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

# enum columns are stored as plain strings (non-native enums)
_ENUM_LENGTH = 16


def upgrade() -> None:
    op.create_table(
        "venues",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("canonical_name", sa.String(), nullable=False),
        sa.Column("normalized_name", sa.String(), nullable=False),
        sa.Column("city", sa.String(), nullable=False),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lon", sa.Float(), nullable=True),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("neighborhood", sa.String(), nullable=True),
        sa.Column("primary_category", sa.String(_ENUM_LENGTH), nullable=False),
        sa.Column("subcategories", sa.JSON(), nullable=False),
        sa.Column("price_band", sa.String(_ENUM_LENGTH), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("website", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_venues"),
    )
    op.create_index("ix_venues_city_active", "venues", ["city", "is_active"])
    op.create_index("ix_venues_normalized_name", "venues", ["normalized_name"])

    op.create_table(
        "venue_sources",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("venue_id", sa.Uuid(), nullable=False),
        sa.Column("source", sa.String(_ENUM_LENGTH), nullable=False),
        sa.Column("source_external_id", sa.String(), nullable=False),
        sa.Column("source_url", sa.String(), nullable=True),
        sa.Column("raw_payload", sa.JSON(), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=False),
        sa.Column("first_seen_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["venue_id"],
            ["venues.id"],
            name="fk_venue_sources_venue_id_venues",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_venue_sources"),
        sa.UniqueConstraint(
            "source", "source_external_id", name="uq_venue_sources_source_external_id"
        ),
    )

    op.create_table(
        "venue_aliases",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("venue_id", sa.Uuid(), nullable=False),
        sa.Column("alias", sa.String(), nullable=False),
        sa.Column("alias_normalized", sa.String(), nullable=False),
        sa.Column("source", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["venue_id"],
            ["venues.id"],
            name="fk_venue_aliases_venue_id_venues",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_venue_aliases"),
        sa.UniqueConstraint("venue_id", "alias_normalized", name="uq_venue_aliases_venue_alias"),
    )

    op.create_table(
        "venue_signals",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("venue_id", sa.Uuid(), nullable=False),
        sa.Column("signal_type", sa.String(_ENUM_LENGTH), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("signal_window", sa.String(_ENUM_LENGTH), nullable=False),
        sa.Column("meta", sa.JSON(), nullable=True),
        sa.Column("computed_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["venue_id"],
            ["venues.id"],
            name="fk_venue_signals_venue_id_venues",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_venue_signals"),
    )
    op.create_index(
        "ix_venue_signals_venue_window_computed",
        "venue_signals",
        ["venue_id", "signal_window", "computed_at"],
    )

    op.create_table(
        "venue_heat_index",
        sa.Column("venue_id", sa.Uuid(), nullable=False),
        sa.Column("composite_score", sa.Float(), nullable=False),
        sa.Column("last_computed_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["venue_id"],
            ["venues.id"],
            name="fk_venue_heat_index_venue_id_venues",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("venue_id", name="pk_venue_heat_index"),
    )

    op.create_table(
        "ingestion_runs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("run_type", sa.String(_ENUM_LENGTH), nullable=False),
        sa.Column("city", sa.String(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(_ENUM_LENGTH), nullable=False),
        sa.Column("stats_json", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_ingestion_runs"),
    )
    op.create_index(
        "ix_ingestion_runs_city_status_started",
        "ingestion_runs",
        ["city", "status", "started_at"],
    )

    op.create_table(
        "ingestion_errors",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("run_id", sa.Uuid(), nullable=False),
        sa.Column("agent_name", sa.String(), nullable=False),
        sa.Column("source", sa.String(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["run_id"],
            ["ingestion_runs.id"],
            name="fk_ingestion_errors_run_id_ingestion_runs",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_ingestion_errors"),
    )

    # the event scraper usually owns this table already
    if not sa.inspect(op.get_bind()).has_table("events"):
        op.create_table(
            "events",
            sa.Column("id", sa.String(), nullable=False),
            sa.Column("title", sa.String(), nullable=True),
            sa.Column("city", sa.String(), nullable=False),
            sa.Column("venue_name", sa.String(), nullable=True),
            sa.Column("address", sa.String(), nullable=True),
            sa.Column("lat", sa.Float(), nullable=True),
            sa.Column("lon", sa.Float(), nullable=True),
            sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
            sa.Column("source_url", sa.String(), nullable=True),
            sa.Column("source_domain", sa.String(), nullable=True),
            sa.PrimaryKeyConstraint("id", name="pk_events"),
        )
        op.create_index("ix_events_city_start_time", "events", ["city", "start_time"])


def downgrade() -> None:
    op.drop_table("ingestion_errors")
    op.drop_index("ix_ingestion_runs_city_status_started", table_name="ingestion_runs")
    op.drop_table("ingestion_runs")
    op.drop_table("venue_heat_index")
    op.drop_index("ix_venue_signals_venue_window_computed", table_name="venue_signals")
    op.drop_table("venue_signals")
    op.drop_table("venue_aliases")
    op.drop_table("venue_sources")
    op.drop_index("ix_venues_normalized_name", table_name="venues")
    op.drop_index("ix_venues_city_active", table_name="venues")
    op.drop_table("venues")
