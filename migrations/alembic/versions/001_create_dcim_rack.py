"""
create dcim_rack table

Revision ID: 001_create_dcim_rack
Revises:
Create Date: 2026-10-12 00:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from migration_helpers import (
    ensure_schema,
    table_exists,
    create_index_if_not_exists,
    drop_index_if_exists,
    drop_table_if_exists,
)

revision = "001_create_dcim_rack"
down_revision = None
branch_labels = None
depends_on = None

TABLE_NAME = "dcim_rack"
SCHEMA = "dcim"


def _create_table() -> None:
    if not table_exists(SCHEMA, TABLE_NAME):
        op.create_table(
            TABLE_NAME,
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("total_units", sa.Integer(), nullable=True),
            sa.Column("datacenter", sa.String(255), nullable=True),
            sa.Column("floor", sa.Integer(), nullable=True),
            sa.Column("location", sa.String(255), nullable=True),
            sa.Column("description", sa.String(255), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
            sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
            sa.CheckConstraint("total_units IS NULL OR total_units > 0", name="ck_dcim_rack_total_units_positive"),
            schema=SCHEMA,
        )

    # Lookups are case-insensitive; the unique index is on the plain name.
    op.execute(
        sa.text(f"CREATE UNIQUE INDEX IF NOT EXISTS ix_dcim_rack_name ON {SCHEMA}.{TABLE_NAME} (name)")
    )
    create_index_if_not_exists(SCHEMA, "ix_dcim_rack_datacenter", TABLE_NAME, ["datacenter"])


def upgrade() -> None:
    ensure_schema(SCHEMA)
    _create_table()


def downgrade() -> None:
    drop_index_if_exists(SCHEMA, "ix_dcim_rack_datacenter", TABLE_NAME)
    drop_index_if_exists(SCHEMA, "ix_dcim_rack_name", TABLE_NAME)
    drop_table_if_exists(SCHEMA, TABLE_NAME)
