"""
create dcim_server table

Revision ID: 002_create_dcim_server
Revises: 001_create_dcim_rack
Create Date: 2026-10-12 00:00:01.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from migration_helpers import (
    table_exists,
    create_index_if_not_exists,
    drop_index_if_exists,
    drop_table_if_exists,
)

revision = "002_create_dcim_server"
down_revision = "001_create_dcim_rack"
branch_labels = None
depends_on = None

TABLE_NAME = "dcim_server"
SCHEMA = "dcim"

INDEXES = (
    ("ix_dcim_server_hostname", ["hostname"]),
    ("ix_dcim_server_serial_number", ["serial_number"]),
    ("ix_dcim_server_rack_id", ["rack_id"]),
)


def _create_table() -> None:
    if not table_exists(SCHEMA, TABLE_NAME):
        op.create_table(
            TABLE_NAME,
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column("hostname", sa.String(255), nullable=False),
            sa.Column("serial_number", sa.String(255), nullable=True),
            sa.Column("brand", sa.String(255), nullable=True),
            sa.Column("model", sa.String(255), nullable=True),
            sa.Column("status", sa.String(255), nullable=False, server_default=sa.text("'active'")),
            sa.Column("device_type", sa.String(255), nullable=True),
            sa.Column(
                "rack_id",
                sa.Integer(),
                sa.ForeignKey("dcim.dcim_rack.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("unit", sa.String(8), nullable=True),
            sa.Column("unit_height", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
            sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
            sa.CheckConstraint("unit_height IS NULL OR unit_height > 0", name="ck_dcim_server_unit_height_positive"),
            schema=SCHEMA,
        )

    for index_name, columns in INDEXES:
        create_index_if_not_exists(SCHEMA, index_name, TABLE_NAME, columns)


def upgrade() -> None:
    _create_table()


def downgrade() -> None:
    for index_name, _ in reversed(INDEXES):
        drop_index_if_exists(SCHEMA, index_name, TABLE_NAME)
    drop_table_if_exists(SCHEMA, TABLE_NAME)
