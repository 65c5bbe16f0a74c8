"""
create dcim_server_position_history table

Revision ID: 003_create_dcim_server_position_history
Revises: 002_create_dcim_server
Create Date: 2026-10-12 00:00:02.000000
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

revision = "003_create_dcim_server_position_history"
down_revision = "002_create_dcim_server"
branch_labels = None
depends_on = None

TABLE_NAME = "dcim_server_position_history"
SCHEMA = "dcim"


def _create_table() -> None:
    if not table_exists(SCHEMA, TABLE_NAME):
        op.create_table(
            TABLE_NAME,
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column(
                "server_id",
                sa.String(36),
                sa.ForeignKey("dcim.dcim_server.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("previous_rack", sa.String(255), nullable=True),
            sa.Column("previous_unit", sa.String(8), nullable=True),
            sa.Column("previous_unit_height", sa.Integer(), nullable=True),
            sa.Column("new_rack", sa.String(255), nullable=False),
            sa.Column("new_unit", sa.String(8), nullable=False),
            sa.Column("new_unit_height", sa.Integer(), nullable=False),
            sa.Column("changed_by", sa.String(255), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
            schema=SCHEMA,
        )

    create_index_if_not_exists(SCHEMA, "ix_dcim_server_position_history_server_id", TABLE_NAME, ["server_id"])
    create_index_if_not_exists(SCHEMA, "ix_dcim_server_position_history_changed_at", TABLE_NAME, ["changed_at"])


def upgrade() -> None:
    _create_table()


def downgrade() -> None:
    drop_index_if_exists(SCHEMA, "ix_dcim_server_position_history_changed_at", TABLE_NAME)
    drop_index_if_exists(SCHEMA, "ix_dcim_server_position_history_server_id", TABLE_NAME)
    drop_table_if_exists(SCHEMA, TABLE_NAME)
