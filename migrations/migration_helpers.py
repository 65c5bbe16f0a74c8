"""
Helper functions for idempotent Alembic migrations.
Every create/drop checks the live catalog first so a partially applied
revision can simply be re-run.
"""

from alembic import op
import sqlalchemy as sa


def _inspector():
    return sa.inspect(op.get_bind())


def ensure_schema(schema: str) -> None:
    """Create the schema if it doesn't exist."""
    op.execute(sa.text(f"CREATE SCHEMA IF NOT EXISTS {schema}"))


def table_exists(schema: str, table_name: str) -> bool:
    """Check if a table exists in the given schema."""
    return _inspector().has_table(table_name, schema=schema)


def index_exists(schema: str, table_name: str, index_name: str) -> bool:
    """Check if an index exists on the given table."""
    if not table_exists(schema, table_name):
        return False
    return any(ix["name"] == index_name for ix in _inspector().get_indexes(table_name, schema=schema))


def create_index_if_not_exists(schema: str, index_name: str, table_name: str, columns: list) -> None:
    """Create an index if it doesn't exist."""
    if not index_exists(schema, table_name, index_name):
        op.create_index(index_name, table_name, columns, schema=schema)


def drop_index_if_exists(schema: str, index_name: str, table_name: str) -> None:
    """Drop an index if it exists."""
    if index_exists(schema, table_name, index_name):
        op.drop_index(index_name, table_name=table_name, schema=schema)


def drop_table_if_exists(schema: str, table_name: str) -> None:
    """Drop a table if it exists."""
    if table_exists(schema, table_name):
        op.drop_table(table_name, schema=schema)
