from __future__ import annotations

import os
import sys
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

MIGRATIONS_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
PROJECT_ROOT = os.path.dirname(MIGRATIONS_DIR)

# migration_helpers lives next to alembic.ini; the ORM package at the project root
sys.path.insert(0, MIGRATIONS_DIR)
sys.path.insert(0, PROJECT_ROOT)

from assetdex.db.base import Base  # noqa: E402
import assetdex.models.inventory_models  # noqa: E402,F401  registers the dcim tables

SCHEMA = "dcim"

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

db_url = os.getenv("DB_URL")
if not db_url:
    raise RuntimeError("DB_URL environment variable is not set")

config.set_main_option("sqlalchemy.url", db_url)

# Revisions are hand-written op scripts; the metadata is only used by
# `alembic check` to report drift between the models and the database.
target_metadata = Base.metadata


def _include_object(obj, name, type_, reflected, compare_to) -> bool:
    if type_ == "table":
        return obj.schema == SCHEMA
    return True


def _configure_kwargs() -> dict:
    return {
        "target_metadata": target_metadata,
        "include_schemas": True,
        "include_object": _include_object,
        "version_table_schema": SCHEMA,
    }


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        # alembic_version is kept in the dcim schema, which must exist first
        connection.exec_driver_sql(f"CREATE SCHEMA IF NOT EXISTS {SCHEMA}")
        connection.commit()

        context.configure(connection=connection, **_configure_kwargs())

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
