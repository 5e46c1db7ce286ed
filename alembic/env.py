from __future__ import annotations

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from db.base import Base
from db.config import load_env_files, normalize_postgres_url, resolve_database_url
from db.models import FleetModelRow, ModelAnnotation, ProductRow  # noqa: F401  registers Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _migration_url() -> str:
    """
    Resolve the catalog database URL for migrations.

    Priority:
    1) `-x db_url=...` for a one-off target
    2) ALEMBIC_DATABASE_URL
    3) sqlalchemy.url from alembic.ini
    4) the application URL (DATABASE_URL, then COVERAGE_DATABASE_URL)
    """

    load_env_files()

    candidates = (
        context.get_x_argument(as_dictionary=True).get("db_url", ""),
        os.getenv("ALEMBIC_DATABASE_URL", ""),
        config.get_main_option("sqlalchemy.url") or "",
    )
    explicit = next((value.strip() for value in candidates if value and value.strip()), None)
    url = normalize_postgres_url(explicit) if explicit else resolve_database_url()

    if not url.startswith("postgresql"):
        raise RuntimeError("Catalog migrations target PostgreSQL only.")
    return url


def run_migrations_offline() -> None:
    context.configure(
        url=_migration_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = _migration_url()

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
