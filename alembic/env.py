from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from db.base import Base
from db.config import normalize_postgres_url, resolve_database_url
from db.models import (  # noqa: F401  (imports trigger Base.metadata registration)
    Block,
    ComplianceDocument,
    Inspection,
    InspectionTemplate,
    Organization,
    Property,
)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _resolve_database_url() -> str:
    """
    ``-x db_url=...`` targets a one-off database; otherwise the service's
    own DATABASE_URL / CLOUD_DATABASE_URL resolution applies.
    """

    override = context.get_x_argument(as_dictionary=True).get("db_url")
    if override:
        url = normalize_postgres_url(override)
        if not url.startswith("postgresql"):
            raise RuntimeError("Migrations target PostgreSQL only.")
        return url
    return resolve_database_url()


def run_migrations_offline() -> None:
    url = _resolve_database_url()

    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = _resolve_database_url()

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        future=True,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
