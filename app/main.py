from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    scheduler_running: bool


def _validate_env() -> None:
    """
    Validate all required environment variables at startup.

    Runs before any service or database connection is initialised.
    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.

    Rules:
    - No empty-string values are accepted.
    - SQLite and local database fallbacks are not permitted.
    - Numeric compliance and scheduler settings must parse as integers.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- APP_MODE -------------------------------------------------------
    app_mode = os.getenv("APP_MODE", "").strip().lower()
    if not app_mode:
        errors.append(
            "APP_MODE is not set. It must be explicitly set to 'cloud'."
        )
    elif app_mode != "cloud":
        errors.append(
            f"APP_MODE='{app_mode}' is not valid. Allowed values: ['cloud']."
        )

    # --- Database URL ---------------------------------------------------
    database_url = os.getenv("DATABASE_URL", "").strip()
    cloud_database_url = os.getenv("CLOUD_DATABASE_URL", "").strip()
    if not database_url and not cloud_database_url:
        errors.append(
            "No database URL configured. Set DATABASE_URL or CLOUD_DATABASE_URL. "
            "SQLite and local database fallbacks are not permitted."
        )

    # --- Integer settings -----------------------------------------------
    for name in (
        "COMPLIANCE_BULK_MAX_SELECTIONS",
        "COMPLIANCE_EXPIRING_DAYS_AHEAD",
        "COMPLIANCE_MIN_YEAR",
        "COMPLIANCE_MAX_YEAR",
        "DOCUMENT_STATUS_REFRESH_HOUR",
        "DOCUMENT_STATUS_REFRESH_MINUTE",
    ):
        raw = os.getenv(name)
        if raw is None:
            continue
        try:
            int(raw.strip())
        except ValueError:
            errors.append(f"{name}='{raw}' is not an integer.")

    if errors:
        raise RuntimeError(
            "Startup validation failed; missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    from db.session import get_session_factory

    try:
        with get_session_factory()() as db:
            db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Compare Base.metadata table names against the live DB schema.

    Every table registered on Base.metadata must exist in the database.
    If any are missing, log a critical error and abort startup so that
    the operator is forced to run migrations before serving traffic.

    Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401 (registers all ORM models on Base.metadata)
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        log = logging.getLogger(__name__)
        log.critical(
            "Schema mismatch: %d table(s) defined in ORM metadata are absent from "
            "the database: %s. Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema, start the scheduler on boot; shut it down on exit."""
    log = logging.getLogger(__name__)
    _check_db()
    log.info("Database connectivity confirmed")
    _check_schema()
    log.info("Database schema validated")

    from app.config import get_scheduler_settings
    from app.scheduler.jobs import build_scheduler

    settings = get_scheduler_settings()
    scheduler = build_scheduler(settings) if settings.enabled else None
    application.state.scheduler = scheduler
    if scheduler is not None:
        scheduler.start()
        log.info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    else:
        log.info("Scheduler disabled by SCHEDULER_ENABLED")
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.shutdown(wait=True)
            log.info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    from app.config import get_app_settings

    get_app_settings()

    application = FastAPI(
        title="Compliance Calendar API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import (
        compliance_router,
        entity_router,
        inspection_router,
        template_router,
    )

    application.include_router(compliance_router)
    application.include_router(inspection_router)
    application.include_router(template_router)
    application.include_router(entity_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        scheduler = getattr(application.state, "scheduler", None)
        return HealthResponse(
            status="ok",
            scheduler_running=bool(scheduler is not None and scheduler.running),
        )

    return application


app = create_app()
