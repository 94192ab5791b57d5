"""
app/scheduler/jobs.py

APScheduler-based background jobs.

Schedule (all times UTC)
--------------------------
  document_status_refresh : daily at DOCUMENT_STATUS_REFRESH_HOUR:MINUTE
                            (01:00 by default)

The refresh rewrites the persisted ``status`` of every compliance document
with an expiry date (current / expiring_soon / expired). Reports and
calendars never read this column; they derive status from the expiry date
on every request. The stored value serves list views and external
consumers.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Iterator

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.config import SchedulerSettings, get_scheduler_settings
from app.services.compliance_document_service import get_compliance_document_service

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------


@contextmanager
def _session_scope(session_factory: sessionmaker[Session] | None = None) -> Iterator[Session]:
    """Yield a fresh session and ensure it is closed on exit."""
    if session_factory is None:
        from db.session import get_session_factory

        session_factory = get_session_factory()
    session: Session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Job: Document status refresh
# ---------------------------------------------------------------------------


def run_document_status_refresh(
    session_factory: sessionmaker[Session] | None = None,
    today: date | None = None,
) -> int:
    """
    Recompute stored document statuses from expiry dates and commit once.

    Returns the number of documents whose status changed.
    """
    logger.info("Scheduler: document_status_refresh starting")
    today = today or datetime.now(tz=timezone.utc).date()
    service = get_compliance_document_service()

    with _session_scope(session_factory) as db:
        try:
            changed = service.refresh_statuses(db, today=today)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Scheduler: document_status_refresh failed")
            raise

    logger.info(
        "Scheduler: document_status_refresh complete date=%s changed=%d",
        today.isoformat(),
        changed,
    )
    return changed


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler(settings: SchedulerSettings | None = None) -> BackgroundScheduler:
    """
    Build and register all periodic jobs.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """
    settings = settings or get_scheduler_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        run_document_status_refresh,
        trigger="cron",
        hour=settings.document_refresh_hour,
        minute=settings.document_refresh_minute,
        id="document_status_refresh",
        name="Daily compliance document status refresh",
        replace_existing=True,
        misfire_grace_time=3600,
        coalesce=True,
    )

    return scheduler
