"""
app/services/bulk_scheduler.py

Bulk Scheduler and direct inspection scheduling.

Write path
----------
Every call runs inside one transaction opened from the session factory:

    1. validate the request shape          (no database access)
    2. lock the target entity row          (SELECT ... FOR UPDATE)
    3. load and check the templates
    4. re-read existing instances          (bulk path only: collision check)
    5. insert the new instances

Concurrent schedules for the same entity serialize on the row lock taken in
step 2, so step 4 always sees rows committed by the call that held the lock
before. Any error raised inside the transaction rolls it back; nothing is
retried.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.config import get_compliance_settings
from app.domain.compliance import MONTH_LABELS, BulkScheduleRequest, BulkScheduleResult
from app.errors import (
    ErrorDetail,
    NotFoundError,
    PersistenceError,
    ScheduleConflictError,
    ScheduleValidationError,
)
from app.validators.schedule_validator import ScheduleValidator
from db.models.block import Block
from db.models.enums import EntityType
from db.models.inspection import Inspection
from db.models.property import Property
from db.repositories.entity_repository import EntityRepository
from db.repositories.inspection_repository import InspectionRepository
from db.repositories.template_repository import TemplateRepository
from db.repositories.types import InspectionCreate

logger = logging.getLogger(__name__)


class BulkScheduler:
    """
    Creates one inspection per selected (template, month) cell, all or
    nothing.
    """

    def __init__(
        self,
        *,
        validator: ScheduleValidator,
        session_factory: sessionmaker[Session] | None = None,
    ) -> None:
        if session_factory is None:
            from db.session import get_session_factory

            session_factory = get_session_factory()
        self._session_factory = session_factory
        self._validator = validator

    def schedule(self, request: BulkScheduleRequest) -> BulkScheduleResult:
        """
        Validate and persist a bulk schedule.

        Raises
        ------
        ScheduleValidationError
            Malformed request, inactive template or scope mismatch.
        NotFoundError
            Unknown entity or template.
        ScheduleConflictError
            A selected cell already holds an inspection.
        PersistenceError
            The database rejected the write.
        """

        try:
            self._validator.validate_request(request)
        except ScheduleValidationError as exc:
            _log_rejection("bulk", request.entity_type, request.entity_id, exc)
            raise

        template_ids = [selection.template_id for selection in request.selections]

        try:
            with self._session_factory() as session:
                with session.begin():
                    entity = _lock_target(session, request.entity_type, request.entity_id)

                    templates = TemplateRepository(session).get_templates(template_ids)
                    self._validator.validate_templates(
                        template_ids=template_ids,
                        templates=templates,
                        entity_type=request.entity_type,
                        organization_id=entity.organization_id,
                    )

                    inspections = InspectionRepository(session)
                    occupied = inspections.occupied_months(
                        entity_type=request.entity_type,
                        entity_id=request.entity_id,
                        year=request.year,
                        template_ids=template_ids,
                    )
                    collisions = [
                        selection for selection in request.selections if selection.key in occupied
                    ]
                    if collisions:
                        raise ScheduleConflictError(
                            f"{len(collisions)} selected month(s) already have inspections.",
                            errors=[
                                ErrorDetail(
                                    code="month_already_scheduled",
                                    message=(
                                        f"{MONTH_LABELS[selection.month_index]} {request.year} "
                                        "already has an inspection for this template."
                                    ),
                                    field="selections",
                                    context={
                                        "template_id": str(selection.template_id),
                                        "month_index": selection.month_index,
                                    },
                                )
                                for selection in collisions
                            ],
                        )

                    records = [
                        InspectionCreate(
                            template_id=selection.template_id,
                            entity_type=request.entity_type,
                            entity_id=request.entity_id,
                            scheduled_date=date(
                                request.year,
                                selection.month_index + 1,
                                selection.day or 1,
                            ),
                            inspection_type=request.inspection_type,
                        )
                        for selection in request.selections
                    ]
                    created_ids = inspections.bulk_create_inspections(records)
        except (NotFoundError, ScheduleValidationError, ScheduleConflictError) as exc:
            _log_rejection("bulk", request.entity_type, request.entity_id, exc)
            raise
        except SQLAlchemyError as exc:
            logger.exception(
                "Bulk schedule persistence failed entity_type=%s entity_id=%s year=%d",
                request.entity_type.value,
                request.entity_id,
                request.year,
            )
            raise PersistenceError("Failed to persist scheduled inspections.") from exc

        logger.info(
            "Bulk schedule created entity_type=%s entity_id=%s year=%d count=%d",
            request.entity_type.value,
            request.entity_id,
            request.year,
            len(created_ids),
        )
        return BulkScheduleResult(
            entity_type=request.entity_type,
            entity_id=request.entity_id,
            year=request.year,
            created_count=len(created_ids),
            inspection_ids=tuple(created_ids),
        )


class InspectionScheduler:
    """
    Schedules a single inspection on an explicit date.

    Unlike :class:`BulkScheduler` an occupied month is allowed.
    """

    def __init__(
        self,
        *,
        validator: ScheduleValidator,
        session_factory: sessionmaker[Session] | None = None,
    ) -> None:
        if session_factory is None:
            from db.session import get_session_factory

            session_factory = get_session_factory()
        self._session_factory = session_factory
        self._validator = validator

    def schedule_one(
        self,
        *,
        entity_type: EntityType,
        entity_id: uuid.UUID,
        template_id: uuid.UUID,
        scheduled_date: date,
        inspection_type: str,
        notes: str | None = None,
    ) -> Inspection:
        try:
            self._validator.validate_single(
                scheduled_date=scheduled_date,
                inspection_type=inspection_type,
            )
            with self._session_factory() as session:
                with session.begin():
                    entity = _lock_target(session, entity_type, entity_id)
                    templates = TemplateRepository(session).get_templates([template_id])
                    self._validator.validate_templates(
                        template_ids=[template_id],
                        templates=templates,
                        entity_type=entity_type,
                        organization_id=entity.organization_id,
                    )
                    inspection = InspectionRepository(session).create_inspection(
                        InspectionCreate(
                            template_id=template_id,
                            entity_type=entity_type,
                            entity_id=entity_id,
                            scheduled_date=scheduled_date,
                            inspection_type=inspection_type,
                            notes=notes,
                        )
                    )
                    session.refresh(inspection)
        except (NotFoundError, ScheduleValidationError) as exc:
            _log_rejection("direct", entity_type, entity_id, exc)
            raise
        except SQLAlchemyError as exc:
            logger.exception(
                "Inspection persistence failed entity_type=%s entity_id=%s",
                entity_type.value,
                entity_id,
            )
            raise PersistenceError("Failed to persist inspection.") from exc

        logger.info(
            "Inspection scheduled id=%s entity_type=%s entity_id=%s date=%s",
            inspection.id,
            entity_type.value,
            entity_id,
            scheduled_date.isoformat(),
        )
        return inspection


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _lock_target(session: Session, entity_type: EntityType, entity_id: uuid.UUID) -> Property | Block:
    entity = EntityRepository(session).lock_entity(entity_type, entity_id)
    if entity is None:
        raise NotFoundError(entity_type.value, entity_id)
    return entity


def _log_rejection(path: str, entity_type: EntityType, entity_id: uuid.UUID, exc: Exception) -> None:
    logger.warning(
        "Schedule rejected path=%s entity_type=%s entity_id=%s reason=%s",
        path,
        entity_type.value,
        entity_id,
        exc,
    )


def build_schedule_validator() -> ScheduleValidator:
    settings = get_compliance_settings()
    return ScheduleValidator(
        max_selections=settings.bulk_max_selections,
        min_year=settings.min_year,
        max_year=settings.max_year,
    )


@lru_cache(maxsize=1)
def get_bulk_scheduler() -> BulkScheduler:
    """
    Build and cache the bulk scheduler bound to the shared session factory.
    """
    return BulkScheduler(validator=build_schedule_validator())


@lru_cache(maxsize=1)
def get_inspection_scheduler() -> InspectionScheduler:
    return InspectionScheduler(validator=build_schedule_validator())
