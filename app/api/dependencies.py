"""
app/api/dependencies.py

Shared FastAPI dependencies: access gate, year resolution and error
mapping.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Protocol

from fastapi import Depends, HTTPException, Query, status

from app.config import ComplianceSettings, get_compliance_settings
from app.errors import (
    ComplianceError,
    ComputationError,
    DocumentValidationError,
    ErrorDetail,
    NotFoundError,
    PersistenceError,
    ScheduleConflictError,
    ScheduleValidationError,
)
from db.models.enums import EntityType

logger = logging.getLogger(__name__)


class AccessGate(Protocol):
    """
    Pass/fail authorization hook for entity-scoped routes.

    Deployments override :func:`get_access_gate` with their own policy.
    """

    def allows(self, entity_type: EntityType, entity_id: uuid.UUID) -> bool: ...

    def allows_organization(self, organization_id: uuid.UUID) -> bool: ...


class AllowAllGate:
    def allows(self, entity_type: EntityType, entity_id: uuid.UUID) -> bool:
        return True

    def allows_organization(self, organization_id: uuid.UUID) -> bool:
        return True


def get_access_gate() -> AccessGate:
    return AllowAllGate()


def require_entity_access(
    entity_type: EntityType,
    entity_id: uuid.UUID,
    gate: AccessGate,
) -> None:
    """
    Raise HTTP 403 when the gate rejects the entity.
    """

    if not gate.allows(entity_type, entity_id):
        logger.warning("Access denied entity_type=%s entity_id=%s", entity_type.value, entity_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access to this entity is not permitted.",
        )


def require_organization_access(organization_id: uuid.UUID, gate: AccessGate) -> None:
    """
    Raise HTTP 403 when the gate rejects an organization-wide read or write.
    """

    if not gate.allows_organization(organization_id):
        logger.warning("Access denied organization_id=%s", organization_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access to this organization is not permitted.",
        )


def entity_access(
    entity_type: EntityType,
    entity_id: uuid.UUID,
    gate: AccessGate = Depends(get_access_gate),
) -> None:
    """
    Route dependency for paths carrying ``{entity_type}/{entity_id}``.
    """

    require_entity_access(entity_type, entity_id, gate)


def resolve_year(
    year: int | None = Query(default=None, description="Calendar year; defaults to the current UTC year"),
    settings: ComplianceSettings = Depends(get_compliance_settings),
) -> int:
    """
    Resolve the requested year and reject one outside the supported range
    with HTTP 422.
    """

    if year is None:
        return datetime.now(tz=timezone.utc).year
    if not settings.min_year <= year <= settings.max_year:
        detail = ErrorDetail(
            code="year_out_of_range",
            message=f"Year must be between {settings.min_year} and {settings.max_year}.",
            field="year",
            context={"year": year},
        )
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Year is out of range.", "errors": [detail.to_dict()]},
        )
    return year


def to_http_exception(exc: ComplianceError) -> HTTPException:
    """
    Map a compliance error to its HTTP response.

    Internal failures are logged here and answered without internals.
    """

    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.to_dict())
    if isinstance(exc, (ScheduleValidationError, DocumentValidationError)):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.to_dict())
    if isinstance(exc, ScheduleConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.to_dict())
    if isinstance(exc, ComputationError):
        logger.exception("Compliance computation failed: %s", exc.to_dict())
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to compute compliance data.",
        )
    if not isinstance(exc, PersistenceError):
        logger.exception("Unmapped compliance error: %s", exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Unable to read or write compliance data.",
    )
