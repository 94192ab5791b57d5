"""
app/api/routers/inspection_router.py

Inspection scheduling endpoints: bulk (one inspection per selected empty
calendar cell, all or nothing) and direct single scheduling.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.api.dependencies import AccessGate, get_access_gate, require_entity_access, to_http_exception
from app.domain.compliance import BulkScheduleRequest, PendingSelection
from app.errors import ComplianceError
from app.schemas.compliance import (
    BulkScheduleRequestBody,
    BulkScheduleResponse,
    InspectionCreateRequest,
    InspectionResponse,
)
from app.services.bulk_scheduler import (
    BulkScheduler,
    InspectionScheduler,
    get_bulk_scheduler,
    get_inspection_scheduler,
)

router = APIRouter(prefix="/inspections", tags=["inspections"])


@router.post(
    "/bulk-schedule",
    response_model=BulkScheduleResponse,
    status_code=status.HTTP_201_CREATED,
)
def bulk_schedule(
    body: BulkScheduleRequestBody,
    gate: AccessGate = Depends(get_access_gate),
    scheduler: BulkScheduler = Depends(get_bulk_scheduler),
) -> BulkScheduleResponse:
    """
    Create one inspection per selection in a single transaction.

    Raises HTTP 422 for invalid selections or templates, 404 for unknown
    entities or templates, and 409 when any selected month is already
    scheduled. Nothing is created on any error.
    """

    require_entity_access(body.entity_type, body.entity_id, gate)

    request = BulkScheduleRequest(
        entity_type=body.entity_type,
        entity_id=body.entity_id,
        year=body.year,
        inspection_type=body.type,
        selections=tuple(
            PendingSelection(
                template_id=selection.template_id,
                month_index=selection.month_index,
                day=selection.day,
            )
            for selection in body.selections
        ),
    )

    try:
        result = scheduler.schedule(request)
    except ComplianceError as exc:
        raise to_http_exception(exc) from exc

    return BulkScheduleResponse(
        count=result.created_count,
        inspection_ids=list(result.inspection_ids),
        entity_type=result.entity_type,
        entity_id=result.entity_id,
        year=result.year,
    )


@router.post(
    "",
    response_model=InspectionResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_inspection(
    body: InspectionCreateRequest,
    gate: AccessGate = Depends(get_access_gate),
    scheduler: InspectionScheduler = Depends(get_inspection_scheduler),
) -> InspectionResponse:
    require_entity_access(body.entity_type, body.entity_id, gate)

    try:
        inspection = scheduler.schedule_one(
            entity_type=body.entity_type,
            entity_id=body.entity_id,
            template_id=body.template_id,
            scheduled_date=body.scheduled_date,
            inspection_type=body.type,
            notes=body.notes,
        )
    except ComplianceError as exc:
        raise to_http_exception(exc) from exc
    return InspectionResponse.model_validate(inspection)
