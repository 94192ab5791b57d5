"""
app/api/routers/compliance_router.py

Compliance report, document calendar and document endpoints.

Reports and calendars are recomputed on every request; nothing is cached.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import (
    AccessGate,
    entity_access,
    get_access_gate,
    require_entity_access,
    require_organization_access,
    resolve_year,
    to_http_exception,
)
from app.domain.compliance import DocumentCalendar
from app.errors import ComplianceError
from app.schemas.compliance import (
    ComplianceDocumentCreateRequest,
    ComplianceDocumentResponse,
    ComplianceReportResponse,
    DocumentCalendarResponse,
    DocumentMonthResponse,
    DocumentTypeRowResponse,
)
from app.services.compliance_document_service import (
    ComplianceDocumentService,
    get_compliance_document_service,
)
from app.services.compliance_report_service import (
    ComplianceReportService,
    get_compliance_report_service,
)
from app.services.document_calendar_service import (
    DocumentCalendarService,
    get_document_calendar_service,
)
from db.models.enums import EntityType
from db.repositories.types import DocumentCreate
from db.session import get_db

router = APIRouter(prefix="/compliance", tags=["compliance"])


@router.get(
    "/documents/expiring",
    response_model=list[ComplianceDocumentResponse],
)
def list_expiring_documents(
    organization_id: uuid.UUID = Query(...),
    days: int | None = Query(default=None, ge=0, le=3650, description="Look-ahead window in days"),
    db: Session = Depends(get_db),
    gate: AccessGate = Depends(get_access_gate),
    document_service: ComplianceDocumentService = Depends(get_compliance_document_service),
) -> list[ComplianceDocumentResponse]:
    """
    Documents expiring within ``days`` (already-expired included), soonest
    first.
    """

    require_organization_access(organization_id, gate)

    try:
        documents = document_service.list_expiring(
            db,
            organization_id=organization_id,
            days_ahead=days,
        )
    except ComplianceError as exc:
        raise to_http_exception(exc) from exc
    return [ComplianceDocumentResponse.model_validate(document) for document in documents]


@router.post(
    "/documents",
    response_model=ComplianceDocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_document(
    body: ComplianceDocumentCreateRequest,
    db: Session = Depends(get_db),
    gate: AccessGate = Depends(get_access_gate),
    document_service: ComplianceDocumentService = Depends(get_compliance_document_service),
) -> ComplianceDocumentResponse:
    """
    Register metadata for a document whose file is already stored.
    """

    require_organization_access(body.organization_id, gate)
    if body.entity_type is not None and body.entity_id is not None:
        require_entity_access(body.entity_type, body.entity_id, gate)

    try:
        document = document_service.create_document(
            db,
            DocumentCreate(
                organization_id=body.organization_id,
                document_type=body.document_type.strip(),
                document_url=body.document_url,
                entity_type=body.entity_type,
                entity_id=body.entity_id,
                expiry_date=body.expiry_date,
            ),
        )
    except ComplianceError as exc:
        raise to_http_exception(exc) from exc
    return ComplianceDocumentResponse.model_validate(document)


@router.get(
    "/{entity_type}/{entity_id}/report",
    response_model=ComplianceReportResponse,
    dependencies=[Depends(entity_access)],
)
def get_compliance_report(
    entity_type: EntityType,
    entity_id: uuid.UUID,
    year: int = Depends(resolve_year),
    db: Session = Depends(get_db),
    report_service: ComplianceReportService = Depends(get_compliance_report_service),
) -> ComplianceReportResponse:
    """
    Per-template, per-month inspection compliance for one entity and year.

    An entity without templates yields an empty report, not an error.
    """

    try:
        report = report_service.build_report(
            db,
            entity_type=entity_type,
            entity_id=entity_id,
            year=year,
        )
    except ComplianceError as exc:
        raise to_http_exception(exc) from exc
    return ComplianceReportResponse.model_validate(report)


@router.get(
    "/{entity_type}/{entity_id}/documents",
    response_model=list[ComplianceDocumentResponse],
    dependencies=[Depends(entity_access)],
)
def list_entity_documents(
    entity_type: EntityType,
    entity_id: uuid.UUID,
    db: Session = Depends(get_db),
    document_service: ComplianceDocumentService = Depends(get_compliance_document_service),
) -> list[ComplianceDocumentResponse]:
    try:
        documents = document_service.list_documents(db, entity_type=entity_type, entity_id=entity_id)
    except ComplianceError as exc:
        raise to_http_exception(exc) from exc
    return [ComplianceDocumentResponse.model_validate(document) for document in documents]


@router.get(
    "/{entity_type}/{entity_id}/document-calendar",
    response_model=DocumentCalendarResponse,
    dependencies=[Depends(entity_access)],
)
def get_document_calendar(
    entity_type: EntityType,
    entity_id: uuid.UUID,
    year: int = Depends(resolve_year),
    db: Session = Depends(get_db),
    calendar_service: DocumentCalendarService = Depends(get_document_calendar_service),
) -> DocumentCalendarResponse:
    """
    Month-by-month document validity for one entity and year.
    """

    try:
        calendar = calendar_service.build_calendar(
            db,
            entity_type=entity_type,
            entity_id=entity_id,
            year=year,
        )
    except ComplianceError as exc:
        raise to_http_exception(exc) from exc
    return _calendar_response(calendar)


def _calendar_response(calendar: DocumentCalendar) -> DocumentCalendarResponse:
    return DocumentCalendarResponse(
        entity_type=calendar.entity_type,
        entity_id=calendar.entity_id,
        year=calendar.year,
        months=list(calendar.months),
        document_count=calendar.document_count,
        rows=[
            DocumentTypeRowResponse(
                document_type=row.document_type,
                status="missing" if row.is_missing else row.status.value,
                expiry_date=row.expiry_date,
                document_id=row.document_id,
                document_count=row.document_count,
                months=[DocumentMonthResponse.model_validate(month) for month in row.months],
            )
            for row in calendar.rows
        ],
        valid_count=calendar.valid_count,
        expiring_count=calendar.expiring_count,
        expired_count=calendar.expired_count,
        missing_count=calendar.missing_count,
        overall_compliance_rate=calendar.overall_compliance_rate,
    )
