"""
app/schemas/compliance.py

Request and response schemas for compliance, scheduling and template
endpoints.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from app.domain.compliance import DocumentStatus, MonthStatus
from db.models.enums import EntityType, InspectionType

# ---------------------------------------------------------------------------
# Compliance report
# ---------------------------------------------------------------------------


class MonthCellResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month_index: int = Field(..., ge=0, le=11)
    month: str
    status: MonthStatus
    count: int = Field(..., ge=0)
    completed_count: int = Field(..., ge=0)
    overdue_count: int = Field(..., ge=0)
    schedulable: bool


class TemplateComplianceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    template_id: uuid.UUID
    template_name: str
    month_cells: list[MonthCellResponse]
    compliance_rate: int = Field(..., ge=0, le=100)
    total_scheduled: int = Field(..., ge=0)
    total_completed: int = Field(..., ge=0)


class ComplianceReportResponse(BaseModel):
    """
    Per-template, per-month compliance status for one entity and year.
    """

    model_config = ConfigDict(from_attributes=True)

    entity_type: EntityType
    entity_id: uuid.UUID
    year: int
    months: list[str]
    templates: list[TemplateComplianceResponse]
    overall_compliance_rate: int = Field(..., ge=0, le=100)
    total_scheduled: int = Field(..., ge=0)
    total_completed: int = Field(..., ge=0)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class DocumentMonthResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month_index: int = Field(..., ge=0, le=11)
    month: str
    status: DocumentStatus
    has_document: bool


class DocumentTypeRowResponse(BaseModel):
    """
    ``status`` is ``missing`` when no document of this type was uploaded.
    """

    document_type: str
    status: str
    expiry_date: date | None = None
    document_id: uuid.UUID | None = None
    document_count: int = Field(..., ge=0)
    months: list[DocumentMonthResponse]


class DocumentCalendarResponse(BaseModel):
    entity_type: EntityType
    entity_id: uuid.UUID
    year: int
    months: list[str]
    document_count: int = Field(..., ge=0)
    rows: list[DocumentTypeRowResponse]
    valid_count: int = Field(..., ge=0)
    expiring_count: int = Field(..., ge=0)
    expired_count: int = Field(..., ge=0)
    missing_count: int = Field(..., ge=0)
    overall_compliance_rate: int = Field(..., ge=0, le=100)


class ComplianceDocumentCreateRequest(BaseModel):
    organization_id: uuid.UUID
    entity_type: EntityType | None = None
    entity_id: uuid.UUID | None = None
    document_type: str = Field(..., min_length=1, max_length=255)
    document_url: str = Field(..., min_length=1)
    expiry_date: date | None = None


class ComplianceDocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    organization_id: uuid.UUID
    property_id: uuid.UUID | None
    block_id: uuid.UUID | None
    document_type: str
    document_url: str
    expiry_date: date | None
    status: str
    created_at: datetime


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------


class ScheduleSelection(BaseModel):
    template_id: uuid.UUID
    month_index: int
    day: int | None = None


class BulkScheduleRequestBody(BaseModel):
    entity_type: EntityType
    entity_id: uuid.UUID
    year: int
    type: str = InspectionType.ROUTINE.value
    selections: list[ScheduleSelection] = Field(default_factory=list)


class BulkScheduleResponse(BaseModel):
    """
    The report for ``(entity_type, entity_id, year)`` is stale and should be
    refetched.
    """

    count: int = Field(..., ge=0)
    inspection_ids: list[uuid.UUID]
    entity_type: EntityType
    entity_id: uuid.UUID
    year: int


class InspectionCreateRequest(BaseModel):
    entity_type: EntityType
    entity_id: uuid.UUID
    template_id: uuid.UUID
    scheduled_date: date
    type: str = InspectionType.ROUTINE.value
    notes: str | None = None


class InspectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    template_id: uuid.UUID
    property_id: uuid.UUID | None
    block_id: uuid.UUID | None
    type: str
    status: str
    scheduled_date: date
    completed_date: datetime | None
    notes: str | None


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


class InspectionTemplateCreateRequest(BaseModel):
    organization_id: uuid.UUID
    name: str = Field(..., min_length=1, max_length=255)
    scope: EntityType = EntityType.PROPERTY
    description: str | None = None


class InspectionTemplateUpdateRequest(BaseModel):
    """
    Scope is immutable, so it is not accepted here.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    is_active: bool | None = None


class InspectionTemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    organization_id: uuid.UUID
    name: str
    description: str | None
    scope: EntityType
    is_active: bool
    created_at: datetime
