"""
app/domain/compliance.py

Value objects for the compliance calendar, document projection and
scheduling flows.

None of these are persisted. Reports and projections are recomputed on
every request because their content depends on "today".
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from db.models.enums import EntityType, InspectionStatus, InspectionType

MONTH_LABELS: tuple[str, ...] = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


class MonthStatus(str, Enum):
    """Resolved status of one template/month cell."""

    COMPLETED = "completed"
    OVERDUE = "overdue"
    DUE = "due"
    SCHEDULED = "scheduled"
    NOT_SCHEDULED = "not_scheduled"


class DocumentStatus(str, Enum):
    """Validity of a document, overall or for one projected month."""

    VALID = "valid"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"
    NO_EXPIRY = "no_expiry"


# ---------------------------------------------------------------------------
# Inspection calendar
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InspectionSnapshot:
    """
    Read-only view of one inspection row, detached from the session.
    """

    id: uuid.UUID
    template_id: uuid.UUID
    scheduled_date: date
    status: InspectionStatus

    @property
    def is_completed(self) -> bool:
        return self.status is InspectionStatus.COMPLETED


@dataclass(frozen=True)
class MonthBucket:
    """
    Inspections of one template whose scheduled date falls in one month.

    ``overdue_count`` is relative to the ``today`` the bucket was built
    with.
    """

    month_index: int
    instances: tuple[InspectionSnapshot, ...] = ()
    count: int = 0
    completed_count: int = 0
    overdue_count: int = 0


@dataclass(frozen=True)
class MonthCell:
    month_index: int
    month: str
    status: MonthStatus
    count: int
    completed_count: int
    overdue_count: int
    schedulable: bool


@dataclass(frozen=True)
class TemplateCompliance:
    template_id: uuid.UUID
    template_name: str
    month_cells: tuple[MonthCell, ...]
    compliance_rate: int
    total_scheduled: int
    total_completed: int

    @property
    def scheduled_months(self) -> int:
        return sum(1 for cell in self.month_cells if cell.status is not MonthStatus.NOT_SCHEDULED)

    @property
    def completed_months(self) -> int:
        return sum(1 for cell in self.month_cells if cell.status is MonthStatus.COMPLETED)


@dataclass(frozen=True)
class ComplianceReport:
    entity_type: EntityType
    entity_id: uuid.UUID
    year: int
    templates: tuple[TemplateCompliance, ...]
    overall_compliance_rate: int
    total_scheduled: int
    total_completed: int
    months: tuple[str, ...] = MONTH_LABELS


# ---------------------------------------------------------------------------
# Document projection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DocumentSnapshot:
    """
    Read-only view of one compliance document row.
    """

    id: uuid.UUID
    document_type: str
    expiry_date: date | None
    created_at: datetime


@dataclass(frozen=True)
class DocumentMonth:
    month_index: int
    month: str
    status: DocumentStatus
    has_document: bool


@dataclass(frozen=True)
class DocumentTypeProjection:
    document_type: str
    status: DocumentStatus
    expiry_date: date | None
    document_id: uuid.UUID | None
    document_count: int
    months: tuple[DocumentMonth, ...]

    @property
    def is_missing(self) -> bool:
        return self.document_count == 0


@dataclass(frozen=True)
class DocumentCalendar:
    entity_type: EntityType
    entity_id: uuid.UUID
    year: int
    document_count: int
    rows: tuple[DocumentTypeProjection, ...]
    valid_count: int
    expiring_count: int
    expired_count: int
    missing_count: int
    overall_compliance_rate: int
    months: tuple[str, ...] = MONTH_LABELS


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PendingSelection:
    """
    One empty calendar cell the caller wants an inspection for.

    Identity is the ``(template_id, month_index)`` pair; ``day`` overrides
    the first-of-month convention.
    """

    template_id: uuid.UUID
    month_index: int
    day: int | None = None

    @property
    def key(self) -> tuple[uuid.UUID, int]:
        return (self.template_id, self.month_index)


@dataclass(frozen=True)
class BulkScheduleRequest:
    entity_type: EntityType
    entity_id: uuid.UUID
    year: int
    selections: tuple[PendingSelection, ...]
    inspection_type: str = InspectionType.ROUTINE.value


@dataclass(frozen=True)
class BulkScheduleResult:
    """
    Outcome of a committed bulk schedule.

    The report for ``(entity_type, entity_id, year)`` is stale once this is
    returned and must be recomputed, not patched.
    """

    entity_type: EntityType
    entity_id: uuid.UUID
    year: int
    created_count: int
    inspection_ids: tuple[uuid.UUID, ...] = field(default_factory=tuple)
