"""
app/domain package marker.
"""

from app.domain.compliance import (
    BulkScheduleRequest,
    BulkScheduleResult,
    ComplianceReport,
    DocumentCalendar,
    DocumentStatus,
    MonthStatus,
    PendingSelection,
)

__all__ = [
    "BulkScheduleRequest",
    "BulkScheduleResult",
    "ComplianceReport",
    "DocumentCalendar",
    "DocumentStatus",
    "MonthStatus",
    "PendingSelection",
]
