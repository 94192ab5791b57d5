"""
app/schemas package marker.
"""

from app.schemas.compliance import (
    BulkScheduleRequestBody,
    BulkScheduleResponse,
    ComplianceDocumentResponse,
    ComplianceReportResponse,
    DocumentCalendarResponse,
    InspectionResponse,
    InspectionTemplateResponse,
)

__all__ = [
    "BulkScheduleRequestBody",
    "BulkScheduleResponse",
    "ComplianceDocumentResponse",
    "ComplianceReportResponse",
    "DocumentCalendarResponse",
    "InspectionResponse",
    "InspectionTemplateResponse",
]
