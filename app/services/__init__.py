"""
app/services package marker.
"""

from app.services.bulk_scheduler import (
    BulkScheduler,
    InspectionScheduler,
    get_bulk_scheduler,
    get_inspection_scheduler,
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
from app.services.template_service import (
    InspectionTemplateService,
    get_inspection_template_service,
)

__all__ = [
    "BulkScheduler",
    "InspectionScheduler",
    "get_bulk_scheduler",
    "get_inspection_scheduler",
    "ComplianceDocumentService",
    "get_compliance_document_service",
    "ComplianceReportService",
    "get_compliance_report_service",
    "DocumentCalendarService",
    "get_document_calendar_service",
    "InspectionTemplateService",
    "get_inspection_template_service",
]
