"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.block import Block
from db.models.compliance_document import ComplianceDocument
from db.models.enums import EntityType, InspectionStatus, InspectionType, StoredDocumentStatus
from db.models.inspection import Inspection
from db.models.inspection_template import InspectionTemplate
from db.models.organization import Organization
from db.models.property import Property

__all__ = [
    "Block",
    "ComplianceDocument",
    "EntityType",
    "Inspection",
    "InspectionStatus",
    "InspectionTemplate",
    "InspectionType",
    "Organization",
    "Property",
    "StoredDocumentStatus",
]
