"""
Repository layer exports.
"""

from db.repositories.document_repository import DocumentRepository
from db.repositories.entity_repository import EntityRepository
from db.repositories.inspection_repository import InspectionRepository
from db.repositories.template_repository import TemplateRepository
from db.repositories.types import DocumentCreate, InspectionCreate

__all__ = [
    "DocumentRepository",
    "EntityRepository",
    "InspectionRepository",
    "TemplateRepository",
    "DocumentCreate",
    "InspectionCreate",
]
