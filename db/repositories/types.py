"""
Typed DTOs used by repository write paths.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date

from db.models.enums import EntityType, InspectionStatus


@dataclass(frozen=True)
class InspectionCreate:
    """
    Normalized inspection row used for batched inserts.
    """

    template_id: uuid.UUID
    entity_type: EntityType
    entity_id: uuid.UUID
    scheduled_date: date
    inspection_type: str
    status: str = InspectionStatus.SCHEDULED.value
    notes: str | None = None
    inspection_id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass(frozen=True)
class DocumentCreate:
    """
    Metadata for one compliance document whose file is already stored.
    """

    organization_id: uuid.UUID
    document_type: str
    document_url: str
    entity_type: EntityType | None = None
    entity_id: uuid.UUID | None = None
    expiry_date: date | None = None
