"""
db/models/enums.py

Closed value sets persisted as strings.

Columns store ``.value``; read paths convert back with ``Enum(value)`` so an
unknown database value fails loudly instead of flowing through as text.
"""

from __future__ import annotations

from enum import Enum


class EntityType(str, Enum):
    """Scheduling target of templates, inspections and documents."""

    PROPERTY = "property"
    BLOCK = "block"


class InspectionStatus(str, Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class InspectionType(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    ROUTINE = "routine"
    MAINTENANCE = "maintenance"
    ESG_SUSTAINABILITY_INSPECTION = "esg_sustainability_inspection"
    FIRE_HAZARD_ASSESSMENT = "fire_hazard_assessment"
    MAINTENANCE_INSPECTION = "maintenance_inspection"
    DAMAGE = "damage"
    EMERGENCY = "emergency"
    SAFETY_COMPLIANCE = "safety_compliance"
    COMPLIANCE_REGULATORY = "compliance_regulatory"
    PRE_PURCHASE = "pre_purchase"
    SPECIALIZED = "specialized"


class StoredDocumentStatus(str, Enum):
    """Persisted document status, rewritten nightly from the expiry date."""

    CURRENT = "current"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"
