"""
db/models/inspection_template.py

Recurring inspection template. One row of the compliance calendar.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin
from db.models.enums import EntityType


class InspectionTemplate(Base, TimestampMixin):
    """
    A recurring inspection requirement (e.g. "Fire alarm test").

    ``scope`` decides which entity kind the template applies to and never
    changes after creation. Templates are soft-disabled through
    ``is_active``; rows referenced by inspections are never deleted.
    """

    __tablename__ = "inspection_templates"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    scope: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=EntityType.PROPERTY.value,
        comment="property or block",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    __table_args__ = (
        CheckConstraint("scope IN ('property', 'block')", name="ck_inspection_templates_scope"),
        Index("ix_inspection_templates_organization_id", "organization_id"),
        Index("ix_inspection_templates_scope_active", "scope", "is_active"),
    )

    def __repr__(self) -> str:
        return (
            f"<InspectionTemplate id={self.id} name={self.name!r} "
            f"scope={self.scope!r} active={self.is_active}>"
        )
