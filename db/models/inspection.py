"""
db/models/inspection.py

Inspection instance: one scheduled occurrence of a template against
exactly one property or block.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin
from db.models.enums import EntityType, InspectionStatus


class Inspection(Base, TimestampMixin):
    """
    ``property_id`` and ``block_id`` are mutually exclusive; the check
    constraint rejects rows with both or neither.

    The calendar report reads these rows but never writes them. Status
    transitions after creation are owned by the inspection workflow.
    """

    __tablename__ = "inspections"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    template_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("inspection_templates.id", ondelete="RESTRICT"),
        nullable=False,
    )
    property_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=True,
    )
    block_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("blocks.id", ondelete="CASCADE"),
        nullable=True,
    )
    type: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=InspectionStatus.SCHEDULED.value,
        comment="draft, scheduled, in_progress, completed",
    )
    scheduled_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )
    completed_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint(
            "(property_id IS NULL) <> (block_id IS NULL)",
            name="ck_inspections_single_target",
        ),
        Index("ix_inspections_template_id", "template_id"),
        Index("ix_inspections_property_scheduled", "property_id", "scheduled_date"),
        Index("ix_inspections_block_scheduled", "block_id", "scheduled_date"),
        Index("ix_inspections_status", "status"),
    )

    @property
    def entity_type(self) -> EntityType:
        return EntityType.PROPERTY if self.property_id is not None else EntityType.BLOCK

    @property
    def entity_id(self) -> uuid.UUID:
        return self.property_id if self.property_id is not None else self.block_id  # type: ignore[return-value]

    def __repr__(self) -> str:
        return (
            f"<Inspection id={self.id} template_id={self.template_id} "
            f"scheduled_date={self.scheduled_date} status={self.status!r}>"
        )
