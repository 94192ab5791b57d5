"""
db/models/organization.py

Organization model: root tenant owning blocks, properties, inspection
templates and compliance documents.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.block import Block
    from db.models.property import Property


class Organization(Base, TimestampMixin):
    """
    A property-management company using the compliance engine.
    """

    __tablename__ = "organizations"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Soft-disable an organization without deletion",
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    blocks: Mapped[list["Block"]] = relationship(
        "Block",
        back_populates="organization",
        passive_deletes=True,
    )

    properties: Mapped[list["Property"]] = relationship(
        "Property",
        back_populates="organization",
        passive_deletes=True,
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        Index("ix_organizations_is_active", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Organization id={self.id} name={self.name!r}>"
