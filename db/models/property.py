"""
db/models/property.py

Property model: a single lettable building or unit group. Optionally
grouped into a block.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.block import Block
    from db.models.organization import Organization


class Property(Base, TimestampMixin):
    __tablename__ = "properties"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )

    block_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("blocks.id", ondelete="SET NULL"),
        nullable=True,
        comment="Optional grouping; properties can exist outside any block",
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    address: Mapped[str] = mapped_column(Text, nullable=False)

    # ── Relationships ──────────────────────────────────────────────────────────

    organization: Mapped["Organization"] = relationship(
        "Organization",
        back_populates="properties",
    )

    block: Mapped["Block | None"] = relationship(
        "Block",
        back_populates="properties",
    )

    __table_args__ = (
        Index("ix_properties_organization_id", "organization_id"),
        Index("ix_properties_block_id", "block_id"),
    )

    def __repr__(self) -> str:
        return f"<Property id={self.id} name={self.name!r} block_id={self.block_id}>"
