"""
db/models/block.py

Block model: a building or complex grouping several properties.
Blocks are scheduling targets in their own right (communal areas, fire
doors, lifts).
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.organization import Organization
    from db.models.property import Property


class Block(Base, TimestampMixin):
    __tablename__ = "blocks"

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

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    address: Mapped[str] = mapped_column(Text, nullable=False)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # ── Relationships ──────────────────────────────────────────────────────────

    organization: Mapped["Organization"] = relationship(
        "Organization",
        back_populates="blocks",
    )

    properties: Mapped[list["Property"]] = relationship(
        "Property",
        back_populates="block",
    )

    __table_args__ = (
        Index("ix_blocks_organization_id", "organization_id"),
    )

    def __repr__(self) -> str:
        return f"<Block id={self.id} name={self.name!r}>"
