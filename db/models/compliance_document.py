"""
db/models/compliance_document.py

Compliance document metadata. The file itself lives in external object
storage; only its URL is recorded here.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin
from db.models.enums import StoredDocumentStatus


class ComplianceDocument(Base, TimestampMixin):
    """
    One uploaded certificate, licence or policy.

    Several rows may share a ``document_type`` for the same entity; the one
    with the greatest ``created_at`` is authoritative and the rest are
    history. ``status`` is a denormalised snapshot maintained by the nightly
    refresh job; the calendar projection always recomputes from
    ``expiry_date``.
    """

    __tablename__ = "compliance_documents"

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
    property_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="SET NULL"),
        nullable=True,
    )
    block_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("blocks.id", ondelete="SET NULL"),
        nullable=True,
    )
    document_type: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Free-form, e.g. 'Gas Safety Certificate'",
    )
    document_url: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    expiry_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
        comment="NULL means the document never expires",
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=StoredDocumentStatus.CURRENT.value,
    )

    __table_args__ = (
        Index("ix_compliance_documents_organization_id", "organization_id"),
        Index("ix_compliance_documents_property_type", "property_id", "document_type"),
        Index("ix_compliance_documents_block_type", "block_id", "document_type"),
        Index("ix_compliance_documents_expiry_date", "expiry_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<ComplianceDocument id={self.id} type={self.document_type!r} "
            f"expiry_date={self.expiry_date}>"
        )
