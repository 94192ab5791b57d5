"""
db/repositories/document_repository.py

Persistence layer for compliance document metadata.
"""

from __future__ import annotations

import uuid
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.compliance_document import ComplianceDocument
from db.models.enums import EntityType, StoredDocumentStatus
from db.repositories.types import DocumentCreate


class DocumentRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_for_entity(
        self,
        *,
        entity_type: EntityType,
        entity_id: uuid.UUID,
    ) -> list[ComplianceDocument]:
        """
        Every document attached to one property or block, newest first.
        """

        column = (
            ComplianceDocument.property_id
            if entity_type is EntityType.PROPERTY
            else ComplianceDocument.block_id
        )
        stmt = (
            select(ComplianceDocument)
            .where(column == entity_id)
            .order_by(ComplianceDocument.created_at.desc(), ComplianceDocument.id.desc())
        )
        return list(self._session.scalars(stmt).all())

    def list_expiring(
        self,
        *,
        organization_id: uuid.UUID,
        days_ahead: int,
        today: date,
    ) -> list[ComplianceDocument]:
        """
        Documents expiring on or before ``today + days_ahead``, already-expired
        ones included, soonest first. Documents without expiry never appear.
        """

        until = today + timedelta(days=max(0, days_ahead))

        stmt = (
            select(ComplianceDocument)
            .where(
                ComplianceDocument.organization_id == organization_id,
                ComplianceDocument.expiry_date.is_not(None),
                ComplianceDocument.expiry_date <= until,
            )
            .order_by(ComplianceDocument.expiry_date, ComplianceDocument.id)
        )
        return list(self._session.scalars(stmt).all())

    def list_with_expiry(self) -> list[ComplianceDocument]:
        stmt = (
            select(ComplianceDocument)
            .where(ComplianceDocument.expiry_date.is_not(None))
            .order_by(ComplianceDocument.id)
        )
        return list(self._session.scalars(stmt).all())

    def create_document(
        self,
        record: DocumentCreate,
        *,
        status: StoredDocumentStatus = StoredDocumentStatus.CURRENT,
    ) -> ComplianceDocument:
        document = ComplianceDocument(
            organization_id=record.organization_id,
            property_id=record.entity_id if record.entity_type is EntityType.PROPERTY else None,
            block_id=record.entity_id if record.entity_type is EntityType.BLOCK else None,
            document_type=record.document_type,
            document_url=record.document_url,
            expiry_date=record.expiry_date,
            status=status.value,
        )
        self._session.add(document)
        self._session.flush()
        return document
