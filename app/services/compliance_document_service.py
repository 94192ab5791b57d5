"""
app/services/compliance_document_service.py

Compliance document metadata: registration, listing, expiry lookups and
the nightly status refresh.

Files themselves live in external storage; only ``document_url`` is kept.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_compliance_settings
from app.errors import DocumentValidationError, ErrorDetail, NotFoundError, PersistenceError
from app.services.document_projector import stored_status
from db.models.compliance_document import ComplianceDocument
from db.models.enums import EntityType
from db.repositories.document_repository import DocumentRepository
from db.repositories.entity_repository import EntityRepository
from db.repositories.types import DocumentCreate

logger = logging.getLogger(__name__)


class ComplianceDocumentService:
    def __init__(self, *, expiring_days_ahead: int = 90) -> None:
        self._expiring_days_ahead = expiring_days_ahead

    def create_document(
        self,
        db: Session,
        record: DocumentCreate,
        *,
        today: date | None = None,
    ) -> ComplianceDocument:
        """
        Persist document metadata and commit.

        The stored status is derived from the expiry date immediately so
        the row is correct before the next nightly refresh.
        """

        today = today or _utc_today()
        entities = EntityRepository(db)

        if entities.get_organization(record.organization_id) is None:
            raise NotFoundError("organization", record.organization_id)

        if record.entity_type is not None:
            if record.entity_id is None:
                raise DocumentValidationError(
                    "entity_id is required when entity_type is set.",
                    errors=[
                        ErrorDetail(
                            code="entity_id_required",
                            message="entity_id is required when entity_type is set.",
                            field="entity_id",
                        )
                    ],
                )
            entity = entities.get_entity(record.entity_type, record.entity_id)
            if entity is None:
                raise NotFoundError(record.entity_type.value, record.entity_id)
            if entity.organization_id != record.organization_id:
                raise DocumentValidationError(
                    "Entity belongs to another organization.",
                    errors=[
                        ErrorDetail(
                            code="organization_mismatch",
                            message="The entity does not belong to the given organization.",
                            field="entity_id",
                            context={
                                "entity_id": str(record.entity_id),
                                "organization_id": str(record.organization_id),
                            },
                        )
                    ],
                )

        try:
            document = DocumentRepository(db).create_document(
                record,
                status=stored_status(record.expiry_date, today),
            )
            db.commit()
            db.refresh(document)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception(
                "Document persistence failed organization_id=%s type=%r",
                record.organization_id,
                record.document_type,
            )
            raise PersistenceError("Failed to persist compliance document.") from exc

        logger.info(
            "Compliance document created id=%s type=%r expiry=%s status=%s",
            document.id,
            document.document_type,
            document.expiry_date,
            document.status,
        )
        return document

    def list_documents(
        self,
        db: Session,
        *,
        entity_type: EntityType,
        entity_id: uuid.UUID,
    ) -> list[ComplianceDocument]:
        try:
            if EntityRepository(db).get_entity(entity_type, entity_id) is None:
                raise NotFoundError(entity_type.value, entity_id)
            return DocumentRepository(db).list_for_entity(entity_type=entity_type, entity_id=entity_id)
        except SQLAlchemyError as exc:
            logger.exception("Document listing failed entity_id=%s", entity_id)
            raise PersistenceError("Failed to load compliance documents.") from exc

    def list_expiring(
        self,
        db: Session,
        *,
        organization_id: uuid.UUID,
        days_ahead: int | None = None,
        today: date | None = None,
    ) -> list[ComplianceDocument]:
        """
        Documents of one organization expiring within ``days_ahead`` days,
        already-expired ones included.
        """

        try:
            return DocumentRepository(db).list_expiring(
                organization_id=organization_id,
                days_ahead=self._expiring_days_ahead if days_ahead is None else days_ahead,
                today=today or _utc_today(),
            )
        except SQLAlchemyError as exc:
            logger.exception("Expiring document lookup failed organization_id=%s", organization_id)
            raise PersistenceError("Failed to load expiring documents.") from exc

    def refresh_statuses(self, db: Session, *, today: date | None = None) -> int:
        """
        Rewrite the stored status of every document with an expiry date.

        Does not commit. Returns the number of rows whose status changed.
        """

        today = today or _utc_today()
        changed = 0
        for document in DocumentRepository(db).list_with_expiry():
            status = stored_status(document.expiry_date, today).value
            if document.status != status:
                document.status = status
                changed += 1
        db.flush()
        return changed


def _utc_today() -> date:
    return datetime.now(tz=timezone.utc).date()


@lru_cache(maxsize=1)
def get_compliance_document_service() -> ComplianceDocumentService:
    settings = get_compliance_settings()
    return ComplianceDocumentService(expiring_days_ahead=settings.expiring_days_ahead)
