"""
app/services/document_calendar_service.py

Document calendar for one entity and year.

Documents are grouped by type; the latest document of each type is the
only one projected. Configured default document types without any upload
appear as missing rows so gaps are visible.

Row order: default types in configured order, then the remaining types
alphabetically.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import date, datetime, timezone
from functools import lru_cache
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_compliance_settings
from app.domain.compliance import (
    DocumentCalendar,
    DocumentSnapshot,
    DocumentStatus,
    DocumentTypeProjection,
)
from app.errors import NotFoundError, PersistenceError
from app.services.compliance_report_service import begin_snapshot_read
from app.services.document_projector import document_status, project_document, select_latest_document
from app.services.month_status import percentage
from db.models.enums import EntityType
from db.repositories.document_repository import DocumentRepository
from db.repositories.entity_repository import EntityRepository

logger = logging.getLogger(__name__)


class DocumentCalendarService:
    def __init__(self, *, default_document_types: Sequence[str] = ()) -> None:
        self._default_document_types = tuple(default_document_types)

    def build_calendar(
        self,
        db: Session,
        *,
        entity_type: EntityType,
        entity_id: uuid.UUID,
        year: int,
        today: date | None = None,
    ) -> DocumentCalendar:
        today = today or datetime.now(tz=timezone.utc).date()

        try:
            begin_snapshot_read(db)
            if EntityRepository(db).get_entity(entity_type, entity_id) is None:
                raise NotFoundError(entity_type.value, entity_id)
            documents = DocumentRepository(db).list_for_entity(
                entity_type=entity_type,
                entity_id=entity_id,
            )
        except SQLAlchemyError as exc:
            logger.exception(
                "Document calendar read failed entity_type=%s entity_id=%s",
                entity_type.value,
                entity_id,
            )
            raise PersistenceError("Failed to load compliance documents.") from exc

        snapshots = [
            DocumentSnapshot(
                id=document.id,
                document_type=document.document_type,
                expiry_date=document.expiry_date,
                created_at=document.created_at,
            )
            for document in documents
        ]
        return assemble_calendar(
            entity_type=entity_type,
            entity_id=entity_id,
            year=year,
            documents=snapshots,
            default_document_types=self._default_document_types,
            today=today,
        )


def assemble_calendar(
    *,
    entity_type: EntityType,
    entity_id: uuid.UUID,
    year: int,
    documents: Sequence[DocumentSnapshot],
    default_document_types: Sequence[str],
    today: date,
) -> DocumentCalendar:
    """
    Project every document type of an entity across ``year``.

    Summary counts cover types, not documents: ``valid_count`` includes
    types whose latest document has no expiry date, and
    ``overall_compliance_rate`` is the valid share of types that have at
    least one document.
    """

    by_type: dict[str, list[DocumentSnapshot]] = defaultdict(list)
    for document in documents:
        by_type[document.document_type].append(document)

    ordered_types = list(dict.fromkeys(default_document_types))
    ordered_types.extend(sorted(name for name in by_type if name not in ordered_types))

    rows: list[DocumentTypeProjection] = []
    for document_type in ordered_types:
        group = by_type.get(document_type, [])
        latest = select_latest_document(group)
        rows.append(
            DocumentTypeProjection(
                document_type=document_type,
                status=document_status(latest.expiry_date if latest else None, today),
                expiry_date=latest.expiry_date if latest else None,
                document_id=latest.id if latest else None,
                document_count=len(group),
                months=project_document(latest, year, today),
            )
        )

    present = [row for row in rows if not row.is_missing]
    valid = sum(1 for row in present if row.status in (DocumentStatus.VALID, DocumentStatus.NO_EXPIRY))

    return DocumentCalendar(
        entity_type=entity_type,
        entity_id=entity_id,
        year=year,
        document_count=len(documents),
        rows=tuple(rows),
        valid_count=valid,
        expiring_count=sum(1 for row in present if row.status is DocumentStatus.EXPIRING_SOON),
        expired_count=sum(1 for row in present if row.status is DocumentStatus.EXPIRED),
        missing_count=len(rows) - len(present),
        overall_compliance_rate=percentage(valid, len(present)),
    )


@lru_cache(maxsize=1)
def get_document_calendar_service() -> DocumentCalendarService:
    """
    Build and cache the calendar service with env-driven default types.
    """
    settings = get_compliance_settings()
    return DocumentCalendarService(default_document_types=settings.default_document_types)
