"""
db/repositories/inspection_repository.py

Persistence layer for inspection instances.

The caller controls commit/rollback; this repository never commits on its
own.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.enums import EntityType
from db.models.inspection import Inspection
from db.repositories.types import InspectionCreate


class InspectionRepository:
    """
    Reads inspections by (entity, year) and writes new scheduled rows.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list_for_entity_year(
        self,
        *,
        entity_type: EntityType,
        entity_id: uuid.UUID,
        year: int,
        template_ids: Iterable[uuid.UUID] | None = None,
    ) -> list[Inspection]:
        """
        Return inspections of one entity scheduled within ``year``.

        Parameters
        ----------
        template_ids:
            Optional filter; ``None`` returns every template.

        Returns
        -------
        list[Inspection]
            Ordered by ``scheduled_date`` then ``id``.
        """

        stmt = select(Inspection).where(
            _entity_column(entity_type) == entity_id,
            Inspection.scheduled_date >= date(year, 1, 1),
            Inspection.scheduled_date <= date(year, 12, 31),
        )
        if template_ids is not None:
            ids = set(template_ids)
            if not ids:
                return []
            stmt = stmt.where(Inspection.template_id.in_(ids))

        stmt = stmt.order_by(Inspection.scheduled_date, Inspection.id)
        return list(self._session.scalars(stmt).all())

    def occupied_months(
        self,
        *,
        entity_type: EntityType,
        entity_id: uuid.UUID,
        year: int,
        template_ids: Iterable[uuid.UUID],
    ) -> set[tuple[uuid.UUID, int]]:
        """
        Return the ``(template_id, month_index)`` pairs that already hold at
        least one inspection for this entity and year.
        """

        rows = self.list_for_entity_year(
            entity_type=entity_type,
            entity_id=entity_id,
            year=year,
            template_ids=template_ids,
        )
        return {(row.template_id, row.scheduled_date.month - 1) for row in rows}

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create_inspection(self, record: InspectionCreate) -> Inspection:
        inspection = _to_model(record)
        self._session.add(inspection)
        self._session.flush()
        return inspection

    def bulk_create_inspections(self, records: Sequence[InspectionCreate]) -> list[uuid.UUID]:
        """
        Add all rows and flush once. Ids are assigned client-side so they are
        known before the flush.
        """

        if not records:
            return []

        self._session.add_all([_to_model(record) for record in records])
        self._session.flush()
        return [record.inspection_id for record in records]


# ---------------------------------------------------------------------------
# Module-level helpers (no business logic)
# ---------------------------------------------------------------------------


def _entity_column(entity_type: EntityType):
    if entity_type is EntityType.PROPERTY:
        return Inspection.property_id
    return Inspection.block_id


def _to_model(record: InspectionCreate) -> Inspection:
    return Inspection(
        id=record.inspection_id,
        template_id=record.template_id,
        property_id=record.entity_id if record.entity_type is EntityType.PROPERTY else None,
        block_id=record.entity_id if record.entity_type is EntityType.BLOCK else None,
        type=record.inspection_type,
        status=record.status,
        scheduled_date=record.scheduled_date,
        notes=record.notes,
    )
