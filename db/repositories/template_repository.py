"""
Repository for inspection templates.

Templates are never deleted; ``is_active`` is the only way to retire one.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from db.models.enums import EntityType
from db.models.inspection_template import InspectionTemplate


class TemplateRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_template(self, template_id: uuid.UUID) -> InspectionTemplate | None:
        return self._session.get(InspectionTemplate, template_id)

    def get_templates(self, template_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, InspectionTemplate]:
        """
        Return the templates that exist among ``template_ids``, keyed by id.
        Missing ids are simply absent from the result.
        """

        ids = set(template_ids)
        if not ids:
            return {}
        stmt = select(InspectionTemplate).where(InspectionTemplate.id.in_(ids))
        return {template.id: template for template in self._session.scalars(stmt).all()}

    def list_templates(
        self,
        *,
        organization_id: uuid.UUID | None = None,
        scope: EntityType | None = None,
        active_only: bool = False,
    ) -> list[InspectionTemplate]:
        """
        Ordered by name, then id, so report rows are stable across requests.
        """

        stmt: Select[tuple[InspectionTemplate]] = select(InspectionTemplate)

        if organization_id is not None:
            stmt = stmt.where(InspectionTemplate.organization_id == organization_id)
        if scope is not None:
            stmt = stmt.where(InspectionTemplate.scope == scope.value)
        if active_only:
            stmt = stmt.where(InspectionTemplate.is_active.is_(True))

        stmt = stmt.order_by(InspectionTemplate.name, InspectionTemplate.id)
        return list(self._session.scalars(stmt).all())

    def create_template(
        self,
        *,
        organization_id: uuid.UUID,
        name: str,
        scope: EntityType,
        description: str | None = None,
    ) -> InspectionTemplate:
        template = InspectionTemplate(
            organization_id=organization_id,
            name=name,
            scope=scope.value,
            description=description,
            is_active=True,
        )
        self._session.add(template)
        self._session.flush()
        return template
