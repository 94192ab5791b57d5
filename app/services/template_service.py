"""
app/services/template_service.py

Inspection template administration.

Templates are never deleted and their scope never changes once created;
``is_active`` retires a template from reports and scheduling.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import NotFoundError, PersistenceError
from db.models.enums import EntityType
from db.models.inspection_template import InspectionTemplate
from db.repositories.entity_repository import EntityRepository
from db.repositories.template_repository import TemplateRepository

logger = logging.getLogger(__name__)


class InspectionTemplateService:
    def create_template(
        self,
        db: Session,
        *,
        organization_id: uuid.UUID,
        name: str,
        scope: EntityType,
        description: str | None = None,
    ) -> InspectionTemplate:
        if EntityRepository(db).get_organization(organization_id) is None:
            raise NotFoundError("organization", organization_id)

        try:
            template = TemplateRepository(db).create_template(
                organization_id=organization_id,
                name=name,
                scope=scope,
                description=description,
            )
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Inspection template create failed")
            raise PersistenceError("Failed to create inspection template.") from exc
        _commit(db, template, action="create")
        logger.info("Inspection template created id=%s scope=%s", template.id, template.scope)
        return template

    def list_templates(
        self,
        db: Session,
        *,
        organization_id: uuid.UUID | None = None,
        scope: EntityType | None = None,
        active_only: bool = False,
    ) -> list[InspectionTemplate]:
        return TemplateRepository(db).list_templates(
            organization_id=organization_id,
            scope=scope,
            active_only=active_only,
        )

    def update_template(
        self,
        db: Session,
        template_id: uuid.UUID,
        *,
        name: str | None = None,
        description: str | None = None,
        is_active: bool | None = None,
    ) -> InspectionTemplate:
        """
        Apply the given fields; ``None`` leaves a field unchanged.
        """

        template = TemplateRepository(db).get_template(template_id)
        if template is None:
            raise NotFoundError("template", template_id)

        if name is not None:
            template.name = name
        if description is not None:
            template.description = description
        if is_active is not None:
            template.is_active = is_active

        _commit(db, template, action="update")
        logger.info("Inspection template updated id=%s active=%s", template.id, template.is_active)
        return template


def _commit(db: Session, template: InspectionTemplate, *, action: str) -> None:
    try:
        db.commit()
        db.refresh(template)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Inspection template %s failed", action)
        raise PersistenceError(f"Failed to {action} inspection template.") from exc


def get_inspection_template_service() -> InspectionTemplateService:
    return InspectionTemplateService()
