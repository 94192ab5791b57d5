"""
app/api/routers/template_router.py

Inspection template administration. There is no delete; deactivate
instead.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import to_http_exception
from app.errors import ComplianceError
from app.schemas.compliance import (
    InspectionTemplateCreateRequest,
    InspectionTemplateResponse,
    InspectionTemplateUpdateRequest,
)
from app.services.template_service import InspectionTemplateService, get_inspection_template_service
from db.models.enums import EntityType
from db.session import get_db

router = APIRouter(prefix="/inspection-templates", tags=["templates"])


@router.post(
    "",
    response_model=InspectionTemplateResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_template(
    body: InspectionTemplateCreateRequest,
    db: Session = Depends(get_db),
    template_service: InspectionTemplateService = Depends(get_inspection_template_service),
) -> InspectionTemplateResponse:
    try:
        template = template_service.create_template(
            db,
            organization_id=body.organization_id,
            name=body.name.strip(),
            scope=body.scope,
            description=body.description,
        )
    except ComplianceError as exc:
        raise to_http_exception(exc) from exc
    return InspectionTemplateResponse.model_validate(template)


@router.get("", response_model=list[InspectionTemplateResponse])
def list_templates(
    organization_id: uuid.UUID | None = Query(default=None),
    scope: EntityType | None = Query(default=None),
    active_only: bool = Query(default=False),
    db: Session = Depends(get_db),
    template_service: InspectionTemplateService = Depends(get_inspection_template_service),
) -> list[InspectionTemplateResponse]:
    templates = template_service.list_templates(
        db,
        organization_id=organization_id,
        scope=scope,
        active_only=active_only,
    )
    return [InspectionTemplateResponse.model_validate(template) for template in templates]


@router.patch("/{template_id}", response_model=InspectionTemplateResponse)
def update_template(
    template_id: uuid.UUID,
    body: InspectionTemplateUpdateRequest,
    db: Session = Depends(get_db),
    template_service: InspectionTemplateService = Depends(get_inspection_template_service),
) -> InspectionTemplateResponse:
    """
    Rename, describe or (de)activate a template. Scope cannot change.
    """

    try:
        template = template_service.update_template(
            db,
            template_id,
            name=body.name.strip() if body.name is not None else None,
            description=body.description,
            is_active=body.is_active,
        )
    except ComplianceError as exc:
        raise to_http_exception(exc) from exc
    return InspectionTemplateResponse.model_validate(template)
