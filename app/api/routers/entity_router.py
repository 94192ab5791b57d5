"""
app/api/routers/entity_router.py

Organization, block and property registration endpoints.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.dependencies import to_http_exception
from app.errors import NotFoundError
from db.models.enums import EntityType
from db.repositories.entity_repository import EntityRepository
from db.session import get_db

router = APIRouter(tags=["entities"])


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class OrganizationCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class OrganizationResponse(BaseModel):
    id: uuid.UUID
    name: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class BlockCreateRequest(BaseModel):
    organization_id: uuid.UUID
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1)
    notes: str | None = None


class BlockResponse(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    name: str
    address: str
    notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class PropertyCreateRequest(BaseModel):
    organization_id: uuid.UUID
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1)
    block_id: uuid.UUID | None = None


class PropertyResponse(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    block_id: uuid.UUID | None
    name: str
    address: str
    created_at: datetime

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/organizations",
    response_model=OrganizationResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_organization(
    body: OrganizationCreateRequest,
    db: Session = Depends(get_db),
) -> OrganizationResponse:
    """
    Create a new organization.

    Raises HTTP 409 if an organization with the same name already exists.
    """
    try:
        organization = EntityRepository(db).create_organization(name=body.name.strip())
        db.commit()
        db.refresh(organization)
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"An organization with name {body.name!r} already exists.",
        )
    return OrganizationResponse.model_validate(organization)


@router.post(
    "/blocks",
    response_model=BlockResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_block(
    body: BlockCreateRequest,
    db: Session = Depends(get_db),
) -> BlockResponse:
    entities = EntityRepository(db)
    _require_organization(entities, body.organization_id)

    block = entities.create_block(
        organization_id=body.organization_id,
        name=body.name.strip(),
        address=body.address,
        notes=body.notes,
    )
    db.commit()
    db.refresh(block)
    return BlockResponse.model_validate(block)


@router.post(
    "/properties",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_property(
    body: PropertyCreateRequest,
    db: Session = Depends(get_db),
) -> PropertyResponse:
    """
    Create a property, optionally inside a block of the same organization.
    """
    entities = EntityRepository(db)
    _require_organization(entities, body.organization_id)

    if body.block_id is not None:
        block = entities.get_entity(EntityType.BLOCK, body.block_id)
        if block is None:
            raise to_http_exception(NotFoundError("block", body.block_id))
        if block.organization_id != body.organization_id:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Block belongs to another organization.",
            )

    prop = entities.create_property(
        organization_id=body.organization_id,
        name=body.name.strip(),
        address=body.address,
        block_id=body.block_id,
    )
    db.commit()
    db.refresh(prop)
    return PropertyResponse.model_validate(prop)


def _require_organization(entities: EntityRepository, organization_id: uuid.UUID) -> None:
    if entities.get_organization(organization_id) is None:
        raise to_http_exception(NotFoundError("organization", organization_id))
