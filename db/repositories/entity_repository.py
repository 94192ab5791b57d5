"""
Lookup and registration of scheduling targets (properties and blocks).
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.block import Block
from db.models.enums import EntityType
from db.models.organization import Organization
from db.models.property import Property

_MODEL_BY_ENTITY_TYPE: dict[EntityType, type[Property] | type[Block]] = {
    EntityType.PROPERTY: Property,
    EntityType.BLOCK: Block,
}


class EntityRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_entity(self, entity_type: EntityType, entity_id: uuid.UUID) -> Property | Block | None:
        model = _MODEL_BY_ENTITY_TYPE[entity_type]
        return self._session.get(model, entity_id)

    def lock_entity(self, entity_type: EntityType, entity_id: uuid.UUID) -> Property | Block | None:
        """
        Load the entity with ``SELECT ... FOR UPDATE``.

        Holding this row lock until commit serializes every schedule write
        aimed at the same property or block.
        """

        model = _MODEL_BY_ENTITY_TYPE[entity_type]
        stmt = select(model).where(model.id == entity_id).with_for_update()
        return self._session.scalars(stmt).one_or_none()

    def get_organization(self, organization_id: uuid.UUID) -> Organization | None:
        return self._session.get(Organization, organization_id)

    def create_organization(self, *, name: str) -> Organization:
        organization = Organization(name=name, is_active=True)
        self._session.add(organization)
        self._session.flush()
        return organization

    def create_block(
        self,
        *,
        organization_id: uuid.UUID,
        name: str,
        address: str,
        notes: str | None = None,
    ) -> Block:
        block = Block(
            organization_id=organization_id,
            name=name,
            address=address,
            notes=notes,
        )
        self._session.add(block)
        self._session.flush()
        return block

    def create_property(
        self,
        *,
        organization_id: uuid.UUID,
        name: str,
        address: str,
        block_id: uuid.UUID | None = None,
    ) -> Property:
        prop = Property(
            organization_id=organization_id,
            name=name,
            address=address,
            block_id=block_id,
        )
        self._session.add(prop)
        self._session.flush()
        return prop
