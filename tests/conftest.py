"""
tests/conftest.py

Shared fixtures: an in-memory SQLite database built from the ORM metadata
and a small seeded organization.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401 (registers all ORM models on Base.metadata)
from db.base import Base
from db.models import (
    Block,
    EntityType,
    Inspection,
    InspectionStatus,
    InspectionTemplate,
    Organization,
    Property,
)


@dataclass(frozen=True)
class Seed:
    organization_id: uuid.UUID
    property_id: uuid.UUID
    block_id: uuid.UUID
    boiler_template_id: uuid.UUID
    fire_template_id: uuid.UUID
    inactive_template_id: uuid.UUID
    block_template_id: uuid.UUID
    other_organization_id: uuid.UUID
    other_property_id: uuid.UUID


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=engine,
        class_=Session,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture()
def seed(session_factory: sessionmaker[Session]) -> Seed:
    """
    One organization with a block, a property inside it and four templates
    (two active property templates, one inactive, one block template), plus
    a second organization whose property has no templates.
    """

    with session_factory() as session:
        with session.begin():
            org = Organization(name="Harbour Lettings")
            other_org = Organization(name="Empty Estates")
            session.add_all([org, other_org])
            session.flush()

            block = Block(organization_id=org.id, name="North Block", address="1 Quay Street")
            session.add(block)
            session.flush()

            prop = Property(
                organization_id=org.id,
                block_id=block.id,
                name="Flat 4",
                address="1 Quay Street, Flat 4",
            )
            other_prop = Property(
                organization_id=other_org.id,
                name="Cottage",
                address="2 Lane End",
            )
            boiler = InspectionTemplate(
                organization_id=org.id,
                name="Boiler service",
                scope=EntityType.PROPERTY.value,
            )
            fire = InspectionTemplate(
                organization_id=org.id,
                name="Fire alarm test",
                scope=EntityType.PROPERTY.value,
            )
            inactive = InspectionTemplate(
                organization_id=org.id,
                name="Legacy gutter check",
                scope=EntityType.PROPERTY.value,
                is_active=False,
            )
            lift = InspectionTemplate(
                organization_id=org.id,
                name="Lift inspection",
                scope=EntityType.BLOCK.value,
            )
            session.add_all([prop, other_prop, boiler, fire, inactive, lift])
            session.flush()

            return Seed(
                organization_id=org.id,
                property_id=prop.id,
                block_id=block.id,
                boiler_template_id=boiler.id,
                fire_template_id=fire.id,
                inactive_template_id=inactive.id,
                block_template_id=lift.id,
                other_organization_id=other_org.id,
                other_property_id=other_prop.id,
            )


def _insert_inspection(
    session_factory: sessionmaker[Session],
    *,
    template_id: uuid.UUID,
    scheduled_date: date,
    property_id: uuid.UUID | None = None,
    block_id: uuid.UUID | None = None,
    status: InspectionStatus = InspectionStatus.SCHEDULED,
) -> uuid.UUID:
    with session_factory() as session:
        with session.begin():
            inspection = Inspection(
                template_id=template_id,
                property_id=property_id,
                block_id=block_id,
                type="routine",
                status=status.value,
                scheduled_date=scheduled_date,
            )
            session.add(inspection)
            session.flush()
            return inspection.id


@pytest.fixture()
def add_inspection(session_factory: sessionmaker[Session]) -> Callable[..., uuid.UUID]:
    """Insert one committed inspection row and return its id."""

    def _add(**kwargs) -> uuid.UUID:
        return _insert_inspection(session_factory, **kwargs)

    return _add
