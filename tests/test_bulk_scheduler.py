"""
tests/test_bulk_scheduler.py

Bulk and direct scheduling against an in-memory SQLite database.

Every rejected request must leave the inspections table untouched.
"""

from __future__ import annotations

import uuid
from datetime import date

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from app.domain.compliance import BulkScheduleRequest, PendingSelection
from app.errors import NotFoundError, ScheduleConflictError, ScheduleValidationError
from app.services.bulk_scheduler import BulkScheduler, InspectionScheduler
from app.validators.schedule_validator import ScheduleValidator
from db.models import EntityType, Inspection

YEAR = 2024


@pytest.fixture()
def validator() -> ScheduleValidator:
    return ScheduleValidator(max_selections=240, min_year=2000, max_year=2100)


@pytest.fixture()
def scheduler(session_factory, validator) -> BulkScheduler:
    return BulkScheduler(validator=validator, session_factory=session_factory)


@pytest.fixture()
def direct_scheduler(session_factory, validator) -> InspectionScheduler:
    return InspectionScheduler(validator=validator, session_factory=session_factory)


def _count(session_factory: sessionmaker[Session]) -> int:
    with session_factory() as session:
        return session.scalar(select(func.count()).select_from(Inspection))


def _rows(session_factory: sessionmaker[Session]) -> list[Inspection]:
    with session_factory() as session:
        return list(session.scalars(select(Inspection).order_by(Inspection.scheduled_date)).all())


def _request(seed, *selections: PendingSelection, **overrides) -> BulkScheduleRequest:
    values = {
        "entity_type": EntityType.PROPERTY,
        "entity_id": seed.property_id,
        "year": YEAR,
        "selections": selections,
    }
    values.update(overrides)
    return BulkScheduleRequest(**values)


# ---------------------------------------------------------------------------
# Success
# ---------------------------------------------------------------------------


class TestBulkScheduleSuccess:
    def test_creates_one_inspection_per_selection(self, scheduler, seed, session_factory) -> None:
        result = scheduler.schedule(
            _request(
                seed,
                PendingSelection(seed.boiler_template_id, 0),
                PendingSelection(seed.boiler_template_id, 6),
                PendingSelection(seed.fire_template_id, 0),
            )
        )

        assert result.created_count == 3
        assert len(result.inspection_ids) == 3
        assert (result.entity_type, result.entity_id, result.year) == (
            EntityType.PROPERTY,
            seed.property_id,
            YEAR,
        )

        rows = _rows(session_factory)
        assert {row.id for row in rows} == set(result.inspection_ids)
        assert {row.scheduled_date for row in rows} == {date(YEAR, 1, 1), date(YEAR, 7, 1)}
        assert all(row.status == "scheduled" for row in rows)
        assert all(row.type == "routine" for row in rows)
        assert all(row.property_id == seed.property_id and row.block_id is None for row in rows)

    def test_day_override(self, scheduler, seed, session_factory) -> None:
        scheduler.schedule(_request(seed, PendingSelection(seed.boiler_template_id, 1, day=29)))
        assert _rows(session_factory)[0].scheduled_date == date(YEAR, 2, 29)

    def test_inspection_type_is_stored(self, scheduler, seed, session_factory) -> None:
        scheduler.schedule(
            _request(
                seed,
                PendingSelection(seed.boiler_template_id, 3),
                inspection_type="safety_compliance",
            )
        )
        assert _rows(session_factory)[0].type == "safety_compliance"

    def test_block_target(self, scheduler, seed, session_factory) -> None:
        scheduler.schedule(
            _request(
                seed,
                PendingSelection(seed.block_template_id, 2),
                entity_type=EntityType.BLOCK,
                entity_id=seed.block_id,
            )
        )
        row = _rows(session_factory)[0]
        assert row.block_id == seed.block_id
        assert row.property_id is None

    def test_existing_instance_in_other_year_does_not_collide(
        self, scheduler, seed, session_factory, add_inspection
    ) -> None:
        add_inspection(
            template_id=seed.boiler_template_id,
            property_id=seed.property_id,
            scheduled_date=date(YEAR - 1, 5, 1),
        )
        result = scheduler.schedule(_request(seed, PendingSelection(seed.boiler_template_id, 4)))
        assert result.created_count == 1
        assert _count(session_factory) == 2

    def test_other_template_same_month_does_not_collide(
        self, scheduler, seed, session_factory, add_inspection
    ) -> None:
        add_inspection(
            template_id=seed.fire_template_id,
            property_id=seed.property_id,
            scheduled_date=date(YEAR, 5, 1),
        )
        result = scheduler.schedule(_request(seed, PendingSelection(seed.boiler_template_id, 4)))
        assert result.created_count == 1


# ---------------------------------------------------------------------------
# All-or-nothing rejections
# ---------------------------------------------------------------------------


class TestBulkScheduleRejections:
    def test_duplicate_selection_creates_nothing(self, scheduler, seed, session_factory) -> None:
        with pytest.raises(ScheduleValidationError):
            scheduler.schedule(
                _request(
                    seed,
                    PendingSelection(seed.boiler_template_id, 2),
                    PendingSelection(seed.boiler_template_id, 2),
                )
            )
        assert _count(session_factory) == 0

    def test_collision_creates_nothing_and_lists_every_pair(
        self, scheduler, seed, session_factory, add_inspection
    ) -> None:
        add_inspection(
            template_id=seed.boiler_template_id,
            property_id=seed.property_id,
            scheduled_date=date(YEAR, 3, 15),
        )
        add_inspection(
            template_id=seed.fire_template_id,
            property_id=seed.property_id,
            scheduled_date=date(YEAR, 8, 1),
        )

        with pytest.raises(ScheduleConflictError) as ctx:
            scheduler.schedule(
                _request(
                    seed,
                    PendingSelection(seed.boiler_template_id, 0),
                    PendingSelection(seed.boiler_template_id, 2),
                    PendingSelection(seed.fire_template_id, 7),
                )
            )

        colliding = {
            (error.context["template_id"], error.context["month_index"]) for error in ctx.value.errors
        }
        assert colliding == {
            (str(seed.boiler_template_id), 2),
            (str(seed.fire_template_id), 7),
        }
        assert _count(session_factory) == 2

    def test_repeating_a_committed_request_conflicts(self, scheduler, seed, session_factory) -> None:
        request = _request(seed, PendingSelection(seed.boiler_template_id, 9))
        scheduler.schedule(request)

        with pytest.raises(ScheduleConflictError):
            scheduler.schedule(request)
        assert _count(session_factory) == 1

    def test_unknown_entity(self, scheduler, seed, session_factory) -> None:
        with pytest.raises(NotFoundError) as ctx:
            scheduler.schedule(
                _request(seed, PendingSelection(seed.boiler_template_id, 0), entity_id=uuid.uuid4())
            )
        assert ctx.value.resource == "property"
        assert _count(session_factory) == 0

    def test_unknown_template(self, scheduler, seed, session_factory) -> None:
        missing = uuid.uuid4()
        with pytest.raises(NotFoundError) as ctx:
            scheduler.schedule(
                _request(
                    seed,
                    PendingSelection(seed.boiler_template_id, 0),
                    PendingSelection(missing, 1),
                )
            )
        assert ctx.value.resource_id == missing
        assert _count(session_factory) == 0

    def test_inactive_template(self, scheduler, seed, session_factory) -> None:
        with pytest.raises(ScheduleValidationError) as ctx:
            scheduler.schedule(_request(seed, PendingSelection(seed.inactive_template_id, 0)))
        assert ctx.value.errors[0].code == "template_inactive"
        assert _count(session_factory) == 0

    def test_scope_mismatch(self, scheduler, seed, session_factory) -> None:
        with pytest.raises(ScheduleValidationError) as ctx:
            scheduler.schedule(_request(seed, PendingSelection(seed.block_template_id, 0)))
        assert ctx.value.errors[0].code == "template_scope_mismatch"
        assert _count(session_factory) == 0

    def test_template_of_other_organization(self, scheduler, seed, session_factory) -> None:
        with pytest.raises(ScheduleValidationError) as ctx:
            scheduler.schedule(
                _request(
                    seed,
                    PendingSelection(seed.boiler_template_id, 2),
                    entity_id=seed.other_property_id,
                )
            )
        assert ctx.value.errors[0].code == "template_organization_mismatch"
        assert _count(session_factory) == 0

    def test_month_out_of_range(self, scheduler, seed, session_factory) -> None:
        with pytest.raises(ScheduleValidationError):
            scheduler.schedule(_request(seed, PendingSelection(seed.boiler_template_id, 12)))
        assert _count(session_factory) == 0


# ---------------------------------------------------------------------------
# Direct scheduling
# ---------------------------------------------------------------------------


class TestDirectScheduling:
    def test_occupied_month_is_allowed(self, direct_scheduler, seed, session_factory) -> None:
        for day in (3, 17):
            direct_scheduler.schedule_one(
                entity_type=EntityType.PROPERTY,
                entity_id=seed.property_id,
                template_id=seed.boiler_template_id,
                scheduled_date=date(YEAR, 4, day),
                inspection_type="routine",
            )
        assert _count(session_factory) == 2

    def test_returns_persisted_row(self, direct_scheduler, seed) -> None:
        inspection = direct_scheduler.schedule_one(
            entity_type=EntityType.PROPERTY,
            entity_id=seed.property_id,
            template_id=seed.fire_template_id,
            scheduled_date=date(YEAR, 10, 12),
            inspection_type="fire_hazard_assessment",
            notes="Annual",
        )
        assert inspection.status == "scheduled"
        assert inspection.type == "fire_hazard_assessment"
        assert inspection.notes == "Annual"

    def test_unknown_template(self, direct_scheduler, seed, session_factory) -> None:
        with pytest.raises(NotFoundError):
            direct_scheduler.schedule_one(
                entity_type=EntityType.PROPERTY,
                entity_id=seed.property_id,
                template_id=uuid.uuid4(),
                scheduled_date=date(YEAR, 1, 1),
                inspection_type="routine",
            )
        assert _count(session_factory) == 0

    def test_scope_mismatch(self, direct_scheduler, seed) -> None:
        with pytest.raises(ScheduleValidationError):
            direct_scheduler.schedule_one(
                entity_type=EntityType.BLOCK,
                entity_id=seed.block_id,
                template_id=seed.boiler_template_id,
                scheduled_date=date(YEAR, 1, 1),
                inspection_type="routine",
            )

    def test_template_of_other_organization(self, direct_scheduler, seed, session_factory) -> None:
        with pytest.raises(ScheduleValidationError) as ctx:
            direct_scheduler.schedule_one(
                entity_type=EntityType.PROPERTY,
                entity_id=seed.other_property_id,
                template_id=seed.boiler_template_id,
                scheduled_date=date(YEAR, 1, 1),
                inspection_type="routine",
            )
        assert ctx.value.errors[0].code == "template_organization_mismatch"
        assert _count(session_factory) == 0
