"""
app/services/compliance_report_service.py

Compliance report assembly.

Loads the entity, its active templates and the year's inspections in one
consistent read, then runs the Calendar Index and the Month-Status Resolver
for every template. Reports are recomputed on every request; nothing here
is cached or persisted.

Totals
------
template.compliance_rate   = round_half_up(100 * completed_months / scheduled_months)
overall_compliance_rate    = same formula over the month sums of all templates
total_scheduled / completed = instance counts, not month counts
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from functools import lru_cache
from typing import Iterable, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.compliance import (
    MONTH_LABELS,
    ComplianceReport,
    InspectionSnapshot,
    MonthCell,
    MonthStatus,
    TemplateCompliance,
)
from app.errors import ComputationError, ErrorDetail, NotFoundError, PersistenceError
from app.services.calendar_index import bucket_instances
from app.services.month_status import compliance_rate, percentage, resolve_month_status
from db.models.enums import EntityType, InspectionStatus
from db.models.inspection import Inspection
from db.repositories.entity_repository import EntityRepository
from db.repositories.inspection_repository import InspectionRepository
from db.repositories.template_repository import TemplateRepository

logger = logging.getLogger(__name__)

SNAPSHOT_ISOLATION_LEVEL = "REPEATABLE READ"


class ComplianceReportService:
    """
    Builds :class:`ComplianceReport` values for one entity and year.
    """

    def build_report(
        self,
        db: Session,
        *,
        entity_type: EntityType,
        entity_id: uuid.UUID,
        year: int,
        today: date | None = None,
    ) -> ComplianceReport:
        """
        Raises
        ------
        NotFoundError
            The entity does not exist.
        PersistenceError
            A read failed; never answered with an empty report.
        """

        today = today or datetime.now(tz=timezone.utc).date()

        try:
            begin_snapshot_read(db)
            entity = EntityRepository(db).get_entity(entity_type, entity_id)
            if entity is None:
                raise NotFoundError(entity_type.value, entity_id)

            templates = TemplateRepository(db).list_templates(
                organization_id=entity.organization_id,
                scope=entity_type,
                active_only=True,
            )
            rows = InspectionRepository(db).list_for_entity_year(
                entity_type=entity_type,
                entity_id=entity_id,
                year=year,
                template_ids=[template.id for template in templates],
            )
        except SQLAlchemyError as exc:
            logger.exception(
                "Report read failed entity_type=%s entity_id=%s year=%d",
                entity_type.value,
                entity_id,
                year,
            )
            raise PersistenceError("Failed to load compliance data.") from exc

        report = assemble_report(
            entity_type=entity_type,
            entity_id=entity_id,
            year=year,
            templates=[(template.id, template.name) for template in templates],
            instances=[to_snapshot(row) for row in rows],
            today=today,
        )
        logger.debug(
            "Report built entity_type=%s entity_id=%s year=%d templates=%d instances=%d",
            entity_type.value,
            entity_id,
            year,
            len(report.templates),
            len(rows),
        )
        return report


# ---------------------------------------------------------------------------
# Pure assembly
# ---------------------------------------------------------------------------


def assemble_report(
    *,
    entity_type: EntityType,
    entity_id: uuid.UUID,
    year: int,
    templates: Sequence[tuple[uuid.UUID, str]],
    instances: Sequence[InspectionSnapshot],
    today: date,
) -> ComplianceReport:
    """
    Deterministic function of its arguments: identical inputs yield equal
    reports.
    """

    rows = tuple(
        build_template_compliance(
            template_id=template_id,
            template_name=template_name,
            instances=instances,
            year=year,
            today=today,
        )
        for template_id, template_name in templates
    )

    return ComplianceReport(
        entity_type=entity_type,
        entity_id=entity_id,
        year=year,
        templates=rows,
        overall_compliance_rate=percentage(
            sum(row.completed_months for row in rows),
            sum(row.scheduled_months for row in rows),
        ),
        total_scheduled=sum(row.total_scheduled for row in rows),
        total_completed=sum(row.total_completed for row in rows),
    )


def build_template_compliance(
    *,
    template_id: uuid.UUID,
    template_name: str,
    instances: Iterable[InspectionSnapshot],
    year: int,
    today: date,
) -> TemplateCompliance:
    buckets = bucket_instances(instances, template_id, year, today)

    cells: list[MonthCell] = []
    for bucket in buckets:
        status = resolve_month_status(bucket, today)
        cells.append(
            MonthCell(
                month_index=bucket.month_index,
                month=MONTH_LABELS[bucket.month_index],
                status=status,
                count=bucket.count,
                completed_count=bucket.completed_count,
                overdue_count=bucket.overdue_count,
                schedulable=status is MonthStatus.NOT_SCHEDULED,
            )
        )

    return TemplateCompliance(
        template_id=template_id,
        template_name=template_name,
        month_cells=tuple(cells),
        compliance_rate=compliance_rate(cell.status for cell in cells),
        total_scheduled=sum(bucket.count for bucket in buckets),
        total_completed=sum(bucket.completed_count for bucket in buckets),
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def begin_snapshot_read(db: Session) -> None:
    """
    Pin the session's next transaction to REPEATABLE READ on PostgreSQL.

    Must run before the first statement of the transaction. Other dialects
    keep their default isolation.
    """

    if db.get_bind().dialect.name != "postgresql":
        return
    if db.in_transaction():
        logger.debug("Snapshot isolation skipped: transaction already started.")
        return
    db.connection(execution_options={"isolation_level": SNAPSHOT_ISOLATION_LEVEL})


def to_snapshot(row: Inspection) -> InspectionSnapshot:
    try:
        status = InspectionStatus(row.status)
    except ValueError as exc:
        raise ComputationError(
            "Inspection has an unknown status.",
            errors=[
                ErrorDetail(
                    code="unknown_inspection_status",
                    message="Stored inspection status is not recognised.",
                    context={"inspection_id": str(row.id), "status": row.status},
                )
            ],
        ) from exc

    return InspectionSnapshot(
        id=row.id,
        template_id=row.template_id,
        scheduled_date=row.scheduled_date,
        status=status,
    )


@lru_cache(maxsize=1)
def get_compliance_report_service() -> ComplianceReportService:
    return ComplianceReportService()
