"""
app/validators/schedule_validator.py

Validation for inspection scheduling requests.
"""

from __future__ import annotations

import calendar
import uuid
from collections import Counter
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Sequence

from app.domain.compliance import BulkScheduleRequest, PendingSelection
from app.errors import ErrorDetail, NotFoundError, ScheduleValidationError
from db.models.enums import EntityType, InspectionType
from db.models.inspection_template import InspectionTemplate

_INSPECTION_TYPES = frozenset(item.value for item in InspectionType)


class ScheduleValidator:
    """
    Validates scheduling requests before anything touches the database.

    Shape checks (:meth:`validate_request`, :meth:`validate_single`) need no
    session. Template checks (:meth:`validate_templates`) run against the
    rows loaded inside the scheduling transaction.
    """

    def __init__(
        self,
        *,
        max_selections: int,
        min_year: int,
        max_year: int,
    ) -> None:
        self._max_selections = max_selections
        self._min_year = min_year
        self._max_year = max_year

    def validate_request(self, request: BulkScheduleRequest) -> None:
        """
        Validate a bulk request and raise one error listing every problem.
        """

        errors: list[ErrorDetail] = []
        errors.extend(self._check_year(request.year))
        errors.extend(_check_inspection_type(request.inspection_type))

        selections = request.selections
        if not selections:
            errors.append(
                ErrorDetail(
                    code="no_selections",
                    message="At least one selection is required.",
                    field="selections",
                )
            )
        elif len(selections) > self._max_selections:
            errors.append(
                ErrorDetail(
                    code="too_many_selections",
                    message=f"At most {self._max_selections} selections are allowed per request.",
                    field="selections",
                    context={"count": len(selections), "limit": self._max_selections},
                )
            )

        for position, selection in enumerate(selections):
            errors.extend(_check_selection(position, selection, request.year))

        counts = Counter(selection.key for selection in selections)
        for (template_id, month_index), occurrences in counts.items():
            if occurrences > 1:
                errors.append(
                    ErrorDetail(
                        code="duplicate_selection",
                        message="The same template and month is selected more than once.",
                        field="selections",
                        context={
                            "template_id": str(template_id),
                            "month_index": month_index,
                            "occurrences": occurrences,
                        },
                    )
                )

        if errors:
            raise ScheduleValidationError(
                f"Bulk schedule request is invalid ({len(errors)} problem(s)).",
                errors=errors,
            )

    def validate_single(self, *, scheduled_date: date, inspection_type: str) -> None:
        errors = [
            *self._check_year(scheduled_date.year, field="scheduled_date"),
            *_check_inspection_type(inspection_type),
        ]
        if errors:
            raise ScheduleValidationError("Schedule request is invalid.", errors=errors)

    def validate_templates(
        self,
        *,
        template_ids: Iterable[uuid.UUID],
        templates: Mapping[uuid.UUID, InspectionTemplate],
        entity_type: EntityType,
        organization_id: uuid.UUID,
    ) -> None:
        """
        Every id must resolve; resolved templates must be active, scoped
        to ``entity_type`` and owned by the entity's organization.

        Raises
        ------
        NotFoundError
            For the first id (in request order) without a template row.
        ScheduleValidationError
            Listing every inactive, mismatched or foreign template.
        """

        ordered_ids = list(dict.fromkeys(template_ids))
        for template_id in ordered_ids:
            if template_id not in templates:
                raise NotFoundError("template", template_id)

        errors: list[ErrorDetail] = []
        for template_id in ordered_ids:
            template = templates[template_id]
            if not template.is_active:
                errors.append(
                    ErrorDetail(
                        code="template_inactive",
                        message="Inactive templates cannot be scheduled.",
                        field="template_id",
                        context={"template_id": str(template_id)},
                    )
                )
            if template.scope != entity_type.value:
                errors.append(
                    ErrorDetail(
                        code="template_scope_mismatch",
                        message=f"Template scope '{template.scope}' does not match entity type '{entity_type.value}'.",
                        field="template_id",
                        context={
                            "template_id": str(template_id),
                            "scope": template.scope,
                            "entity_type": entity_type.value,
                        },
                    )
                )
            if template.organization_id != organization_id:
                errors.append(
                    ErrorDetail(
                        code="template_organization_mismatch",
                        message="Template belongs to another organization.",
                        field="template_id",
                        context={
                            "template_id": str(template_id),
                            "organization_id": str(organization_id),
                        },
                    )
                )

        if errors:
            raise ScheduleValidationError("One or more templates cannot be scheduled.", errors=errors)

    def _check_year(self, year: int, *, field: str = "year") -> Sequence[ErrorDetail]:
        if self._min_year <= year <= self._max_year:
            return ()
        return (
            ErrorDetail(
                code="year_out_of_range",
                message=f"Year must be within {self._min_year}..{self._max_year}.",
                field=field,
                context={"year": year},
            ),
        )


def _check_inspection_type(inspection_type: str) -> Sequence[ErrorDetail]:
    if inspection_type in _INSPECTION_TYPES:
        return ()
    return (
        ErrorDetail(
            code="unsupported_inspection_type",
            message="Inspection type is not supported.",
            field="type",
            context={"type": inspection_type, "allowed": sorted(_INSPECTION_TYPES)},
        ),
    )


def _check_selection(position: int, selection: PendingSelection, year: int) -> list[ErrorDetail]:
    field = f"selections[{position}]"
    if not 0 <= selection.month_index <= 11:
        return [
            ErrorDetail(
                code="month_index_out_of_range",
                message="month_index must be within 0..11.",
                field=f"{field}.month_index",
                context={"month_index": selection.month_index},
            )
        ]

    if selection.day is None:
        return []

    # monthrange needs a year calendar accepts; out-of-range years are
    # reported separately.
    days_in_month = calendar.monthrange(min(max(year, 1), 9999), selection.month_index + 1)[1]
    if not 1 <= selection.day <= days_in_month:
        return [
            ErrorDetail(
                code="invalid_day",
                message=f"day must be within 1..{days_in_month} for this month.",
                field=f"{field}.day",
                context={"day": selection.day, "month_index": selection.month_index},
            )
        ]
    return []
