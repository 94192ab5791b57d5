"""
app/services/calendar_index.py

Calendar Index: groups one template's inspections into the twelve months
of a target year.

This stage only counts. Status classification belongs to
:mod:`app.services.month_status`.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import date
from typing import Iterable

from app.domain.compliance import InspectionSnapshot, MonthBucket

MONTHS_PER_YEAR = 12


def bucket_instances(
    instances: Iterable[InspectionSnapshot],
    template_id: uuid.UUID,
    year: int,
    today: date,
) -> tuple[MonthBucket, ...]:
    """
    Return exactly twelve buckets (index 0 = January) for ``template_id``.

    Instances of other templates or other years are ignored. Within a
    bucket, instances keep their input order.

    ``overdue_count`` counts instances scheduled strictly before ``today``
    that are not completed.
    """

    grouped: dict[int, list[InspectionSnapshot]] = defaultdict(list)
    for instance in instances:
        if instance.template_id != template_id:
            continue
        if instance.scheduled_date.year != year:
            continue
        grouped[instance.scheduled_date.month - 1].append(instance)

    return tuple(
        _build_bucket(month_index, grouped.get(month_index, ()), today)
        for month_index in range(MONTHS_PER_YEAR)
    )


def _build_bucket(
    month_index: int,
    members: Iterable[InspectionSnapshot],
    today: date,
) -> MonthBucket:
    members = tuple(members)
    completed = sum(1 for item in members if item.is_completed)
    overdue = sum(
        1 for item in members if not item.is_completed and item.scheduled_date < today
    )
    return MonthBucket(
        month_index=month_index,
        instances=members,
        count=len(members),
        completed_count=completed,
        overdue_count=overdue,
    )
