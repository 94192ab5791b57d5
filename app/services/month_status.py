"""
app/services/month_status.py

Inspection Month-Status Resolver.

Precedence, first match wins
----------------------------
1. every instance completed                         -> completed
2. any instance before today and not completed      -> overdue
3. any instance within [today, today + 30 days]     -> due
4. at least one instance                            -> scheduled
5. empty bucket                                     -> not_scheduled

Completion dominates so a late-but-finished inspection does not alarm the
user; overdue dominates due/scheduled because it is an unmet obligation.

Compliance rate
---------------
rate = round_half_up(100 * completed_months / scheduled_months)

where ``scheduled_months`` counts every month that is not
``not_scheduled``. A template with no scheduled months has rate 0.
"""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Iterable

from app.domain.compliance import MonthBucket, MonthStatus
from app.errors import ComputationError, ErrorDetail

DUE_WINDOW_DAYS = 30


def resolve_month_status(bucket: MonthBucket, today: date) -> MonthStatus:
    """
    Classify one bucket relative to ``today``.

    Raises
    ------
    ComputationError
        When the bucket's counts contradict its instances.
    """

    _check_bucket(bucket)

    if bucket.count == 0:
        return MonthStatus.NOT_SCHEDULED

    if bucket.completed_count == bucket.count:
        return MonthStatus.COMPLETED

    pending = [item for item in bucket.instances if not item.is_completed]

    if any(item.scheduled_date < today for item in pending):
        return MonthStatus.OVERDUE

    due_until = today + timedelta(days=DUE_WINDOW_DAYS)
    if any(today <= item.scheduled_date <= due_until for item in bucket.instances):
        return MonthStatus.DUE

    return MonthStatus.SCHEDULED


def compliance_rate(statuses: Iterable[MonthStatus]) -> int:
    """
    Percentage of scheduled months that are completed, 0 when none are
    scheduled.
    """

    scheduled = 0
    completed = 0
    for status in statuses:
        if status is MonthStatus.NOT_SCHEDULED:
            continue
        scheduled += 1
        if status is MonthStatus.COMPLETED:
            completed += 1
    return percentage(completed, scheduled)


def percentage(part: int, whole: int) -> int:
    """Integer percentage rounded half-up; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return math.floor(100 * part / whole + 0.5)


def _check_bucket(bucket: MonthBucket) -> None:
    if not 0 <= bucket.month_index <= 11:
        raise ComputationError(
            "Month bucket index out of range.",
            errors=[
                ErrorDetail(
                    code="bucket_month_out_of_range",
                    message="Bucket month index must be within 0..11.",
                    context={"month_index": bucket.month_index},
                )
            ],
        )

    completed = sum(1 for item in bucket.instances if item.is_completed)
    consistent = (
        bucket.count == len(bucket.instances)
        and bucket.completed_count == completed
        and 0 <= bucket.overdue_count <= bucket.count - bucket.completed_count
    )
    if not consistent:
        raise ComputationError(
            "Month bucket counts contradict its instances.",
            errors=[
                ErrorDetail(
                    code="bucket_counts_inconsistent",
                    message="Bucket counts do not match the instances it holds.",
                    context={
                        "month_index": bucket.month_index,
                        "count": bucket.count,
                        "instances": len(bucket.instances),
                        "completed_count": bucket.completed_count,
                        "overdue_count": bucket.overdue_count,
                    },
                )
            ],
        )
