"""
tests/test_month_status.py

Pytest unit tests for the month-status resolver and compliance-rate
arithmetic.

Coverage
--------
- Precedence: completed > overdue > due > scheduled > not_scheduled
- Inclusive 30-day due window
- Half-up rounding of the compliance rate
- Inconsistent buckets raise ComputationError
"""

from __future__ import annotations

import uuid
from datetime import date, timedelta

import pytest

from app.domain.compliance import InspectionSnapshot, MonthBucket, MonthStatus
from app.errors import ComputationError
from app.services.calendar_index import bucket_instances
from app.services.month_status import (
    DUE_WINDOW_DAYS,
    compliance_rate,
    percentage,
    resolve_month_status,
)
from db.models.enums import InspectionStatus

TODAY = date(2024, 6, 15)
TEMPLATE = uuid.uuid4()


def _snap(scheduled: date, status: InspectionStatus = InspectionStatus.SCHEDULED) -> InspectionSnapshot:
    return InspectionSnapshot(
        id=uuid.uuid4(),
        template_id=TEMPLATE,
        scheduled_date=scheduled,
        status=status,
    )


def _status_of(*instances: InspectionSnapshot) -> MonthStatus:
    """Resolve the bucket holding all ``instances`` (they share one month)."""
    month_index = instances[0].scheduled_date.month - 1
    bucket = bucket_instances(instances, TEMPLATE, instances[0].scheduled_date.year, TODAY)[month_index]
    return resolve_month_status(bucket, TODAY)


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestPrecedence:
    def test_empty_bucket_is_not_scheduled(self) -> None:
        assert resolve_month_status(MonthBucket(month_index=0), TODAY) is MonthStatus.NOT_SCHEDULED

    def test_completed_ten_days_ago(self) -> None:
        assert _status_of(_snap(TODAY - timedelta(days=10), InspectionStatus.COMPLETED)) is MonthStatus.COMPLETED

    def test_late_but_completed_is_completed(self) -> None:
        assert _status_of(_snap(date(2024, 1, 5), InspectionStatus.COMPLETED)) is MonthStatus.COMPLETED

    def test_overdue_beats_due(self) -> None:
        status = _status_of(
            _snap(TODAY - timedelta(days=1)),
            _snap(TODAY + timedelta(days=5)),
        )
        assert status is MonthStatus.OVERDUE

    def test_partially_completed_past_month_is_overdue(self) -> None:
        status = _status_of(
            _snap(date(2024, 6, 2), InspectionStatus.COMPLETED),
            _snap(date(2024, 6, 3), InspectionStatus.IN_PROGRESS),
        )
        assert status is MonthStatus.OVERDUE

    def test_scheduled_today_is_due(self) -> None:
        assert _status_of(_snap(TODAY)) is MonthStatus.DUE

    def test_due_window_is_inclusive(self) -> None:
        assert _status_of(_snap(TODAY + timedelta(days=DUE_WINDOW_DAYS))) is MonthStatus.DUE

    def test_beyond_window_is_scheduled(self) -> None:
        assert _status_of(_snap(TODAY + timedelta(days=DUE_WINDOW_DAYS + 1))) is MonthStatus.SCHEDULED

    def test_completed_plus_pending_in_window_is_due(self) -> None:
        status = _status_of(
            _snap(date(2024, 6, 16), InspectionStatus.COMPLETED),
            _snap(date(2024, 6, 28)),
        )
        assert status is MonthStatus.DUE

    def test_far_future_month_is_scheduled(self) -> None:
        assert _status_of(_snap(date(2024, 11, 1))) is MonthStatus.SCHEDULED

    def test_same_inputs_same_status(self) -> None:
        instances = (_snap(date(2024, 6, 20)), _snap(date(2024, 6, 1)))
        assert _status_of(*instances) is _status_of(*instances)


# ---------------------------------------------------------------------------
# Bucket consistency
# ---------------------------------------------------------------------------


class TestBucketChecks:
    def test_count_without_instances_raises(self) -> None:
        with pytest.raises(ComputationError) as ctx:
            resolve_month_status(MonthBucket(month_index=3, count=2), TODAY)
        assert ctx.value.errors[0].code == "bucket_counts_inconsistent"

    def test_month_index_out_of_range_raises(self) -> None:
        with pytest.raises(ComputationError) as ctx:
            resolve_month_status(MonthBucket(month_index=12), TODAY)
        assert ctx.value.errors[0].code == "bucket_month_out_of_range"


# ---------------------------------------------------------------------------
# Compliance rate
# ---------------------------------------------------------------------------


class TestComplianceRate:
    def test_no_scheduled_months_is_zero(self) -> None:
        assert compliance_rate([MonthStatus.NOT_SCHEDULED] * 12) == 0

    def test_not_scheduled_months_are_excluded(self) -> None:
        statuses = [MonthStatus.COMPLETED, MonthStatus.OVERDUE] + [MonthStatus.NOT_SCHEDULED] * 10
        assert compliance_rate(statuses) == 50

    def test_due_and_scheduled_count_as_scheduled(self) -> None:
        statuses = [MonthStatus.COMPLETED, MonthStatus.DUE, MonthStatus.SCHEDULED]
        assert compliance_rate(statuses) == 33

    def test_two_of_three_rounds_up(self) -> None:
        statuses = [MonthStatus.COMPLETED, MonthStatus.COMPLETED, MonthStatus.OVERDUE]
        assert compliance_rate(statuses) == 67

    @pytest.mark.parametrize(
        ("part", "whole", "expected"),
        [(1, 8, 13), (5, 8, 63), (3, 8, 38), (0, 4, 0), (4, 4, 100), (1, 0, 0)],
    )
    def test_percentage_rounds_half_up(self, part: int, whole: int, expected: int) -> None:
        assert percentage(part, whole) == expected
