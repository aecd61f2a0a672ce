"""Tests for opscentral/services/capacity_policy.py

Run with:  pytest tests/test_capacity_policy.py -v

2025-01-05 is a Sunday (the default weekly off-day); 2025-01-06 a Monday.
"""

from datetime import date, datetime, timezone

import pytest

from opscentral.schemas.job import JobRecord, JobStatus
from opscentral.schemas.settings import SystemSettings
from opscentral.services.capacity_policy import (
    capacity_for,
    current_load,
    dock_slots_remaining,
    dock_slots_used,
    is_at_capacity,
    is_holiday,
    is_off_day,
    operational_today,
)


# ── Helpers ────────────────────────────────────────────────────────────────────

def _job(job_id, day="2025-01-06", status=JobStatus.ACTIVE, **kwargs):
    return JobRecord(id=job_id, job_date=day, status=status, **kwargs)


# ── operational_today ──────────────────────────────────────────────────────────

class TestOperationalToday:
    def test_uses_operational_timezone_not_utc(self):
        # 21:00 UTC is already 01:00 the next day in Dubai (UTC+4)
        now = datetime(2025, 1, 5, 21, 0, tzinfo=timezone.utc)
        assert operational_today(now) == "2025-01-06"

    def test_same_day_when_before_offset(self):
        now = datetime(2025, 1, 5, 10, 0, tzinfo=timezone.utc)
        assert operational_today(now) == "2025-01-05"


# ── Off-day / holiday ──────────────────────────────────────────────────────────

@pytest.mark.parametrize("day,expected", [
    (date(2025, 1, 5), True),    # Sunday
    (date(2025, 1, 6), False),   # Monday
    (date(2025, 1, 4), False),   # Saturday
    (date(2025, 1, 12), True),   # next Sunday
])
def test_is_off_day_default_sunday(day, expected):
    assert is_off_day(day) is expected


def test_is_off_day_configurable():
    # Friday off-day
    assert is_off_day(date(2025, 1, 3), off_day=4) is True
    assert is_off_day(date(2025, 1, 5), off_day=4) is False


def test_is_holiday():
    settings = SystemSettings(holidays=["2025-12-02"])
    assert is_holiday("2025-12-02", settings) is True
    assert is_holiday("2025-12-03", settings) is False


# ── Capacity ───────────────────────────────────────────────────────────────────

class TestCapacityFor:
    def test_default_is_ten(self):
        assert capacity_for("2025-01-06", SystemSettings()) == 10

    def test_explicit_limit(self):
        settings = SystemSettings(daily_job_limits={"2025-01-06": 3})
        assert capacity_for("2025-01-06", settings) == 3
        assert capacity_for("2025-01-07", settings) == 10

    def test_explicit_zero_closes_day(self):
        settings = SystemSettings(daily_job_limits={"2025-01-06": 0})
        assert capacity_for("2025-01-06", settings) == 0


class TestCurrentLoad:
    def test_counts_non_rejected_general_jobs_on_day(self):
        jobs = [
            _job("A"),
            _job("B", status=JobStatus.PENDING_ADD),
            _job("C", status=JobStatus.PENDING_DELETE),
            _job("D", status=JobStatus.REJECTED),
            _job("E", is_warehouse_activity=True),
            _job("F", day="2025-01-07"),
        ]
        assert current_load("2025-01-06", jobs) == 3

    def test_is_at_capacity(self):
        settings = SystemSettings(daily_job_limits={"2025-01-06": 2})
        assert is_at_capacity("2025-01-06", [_job("A")], settings) is False
        assert is_at_capacity("2025-01-06", [_job("A"), _job("B")], settings) is True

    def test_empty_day_not_at_default_capacity(self):
        assert is_at_capacity("2025-01-06", [], SystemSettings()) is False


# ── Dock slots ─────────────────────────────────────────────────────────────────

class TestDockSlots:
    def test_only_warehouse_jobs_use_slots(self):
        jobs = [
            _job("W1", is_warehouse_activity=True),
            _job("W2", is_warehouse_activity=True, status=JobStatus.REJECTED),
            _job("G1"),
        ]
        assert dock_slots_used("2025-01-06", jobs) == 1
        assert dock_slots_remaining("2025-01-06", jobs) == 4

    def test_remaining_never_negative(self):
        jobs = [_job(f"W{i}", is_warehouse_activity=True) for i in range(7)]
        assert dock_slots_remaining("2025-01-06", jobs) == 0
