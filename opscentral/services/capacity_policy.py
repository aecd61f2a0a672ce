"""
Date and capacity rules for scheduling.

All functions are pure. Dates are ISO `YYYY-MM-DD` strings, the same form the
`jobs.job_date` column and the settings maps use.
"""
from __future__ import annotations

import zoneinfo
from datetime import date, datetime
from typing import Iterable

from opscentral.core.config import settings as core_settings
from opscentral.schemas.job import JobRecord, JobStatus
from opscentral.schemas.settings import SystemSettings


def operational_today(now: datetime | None = None) -> str:
    """Today's date in the operational timezone (not the server's)."""
    tz = zoneinfo.ZoneInfo(core_settings.OPERATIONAL_TIMEZONE)
    current = now.astimezone(tz) if now is not None else datetime.now(tz)
    return current.date().isoformat()


def is_off_day(day: date, off_day: int | None = None) -> bool:
    off_day = core_settings.WEEKLY_OFF_DAY if off_day is None else off_day
    return day.weekday() == off_day


def is_holiday(day: str, settings: SystemSettings) -> bool:
    return day in settings.holidays


def capacity_for(day: str, settings: SystemSettings) -> int:
    limit = settings.daily_job_limits.get(day)
    if limit is None:
        return core_settings.DEFAULT_DAILY_JOB_LIMIT
    return int(limit)


def current_load(day: str, jobs: Iterable[JobRecord]) -> int:
    """Non-rejected, non-warehouse jobs booked on `day`."""
    return sum(
        1
        for job in jobs
        if job.job_date == day
        and job.status != JobStatus.REJECTED
        and not job.is_warehouse_activity
    )


def is_at_capacity(day: str, jobs: Iterable[JobRecord], settings: SystemSettings) -> bool:
    return current_load(day, jobs) >= capacity_for(day, settings)


# ── Warehouse dock slots ──────────────────────────────────────────────────────

def dock_slots_used(day: str, jobs: Iterable[JobRecord]) -> int:
    return sum(
        1
        for job in jobs
        if job.job_date == day
        and job.is_warehouse_activity
        and job.status != JobStatus.REJECTED
    )


def dock_slots_remaining(day: str, jobs: Iterable[JobRecord], limit: int | None = None) -> int:
    limit = core_settings.DOCK_SLOTS_PER_DAY if limit is None else limit
    return max(0, limit - dock_slots_used(day, jobs))
