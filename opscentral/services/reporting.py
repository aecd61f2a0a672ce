"""Read-only dashboard views over the cached job list and settings."""
from __future__ import annotations

from collections import Counter
from datetime import date, timedelta
from typing import Any, Iterable

from opscentral.core.config import settings as core_settings
from opscentral.schemas.job import JobRecord, JobStatus
from opscentral.schemas.settings import SystemSettings
from opscentral.services.capacity_policy import (
    capacity_for,
    current_load,
    dock_slots_remaining,
    dock_slots_used,
    is_holiday,
    is_off_day,
)


def day_summary(day: str, jobs: Iterable[JobRecord], settings: SystemSettings) -> dict[str, Any]:
    jobs = list(jobs)
    on_day = [job for job in jobs if job.job_date == day]
    by_status = Counter(job.status.value for job in on_day)
    limit = capacity_for(day, settings)
    load = current_load(day, jobs)
    return {
        "date": day,
        "holiday": is_holiday(day, settings),
        "off_day": is_off_day(date.fromisoformat(day)),
        "status_counts": {status.value: by_status.get(status.value, 0) for status in JobStatus},
        "load": load,
        "capacity": limit,
        "remaining": max(0, limit - load),
        "dock_slots_used": dock_slots_used(day, jobs),
        "dock_slots_remaining": dock_slots_remaining(day, jobs),
        "dock_slots_total": core_settings.DOCK_SLOTS_PER_DAY,
        "import_clearance": sum(1 for job in on_day if job.is_import_clearance),
        "transporter": sum(1 for job in on_day if job.is_transporter),
    }


def capacity_outlook(
    start: str,
    days: int,
    jobs: Iterable[JobRecord],
    settings: SystemSettings,
) -> list[dict[str, Any]]:
    jobs = list(jobs)
    first = date.fromisoformat(start)
    outlook = []
    for offset in range(max(0, days)):
        current = first + timedelta(days=offset)
        day = current.isoformat()
        limit = capacity_for(day, settings)
        load = current_load(day, jobs)
        outlook.append({
            "date": day,
            "load": load,
            "capacity": limit,
            "full": load >= limit,
            "holiday": is_holiday(day, settings),
            "off_day": is_off_day(current),
        })
    return outlook


def approval_queue(jobs: Iterable[JobRecord]) -> dict[str, list[JobRecord]]:
    queue: dict[str, list[JobRecord]] = {"additions": [], "deletions": []}
    for job in jobs:
        if job.status == JobStatus.PENDING_ADD:
            queue["additions"].append(job)
        elif job.status == JobStatus.PENDING_DELETE:
            queue["deletions"].append(job)
    return queue
