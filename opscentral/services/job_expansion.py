"""
Multi-day job expansion.

A job request covers `duration` working days starting at `job_date`. Each
working day becomes its own row (a "slice"): the weekly off-day is skipped
without consuming a day, while a holiday or a full day anywhere in the span
rejects the whole request before anything is written.

Slice ids: the first day keeps the requested Job No., following days get
`-D2`, `-D3`, ... and any id already taken (persisted or staged in the same
batch) gets `-1`, `-2`, ... appended until it is free.
"""
from __future__ import annotations

import logging
import time
from datetime import date, timedelta
from typing import Any, Iterable

from opscentral.core.config import settings as core_settings
from opscentral.core.users import UserProfile
from opscentral.repositories import job_repo
from opscentral.repositories.errors import UniqueViolationError
from opscentral.repositories.table_client import TableClient
from opscentral.schemas.job import (
    CustomsStatus,
    JobDraft,
    JobRecord,
    JobStatus,
    TransporterStatus,
    split_legacy_vehicle,
)
from opscentral.schemas.settings import SystemSettings
from opscentral.services.capacity_policy import (
    capacity_for,
    current_load,
    dock_slots_used,
    is_holiday,
    is_off_day,
    operational_today,
)

logger = logging.getLogger(__name__)


class JobCreationError(Exception):
    """Base class for job requests rejected before or during the batch write."""


class HolidayBlockedError(JobCreationError):
    def __init__(self, day: str):
        self.day = day
        super().__init__(f"{day} is a public holiday. Jobs cannot be scheduled on holidays.")


class CapacityExceededError(JobCreationError):
    def __init__(self, day: str, limit: int, message: str | None = None):
        self.day = day
        self.limit = limit
        super().__init__(
            message or f"Daily limit of {limit} reached for {day}. Cannot schedule multi-day job."
        )


class DockSlotsFullError(CapacityExceededError):
    def __init__(self, day: str, limit: int):
        super().__init__(day, limit, f"All {limit} dock slots are booked for {day}.")


class ExpansionLimitError(JobCreationError):
    pass


class JobIdCollisionError(JobCreationError):
    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(
            f"A job with ID {job_id} already exists. Please use a unique Job No. and try again."
        )


_SLICE_EXCLUDED_FIELDS = {"id", "title", "duration", "status", "job_date", "vehicle", "vehicles"}


def normalize_duration(value: int | None) -> int:
    if not value or value < 1:
        return 1
    return int(value)


def resolve_slice_id(candidate: str, taken: set[str]) -> str:
    if candidate not in taken:
        return candidate
    suffix = 1
    while f"{candidate}-{suffix}" in taken:
        suffix += 1
    return f"{candidate}-{suffix}"


def _initial_status(draft: JobDraft, requester: UserProfile) -> JobStatus:
    if draft.status is not None:
        return draft.status
    return JobStatus.ACTIVE if requester.is_admin else JobStatus.PENDING_ADD


def _shared_fields(draft: JobDraft) -> dict[str, Any]:
    fields = draft.model_dump(exclude=_SLICE_EXCLUDED_FIELDS)
    fields["assigned_to"] = draft.assigned_to or "Unassigned"
    fields["priority"] = draft.priority or "LOW"
    fields["description"] = draft.description or "N/A"
    fields["shipment_details"] = draft.shipment_details or "N/A"
    fields["vehicles"] = list(draft.vehicles) or split_legacy_vehicle(draft.vehicle)
    if draft.is_import_clearance and draft.customs_status is None:
        fields["customs_status"] = CustomsStatus.PENDING_DOCUMENTATION
    if draft.is_transporter and draft.transporter_status is None:
        fields["transporter_status"] = TransporterStatus.SCHEDULED
    return fields


def _check_day_open(day: str, draft: JobDraft, jobs: list[JobRecord], settings: SystemSettings) -> None:
    if is_holiday(day, settings):
        raise HolidayBlockedError(day)

    if draft.is_warehouse_activity:
        limit = core_settings.DOCK_SLOTS_PER_DAY
        if dock_slots_used(day, jobs) >= limit:
            raise DockSlotsFullError(day, limit)
        return

    limit = capacity_for(day, settings)
    if current_load(day, jobs) >= limit:
        raise CapacityExceededError(day, limit)


def expand_job(
    draft: JobDraft,
    *,
    jobs: Iterable[JobRecord],
    settings: SystemSettings,
    requester: UserProfile,
    today: str | None = None,
    now_ms: int | None = None,
) -> list[JobRecord]:
    """Materialize every slice of `draft` or raise without producing any."""
    existing = list(jobs)
    duration = normalize_duration(draft.duration)
    current = date.fromisoformat(draft.job_date or today or operational_today())
    created_at = now_ms if now_ms is not None else int(time.time() * 1000)
    status = _initial_status(draft, requester)
    shared = _shared_fields(draft)

    taken = {job.id for job in existing}
    slices: list[JobRecord] = []
    max_iterations = core_settings.EXPANSION_ITERATION_FACTOR * duration
    iterations = 0

    while len(slices) < duration:
        if iterations >= max_iterations:
            raise ExpansionLimitError(
                f"Could not place {duration} working day(s) from {draft.job_date or today} "
                f"within {max_iterations} calendar days."
            )
        iterations += 1

        if is_off_day(current):
            current += timedelta(days=1)
            continue

        day = current.isoformat()
        _check_day_open(day, draft, existing, settings)

        day_number = len(slices) + 1
        candidate = draft.id if day_number == 1 else f"{draft.id}-D{day_number}"
        slice_id = resolve_slice_id(candidate, taken)
        taken.add(slice_id)

        slices.append(
            JobRecord(
                **shared,
                id=slice_id,
                title=slice_id,
                job_date=day,
                duration=duration,
                status=status,
                created_at=created_at,
                requester_id=requester.employee_id,
                is_locked=False,
            )
        )
        current += timedelta(days=1)

    return slices


def create_jobs(
    client: TableClient,
    draft: JobDraft,
    *,
    jobs: Iterable[JobRecord],
    settings: SystemSettings,
    requester: UserProfile,
    today: str | None = None,
) -> list[JobRecord]:
    """Expand `draft` and persist every slice in a single batch."""
    slices = expand_job(draft, jobs=jobs, settings=settings, requester=requester, today=today)
    try:
        job_repo.insert_jobs(client, slices)
    except UniqueViolationError as exc:
        logger.warning("jobs: id collision creating %s: %s", draft.id, exc)
        raise JobIdCollisionError(draft.id) from exc
    logger.info(
        "jobs: created %d slice(s) for %s requester=%s status=%s",
        len(slices), draft.id, requester.employee_id, slices[0].status.value,
    )
    return slices
