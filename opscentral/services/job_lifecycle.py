"""
Job lifecycle transitions.

    (create) ──> PENDING_ADD ──approve──> ACTIVE ──delete (non-admin)──> PENDING_DELETE
                     │                      ▲                               │    │
                     └──reject──> REJECTED  └───────────reject──────────────┘    │
                                                                   approve ──> (row removed)

An admin delete removes the row outright from any status and ignores the lock.
COMPLETED is set outside this module and is terminal.

Each `plan_*` function validates against the job as currently cached and
returns a Mutation describing the single write to make. Nothing here touches
the store except `apply_mutation`, so a rejected transition never writes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from pydantic import ValidationError

from opscentral.core.users import UserProfile
from opscentral.repositories import job_repo
from opscentral.repositories.table_client import TableClient
from opscentral.schemas.job import (
    IMMUTABLE_FIELDS,
    TRACKING_STEPS,
    CustomsStatus,
    JobAllocation,
    JobRecord,
    JobStatus,
    TransporterStatus,
    join_legacy_vehicle,
)

logger = logging.getLogger(__name__)

UPDATE = "update"
DELETE = "delete"


class LifecycleError(Exception):
    pass


class JobNotFoundError(LifecycleError):
    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job {job_id} not found.")


class JobLockedError(LifecycleError):
    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job {job_id} is locked and cannot be removed.")


class InvalidTransitionError(LifecycleError):
    pass


class InvalidFieldError(LifecycleError):
    pass


@dataclass(frozen=True)
class Mutation:
    job_id: str
    action: str
    values: dict[str, Any] = field(default_factory=dict)
    event: str = ""


def find_job(jobs: Iterable[JobRecord], job_id: str) -> JobRecord:
    for job in jobs:
        if job.id == job_id:
            return job
    raise JobNotFoundError(job_id)


# ── Approvals / deletion ──────────────────────────────────────────────────────

def plan_approval(job: JobRecord, approved: bool, allocation: JobAllocation | None = None) -> Mutation:
    if job.status == JobStatus.PENDING_ADD:
        new_status = JobStatus.ACTIVE if approved else JobStatus.REJECTED
        values: dict[str, Any] = {"status": new_status.value}
        if allocation is not None:
            values.update(allocation.to_values())
        return Mutation(job.id, UPDATE, values, event="approved" if approved else "rejected")

    if job.status == JobStatus.PENDING_DELETE:
        if approved:
            return Mutation(job.id, DELETE, event="delete_approved")
        return Mutation(job.id, UPDATE, {"status": JobStatus.ACTIVE.value}, event="delete_rejected")

    raise InvalidTransitionError(
        f"Job {job.id} is {job.status.value}; only pending requests can be approved or rejected."
    )


def plan_delete(job: JobRecord, actor: UserProfile) -> Mutation:
    if actor.is_admin:
        return Mutation(job.id, DELETE, event="deleted_by_admin")

    if job.is_locked:
        raise JobLockedError(job.id)

    if job.status != JobStatus.ACTIVE:
        raise InvalidTransitionError(
            f"Job {job.id} is {job.status.value}; only active jobs can be submitted for deletion."
        )
    return Mutation(job.id, UPDATE, {"status": JobStatus.PENDING_DELETE.value}, event="delete_requested")


# ── Allocation / lock ─────────────────────────────────────────────────────────

def plan_allocation(job: JobRecord, allocation: JobAllocation) -> Mutation:
    return Mutation(job.id, UPDATE, allocation.to_values(), event="allocation_updated")


def plan_lock_toggle(job: JobRecord) -> Mutation:
    return Mutation(job.id, UPDATE, {"is_locked": not job.is_locked}, event="lock_toggled")


# ── Customs / tracking / transporter ──────────────────────────────────────────

def plan_customs_update(
    job: JobRecord,
    status: CustomsStatus,
    actor: UserProfile,
    updated_at: str,
) -> Mutation:
    if not job.is_import_clearance:
        raise InvalidTransitionError(f"Job {job.id} is not an import clearance job.")
    history = [entry.model_dump() for entry in job.customs_history]
    history.append({"status": status.value, "updated_at": updated_at, "updated_by": actor.name})
    return Mutation(
        job.id,
        UPDATE,
        {"customs_status": status.value, "customs_history": history},
        event="customs_updated",
    )


def _check_tracking_step(step: int) -> None:
    if step not in TRACKING_STEPS:
        raise InvalidFieldError(f"Tracking step must be between 1 and {len(TRACKING_STEPS)}, got {step}.")


def plan_tracking_notes(job: JobRecord, step: int, notes: str, updated_at: str) -> Mutation:
    _check_tracking_step(step)
    tracking_data = {key: value.model_dump() for key, value in job.tracking_data.items()}
    tracking_data[str(step)] = {"notes": notes, "updated_at": updated_at}
    return Mutation(job.id, UPDATE, {"tracking_data": tracking_data}, event="tracking_notes_saved")


def plan_tracking_step(job: JobRecord, step: int) -> Mutation:
    _check_tracking_step(step)
    return Mutation(job.id, UPDATE, {"tracking_current_step": step}, event="tracking_step_set")


def plan_transporter_status(job: JobRecord, status: TransporterStatus) -> Mutation:
    if not job.is_transporter:
        raise InvalidTransitionError(f"Job {job.id} is not a transporter service.")
    return Mutation(job.id, UPDATE, {"transporter_status": status.value}, event="transporter_status_set")


# ── General edit ──────────────────────────────────────────────────────────────

# Status, lock, customs, tracking and transporter state each move only through
# their own plan_* function above.
EDIT_FORBIDDEN_FIELDS = IMMUTABLE_FIELDS | {
    "status",
    "is_locked",
    "customs_status",
    "customs_history",
    "tracking_current_step",
    "tracking_data",
    "transporter_status",
}


def plan_edit(job: JobRecord, changes: dict[str, Any]) -> Mutation:
    """Edit descriptive/scheduling fields. Status moves only through transitions."""
    forbidden = sorted(set(changes) & EDIT_FORBIDDEN_FIELDS)
    if forbidden:
        raise InvalidFieldError(f"Fields cannot be edited: {', '.join(forbidden)}")
    unknown = sorted(set(changes) - set(JobRecord.model_fields))
    if unknown:
        raise InvalidFieldError(f"Unknown job fields: {', '.join(unknown)}")
    if not changes:
        raise InvalidFieldError("No changes supplied.")

    try:
        merged = JobRecord.model_validate({**job.model_dump(), **changes})
    except ValidationError as exc:
        raise InvalidFieldError(str(exc)) from exc

    row = merged.to_row()
    values = {name: row[name] for name in changes}
    if "vehicles" in changes:
        values["vehicle"] = join_legacy_vehicle(merged.vehicles)
    return Mutation(job.id, UPDATE, values, event="edited")


# ── Applying ──────────────────────────────────────────────────────────────────

def apply_mutation(client: TableClient, mutation: Mutation) -> None:
    if mutation.action == DELETE:
        job_repo.delete_job(client, mutation.job_id)
    else:
        job_repo.update_job(client, mutation.job_id, mutation.values)
    logger.info("jobs: %s id=%s", mutation.event or mutation.action, mutation.job_id)


def apply_locally(jobs: list[JobRecord], mutation: Mutation) -> list[JobRecord]:
    """Return `jobs` with `mutation` applied in memory (used for optimistic updates)."""
    if mutation.action == DELETE:
        return [job for job in jobs if job.id != mutation.job_id]
    updated = []
    for job in jobs:
        if job.id == mutation.job_id:
            job = JobRecord.model_validate({**job.model_dump(), **mutation.values})
        updated.append(job)
    return updated
