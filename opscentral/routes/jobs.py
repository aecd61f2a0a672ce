import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from opscentral.core.users import UserProfile
from opscentral.dependencies.viewer import get_state, require_viewer
from opscentral.schemas.job import (
    CustomsStatus,
    JobAllocation,
    JobDraft,
    JobRecord,
    TransporterStatus,
)
from opscentral.services.app_state import AppState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


class CustomsUpdate(BaseModel):
    status: CustomsStatus


class TrackingNotes(BaseModel):
    notes: str = ""


class TrackingStepUpdate(BaseModel):
    step: int


class TransporterUpdate(BaseModel):
    status: TransporterStatus


def _job_payload(job: JobRecord) -> dict[str, Any]:
    return job.model_dump(mode="json")


@router.get("")
async def list_jobs(
    job_date: Optional[str] = Query(default=None, alias="date"),
    mine: bool = False,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    jobs = await state.refresh_jobs()
    if job_date:
        jobs = [job for job in jobs if job.job_date == job_date]
    if mine:
        jobs = [job for job in jobs if job.requester_id == viewer.employee_id]
    return {"status": "ok", "count": len(jobs), "jobs": [_job_payload(job) for job in jobs]}


@router.post("")
async def create_job(
    draft: JobDraft,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> JSONResponse:
    await state.refresh_settings()
    await state.refresh_jobs()
    slices = await state.create_job(draft, viewer)
    return JSONResponse(
        status_code=201,
        content={"status": "ok", "jobs": [_job_payload(job) for job in slices]},
    )


@router.patch("/{job_id}")
async def edit_job(
    job_id: str,
    changes: dict[str, Any] = Body(...),
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    job = await state.edit_job(job_id, changes, viewer)
    return {"status": "ok", "job": _job_payload(job)}


@router.put("/{job_id}/allocation")
async def update_allocation(
    job_id: str,
    allocation: JobAllocation,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    await state.update_allocation(job_id, allocation, viewer)
    return {"status": "ok"}


@router.post("/{job_id}/lock")
async def toggle_lock(
    job_id: str,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    locked = await state.toggle_lock(job_id, viewer)
    return {"status": "ok", "is_locked": locked}


@router.delete("/{job_id}")
async def delete_job(
    job_id: str,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    mutation = await state.delete_job(job_id, viewer)
    return {"status": "ok", "result": mutation.event}


@router.post("/{job_id}/customs")
async def update_customs(
    job_id: str,
    body: CustomsUpdate,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    await state.update_customs(job_id, body.status, viewer)
    return {"status": "ok"}


@router.put("/{job_id}/tracking/{step}")
async def save_tracking_notes(
    job_id: str,
    step: int,
    body: TrackingNotes,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    job = await state.save_tracking_notes(job_id, step, body.notes, viewer)
    return {"status": "ok", "job": _job_payload(job)}


@router.put("/{job_id}/tracking-step")
async def set_tracking_step(
    job_id: str,
    body: TrackingStepUpdate,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    await state.set_tracking_step(job_id, body.step, viewer)
    return {"status": "ok"}


@router.put("/{job_id}/transporter-status")
async def set_transporter_status(
    job_id: str,
    body: TransporterUpdate,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    await state.set_transporter_status(job_id, body.status, viewer)
    return {"status": "ok"}
