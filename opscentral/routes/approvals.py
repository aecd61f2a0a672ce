import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from opscentral.core.users import UserProfile
from opscentral.dependencies.viewer import get_state, require_viewer
from opscentral.schemas.job import JobAllocation
from opscentral.services.app_state import AppState, PermissionDeniedError
from opscentral.services.reporting import approval_queue

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/approvals", tags=["approvals"])


class ApprovalDecision(BaseModel):
    approved: bool
    allocation: Optional[JobAllocation] = None


@router.get("")
async def list_queue(
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    if not viewer.can("approvals"):
        raise PermissionDeniedError(viewer, "approvals")
    queue = approval_queue(await state.refresh_jobs())
    return {
        "status": "ok",
        "additions": [job.model_dump(mode="json") for job in queue["additions"]],
        "deletions": [job.model_dump(mode="json") for job in queue["deletions"]],
    }


@router.post("/{job_id}")
async def decide(
    job_id: str,
    decision: ApprovalDecision,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    mutation = await state.decide_approval(job_id, decision.approved, viewer, decision.allocation)
    return {"status": "ok", "result": mutation.event}
