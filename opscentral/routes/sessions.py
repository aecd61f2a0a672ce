import logging

from fastapi import APIRouter, Depends

from opscentral.core.users import UserProfile
from opscentral.dependencies.viewer import get_registry, get_state, require_viewer
from opscentral.services.app_state import AppState, PermissionDeniedError
from opscentral.services.poller import PollerRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.post("")
async def start_session(
    viewer: UserProfile = Depends(require_viewer),
    registry: PollerRegistry = Depends(get_registry),
) -> dict:
    poller = registry.start(viewer.employee_id)
    return {"status": "ok", "viewer": viewer.employee_id, "interval_seconds": poller.interval_seconds}


@router.delete("")
async def stop_session(
    viewer: UserProfile = Depends(require_viewer),
    registry: PollerRegistry = Depends(get_registry),
) -> dict:
    stopped = await registry.stop(viewer.employee_id)
    return {"status": "ok", "stopped": stopped}


@router.post("/poll")
async def poll_now(
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    """Run one poll cycle immediately for the caller."""
    fresh = await state.poll_once(viewer.employee_id)
    return {"status": "ok", "new": [n.model_dump() for n in fresh]}


@router.get("")
async def active_sessions(
    viewer: UserProfile = Depends(require_viewer),
    registry: PollerRegistry = Depends(get_registry),
) -> dict:
    if not viewer.is_admin:
        raise PermissionDeniedError(viewer, "session overview")
    return {"status": "ok", "viewers": registry.active_viewers()}
