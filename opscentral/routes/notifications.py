import logging

from fastapi import APIRouter, Depends

from opscentral.core.users import UserProfile
from opscentral.dependencies.viewer import get_state, require_viewer
from opscentral.services.app_state import AppState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    """Newest first. Does not mark anything read."""
    notifications = await state.notifications_for(viewer.employee_id)
    return {
        "unread_count": sum(1 for n in notifications if not n.read),
        "notifications": [n.model_dump() for n in notifications],
    }


@router.post("/open")
async def open_panel(
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    """Opening the panel marks every notification read."""
    notifications = await state.open_notifications(viewer.employee_id)
    return {"unread_count": 0, "notifications": [n.model_dump() for n in notifications]}
