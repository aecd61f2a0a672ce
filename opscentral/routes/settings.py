import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from opscentral.core.users import UserProfile
from opscentral.dependencies.viewer import get_state, require_viewer
from opscentral.schemas.settings import SystemAlert, SystemSettings
from opscentral.services.app_state import AppState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["settings"])


class DailyLimitUpdate(BaseModel):
    limit: int


class LogoUpdate(BaseModel):
    logo: Optional[str] = None


def _payload(current: SystemSettings) -> dict:
    return {"status": "ok", "settings": current.model_dump(mode="json")}


@router.get("")
async def get_settings(
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    return _payload(await state.refresh_settings())


@router.put("/daily-limits/{day}")
async def set_daily_limit(
    day: str,
    body: DailyLimitUpdate,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    return _payload(await state.set_daily_limit(day, body.limit, viewer))


@router.post("/holidays/{day}")
async def toggle_holiday(
    day: str,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    return _payload(await state.toggle_holiday(day, viewer))


@router.put("/logo")
async def update_logo(
    body: LogoUpdate,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    return _payload(await state.update_logo(body.logo, viewer))


@router.put("/alert")
async def set_alert(
    alert: SystemAlert,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    return _payload(await state.set_system_alert(alert, viewer))


@router.delete("/alert")
async def clear_alert(
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    return _payload(await state.set_system_alert(None, viewer))
