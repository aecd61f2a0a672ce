import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from opscentral.core.users import UserProfile
from opscentral.dependencies.viewer import get_state, require_viewer
from opscentral.services.app_state import AppState
from opscentral.services.capacity_policy import operational_today
from opscentral.services.reporting import capacity_outlook, day_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def _bad_date(value: str) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"status": "error", "message": f"Date must be YYYY-MM-DD, got {value!r}"},
    )


def _valid(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


@router.get("/summary")
async def summary(
    day: Optional[str] = Query(default=None, alias="date"),
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
):
    day = day or operational_today()
    if not _valid(day):
        return _bad_date(day)
    await state.refresh_settings()
    jobs = await state.refresh_jobs()
    return {"status": "ok", "summary": day_summary(day, jobs, state.settings)}


@router.get("/outlook")
async def outlook(
    start: Optional[str] = None,
    days: int = Query(default=7, ge=1, le=60),
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
):
    start = start or operational_today()
    if not _valid(start):
        return _bad_date(start)
    await state.refresh_settings()
    jobs = await state.refresh_jobs()
    return {"status": "ok", "days": capacity_outlook(start, days, jobs, state.settings)}
