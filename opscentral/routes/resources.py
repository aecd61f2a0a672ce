import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from opscentral.core.users import UserProfile
from opscentral.dependencies.viewer import get_state, require_viewer
from opscentral.schemas.resources import PersonnelCreate, PersonnelStatus, VehicleCreate, VehicleStatus
from opscentral.services.app_state import AppState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/resources", tags=["resources"])


class PersonnelStatusUpdate(BaseModel):
    status: PersonnelStatus


class VehicleStatusUpdate(BaseModel):
    status: VehicleStatus


@router.get("")
async def list_resources(
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    await state.refresh_resources()
    return {
        "status": "ok",
        "personnel": [p.model_dump(mode="json") for p in state.personnel],
        "vehicles": [v.model_dump(mode="json") for v in state.vehicles],
    }


# ── Personnel ─────────────────────────────────────────────────────────────────

@router.post("/personnel")
async def add_personnel(
    person: PersonnelCreate,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> JSONResponse:
    new_id = await state.add_personnel(person, viewer)
    return JSONResponse(status_code=201, content={"status": "ok", "id": new_id})


@router.patch("/personnel/{person_id}")
async def update_personnel_status(
    person_id: str,
    body: PersonnelStatusUpdate,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    await state.update_personnel_status(person_id, body.status, viewer)
    return {"status": "ok"}


@router.delete("/personnel/{person_id}")
async def delete_personnel(
    person_id: str,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    await state.delete_personnel(person_id, viewer)
    return {"status": "ok"}


# ── Vehicles ──────────────────────────────────────────────────────────────────

@router.post("/vehicles")
async def add_vehicle(
    vehicle: VehicleCreate,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> JSONResponse:
    new_id = await state.add_vehicle(vehicle, viewer)
    return JSONResponse(status_code=201, content={"status": "ok", "id": new_id})


@router.patch("/vehicles/{vehicle_id}")
async def update_vehicle_status(
    vehicle_id: str,
    body: VehicleStatusUpdate,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    await state.update_vehicle_status(vehicle_id, body.status, viewer)
    return {"status": "ok"}


@router.delete("/vehicles/{vehicle_id}")
async def delete_vehicle(
    vehicle_id: str,
    viewer: UserProfile = Depends(require_viewer),
    state: AppState = Depends(get_state),
) -> dict:
    await state.delete_vehicle(vehicle_id, viewer)
    return {"status": "ok"}
