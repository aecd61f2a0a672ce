import logging
import uuid

from opscentral.repositories.table_client import TableClient
from opscentral.schemas.resources import (
    Personnel,
    PersonnelCreate,
    PersonnelStatus,
    Vehicle,
    VehicleCreate,
    VehicleStatus,
)

logger = logging.getLogger(__name__)

PERSONNEL_TABLE = "personnel"
VEHICLES_TABLE = "vehicles"


# ---------------------------------------------------------------------------
# Personnel
# ---------------------------------------------------------------------------

def fetch_personnel(client: TableClient) -> list[Personnel]:
    return [Personnel.from_row(row) for row in client.select(PERSONNEL_TABLE, order_by="name")]


def add_personnel(client: TableClient, person: PersonnelCreate) -> str:
    new_id = str(uuid.uuid4())
    client.insert(PERSONNEL_TABLE, [{"id": new_id, **person.model_dump(mode="json")}])
    logger.info("personnel: added id=%s name=%s", new_id, person.name)
    return new_id


def update_personnel_status(client: TableClient, person_id: str, status: PersonnelStatus) -> None:
    client.update(PERSONNEL_TABLE, {"status": status.value}, {"id": person_id})


def delete_personnel(client: TableClient, person_id: str) -> None:
    client.delete(PERSONNEL_TABLE, {"id": person_id})


# ---------------------------------------------------------------------------
# Vehicles
# ---------------------------------------------------------------------------

def fetch_vehicles(client: TableClient) -> list[Vehicle]:
    return [Vehicle.from_row(row) for row in client.select(VEHICLES_TABLE, order_by="name")]


def add_vehicle(client: TableClient, vehicle: VehicleCreate) -> str:
    new_id = str(uuid.uuid4())
    client.insert(VEHICLES_TABLE, [{"id": new_id, **vehicle.model_dump(mode="json")}])
    logger.info("vehicles: added id=%s plate=%s", new_id, vehicle.plate)
    return new_id


def update_vehicle_status(client: TableClient, vehicle_id: str, status: VehicleStatus) -> None:
    client.update(VEHICLES_TABLE, {"status": status.value}, {"id": vehicle_id})


def delete_vehicle(client: TableClient, vehicle_id: str) -> None:
    client.delete(VEHICLES_TABLE, {"id": vehicle_id})
