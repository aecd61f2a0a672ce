from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class PersonnelType(str, Enum):
    TEAM_LEADER = "Team Leader"
    WRITER_CREW = "Writer Crew"
    DRIVER = "Driver"


class PersonnelStatus(str, Enum):
    AVAILABLE = "Available"
    ANNUAL_LEAVE = "Annual Leave"
    SICK_LEAVE = "Sick Leave"
    PERSONAL_LEAVE = "Personal Leave"


class VehicleStatus(str, Enum):
    AVAILABLE = "Available"
    OUT_OF_SERVICE = "Out of Service"
    MAINTENANCE = "Maintenance"


class PersonnelCreate(BaseModel):
    employee_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    type: PersonnelType
    status: PersonnelStatus = PersonnelStatus.AVAILABLE
    emirates_id: str = Field(min_length=1)
    license_number: Optional[str] = None


class Personnel(PersonnelCreate):
    id: str

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Personnel":
        return cls.model_validate(row)


class VehicleCreate(BaseModel):
    name: str = Field(min_length=1)
    plate: str = Field(min_length=1)
    status: VehicleStatus = VehicleStatus.AVAILABLE


class Vehicle(VehicleCreate):
    id: str

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Vehicle":
        return cls.model_validate(row)
