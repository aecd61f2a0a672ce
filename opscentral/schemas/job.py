"""
Job row schema.

`JobRecord` is the single deserialization boundary for rows read from the
`jobs` table. Older rows may carry nulls for list/flag columns, no duration,
or only the legacy comma-joined `vehicle` column; all of that is normalized
here so services never have to read rows defensively.
"""
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class JobStatus(str, Enum):
    PENDING_ADD = "PENDING_ADD"
    PENDING_DELETE = "PENDING_DELETE"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


class CustomsStatus(str, Enum):
    PENDING_DOCUMENTATION = "PENDING_DOCUMENTATION"
    SUBMITTED = "SUBMITTED"
    IN_REVIEW = "IN_REVIEW"
    CLEARED = "CLEARED"
    REJECTED_CUSTOMS = "REJECTED_CUSTOMS"


class TransporterStatus(str, Enum):
    SCHEDULED = "Scheduled"
    IN_TRANSIT = "In Transit"
    COMPLETED = "Completed"


class CustomsHistoryEntry(BaseModel):
    status: str
    updated_at: str
    updated_by: str


class TrackingStep(BaseModel):
    model_config = ConfigDict(extra="allow")

    notes: str = ""
    updated_at: Optional[str] = None


TRACKING_STEPS = {
    1: "Origin Country",
    2: "Customs Clearance",
    3: "International Transit",
    4: "Destination Customs",
    5: "Final Delivery",
}

_LIST_FIELDS = ("writer_crew", "vehicles", "customs_history", "drop_off_locations")
_FLAG_FIELDS = ("is_warehouse_activity", "is_import_clearance", "is_transporter", "is_locked")


def split_legacy_vehicle(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def join_legacy_vehicle(vehicles: list[str]) -> str | None:
    return ", ".join(vehicles) if vehicles else None


def _validate_iso_date(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    raw = str(value).strip()
    try:
        return date.fromisoformat(raw).isoformat()
    except ValueError as exc:
        raise ValueError(f"job_date must be YYYY-MM-DD, got {value!r}") from exc


class JobRecord(BaseModel):
    schema_version: ClassVar[int] = 2

    model_config = ConfigDict(extra="ignore")

    id: str
    title: Optional[str] = None
    shipper_name: Optional[str] = None
    shipper_phone: Optional[str] = None
    client_email: Optional[str] = None
    location: Optional[str] = None
    shipment_details: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    agent_name: Optional[str] = None
    loading_type: Optional[str] = None
    main_category: Optional[str] = None
    sub_category: Optional[str] = None
    shuttle: Optional[str] = None
    long_carry: Optional[str] = None
    special_requests: Optional[dict[str, bool]] = None
    volume_cbm: Optional[float] = None
    notes: Optional[str] = None

    job_date: str
    job_time: Optional[str] = None
    duration: int = 1

    status: JobStatus
    created_at: Optional[int] = None
    requester_id: Optional[str] = None
    assigned_to: Optional[str] = None

    is_warehouse_activity: bool = False
    is_import_clearance: bool = False
    is_transporter: bool = False
    is_locked: bool = False

    team_leader: Optional[str] = None
    writer_crew: list[str] = Field(default_factory=list)
    vehicles: list[str] = Field(default_factory=list)

    bol_number: Optional[str] = None
    container_number: Optional[str] = None
    customs_status: Optional[CustomsStatus] = None
    customs_history: list[CustomsHistoryEntry] = Field(default_factory=list)

    tracking_current_step: Optional[int] = None
    tracking_data: dict[str, TrackingStep] = Field(default_factory=dict)

    activity_name: Optional[str] = None

    drop_off_locations: list[str] = Field(default_factory=list)
    transporter_status: Optional[TransporterStatus] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_legacy_row(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        row = dict(data)
        if not row.get("vehicles"):
            row["vehicles"] = split_legacy_vehicle(row.get("vehicle"))
        for name in _LIST_FIELDS:
            if row.get(name) is None:
                row[name] = []
        for name in _FLAG_FIELDS:
            if row.get(name) is None:
                row[name] = False
        if row.get("tracking_data") is None:
            row["tracking_data"] = {}
        duration = row.get("duration")
        if duration is None or int(duration) < 1:
            row["duration"] = 1
        return row

    @field_validator("job_date")
    @classmethod
    def _job_date_is_iso(cls, value: str) -> str:
        return _validate_iso_date(value)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "JobRecord":
        return cls.model_validate(row)

    def to_row(self) -> dict[str, Any]:
        row = self.model_dump(mode="json")
        row["vehicle"] = join_legacy_vehicle(self.vehicles)
        return row


class JobDraft(BaseModel):
    """Job request as submitted by an operator, before expansion into slices."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    title: Optional[str] = None
    shipper_name: Optional[str] = None
    shipper_phone: Optional[str] = None
    client_email: Optional[str] = None
    location: Optional[str] = None
    shipment_details: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    agent_name: Optional[str] = None
    loading_type: Optional[str] = None
    main_category: Optional[str] = None
    sub_category: Optional[str] = None
    shuttle: Optional[str] = None
    long_carry: Optional[str] = None
    special_requests: Optional[dict[str, bool]] = None
    volume_cbm: Optional[float] = None
    notes: Optional[str] = None

    job_date: Optional[str] = None
    job_time: Optional[str] = None
    duration: Optional[int] = None
    status: Optional[JobStatus] = None
    assigned_to: Optional[str] = None

    is_warehouse_activity: bool = False
    is_import_clearance: bool = False
    is_transporter: bool = False

    team_leader: Optional[str] = None
    writer_crew: list[str] = Field(default_factory=list)
    vehicles: list[str] = Field(default_factory=list)
    vehicle: Optional[str] = None

    bol_number: Optional[str] = None
    container_number: Optional[str] = None
    customs_status: Optional[CustomsStatus] = None

    activity_name: Optional[str] = None
    drop_off_locations: list[str] = Field(default_factory=list)
    transporter_status: Optional[TransporterStatus] = None

    @field_validator("id")
    @classmethod
    def _strip_id(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Job No. is required")
        return stripped

    @field_validator("job_date")
    @classmethod
    def _job_date_is_iso(cls, value: Optional[str]) -> Optional[str]:
        return _validate_iso_date(value)


class JobAllocation(BaseModel):
    team_leader: str = ""
    vehicles: list[str] = Field(default_factory=list)
    writer_crew: list[str] = Field(default_factory=list)

    def to_values(self) -> dict[str, Any]:
        return {
            "team_leader": self.team_leader,
            "writer_crew": list(self.writer_crew),
            "vehicles": list(self.vehicles),
            "vehicle": join_legacy_vehicle(self.vehicles),
        }


# Columns an operator may not change through a general edit.
IMMUTABLE_FIELDS = frozenset({"id", "requester_id", "created_at"})
