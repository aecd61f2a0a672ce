from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class SystemAlert(BaseModel):
    active: bool = False
    title: str = ""
    message: str = ""
    type: Literal["info", "warning", "error", "maintenance"] = "info"


class SystemSettings(BaseModel):
    daily_job_limits: dict[str, int] = Field(default_factory=dict)
    holidays: list[str] = Field(default_factory=list)
    company_logo: Optional[str] = None
    system_alert: Optional[SystemAlert] = None

    @field_validator("daily_job_limits", "holidays", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any, info) -> Any:
        if value is None:
            return {} if info.field_name == "daily_job_limits" else []
        return value

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "SystemSettings":
        return cls.model_validate(row)

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
