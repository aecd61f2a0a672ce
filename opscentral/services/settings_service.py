"""
Capacity/holiday/branding administration on the system_settings row.

Each helper computes the column values to write from the current settings;
the caller writes them and re-fetches.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Optional

from opscentral.core.config import settings as core_settings
from opscentral.schemas.settings import SystemAlert, SystemSettings


class SettingsError(ValueError):
    pass


def _check_day(day: str) -> str:
    try:
        return date.fromisoformat(day.strip()).isoformat()
    except (AttributeError, ValueError) as exc:
        raise SettingsError(f"Date must be YYYY-MM-DD, got {day!r}") from exc


def daily_limit_values(current: SystemSettings, day: str, limit: int) -> dict[str, Any]:
    day = _check_day(day)
    if limit < 0:
        raise SettingsError("Daily job limit cannot be negative.")
    limits = dict(current.daily_job_limits)
    limits[day] = int(limit)
    return {"daily_job_limits": limits}


def holiday_toggle_values(current: SystemSettings, day: str) -> dict[str, Any]:
    """Adding a holiday closes the day (limit 0); removing it restores the default."""
    day = _check_day(day)
    holidays = list(current.holidays)
    limits = dict(current.daily_job_limits)
    if day in holidays:
        holidays.remove(day)
        limits[day] = core_settings.DEFAULT_DAILY_JOB_LIMIT
    else:
        holidays.append(day)
        holidays.sort()
        limits[day] = 0
    return {"holidays": holidays, "daily_job_limits": limits}


def logo_values(logo: Optional[str]) -> dict[str, Any]:
    return {"company_logo": logo or None}


def alert_values(alert: Optional[SystemAlert]) -> dict[str, Any]:
    if alert is None:
        return {"system_alert": None}
    return {"system_alert": alert.model_dump(mode="json")}
