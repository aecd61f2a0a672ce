"""Tests for opscentral/repositories/settings_repo.py and services/settings_service.py

Run with:  pytest tests/test_settings_repo.py -v
"""

import pytest

from opscentral.repositories.errors import StoreError, UniqueViolationError
from opscentral.repositories.settings_repo import fetch_settings, update_settings
from opscentral.schemas.settings import SystemAlert, SystemSettings
from opscentral.services.settings_service import (
    SettingsError,
    alert_values,
    daily_limit_values,
    holiday_toggle_values,
    logo_values,
)


# ── Helpers ────────────────────────────────────────────────────────────────────

class FlakyClient:
    """select_one fails `failures` times, then returns `row`."""

    def __init__(self, failures, row=None, error=StoreError("connection reset")):
        self.failures = failures
        self.row = row
        self.error = error
        self.calls = 0
        self.inserted = []

    def select_one(self, table, filters):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.row

    def insert(self, table, rows):
        self.inserted.extend(rows)
        return len(rows)


class RecordingSleep:
    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


# ── fetch_settings ─────────────────────────────────────────────────────────────

class TestFetchSettings:
    def test_missing_row_bootstrapped(self, client):
        settings = fetch_settings(client, sleep=RecordingSleep())
        assert settings == SystemSettings()
        row = client.select_one("system_settings", {"id": 1})
        assert row is not None
        assert row["holidays"] == []

    def test_existing_row_read(self, client):
        client.insert("system_settings", [{"id": 1, "daily_job_limits": {"2025-01-06": 4}, "holidays": ["2025-12-02"]}])
        settings = fetch_settings(client)
        assert settings.daily_job_limits == {"2025-01-06": 4}
        assert settings.holidays == ["2025-12-02"]

    def test_null_columns_normalized(self, client):
        client.insert("system_settings", [{"id": 1, "daily_job_limits": None, "holidays": None}])
        settings = fetch_settings(client)
        assert settings.daily_job_limits == {}
        assert settings.holidays == []

    def test_transient_failures_retried_with_fixed_delay(self):
        flaky = FlakyClient(failures=2, row={"id": 1, "holidays": ["2025-12-02"]})
        sleep = RecordingSleep()
        settings = fetch_settings(flaky, attempts=3, delay_seconds=1.0, sleep=sleep)
        assert settings.holidays == ["2025-12-02"]
        assert flaky.calls == 3
        assert sleep.delays == [1.0, 1.0]

    def test_gives_up_with_defaults(self):
        flaky = FlakyClient(failures=10)
        sleep = RecordingSleep()
        settings = fetch_settings(flaky, attempts=3, delay_seconds=0.5, sleep=sleep)
        assert settings == SystemSettings()
        assert flaky.calls == 3
        assert sleep.delays == [0.5, 0.5]

    def test_concurrent_bootstrap_rereads(self):
        flaky = FlakyClient(failures=1, row={"id": 1}, error=UniqueViolationError("duplicate key"))
        sleep = RecordingSleep()
        fetch_settings(flaky, attempts=3, sleep=sleep)
        assert flaky.calls == 2
        assert sleep.delays == []

    def test_update_settings(self, client):
        fetch_settings(client)
        update_settings(client, {"holidays": ["2025-12-03"]})
        assert fetch_settings(client).holidays == ["2025-12-03"]


# ── settings_service ───────────────────────────────────────────────────────────

class TestSettingsService:
    def test_daily_limit(self):
        values = daily_limit_values(SystemSettings(daily_job_limits={"2025-01-07": 2}), "2025-01-06", 4)
        assert values == {"daily_job_limits": {"2025-01-07": 2, "2025-01-06": 4}}

    def test_negative_limit_rejected(self):
        with pytest.raises(SettingsError):
            daily_limit_values(SystemSettings(), "2025-01-06", -1)

    def test_bad_date_rejected(self):
        with pytest.raises(SettingsError):
            daily_limit_values(SystemSettings(), "tomorrow", 3)

    def test_holiday_added_closes_day(self):
        values = holiday_toggle_values(SystemSettings(), "2025-12-02")
        assert values == {"holidays": ["2025-12-02"], "daily_job_limits": {"2025-12-02": 0}}

    def test_holiday_removed_restores_default(self):
        current = SystemSettings(holidays=["2025-12-02"], daily_job_limits={"2025-12-02": 0})
        values = holiday_toggle_values(current, "2025-12-02")
        assert values == {"holidays": [], "daily_job_limits": {"2025-12-02": 10}}

    def test_logo_and_alert(self):
        assert logo_values("") == {"company_logo": None}
        assert alert_values(None) == {"system_alert": None}
        alert = SystemAlert(active=True, title="Maintenance", message="Down at 22:00", type="maintenance")
        assert alert_values(alert)["system_alert"]["type"] == "maintenance"
