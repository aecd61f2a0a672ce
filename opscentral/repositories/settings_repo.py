"""
system_settings singleton: fetch (with bootstrap + bounded retry) and update.

This is the only read path with a retry policy. A missing row is created with
defaults and read back; transient store failures are retried with a fixed
delay. When every attempt fails the defaults are returned and the failure is
only logged.
"""
import logging
import time
from typing import Any, Callable

from opscentral.core.config import settings as core_settings
from opscentral.repositories.errors import StoreError, UniqueViolationError
from opscentral.repositories.table_client import TableClient
from opscentral.schemas.settings import SystemSettings

logger = logging.getLogger(__name__)

SETTINGS_TABLE = "system_settings"


def fetch_settings(
    client: TableClient,
    *,
    row_id: int | None = None,
    attempts: int | None = None,
    delay_seconds: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> SystemSettings:
    row_id = row_id if row_id is not None else core_settings.SETTINGS_ROW_ID
    attempts = max(1, attempts if attempts is not None else core_settings.SETTINGS_FETCH_ATTEMPTS)
    delay_seconds = delay_seconds if delay_seconds is not None else core_settings.SETTINGS_RETRY_DELAY_SECONDS

    for attempt in range(1, attempts + 1):
        try:
            row = client.select_one(SETTINGS_TABLE, {"id": row_id})
            if row is not None:
                return SystemSettings.from_row(row)

            logger.info("settings: row id=%s missing, bootstrapping defaults", row_id)
            client.insert(SETTINGS_TABLE, [{"id": row_id, **SystemSettings().to_row()}])
            continue
        except UniqueViolationError:
            logger.info("settings: row id=%s bootstrapped concurrently, re-reading", row_id)
            continue
        except StoreError as exc:
            logger.warning(
                "settings: fetch attempt %d/%d failed: %s", attempt, attempts, exc
            )
        if attempt < attempts:
            sleep(delay_seconds)

    logger.error("settings: giving up after %d attempt(s), using defaults", attempts)
    return SystemSettings()


def update_settings(client: TableClient, values: dict[str, Any], *, row_id: int | None = None) -> None:
    row_id = row_id if row_id is not None else core_settings.SETTINGS_ROW_ID
    client.update(SETTINGS_TABLE, values, {"id": row_id})
