"""
Exception → HTTP response mapping.

Services raise their own exception families; `install_error_handlers`
registers one handler per family so every route answers failures with the
same `{"status": "error", "message": ...}` body.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from opscentral.repositories.errors import RecordNotFoundError, SchemaMismatchError, StoreError
from opscentral.services.app_state import PermissionDeniedError
from opscentral.services.job_expansion import JobCreationError
from opscentral.services.job_lifecycle import JobLockedError, JobNotFoundError, LifecycleError
from opscentral.services.settings_service import SettingsError

logger = logging.getLogger(__name__)

SCHEMA_MISMATCH_MESSAGE = (
    "The database schema is missing columns this service needs. "
    "Apply the latest schema update and try again. Details: {details}"
)


def status_for(exc: Exception) -> int:
    if isinstance(exc, PermissionDeniedError):
        return 403
    if isinstance(exc, JobLockedError):
        return 423
    if isinstance(exc, (JobNotFoundError, RecordNotFoundError)):
        return 404
    if isinstance(exc, (JobCreationError, LifecycleError, SettingsError)):
        return 409
    if isinstance(exc, SchemaMismatchError):
        return 500
    if isinstance(exc, StoreError):
        return 502
    return 500


def message_for(exc: Exception) -> str:
    if isinstance(exc, SchemaMismatchError):
        return SCHEMA_MISMATCH_MESSAGE.format(details=exc)
    return str(exc)


async def handle_app_error(request: Request, exc: Exception) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("request failed: %s %s: %s", request.method, request.url.path, exc)
    else:
        logger.info("request rejected: %s %s status=%d: %s", request.method, request.url.path, status_code, exc)
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message_for(exc)})


def install_error_handlers(app: FastAPI) -> None:
    for exc_class in (JobCreationError, LifecycleError, SettingsError, PermissionDeniedError, StoreError):
        app.add_exception_handler(exc_class, handle_app_error)
