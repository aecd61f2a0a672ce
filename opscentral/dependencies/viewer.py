"""
Request-scoped lookups shared by the routers.

The caller identifies itself with the `X-Employee-Id` header, resolved
against the static operator directory. App-wide objects (state store, poller
registry) live on `app.state` and are set up by the lifespan.
"""
from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException, Request, status

from opscentral.core.users import UserProfile, find_user
from opscentral.services.app_state import AppState
from opscentral.services.poller import PollerRegistry


def get_state(request: Request) -> AppState:
    return request.app.state.app_state


def get_registry(request: Request) -> PollerRegistry:
    return request.app.state.pollers


def require_viewer(x_employee_id: Optional[str] = Header(default=None)) -> UserProfile:
    if not x_employee_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"status": "error", "message": "auth_required"},
        )
    user = find_user(x_employee_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"status": "error", "message": "unknown_employee"},
        )
    return user
