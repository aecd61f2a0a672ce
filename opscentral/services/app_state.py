"""
Shared application state.

One `AppState` per process holds the cached job list, settings, personnel and
vehicles, plus the injected `TableClient` every read and write goes through.
The repositories are synchronous, so every backend call is pushed onto a
worker thread with `asyncio.to_thread` and awaited.

Writes go to the store first. The cache changes only by re-fetching after a
successful write, so a failed write leaves it exactly as it was. Tracking
notes are the exception: after the write succeeds the cached job is patched
in place and no re-fetch happens.
"""
from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional

from opscentral.core.users import UserProfile
from opscentral.repositories import job_repo, resource_repo, settings_repo
from opscentral.repositories.keyed_store import KeyedStore, build_keyed_store
from opscentral.repositories.table_client import TableClient
from opscentral.schemas.job import (
    CustomsStatus,
    JobAllocation,
    JobDraft,
    JobRecord,
    TransporterStatus,
)
from opscentral.schemas.notification import Notification
from opscentral.schemas.resources import (
    Personnel,
    PersonnelCreate,
    PersonnelStatus,
    Vehicle,
    VehicleCreate,
    VehicleStatus,
)
from opscentral.schemas.settings import SystemAlert, SystemSettings
from opscentral.services import job_lifecycle, settings_service
from opscentral.services.job_expansion import create_jobs
from opscentral.services.notification_diff import NotificationFeed

logger = logging.getLogger(__name__)


class PermissionDeniedError(Exception):
    def __init__(self, actor: UserProfile, permission: str):
        self.actor = actor
        self.permission = permission
        super().__init__(f"{actor.employee_id} is not allowed to use {permission}.")


def _require(actor: UserProfile, permission: str) -> None:
    if not actor.can(permission):
        raise PermissionDeniedError(actor, permission)


def _require_admin(actor: UserProfile, action: str) -> None:
    if not actor.is_admin:
        raise PermissionDeniedError(actor, action)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class AppState:
    def __init__(
        self,
        client: TableClient,
        *,
        snapshots: KeyedStore | None = None,
        notifications: KeyedStore | None = None,
    ) -> None:
        self.client = client
        self.feed = NotificationFeed(
            snapshots if snapshots is not None else build_keyed_store("snapshot", client),
            notifications if notifications is not None else build_keyed_store("notifications", client),
        )
        self.jobs: list[JobRecord] = []
        self.settings: SystemSettings = SystemSettings()
        self.personnel: list[Personnel] = []
        self.vehicles: list[Vehicle] = []

    # ── Refresh ───────────────────────────────────────────────────────────────

    async def refresh_jobs(self) -> list[JobRecord]:
        self.jobs = await asyncio.to_thread(job_repo.fetch_jobs, self.client)
        return self.jobs

    async def refresh_settings(self) -> SystemSettings:
        self.settings = await asyncio.to_thread(settings_repo.fetch_settings, self.client)
        return self.settings

    async def refresh_resources(self) -> None:
        self.personnel = await asyncio.to_thread(resource_repo.fetch_personnel, self.client)
        self.vehicles = await asyncio.to_thread(resource_repo.fetch_vehicles, self.client)

    async def refresh_all(self) -> None:
        await self.refresh_settings()
        await self.refresh_jobs()
        await self.refresh_resources()
        logger.info(
            "state: loaded jobs=%d personnel=%d vehicles=%d",
            len(self.jobs), len(self.personnel), len(self.vehicles),
        )

    # ── Jobs ──────────────────────────────────────────────────────────────────

    async def create_job(self, draft: JobDraft, requester: UserProfile, *, today: str | None = None) -> list[JobRecord]:
        slices = await asyncio.to_thread(
            create_jobs,
            self.client,
            draft,
            jobs=list(self.jobs),
            settings=self.settings,
            requester=requester,
            today=today,
        )
        await self.refresh_jobs()
        return slices

    async def _apply(self, mutation: job_lifecycle.Mutation) -> None:
        await asyncio.to_thread(job_lifecycle.apply_mutation, self.client, mutation)
        await self.refresh_jobs()

    def _job(self, job_id: str) -> JobRecord:
        return job_lifecycle.find_job(self.jobs, job_id)

    async def decide_approval(
        self,
        job_id: str,
        approved: bool,
        actor: UserProfile,
        allocation: JobAllocation | None = None,
    ) -> job_lifecycle.Mutation:
        _require(actor, "approvals")
        mutation = job_lifecycle.plan_approval(self._job(job_id), approved, allocation)
        await self._apply(mutation)
        return mutation

    async def delete_job(self, job_id: str, actor: UserProfile) -> job_lifecycle.Mutation:
        mutation = job_lifecycle.plan_delete(self._job(job_id), actor)
        await self._apply(mutation)
        return mutation

    async def update_allocation(self, job_id: str, allocation: JobAllocation, actor: UserProfile) -> None:
        _require(actor, "schedule")
        await self._apply(job_lifecycle.plan_allocation(self._job(job_id), allocation))

    async def toggle_lock(self, job_id: str, actor: UserProfile) -> bool:
        _require_admin(actor, "job locking")
        mutation = job_lifecycle.plan_lock_toggle(self._job(job_id))
        await self._apply(mutation)
        return bool(mutation.values["is_locked"])

    async def update_customs(self, job_id: str, status: CustomsStatus, actor: UserProfile) -> None:
        _require(actor, "import_clearance")
        mutation = job_lifecycle.plan_customs_update(self._job(job_id), status, actor, _now_iso())
        await self._apply(mutation)

    async def save_tracking_notes(self, job_id: str, step: int, notes: str, actor: UserProfile) -> JobRecord:
        _require(actor, "tracking")
        mutation = job_lifecycle.plan_tracking_notes(self._job(job_id), step, notes, _now_iso())
        await asyncio.to_thread(job_lifecycle.apply_mutation, self.client, mutation)
        self.jobs = job_lifecycle.apply_locally(self.jobs, mutation)
        return self._job(job_id)

    async def set_tracking_step(self, job_id: str, step: int, actor: UserProfile) -> None:
        _require(actor, "tracking")
        await self._apply(job_lifecycle.plan_tracking_step(self._job(job_id), step))

    async def set_transporter_status(self, job_id: str, status: TransporterStatus, actor: UserProfile) -> None:
        _require(actor, "transporter")
        await self._apply(job_lifecycle.plan_transporter_status(self._job(job_id), status))

    async def edit_job(self, job_id: str, changes: dict[str, Any], actor: UserProfile) -> JobRecord:
        job = self._job(job_id)
        if not actor.is_admin and job.requester_id != actor.employee_id:
            raise PermissionDeniedError(actor, "editing other operators' jobs")
        await self._apply(job_lifecycle.plan_edit(job, changes))
        return self._job(job_id)

    # ── Settings ──────────────────────────────────────────────────────────────

    async def _write_settings(self, values: dict[str, Any]) -> SystemSettings:
        await asyncio.to_thread(settings_repo.update_settings, self.client, values)
        logger.info("settings: updated %s", sorted(values))
        return await self.refresh_settings()

    async def set_daily_limit(self, day: str, limit: int, actor: UserProfile) -> SystemSettings:
        _require(actor, "capacity")
        return await self._write_settings(settings_service.daily_limit_values(self.settings, day, limit))

    async def toggle_holiday(self, day: str, actor: UserProfile) -> SystemSettings:
        _require(actor, "capacity")
        return await self._write_settings(settings_service.holiday_toggle_values(self.settings, day))

    async def update_logo(self, logo: Optional[str], actor: UserProfile) -> SystemSettings:
        _require_admin(actor, "branding")
        return await self._write_settings(settings_service.logo_values(logo))

    async def set_system_alert(self, alert: Optional[SystemAlert], actor: UserProfile) -> SystemSettings:
        _require_admin(actor, "system alerts")
        return await self._write_settings(settings_service.alert_values(alert))

    # ── Resources ─────────────────────────────────────────────────────────────

    async def add_personnel(self, person: PersonnelCreate, actor: UserProfile) -> str:
        _require(actor, "resources")
        new_id = await asyncio.to_thread(resource_repo.add_personnel, self.client, person)
        await self.refresh_resources()
        return new_id

    async def update_personnel_status(self, person_id: str, status: PersonnelStatus, actor: UserProfile) -> None:
        _require(actor, "resources")
        await asyncio.to_thread(resource_repo.update_personnel_status, self.client, person_id, status)
        await self.refresh_resources()

    async def delete_personnel(self, person_id: str, actor: UserProfile) -> None:
        _require(actor, "resources")
        await asyncio.to_thread(resource_repo.delete_personnel, self.client, person_id)
        await self.refresh_resources()

    async def add_vehicle(self, vehicle: VehicleCreate, actor: UserProfile) -> str:
        _require(actor, "resources")
        new_id = await asyncio.to_thread(resource_repo.add_vehicle, self.client, vehicle)
        await self.refresh_resources()
        return new_id

    async def update_vehicle_status(self, vehicle_id: str, status: VehicleStatus, actor: UserProfile) -> None:
        _require(actor, "resources")
        await asyncio.to_thread(resource_repo.update_vehicle_status, self.client, vehicle_id, status)
        await self.refresh_resources()

    async def delete_vehicle(self, vehicle_id: str, actor: UserProfile) -> None:
        _require(actor, "resources")
        await asyncio.to_thread(resource_repo.delete_vehicle, self.client, vehicle_id)
        await self.refresh_resources()

    # ── Notifications ─────────────────────────────────────────────────────────

    async def poll_once(self, viewer_id: str, *, generation_ms: int | None = None) -> list[Notification]:
        jobs = await self.refresh_jobs()
        generation_ms = generation_ms if generation_ms is not None else int(time.time() * 1000)
        return await asyncio.to_thread(
            self.feed.process_poll, viewer_id, jobs, generation_ms=generation_ms
        )

    async def notifications_for(self, viewer_id: str) -> list[Notification]:
        return await asyncio.to_thread(self.feed.list, viewer_id)

    async def open_notifications(self, viewer_id: str) -> list[Notification]:
        return await asyncio.to_thread(self.feed.mark_all_read, viewer_id)
