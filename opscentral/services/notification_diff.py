"""
Snapshot diff → viewer notifications.

Every poll hands the full job list to `NotificationFeed.process_poll`. The
viewer's previous snapshot is loaded from the snapshot store and compared with
the new list, looking only at jobs the viewer requested. Each changed facet of
a job yields at most one notification, checked in this order:

    status → team leader → vehicles → crew → time → date → notes

Jobs missing from the previous snapshot are new, not changed, and produce
nothing. Afterwards the snapshot is replaced by the full current list (all
jobs, not only the viewer's), so an unchanged list diffs to nothing next time.
"""
from __future__ import annotations

import logging
import threading
import time
import zoneinfo
from datetime import datetime
from typing import Any, Iterable

from opscentral.core.config import settings as core_settings
from opscentral.repositories.keyed_store import KeyedStore
from opscentral.schemas.job import JobRecord, JobStatus
from opscentral.schemas.notification import Notification

logger = logging.getLogger(__name__)


def _display_time(generation_ms: int) -> str:
    tz = zoneinfo.ZoneInfo(core_settings.OPERATIONAL_TIMEZONE)
    return datetime.fromtimestamp(generation_ms / 1000, tz).strftime("%Y-%m-%d %H:%M")


def _name_set(values: Iterable[str]) -> frozenset[str]:
    return frozenset(v for v in values if v)


def _describe(values: Iterable[str]) -> str:
    return ", ".join(sorted(values)) or "none"


def _job_changes(before: JobRecord, after: JobRecord) -> list[tuple[str, str, str]]:
    """(facet, type, text) for each changed facet of one job, in check order."""
    changes: list[tuple[str, str, str]] = []
    job_id = after.id

    if after.status != before.status:
        if after.status == JobStatus.ACTIVE:
            changes.append(("status", "success", f"Job {job_id} Approved by Admin"))
        elif after.status == JobStatus.REJECTED:
            changes.append(("status", "error", f"Job {job_id} Rejected by Admin"))

    if after.team_leader and after.team_leader != before.team_leader:
        changes.append(("leader", "info", f"Team Leader {after.team_leader} assigned to Job {job_id}"))

    new_vehicles = _name_set(after.vehicles)
    if new_vehicles and new_vehicles != _name_set(before.vehicles):
        changes.append(("vehicles", "info", f"Vehicles updated for Job {job_id}: {_describe(new_vehicles)}"))

    new_crew = _name_set(after.writer_crew)
    if new_crew and new_crew != _name_set(before.writer_crew):
        changes.append(("crew", "info", f"Crew updated for Job {job_id}: {_describe(new_crew)}"))

    if (after.job_time or "") != (before.job_time or ""):
        changes.append((
            "time", "info",
            f"Job {job_id} time changed from {before.job_time or 'unset'} to {after.job_time or 'unset'}",
        ))

    if after.job_date != before.job_date:
        changes.append((
            "date", "info",
            f"Job {job_id} rescheduled from {before.job_date} to {after.job_date}",
        ))

    if (after.notes or "") != (before.notes or ""):
        changes.append(("notes", "info", f"Notes updated for Job {job_id}"))

    return changes


def synthesize_notifications(
    previous: Iterable[JobRecord],
    current: Iterable[JobRecord],
    viewer_id: str,
    *,
    generation_ms: int | None = None,
) -> list[Notification]:
    generation_ms = generation_ms if generation_ms is not None else int(time.time() * 1000)
    shown_at = _display_time(generation_ms)
    previous_by_id = {job.id: job for job in previous}

    notifications: list[Notification] = []
    for job in current:
        if job.requester_id != viewer_id:
            continue
        before = previous_by_id.get(job.id)
        if before is None:
            continue
        for facet, notif_type, text in _job_changes(before, job):
            notifications.append(
                Notification(
                    id=f"{facet}-{job.id}-{generation_ms}",
                    text=text,
                    time=shown_at,
                    read=False,
                    type=notif_type,
                )
            )
    return notifications


class NotificationFeed:
    """Per-viewer snapshot bookkeeping and notification list.

    Polls and panel opens run on worker threads; every read-modify-write of
    one viewer's snapshot or list holds that viewer's lock.
    """

    def __init__(self, snapshots: KeyedStore, notifications: KeyedStore):
        self.snapshots = snapshots
        self.notifications = notifications
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _viewer_lock(self, viewer_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(viewer_id)
            if lock is None:
                lock = self._locks[viewer_id] = threading.Lock()
            return lock

    def _load_snapshot(self, viewer_id: str) -> list[JobRecord] | None:
        raw = self.snapshots.get(viewer_id)
        if raw is None:
            return None
        return [JobRecord.from_row(row) for row in raw]

    @staticmethod
    def _dump_jobs(jobs: Iterable[JobRecord]) -> list[dict[str, Any]]:
        return [job.to_row() for job in jobs]

    def list(self, viewer_id: str) -> list[Notification]:
        raw = self.notifications.get(viewer_id) or []
        return [Notification.model_validate(item) for item in raw]

    def unread_count(self, viewer_id: str) -> int:
        return sum(1 for n in self.list(viewer_id) if not n.read)

    def process_poll(
        self,
        viewer_id: str,
        jobs: list[JobRecord],
        *,
        generation_ms: int | None = None,
    ) -> list[Notification]:
        with self._viewer_lock(viewer_id):
            previous = self._load_snapshot(viewer_id)
            if previous is None:
                self.snapshots.put(viewer_id, self._dump_jobs(jobs))
                logger.debug("notifications: seeded snapshot viewer=%s jobs=%d", viewer_id, len(jobs))
                return []

            fresh = synthesize_notifications(previous, jobs, viewer_id, generation_ms=generation_ms)
            if fresh:
                stored = self.list(viewer_id)
                self.notifications.put(
                    viewer_id, [n.model_dump() for n in fresh] + [n.model_dump() for n in stored]
                )
                logger.info("notifications: viewer=%s new=%d", viewer_id, len(fresh))
            self.snapshots.put(viewer_id, self._dump_jobs(jobs))
            return fresh

    def mark_all_read(self, viewer_id: str) -> list[Notification]:
        with self._viewer_lock(viewer_id):
            marked = [n.model_copy(update={"read": True}) for n in self.list(viewer_id)]
            self.notifications.put(viewer_id, [n.model_dump() for n in marked])
            return marked
