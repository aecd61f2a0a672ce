"""Tests for opscentral/services/notification_diff.py

Run with:  pytest tests/test_notification_diff.py -v
"""

import asyncio
import time

from opscentral.repositories.keyed_store import MemoryKeyedStore
from opscentral.schemas.job import JobRecord, JobStatus
from opscentral.services.notification_diff import NotificationFeed, synthesize_notifications

GEN = 1_736_150_400_000  # 2025-01-06 08:00 UTC


def _job(job_id="A1", status=JobStatus.ACTIVE, requester_id="OPS-101", **kwargs):
    return JobRecord(
        id=job_id, job_date="2025-01-06", status=status, requester_id=requester_id, **kwargs
    )


def _diff(previous, current, viewer="OPS-101"):
    return synthesize_notifications(previous, current, viewer, generation_ms=GEN)


# ── synthesize_notifications ───────────────────────────────────────────────────

class TestStatusFacet:
    def test_approval_is_single_success(self):
        notes = _diff([_job(status=JobStatus.PENDING_ADD)], [_job(status=JobStatus.ACTIVE)])
        assert len(notes) == 1
        assert notes[0].type == "success"
        assert notes[0].id == f"status-A1-{GEN}"
        assert "A1" in notes[0].text
        assert notes[0].read is False

    def test_rejection_is_error(self):
        notes = _diff([_job(status=JobStatus.PENDING_ADD)], [_job(status=JobStatus.REJECTED)])
        assert [n.type for n in notes] == ["error"]

    def test_other_status_moves_are_silent(self):
        assert _diff([_job(status=JobStatus.ACTIVE)], [_job(status=JobStatus.PENDING_DELETE)]) == []


class TestScoping:
    def test_other_viewers_jobs_ignored(self):
        before = [_job(status=JobStatus.PENDING_ADD, requester_id="OPS-102")]
        after = [_job(status=JobStatus.ACTIVE, requester_id="OPS-102")]
        assert _diff(before, after) == []

    def test_new_jobs_skipped(self):
        assert _diff([], [_job()]) == []

    def test_unchanged_list_is_idempotent(self):
        jobs = [_job(team_leader="Omar", vehicles=["T1"], notes="x")]
        assert _diff(jobs, jobs) == []


class TestAllocationFacets:
    def test_leader_only_when_newly_non_empty(self):
        assert [n.id for n in _diff([_job()], [_job(team_leader="Omar")])] == [f"leader-A1-{GEN}"]
        assert _diff([_job(team_leader="Omar")], [_job(team_leader="")]) == []

    def test_vehicle_set_is_order_independent(self):
        before = [_job(vehicles=["T1", "T2"])]
        assert _diff(before, [_job(vehicles=["T2", "T1"])]) == []
        assert len(_diff(before, [_job(vehicles=["T1", "T3"])])) == 1

    def test_vehicles_cleared_is_silent(self):
        assert _diff([_job(vehicles=["T1"])], [_job(vehicles=[])]) == []

    def test_crew_change(self):
        notes = _diff([_job(writer_crew=["Ali"])], [_job(writer_crew=["Ali", "Sara"])])
        assert [n.id for n in notes] == [f"crew-A1-{GEN}"]
        assert "Sara" in notes[0].text


class TestScheduleFacets:
    def test_time_change_mentions_both_values(self):
        (note,) = _diff([_job(job_time="08:00")], [_job(job_time="10:30")])
        assert "08:00" in note.text and "10:30" in note.text

    def test_date_change(self):
        before = [_job()]
        after = [JobRecord(id="A1", job_date="2025-01-07", status=JobStatus.ACTIVE, requester_id="OPS-101")]
        (note,) = _diff(before, after)
        assert note.id == f"date-A1-{GEN}"
        assert "2025-01-06" in note.text and "2025-01-07" in note.text

    def test_notes_change(self):
        (note,) = _diff([_job(notes="a")], [_job(notes="b")])
        assert note.id == f"notes-A1-{GEN}"


def test_fixed_facet_order():
    before = [_job(status=JobStatus.PENDING_ADD)]
    after = [_job(
        status=JobStatus.ACTIVE,
        team_leader="Omar",
        vehicles=["T1"],
        writer_crew=["Ali"],
        job_time="09:00",
        notes="gate 4",
    )]
    prefixes = [n.id.split("-")[0] for n in _diff(before, after)]
    assert prefixes == ["status", "leader", "vehicles", "crew", "time", "notes"]


def test_ids_distinct_within_one_cycle():
    before = [_job("A1", status=JobStatus.PENDING_ADD), _job("A2", status=JobStatus.PENDING_ADD)]
    after = [_job("A1", team_leader="Omar"), _job("A2", team_leader="Omar")]
    ids = [n.id for n in _diff(before, after)]
    assert len(ids) == len(set(ids)) == 4


# ── NotificationFeed ───────────────────────────────────────────────────────────

def _feed():
    return NotificationFeed(MemoryKeyedStore(), MemoryKeyedStore())


class TestNotificationFeed:
    def test_first_poll_seeds_without_notifying(self):
        feed = _feed()
        assert feed.process_poll("OPS-101", [_job(status=JobStatus.PENDING_ADD)], generation_ms=GEN) == []
        assert feed.list("OPS-101") == []
        assert feed.snapshots.get("OPS-101") is not None

    def test_approval_between_polls(self):
        feed = _feed()
        feed.process_poll("OPS-101", [_job(status=JobStatus.PENDING_ADD)], generation_ms=GEN)
        fresh = feed.process_poll("OPS-101", [_job(status=JobStatus.ACTIVE)], generation_ms=GEN + 1)
        assert [n.type for n in fresh] == ["success"]
        assert feed.unread_count("OPS-101") == 1

    def test_repeat_poll_of_same_list_is_silent(self):
        feed = _feed()
        feed.process_poll("OPS-101", [_job(status=JobStatus.PENDING_ADD)], generation_ms=GEN)
        feed.process_poll("OPS-101", [_job(status=JobStatus.ACTIVE)], generation_ms=GEN + 1)
        assert feed.process_poll("OPS-101", [_job(status=JobStatus.ACTIVE)], generation_ms=GEN + 2) == []
        assert len(feed.list("OPS-101")) == 1

    def test_newest_first(self):
        feed = _feed()
        feed.process_poll("OPS-101", [_job(status=JobStatus.PENDING_ADD)], generation_ms=GEN)
        feed.process_poll("OPS-101", [_job(status=JobStatus.ACTIVE)], generation_ms=GEN + 1)
        feed.process_poll("OPS-101", [_job(status=JobStatus.ACTIVE, notes="n")], generation_ms=GEN + 2)
        assert [n.id.split("-")[0] for n in feed.list("OPS-101")] == ["notes", "status"]

    def test_snapshot_holds_all_jobs(self):
        feed = _feed()
        jobs = [_job("A1"), _job("B1", requester_id="OPS-102")]
        feed.process_poll("OPS-101", jobs, generation_ms=GEN)
        assert sorted(row["id"] for row in feed.snapshots.get("OPS-101")) == ["A1", "B1"]

    def test_mark_all_read(self):
        feed = _feed()
        feed.process_poll("OPS-101", [_job(status=JobStatus.PENDING_ADD)], generation_ms=GEN)
        feed.process_poll("OPS-101", [_job(status=JobStatus.REJECTED)], generation_ms=GEN + 1)
        marked = feed.mark_all_read("OPS-101")
        assert all(n.read for n in marked)
        assert feed.unread_count("OPS-101") == 0
        assert len(feed.list("OPS-101")) == 1

    def test_viewers_are_isolated(self):
        feed = _feed()
        feed.process_poll("OPS-101", [_job(status=JobStatus.PENDING_ADD)], generation_ms=GEN)
        feed.process_poll("OPS-101", [_job(status=JobStatus.ACTIVE)], generation_ms=GEN + 1)
        assert feed.list("OPS-102") == []


# ── Concurrent poll / open ─────────────────────────────────────────────────────

class SlowStore(MemoryKeyedStore):
    """Stalls every read so overlapping read-modify-write cycles interleave."""

    def get(self, user_id):
        value = super().get(user_id)
        time.sleep(0.05)
        return value


def _slow_feed_with_pending_job():
    feed = NotificationFeed(SlowStore(), SlowStore())
    feed.process_poll("OPS-101", [_job(status=JobStatus.PENDING_ADD)], generation_ms=GEN)
    feed.notifications.put(
        "OPS-101", [{"id": "old", "text": "earlier", "time": "2025-01-05 09:00", "read": False, "type": "info"}]
    )
    return feed


class TestConcurrentAccess:
    def test_open_during_poll_keeps_new_notification(self):
        feed = _slow_feed_with_pending_job()

        async def run():
            await asyncio.gather(
                asyncio.to_thread(feed.process_poll, "OPS-101", [_job()], generation_ms=GEN + 1),
                asyncio.to_thread(feed.mark_all_read, "OPS-101"),
            )

        asyncio.run(run())
        assert sorted(n.id for n in feed.list("OPS-101")) == ["old", f"status-A1-{GEN + 1}"]

    def test_overlapping_polls_notify_once(self):
        feed = _slow_feed_with_pending_job()

        async def run():
            await asyncio.gather(
                asyncio.to_thread(feed.process_poll, "OPS-101", [_job()], generation_ms=GEN + 1),
                asyncio.to_thread(feed.process_poll, "OPS-101", [_job()], generation_ms=GEN + 2),
            )

        asyncio.run(run())
        stored = [n.id for n in feed.list("OPS-101") if n.id != "old"]
        assert len(stored) == 1
        assert stored[0].startswith("status-A1-")
