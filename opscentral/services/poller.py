"""
Background job polling per viewer session.

A `JobPoller` is an asyncio task that refreshes the job list every
`JOB_POLL_INTERVAL_SECONDS` and feeds it to the viewer's notification feed.
`PollerRegistry` owns every running task; the app lifespan calls
`shutdown()` so no task outlives the event loop.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging

from opscentral.core.config import settings as core_settings
from opscentral.services.app_state import AppState

logger = logging.getLogger(__name__)


class JobPoller:
    def __init__(self, state: AppState, viewer_id: str, interval_seconds: float | None = None) -> None:
        self.state = state
        self.viewer_id = viewer_id
        self.interval_seconds = (
            interval_seconds if interval_seconds is not None else core_settings.JOB_POLL_INTERVAL_SECONDS
        )
        self.ticks = 0
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=f"job-poller:{self.viewer_id}")
        logger.info("poller: started viewer=%s interval=%.1fs", self.viewer_id, self.interval_seconds)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("poller: stopped viewer=%s ticks=%d", self.viewer_id, self.ticks)

    async def _run(self) -> None:
        while True:
            try:
                fresh = await self.state.poll_once(self.viewer_id)
                logger.debug("poller: tick viewer=%s new=%d", self.viewer_id, len(fresh))
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("poller: tick failed viewer=%s", self.viewer_id)
            self.ticks += 1
            await asyncio.sleep(self.interval_seconds)


class PollerRegistry:
    def __init__(self, state: AppState, interval_seconds: float | None = None) -> None:
        self.state = state
        self.interval_seconds = interval_seconds
        self._pollers: dict[str, JobPoller] = {}

    def active_viewers(self) -> list[str]:
        return sorted(viewer for viewer, poller in self._pollers.items() if poller.running)

    def start(self, viewer_id: str) -> JobPoller:
        poller = self._pollers.get(viewer_id)
        if poller is None:
            poller = JobPoller(self.state, viewer_id, self.interval_seconds)
            self._pollers[viewer_id] = poller
        poller.start()
        return poller

    async def stop(self, viewer_id: str) -> bool:
        poller = self._pollers.pop(viewer_id, None)
        if poller is None:
            return False
        await poller.stop()
        return True

    async def shutdown(self) -> None:
        viewers = list(self._pollers)
        for viewer_id in viewers:
            await self.stop(viewer_id)
        if viewers:
            logger.info("poller: shutdown stopped %d session(s)", len(viewers))
