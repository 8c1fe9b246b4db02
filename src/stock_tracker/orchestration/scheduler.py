"""
Periodic TIMER refresh bound to a session's lifetime.
"""

import asyncio

from stock_tracker.infrastructure.observability import get_sync_logger
from stock_tracker.orchestration.ports import RefreshTrigger
from stock_tracker.orchestration.workflows.base import RefreshResult
from stock_tracker.orchestration.workflows.refresh_workflow import SyncEngine


class RefreshScheduler:
    """
    Owns an asyncio task that refreshes every interval.

    stop() never interrupts a batch: the loop only waits between ticks, and a
    tick in progress runs to completion before stop() returns.
    """

    def __init__(self, engine: SyncEngine, interval_seconds: float = 300.0):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.engine = engine
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None
        self._stopping: asyncio.Event | None = None
        self._log = get_sync_logger("refresh-scheduler", user_id=engine.store.user_id)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking; must be called from a running event loop."""
        if self.running:
            return
        self._stopping = asyncio.Event()
        self._task = asyncio.create_task(
            self._run(self._stopping), name="stock-tracker-refresh"
        )
        self._log.info("scheduler_started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        """Stop the loop, waiting for a tick in progress to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        self._stopping.set()
        await task
        self._log.info("scheduler_stopped")

    async def tick(self) -> RefreshResult | None:
        """
        One TIMER refresh.

        Skipped while the watchlist is empty, unless the stored list still has
        to be loaded.
        """
        if len(self.engine.store) == 0 and self.engine.loaded:
            return None
        try:
            return await self.engine.refresh(RefreshTrigger.TIMER)
        except Exception as e:
            self._log.exception("scheduled_refresh_failed", error=str(e))
            return None

    async def _run(self, stopping: asyncio.Event) -> None:
        while not stopping.is_set():
            try:
                await asyncio.wait_for(stopping.wait(), timeout=self.interval_seconds)
            except TimeoutError:
                await self.tick()
