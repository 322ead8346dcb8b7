"""
Sweep Scheduler — Periodic background risk sweep.

Started with the application when scheduled_sweep_enabled is set. Stopping
sets the shared event, which also cancels a running sweep between students.
"""

from __future__ import annotations

import asyncio
import logging

from dropout_risk.workers.recompute_worker import RiskEngine

logger = logging.getLogger("dropout_risk.scheduler")


class SweepScheduler:
    """Runs engine.recompute_all() every interval_seconds until stopped."""

    def __init__(self, engine: RiskEngine, interval_seconds: float) -> None:
        self.engine = engine
        self.interval_seconds = interval_seconds
        self._stop = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._task = asyncio.create_task(self._run())
        logger.info(f"Scheduled risk sweep every {self.interval_seconds}s")

    async def stop(self) -> None:
        self._stop.set()
        if self._task is not None:
            await self._task
            self._task = None

    async def _run(self) -> None:
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval_seconds)
                return
            except asyncio.TimeoutError:
                pass

            try:
                await self.engine.recompute_all(cancel_event=self._stop)
            except Exception as e:
                logger.error(f"Scheduled risk sweep failed: {e}")
