from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from macro_indicators.core.config import SchedulerConfig
from macro_indicators.scheduler.service import MacroAnalysisService

logger = logging.getLogger(__name__)


def seconds_until_minute(now: datetime, minute: int) -> float:
    """Seconds from ``now`` until the next ``HH:minute:00``."""
    target = now.replace(minute=minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(hours=1)
    return (target - now).total_seconds()


class AnalysisScheduler:
    """Trigger an analysis cycle every hour at the configured minute."""

    def __init__(
        self,
        service: MacroAnalysisService,
        config: SchedulerConfig,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._service = service
        self._config = config
        self._clock = clock or (lambda: datetime.now(tz=timezone.utc))
        self._task: asyncio.Task | None = None
        self._running = False

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        logger.info("Scheduling macro indicators analysis every hour at %d minutes", self._config.minute)
        self._task = asyncio.create_task(self._loop(), name="macro-analysis")

    async def run_forever(self) -> None:
        await self.start()
        await self.wait_until_stopped()

    async def stop(self) -> None:
        self._running = False
        if self._task is None:
            return
        self._task.cancel()
        try:
            await asyncio.gather(self._task, return_exceptions=True)
        finally:
            self._task = None

    async def wait_until_stopped(self) -> None:
        if self._task is None:
            return
        try:
            await asyncio.gather(self._task, return_exceptions=True)
        except asyncio.CancelledError:
            pass

    async def _loop(self) -> None:
        while self._running:
            await asyncio.sleep(seconds_until_minute(self._clock(), self._config.minute))
            await self.trigger()

    async def trigger(self) -> None:
        logger.info("Triggered scheduled macro indicators analysis")
        try:
            await self._service.perform_analysis()
        except Exception as exc:
            logger.exception("Scheduled analysis failed: %s", exc)
