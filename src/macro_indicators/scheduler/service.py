"""Analysis cycle: collect, compute metrics, narrate, store."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List

from macro_indicators.ai.base import NarrationProvider
from macro_indicators.ai.prompt import build_brief
from macro_indicators.core.config import Config
from macro_indicators.core.errors import MacroAnalysisError
from macro_indicators.core.models import (
    AnalysisRecord,
    CycleOutcome,
    CycleStatus,
    SaveSummary,
)
from macro_indicators.data.fetcher import MacroDataFetcher
from macro_indicators.indicators.calculator import MetricsCalculator
from macro_indicators.storage.repository import AnalysisStore

logger = logging.getLogger(__name__)


class CycleState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class MacroAnalysisService:
    """Run one analysis cycle at a time; overlapping requests are skipped."""

    def __init__(
        self,
        config: Config,
        fetcher: MacroDataFetcher,
        narrator: NarrationProvider,
        store: AnalysisStore,
        calculator: MetricsCalculator | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._fetcher = fetcher
        self._narrator = narrator
        self._store = store
        self._calculator = calculator or MetricsCalculator(config.analysis)
        self._clock = clock or (lambda: datetime.now(tz=timezone.utc))
        self._state = CycleState.IDLE
        self._state_lock = asyncio.Lock()

    @property
    def state(self) -> CycleState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is CycleState.RUNNING

    async def perform_analysis(self) -> CycleOutcome:
        async with self._state_lock:
            if self._state is CycleState.RUNNING:
                logger.warning("Analysis already running, skipping")
                return CycleOutcome(status=CycleStatus.SKIPPED_BUSY)
            self._state = CycleState.RUNNING

        started = time.perf_counter()
        try:
            return await self._run_cycle(started)
        except MacroAnalysisError as exc:
            logger.error("Macro analysis failed: %s", exc)
            raise
        finally:
            self._state = CycleState.IDLE

    async def _run_cycle(self, started: float) -> CycleOutcome:
        lookback = self._config.analysis.lookback_hours
        logger.info("Starting macro indicators analysis cycle")

        dataset = await self._fetcher.collect(lookback)
        if dataset.is_empty:
            logger.warning("No macro data found for analysis")
            return CycleOutcome(status=CycleStatus.SKIPPED_NO_DATA)

        metrics = self._calculator.calculate(dataset)
        now = self._clock()
        brief = build_brief(metrics, lookback, now=now)
        narration = await self._narrator.narrate(brief)

        record = AnalysisRecord(
            analysis_time=now.isoformat(),
            analysis=narration.to_dict(),
            service_version=self._config.storage.service_version,
            model=self._narrator.model,
            provider=self._narrator.provider,
            data_collection_period=f"{lookback} hours",
        )
        analysis_id = await asyncio.to_thread(self._store.append, record)

        duration_ms = (time.perf_counter() - started) * 1000
        summary = SaveSummary(
            analysis_id=analysis_id,
            timestamp=record.analysis_time,
            fear_greed_value=narration.fear_greed_value,
            created_at=narration.created_at,
        )
        logger.info(
            "Macro analysis %s completed in %.0fms (fear/greed: %s)",
            analysis_id,
            duration_ms,
            summary.fear_greed_value if summary.fear_greed_value is not None else "N/A",
        )
        return CycleOutcome(
            status=CycleStatus.COMPLETED,
            summary=summary,
            metrics=metrics,
            duration_ms=duration_ms,
        )

    async def history(self, limit: int | None = None) -> List[AnalysisRecord]:
        limit = limit if limit is not None else self._config.storage.history_limit
        return await asyncio.to_thread(self._store.list_recent, limit)

    def status(self) -> Dict[str, Any]:
        lookback = self._config.analysis.lookback_hours
        return {
            "service": "Macro Economic Indicators Analysis Service",
            "status": "operational",
            "isRunning": self.is_running,
            "configuration": {
                "lookbackPeriod": f"{lookback} hours ({round(lookback / 24)} days)",
                "analysisFrequency": f"Every hour at {self._config.scheduler.minute} minutes",
                "dataServiceUrl": self._config.data_service.base_url,
                "model": self._narrator.model,
                "provider": self._narrator.provider,
            },
        }

    async def close(self) -> None:
        await self._fetcher.close()
        await self._narrator.close()
