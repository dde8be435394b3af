"""Macro data fetching layer with retry hooks."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from macro_indicators.core.config import AnalysisConfig, DataServiceConfig
from macro_indicators.core.errors import DataSourceError
from macro_indicators.core.models import MacroDataset
from macro_indicators.data.aggregation import aggregate_pairs_to_hourly, aggregate_to_hourly
from macro_indicators.data.sentiment import extract_snapshot

logger = logging.getLogger(__name__)


class MacroDataFetcher:
    """Retrieve S&P 500, fear & greed and currency samples from the data service."""

    def __init__(
        self,
        config: DataServiceConfig,
        analysis: AnalysisConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._cfg = config
        self._analysis = analysis or AnalysisConfig()
        self._client = client or httpx.AsyncClient(
            base_url=config.base_url, timeout=config.timeout_seconds
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            wait=wait_exponential(multiplier=1, min=1, max=8),
            stop=stop_after_attempt(max(self._cfg.retry_attempts, 1)),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )

    async def collect(self, lookback_hours: Optional[int] = None) -> MacroDataset:
        """Fetch all three indicators concurrently and reduce them to hourly series."""
        hours = lookback_hours or self._analysis.lookback_hours
        logger.info("Collecting macro indicators for last %s hours (%s days)", hours, round(hours / 24))

        sp500_body, fear_greed_body, currency_body = await asyncio.gather(
            self._get_json("/sp500", params={"hours": hours}),
            self._get_json("/fear-greed"),
            self._get_json("/currency", params={"hours": hours}),
        )

        dataset = MacroDataset(
            sp500=aggregate_to_hourly(_rows(sp500_body), self._analysis.price_field),
            currency=aggregate_pairs_to_hourly(_rows(currency_body)),
            fear_greed=extract_snapshot(fear_greed_body),
            collected_at=datetime.now(tz=timezone.utc),
        )
        logger.info(
            "Collected %d S&P 500 and %d currency hourly intervals (target: %d hours)",
            len(dataset.sp500),
            len(dataset.currency),
            hours,
        )
        logger.info(
            "Current fear & greed: %s",
            dataset.fear_greed.value if dataset.fear_greed and dataset.fear_greed.value is not None else "N/A",
        )
        return dataset

    async def _get_json(self, path: str, params: Dict[str, Any] | None = None) -> Any:
        try:
            async for attempt in self._retrying():
                with attempt:
                    response = await self._client.get(path, params=params)
                    response.raise_for_status()
                    return response.json()
        except httpx.HTTPError as exc:
            raise DataSourceError(f"Request to {path} failed: {exc}", endpoint=path) from exc
        except ValueError as exc:
            raise DataSourceError(f"Invalid JSON from {path}: {exc}", endpoint=path) from exc
        raise DataSourceError(f"Retries exhausted for {path}", endpoint=path)

    async def close(self) -> None:
        await self._client.aclose()


def _rows(body: Any) -> List[Dict[str, Any]]:
    if not isinstance(body, dict):
        return []
    data = body.get("data") or []
    if not isinstance(data, list):
        return []
    return [row for row in data if isinstance(row, dict)]
