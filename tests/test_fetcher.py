from __future__ import annotations

import httpx
import pytest

from macro_indicators.core.config import AnalysisConfig, DataServiceConfig
from macro_indicators.core.errors import DataSourceError
from macro_indicators.data.aggregation import HOUR_MS
from macro_indicators.data.fetcher import MacroDataFetcher


def _fetcher(handler) -> MacroDataFetcher:
    config = DataServiceConfig(base_url="http://data.test", retry_attempts=1)
    client = httpx.AsyncClient(base_url=config.base_url, transport=httpx.MockTransport(handler))
    return MacroDataFetcher(config, AnalysisConfig(), client=client)


@pytest.mark.asyncio
async def test_collect_aggregates_all_indicators() -> None:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        if request.url.path == "/sp500":
            return httpx.Response(
                200,
                json={
                    "data": [
                        {"timestamp": 1000 * HOUR_MS, "price": 100},
                        {"timestamp": 1000 * HOUR_MS + 60_000, "price": 101},
                        {"timestamp": 1001 * HOUR_MS, "price": 102},
                    ]
                },
            )
        if request.url.path == "/currency":
            return httpx.Response(
                200,
                json={"data": [{"timestamp": 1000 * HOUR_MS, "USD/EUR": 0.9}, {"USD/EUR": 1.0}]},
            )
        return httpx.Response(
            200, json={"crypto_fear_greed": {"value": 40, "classification": "Fear"}, "timestamp": 9}
        )

    fetcher = _fetcher(handler)
    dataset = await fetcher.collect(24)
    await fetcher.close()

    assert [agg.value for agg in dataset.sp500] == [101, 102]
    assert len(dataset.currency) == 1
    assert dataset.fear_greed is not None and dataset.fear_greed.value == 40
    assert not dataset.is_empty
    assert "http://data.test/sp500?hours=24" in requested
    assert "http://data.test/currency?hours=24" in requested
    assert "http://data.test/fear-greed" in requested


@pytest.mark.asyncio
async def test_collect_with_no_rows_is_empty() -> None:
    fetcher = _fetcher(lambda request: httpx.Response(200, json={"data": []}))

    dataset = await fetcher.collect()
    await fetcher.close()

    assert dataset.is_empty


@pytest.mark.asyncio
async def test_http_error_raises_data_source_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/currency":
            return httpx.Response(503)
        return httpx.Response(200, json={"data": []})

    fetcher = _fetcher(handler)

    with pytest.raises(DataSourceError) as excinfo:
        await fetcher.collect(1)
    await fetcher.close()

    assert excinfo.value.endpoint == "/currency"
