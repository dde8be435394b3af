from __future__ import annotations

import pytest

from macro_indicators.core.config import AnalysisConfig
from macro_indicators.core.models import (
    HourlyAggregate,
    MacroDataset,
    PairAggregate,
    Sentiment,
    SentimentSnapshot,
    Trend,
    VolatilityOverview,
)
from macro_indicators.data.aggregation import HOUR_MS
from macro_indicators.indicators.calculator import MetricsCalculator


def _scalar(values: list[float]) -> list[HourlyAggregate]:
    return [
        HourlyAggregate(hour_timestamp=i * HOUR_MS, value=v, original_timestamp=i * HOUR_MS + 1)
        for i, v in enumerate(values)
    ]


def _pairs(rows: list[dict]) -> list[PairAggregate]:
    return [
        PairAggregate(hour_timestamp=i * HOUR_MS, fields=row, original_timestamp=i * HOUR_MS)
        for i, row in enumerate(rows)
    ]


@pytest.fixture()
def calculator() -> MetricsCalculator:
    return MetricsCalculator(AnalysisConfig())


def test_scalar_metrics_scenario(calculator: MetricsCalculator) -> None:
    metrics = calculator.calculate_scalar(_scalar([100, 102, 101, 105, 107]))

    assert metrics.current == 107
    assert metrics.overall_change == 7.0
    assert metrics.trend is Trend.BULLISH
    assert metrics.recent_trend is Trend.BULLISH
    assert metrics.data_points == 5
    assert metrics.volatility == pytest.approx(2.6077, abs=1e-4)


@pytest.mark.parametrize("values", [[], [100.0]])
def test_scalar_metrics_insufficient(calculator: MetricsCalculator, values: list[float]) -> None:
    metrics = calculator.calculate_scalar(_scalar(values))

    assert metrics.to_dict() == {"current": None, "overallChange": None, "trend": "insufficient_data"}


def test_recent_trend_uses_trailing_window(calculator: MetricsCalculator) -> None:
    # 30 points: first 25 rising, last 5 falling; window = max(6, 5) = 6
    values = [float(i) for i in range(25)] + [24.0 - i for i in range(1, 6)]

    metrics = calculator.calculate_scalar(_scalar(values))

    assert metrics.trend is Trend.BULLISH
    assert metrics.recent_trend is Trend.BEARISH


def test_recent_trend_short_series_reports_insufficient(calculator: MetricsCalculator) -> None:
    metrics = calculator.calculate_scalar(_scalar([1.0, 2.0]))

    assert metrics.trend is Trend.INSUFFICIENT_DATA
    assert metrics.recent_trend is Trend.INSUFFICIENT_DATA
    assert metrics.overall_change == 100.0
    assert metrics.volatility == pytest.approx(0.5)


def test_sentiment_metrics(calculator: MetricsCalculator) -> None:
    snapshot = SentimentSnapshot(value=76, classification="Extreme Greed", timestamp="2024-05-01")

    metrics = calculator.calculate_sentiment(snapshot)

    assert metrics.to_dict() == {
        "current": 76,
        "classification": "Extreme Greed",
        "sentiment": "extreme_greed",
        "timestamp": "2024-05-01",
    }


def test_sentiment_value_given_as_text(calculator: MetricsCalculator) -> None:
    metrics = calculator.calculate_sentiment(SentimentSnapshot(value="40", classification="Fear"))

    assert metrics.current == 40.0
    assert metrics.sentiment is Sentiment.FEAR

    unreadable = calculator.calculate_sentiment(SentimentSnapshot(value="n/a", classification=None))

    assert unreadable.current is None
    assert unreadable.sentiment is Sentiment.UNKNOWN


def test_sentiment_metrics_without_snapshot(calculator: MetricsCalculator) -> None:
    metrics = calculator.calculate_sentiment(None)

    assert metrics.sentiment is Sentiment.UNKNOWN
    assert metrics.to_dict() == {"current": None, "sentiment": "unknown", "classification": None}


def test_pair_metrics_scenario(calculator: MetricsCalculator) -> None:
    aggregates = _pairs(
        [
            {"USD/EUR": 0.90, "USD/GBP": 0.80},
            {"USD/EUR": 0.92},
            {"USD/EUR": 0.95, "USD/GBP": 0.80},
        ]
    )

    metrics = calculator.calculate_pairs(aggregates)

    eur = metrics.pairs["USD/EUR"]
    assert eur.current == 0.95
    assert eur.overall_change == 5.5556
    assert eur.trend is Trend.BULLISH
    assert eur.volatility == pytest.approx(0.0205, abs=1e-4)

    gbp = metrics.pairs["USD/GBP"]
    assert gbp.overall_change == 0.0
    # missing from the middle hour, so its series has two points
    assert gbp.trend is Trend.INSUFFICIENT_DATA
    assert gbp.volatility == 0.0

    assert metrics.avg_volatility == pytest.approx(2.7778, abs=1e-4)
    assert metrics.overview is VolatilityOverview.HIGH
    assert metrics.data_points == 3


def test_pairs_absent_or_zero_at_either_end_are_skipped(calculator: MetricsCalculator) -> None:
    aggregates = _pairs(
        [
            {"USD/EUR": 0.90, "USD/JPY": 0, "USD/CHF": 0.88},
            {"USD/EUR": 0.901, "USD/JPY": 150.0, "USD/CAD": 1.35, "source": "ecb"},
        ]
    )

    metrics = calculator.calculate_pairs(aggregates)

    assert set(metrics.pairs) == {"USD/EUR"}
    assert metrics.overview is VolatilityOverview.LOW


def test_pair_rates_given_as_text_are_used(calculator: MetricsCalculator) -> None:
    aggregates = _pairs(
        [
            {"USD/EUR": "0.90", "USD/GBP": "0"},
            {"USD/EUR": 0.92},
            {"USD/EUR": "0.95", "USD/GBP": "0.80"},
        ]
    )

    metrics = calculator.calculate_pairs(aggregates)

    assert set(metrics.pairs) == {"USD/EUR"}
    eur = metrics.pairs["USD/EUR"]
    assert eur.current == 0.95
    assert eur.overall_change == 5.5556
    assert eur.trend is Trend.BULLISH


def test_overview_tiers(calculator: MetricsCalculator) -> None:
    moderate = calculator.calculate_pairs(_pairs([{"A": 100.0}, {"A": 101.5}]))
    assert moderate.overview is VolatilityOverview.MODERATE
    assert moderate.avg_volatility == 1.5

    none_qualified = calculator.calculate_pairs(_pairs([{"A": 1.0}, {"B": 1.0}]))
    assert none_qualified.pairs == {}
    assert none_qualified.avg_volatility == 0.0
    assert none_qualified.overview is VolatilityOverview.LOW


def test_pair_metrics_insufficient(calculator: MetricsCalculator) -> None:
    metrics = calculator.calculate_pairs(_pairs([{"USD/EUR": 0.9}]))

    assert metrics.to_dict() == {"pairs": {}, "overview": "insufficient_data"}


def test_assembled_report_shape(calculator: MetricsCalculator) -> None:
    dataset = MacroDataset(
        sp500=_scalar([100, 102, 101, 105, 107]),
        currency=_pairs([{"USD/EUR": 0.90}, {"USD/EUR": 0.95}]),
        fear_greed=SentimentSnapshot(value=45, classification="Fear", timestamp=1),
    )

    report = calculator.calculate(dataset).to_dict()

    assert set(report) == {"sp500", "fearGreed", "currency"}
    assert report["sp500"]["overallChange"] == 7.0
    assert report["sp500"]["recentTrend"] == "bullish"
    assert report["fearGreed"]["sentiment"] == "fear"
    assert report["currency"]["pairs"]["USD/EUR"] == {
        "current": 0.95,
        "overallChange": 5.5556,
        "trend": "insufficient_data",
        "volatility": 0.025,
    }
    assert report["currency"]["dataPoints"] == 2


def test_assembled_report_passes_through_degraded_markers(calculator: MetricsCalculator) -> None:
    report = calculator.calculate(MacroDataset()).to_dict()

    assert report == {
        "sp500": {"current": None, "overallChange": None, "trend": "insufficient_data"},
        "fearGreed": {"current": None, "sentiment": "unknown", "classification": None},
        "currency": {"pairs": {}, "overview": "insufficient_data"},
    }
