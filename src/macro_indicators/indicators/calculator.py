"""Per-indicator metrics and the composite report handed to the narrator."""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Sequence

from macro_indicators.core.config import AnalysisConfig
from macro_indicators.core.models import (
    CurrencyMetrics,
    HourlyAggregate,
    MacroDataset,
    MacroMetrics,
    PairAggregate,
    PairMetrics,
    ScalarMetrics,
    SentimentMetrics,
    SentimentSnapshot,
    Sentiment,
    Trend,
    VolatilityOverview,
)
from macro_indicators.data.aggregation import coerce_number
from macro_indicators.indicators.statistics import (
    calculate_trend,
    calculate_volatility,
    classify_sentiment,
    percent_change,
)

MIN_CHANGE_POINTS = 2


class MetricsCalculator:
    """Derive trend, volatility and sentiment metrics from hourly aggregates."""

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        self._cfg = config or AnalysisConfig()

    def calculate(self, dataset: MacroDataset) -> MacroMetrics:
        return MacroMetrics(
            sp500=self.calculate_scalar(dataset.sp500),
            fear_greed=self.calculate_sentiment(dataset.fear_greed),
            currency=self.calculate_pairs(dataset.currency),
        )

    def calculate_scalar(self, aggregates: Sequence[HourlyAggregate]) -> ScalarMetrics:
        if not aggregates or len(aggregates) < MIN_CHANGE_POINTS:
            return ScalarMetrics(current=None, overall_change=None, trend=Trend.INSUFFICIENT_DATA)

        values = [agg.value for agg in aggregates]
        recent_count = max(
            math.floor(len(values) * self._cfg.recent_window_ratio), self._cfg.recent_min_points
        )
        return ScalarMetrics(
            current=values[-1],
            overall_change=percent_change(values[0], values[-1], 2),
            trend=calculate_trend(values),
            recent_trend=calculate_trend(values[-recent_count:]),
            data_points=len(values),
            volatility=calculate_volatility(values),
        )

    def calculate_sentiment(self, snapshot: Optional[SentimentSnapshot]) -> SentimentMetrics:
        if snapshot is None:
            return SentimentMetrics(
                current=None,
                classification=None,
                sentiment=Sentiment.UNKNOWN,
                observed=False,
            )
        value = coerce_number(snapshot.value)
        return SentimentMetrics(
            current=value,
            classification=snapshot.classification,
            sentiment=classify_sentiment(value),
            timestamp=snapshot.timestamp,
        )

    def calculate_pairs(self, aggregates: Sequence[PairAggregate]) -> CurrencyMetrics:
        if not aggregates or len(aggregates) < MIN_CHANGE_POINTS:
            return CurrencyMetrics(pairs={}, overview=VolatilityOverview.INSUFFICIENT_DATA)

        first = aggregates[0].fields
        last = aggregates[-1].fields
        pairs: Dict[str, PairMetrics] = {}
        for name, raw in last.items():
            current, start = _rate(raw), _rate(first.get(name))
            if current is None or start is None:
                continue
            series = _pair_series(aggregates, name)
            pairs[name] = PairMetrics(
                current=current,
                overall_change=percent_change(start, current, 4),
                trend=calculate_trend(series),
                volatility=round(calculate_volatility(series), 4),
            )

        changes = [abs(pair.overall_change) for pair in pairs.values()]
        avg_volatility = sum(changes) / len(changes) if changes else 0.0
        return CurrencyMetrics(
            pairs=pairs,
            overview=self._classify_overview(avg_volatility),
            avg_volatility=round(avg_volatility, 4),
            data_points=len(aggregates),
        )

    def _classify_overview(self, avg_volatility: float) -> VolatilityOverview:
        if avg_volatility > self._cfg.high_volatility_threshold:
            return VolatilityOverview.HIGH
        if avg_volatility > self._cfg.moderate_volatility_threshold:
            return VolatilityOverview.MODERATE
        return VolatilityOverview.LOW


def _pair_series(aggregates: Sequence[PairAggregate], name: str) -> List[float]:
    # hours missing the pair are skipped, not gap-filled
    rates = (_rate(agg.fields.get(name)) for agg in aggregates)
    return [rate for rate in rates if rate is not None]


def _rate(value: Any) -> Optional[float]:
    """Numeric strings count as rates; zero does not."""
    rate = coerce_number(value)
    if rate is None or rate == 0:
        return None
    return rate
