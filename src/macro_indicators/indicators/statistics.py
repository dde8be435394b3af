"""Series statistics built on top of pandas."""

from __future__ import annotations

from typing import Optional, Sequence

import pandas as pd

from macro_indicators.core.models import Sentiment, Trend

MIN_TREND_POINTS = 3
MIN_VOLATILITY_POINTS = 2

# upper bound of each band, inclusive
SENTIMENT_BANDS = (
    (25, Sentiment.EXTREME_FEAR),
    (45, Sentiment.FEAR),
    (55, Sentiment.NEUTRAL),
    (75, Sentiment.GREED),
)


def calculate_trend(values: Sequence[float]) -> Trend:
    """Classify direction by the share of adjacent moves that went up.

    Only ordering matters: magnitudes are ignored.
    """
    if len(values) < MIN_TREND_POINTS:
        return Trend.INSUFFICIENT_DATA
    series = pd.Series(values, dtype="float64")
    increases = int((series.diff() > 0).sum())
    ratio = increases / (len(series) - 1)
    if ratio > 0.6:
        return Trend.BULLISH
    if ratio < 0.4:
        return Trend.BEARISH
    return Trend.SIDEWAYS


def calculate_volatility(values: Sequence[float]) -> float:
    """Population standard deviation; 0.0 when fewer than two points."""
    if values is None or len(values) < MIN_VOLATILITY_POINTS:
        return 0.0
    return float(pd.Series(values, dtype="float64").std(ddof=0))


def classify_sentiment(value: Optional[float]) -> Sentiment:
    if value is None:
        return Sentiment.UNKNOWN
    for upper, label in SENTIMENT_BANDS:
        if value <= upper:
            return label
    return Sentiment.EXTREME_GREED


def percent_change(first: Optional[float], last: Optional[float], digits: int) -> Optional[float]:
    if first is None or last is None or first == 0:
        return None
    return round((last - first) / first * 100, digits)
