"""Render the composite metrics report into the brief sent to the narrator."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from macro_indicators.core.models import AnalysisBrief, MacroMetrics

SYSTEM_PROMPT = (
    "You are an expert macro-economic analyst specializing in Fear & Greed Index, "
    "S&P 500, and currency market analysis. You analyze each indicator independently "
    "to provide context about current global financial market conditions and economic "
    "environment. Focus on current state and recent changes rather than correlations "
    "between indicators."
)

PROMPT_TEMPLATE = """Analyze the current macro-economic conditions as of {timestamp}.
The data covers the last {lookback_hours} hours ({lookback_minutes} minutes) of hourly-aggregated observations.

## S&P 500
{sp500_section}

## Fear & Greed Index
{fear_greed_section}

## Currency Exchange Rates
{currency_section}

Respond only in JSON with the fields:
- "sp500_analysis": assessment of the equity market
- "fear_greed_analysis": assessment of market sentiment
- "currency_analysis": assessment of the currency market
- "analysis_summary": overall market conditions in a few sentences
- "fear_greed_value": the current fear & greed index value as a number
"""


def _fmt(value: Any) -> str:
    return "N/A" if value is None else str(value)


def render_sp500_section(metrics: MacroMetrics, lookback_hours: int) -> str:
    sp500 = metrics.sp500
    return "\n".join(
        [
            f"**Current S&P 500**: {_fmt(sp500.current)}",
            f"**Overall Change ({lookback_hours} hours)**: {_fmt(sp500.overall_change)}%",
            f"**Trend**: {sp500.trend.value}",
            f"**Recent Trend**: {_fmt(sp500.recent_trend.value if sp500.recent_trend else None)}",
            f"**Volatility**: {_fmt(sp500.volatility)}",
            f"**Data Points**: {_fmt(sp500.data_points)} hourly intervals",
        ]
    )


def render_fear_greed_section(metrics: MacroMetrics) -> str:
    fear_greed = metrics.fear_greed
    return "\n".join(
        [
            f"**Current Index**: {_fmt(fear_greed.current)}",
            f"**Classification**: {_fmt(fear_greed.classification)}",
            f"**Sentiment**: {fear_greed.sentiment.value}",
            f"**Timestamp**: {_fmt(fear_greed.timestamp)}",
        ]
    )


def render_currency_section(metrics: MacroMetrics, lookback_hours: int) -> str:
    currency = metrics.currency
    pair_lines = [
        f"- **{name}**: {pair.current} ({'+' if pair.overall_change > 0 else ''}"
        f"{pair.overall_change}% - {pair.trend.value}, volatility: {pair.volatility})"
        for name, pair in currency.pairs.items()
    ]
    return "\n".join(
        [
            f"**Market Overview**: {currency.overview.value}",
            f"**Average Volatility**: {_fmt(currency.avg_volatility)}%",
            f"**Currency Pairs ({lookback_hours} hours)**:",
            "\n".join(pair_lines) if pair_lines else "No currency data available",
            f"**Data Points**: {_fmt(currency.data_points)} hourly intervals",
        ]
    )


def build_brief(
    metrics: MacroMetrics, lookback_hours: int, now: Optional[datetime] = None
) -> AnalysisBrief:
    generated_at = now or datetime.now(tz=timezone.utc)
    sp500_section = render_sp500_section(metrics, lookback_hours)
    fear_greed_section = render_fear_greed_section(metrics)
    currency_section = render_currency_section(metrics, lookback_hours)
    prompt = PROMPT_TEMPLATE.format(
        timestamp=generated_at.isoformat(),
        lookback_hours=lookback_hours,
        lookback_minutes=lookback_hours * 60,
        sp500_section=sp500_section,
        fear_greed_section=fear_greed_section,
        currency_section=currency_section,
    )
    return AnalysisBrief(
        generated_at=generated_at,
        lookback_hours=lookback_hours,
        sp500_section=sp500_section,
        fear_greed_section=fear_greed_section,
        currency_section=currency_section,
        prompt=prompt,
        metrics=metrics,
    )
