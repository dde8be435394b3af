from __future__ import annotations

from datetime import datetime, timezone

from macro_indicators.ai.base import NarrationProvider
from macro_indicators.core.models import AnalysisBrief, NarrationResult


class StubNarrator(NarrationProvider):
    """Offline narrator that restates the metrics without calling a model."""

    model = "stub"
    provider = "local"

    async def narrate(self, brief: AnalysisBrief) -> NarrationResult:
        metrics = brief.metrics
        sp500 = metrics.sp500
        fear_greed = metrics.fear_greed
        currency = metrics.currency

        if sp500.current is None:
            sp500_text = "Not enough S&P 500 data to assess the equity market."
        else:
            sp500_text = (
                f"S&P 500 at {sp500.current} with a {sp500.trend.value} trend, "
                f"{sp500.overall_change}% over {brief.lookback_hours} hours."
            )
        fear_greed_text = (
            f"Fear & greed index at {fear_greed.current} ({fear_greed.sentiment.value})."
            if fear_greed.current is not None
            else "No fear & greed reading available."
        )
        currency_text = (
            f"{len(currency.pairs)} currency pairs tracked, overview {currency.overview.value}."
        )
        return NarrationResult(
            sp500_analysis=sp500_text,
            fear_greed_analysis=fear_greed_text,
            currency_analysis=currency_text,
            analysis_summary=" ".join([sp500_text, fear_greed_text, currency_text]),
            fear_greed_value=fear_greed.current,
            created_at=datetime.now(tz=timezone.utc).isoformat(),
        )
