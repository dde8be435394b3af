"""Console rendering of metrics and cycle results using Rich."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from macro_indicators.core.models import AnalysisRecord, CycleOutcome, CycleStatus, MacroMetrics

# levels used by the CLI; anything else renders as info
_EVENT_COLOURS = {"info": "cyan", "success": "green", "warning": "yellow", "error": "red"}


class ConsoleReporter:
    """Print metrics, cycle outcomes and service state to the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def log_event(
        self,
        message: str,
        *,
        level: str = "info",
        details: Mapping[str, Any] | None = None,
    ) -> None:
        colour = _EVENT_COLOURS.get(level, _EVENT_COLOURS["info"])
        if not details:
            self._console.print(Text(message, style=f"bold {colour}"))
            return
        self._console.print(
            Panel(_details_grid(details), title=Text(message, style="bold"), border_style=colour)
        )

    def error(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        self.log_event(message, level="error", details=details)

    def log_metrics(self, metrics: MacroMetrics) -> None:
        sp500 = metrics.sp500
        table = Table(title="S&P 500", show_lines=True)
        table.add_column("Field")
        table.add_column("Value")
        table.add_row("Current", _fmt(sp500.current))
        table.add_row("Overall Change %", _fmt(sp500.overall_change))
        table.add_row("Trend", sp500.trend.value)
        table.add_row("Recent Trend", sp500.recent_trend.value if sp500.recent_trend else "N/A")
        table.add_row("Volatility", _fmt(sp500.volatility, ".4f"))
        table.add_row("Data Points", _fmt(sp500.data_points))
        self._console.print(table)

        fear_greed = metrics.fear_greed
        table = Table(title="Fear & Greed", show_lines=True)
        table.add_column("Field")
        table.add_column("Value")
        table.add_row("Current", _fmt(fear_greed.current))
        table.add_row("Classification", _fmt(fear_greed.classification))
        table.add_row("Sentiment", fear_greed.sentiment.value)
        self._console.print(table)

        currency = metrics.currency
        table = Table(
            title=f"Currency ({currency.overview.value}, avg {_fmt(currency.avg_volatility)}%)",
            show_lines=True,
        )
        for column in ("Pair", "Current", "Change %", "Trend", "Volatility"):
            table.add_column(column)
        for name, pair in currency.pairs.items():
            table.add_row(
                name, str(pair.current), f"{pair.overall_change:+.4f}", pair.trend.value, str(pair.volatility)
            )
        self._console.print(table)

    def log_outcome(self, outcome: CycleOutcome) -> None:
        if outcome.status == CycleStatus.SKIPPED_BUSY:
            self.log_event("Analysis already running, skipped", level="warning")
            return
        if outcome.status == CycleStatus.SKIPPED_NO_DATA:
            self.log_event("No macro data found, analysis skipped", level="warning")
            return
        summary = outcome.summary
        self.log_event(
            "Macro analysis completed",
            level="success",
            details={
                "analysis_id": summary.analysis_id if summary else "N/A",
                "fear_greed": _fmt(summary.fear_greed_value if summary else None),
                "created_at": summary.created_at if summary else "N/A",
                "duration_ms": _fmt(outcome.duration_ms, ".0f"),
            },
        )

    def log_history(self, records: Iterable[AnalysisRecord]) -> None:
        table = Table(title="Recent analyses", show_lines=True)
        for column in ("ID", "Time", "Model", "Fear/Greed", "Summary"):
            table.add_column(column)
        for record in records:
            table.add_row(
                record.id or "",
                record.analysis_time,
                record.model,
                _fmt(record.analysis.get("fear_greed_value")),
                str(record.analysis.get("analysis_summary", "")),
            )
        self._console.print(table)

    def log_status(self, status: Mapping[str, Any]) -> None:
        details = {key: value for key, value in status.items() if key != "configuration"}
        details.update(status.get("configuration", {}))
        self.log_event(str(status.get("service", "Status")), details=details)


def _details_grid(details: Mapping[str, Any]) -> Table:
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="bold", no_wrap=True)
    grid.add_column()
    for key, value in details.items():
        grid.add_row(str(key), _fmt(value))
    return grid


def _fmt(value: Any, spec: str = "") -> str:
    if value is None:
        return "N/A"
    return format(value, spec) if spec else str(value)
