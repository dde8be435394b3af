"""Entry point for manual runs or the hourly scheduler."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from macro_indicators.ai.base import NarrationProvider
from macro_indicators.ai.openrouter_client import OpenRouterClient
from macro_indicators.ai.stub import StubNarrator
from macro_indicators.core.config import Config
from macro_indicators.core.errors import ConfigurationError, MacroAnalysisError
from macro_indicators.data.fetcher import MacroDataFetcher
from macro_indicators.indicators.calculator import MetricsCalculator
from macro_indicators.monitoring.logger import ConsoleReporter
from macro_indicators.scheduler.runner import AnalysisScheduler
from macro_indicators.scheduler.service import MacroAnalysisService
from macro_indicators.storage.repository import (
    AnalysisStore,
    InMemoryAnalysisStore,
    JsonlAnalysisStore,
)


def build_store(config: Config) -> AnalysisStore:
    if config.storage.path:
        return JsonlAnalysisStore(config.storage.path)
    return InMemoryAnalysisStore()


def build_narrator(config: Config, offline: bool) -> NarrationProvider:
    if offline:
        return StubNarrator()
    if not config.ai.api_key:
        raise ConfigurationError("MACRO_OPENROUTER_API_KEY is required (or use --offline)")
    return OpenRouterClient(config.ai)


def build_service(config: Config, offline: bool = False) -> MacroAnalysisService:
    return MacroAnalysisService(
        config=config,
        fetcher=MacroDataFetcher(config.data_service, config.analysis),
        narrator=build_narrator(config, offline),
        store=build_store(config),
        calculator=MetricsCalculator(config.analysis),
    )


async def run_command(args: argparse.Namespace, config: Config, reporter: ConsoleReporter) -> None:
    if args.command == "metrics":
        fetcher = MacroDataFetcher(config.data_service, config.analysis)
        try:
            dataset = await fetcher.collect(config.analysis.lookback_hours)
        finally:
            await fetcher.close()
        reporter.log_metrics(MetricsCalculator(config.analysis).calculate(dataset))
        return

    service = build_service(config, offline=getattr(args, "offline", False))
    try:
        if args.command == "analyze":
            outcome = await service.perform_analysis()
            if outcome.metrics is not None:
                reporter.log_metrics(outcome.metrics)
            reporter.log_outcome(outcome)
        elif args.command == "serve":
            scheduler = AnalysisScheduler(service, config.scheduler)
            try:
                await scheduler.run_forever()
            finally:
                await scheduler.stop()
        elif args.command == "history":
            reporter.log_history(await service.history(args.limit))
        elif args.command == "status":
            reporter.log_status(service.status())
    finally:
        await service.close()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Macro economic indicators analysis")
    parser.add_argument("--config", type=str, help="Path to YAML config", default=None)
    parser.add_argument("--log-level", type=str, default="INFO")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Run one analysis cycle")
    analyze.add_argument("--offline", action="store_true", help="Narrate without calling the model")
    sub.add_parser("metrics", help="Collect data and print metrics only")
    serve = sub.add_parser("serve", help="Run the hourly scheduler")
    serve.add_argument("--offline", action="store_true", help="Narrate without calling the model")
    history = sub.add_parser("history", help="Show recent analyses")
    history.add_argument("--limit", type=int, default=None)
    sub.add_parser("status", help="Show service configuration")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    reporter = ConsoleReporter()
    try:
        config = Config.load(args.config)
        asyncio.run(run_command(args, config, reporter))
    except MacroAnalysisError as exc:
        reporter.error("Macro analysis failed", details={"error": str(exc)})
        return 1
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    sys.exit(main())
