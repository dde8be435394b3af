"""Configuration loading utilities for the macro indicators service."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, Field, ValidationError

from macro_indicators.core.errors import ConfigurationError

CONFIG_ENV_PREFIX = "MACRO_"


class DataServiceConfig(BaseModel):
    base_url: str = "http://localhost:8083"
    timeout_seconds: float = 10.0
    retry_attempts: int = 3


class AiConfig(BaseModel):
    provider: str = "openrouter"
    api_url: str = "https://openrouter.ai/api/v1/chat/completions"
    api_key: str | None = None
    model: str = "openai/gpt-5-mini"
    timeout_seconds: float = 60.0
    retry_attempts: int = 2
    max_tokens: int = 10000
    temperature: float = 0.3
    title: str = "Macro Indicators Analysis - Economic Conditions"


class AnalysisConfig(BaseModel):
    lookback_hours: int = Field(default=168, gt=0)
    price_field: str = "price"
    recent_window_ratio: float = 0.2
    recent_min_points: int = 5
    high_volatility_threshold: float = 2.0
    moderate_volatility_threshold: float = 1.0


class SchedulerConfig(BaseModel):
    minute: int = Field(default=58, ge=0, le=59)
    enabled: bool = True


class StorageConfig(BaseModel):
    path: str | None = None  # None keeps results in memory
    history_limit: int = 10
    service_version: str = "1.0.0"


class Config(BaseModel):
    data_service: DataServiceConfig = Field(default_factory=DataServiceConfig)
    ai: AiConfig = Field(default_factory=AiConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    @staticmethod
    def load(path: str | Path | None = None, env_prefix: str = CONFIG_ENV_PREFIX) -> "Config":
        """Load config from YAML file if provided, then apply environment overrides."""
        data: Dict[str, Any] = {}
        if path is not None:
            file_path = Path(path)
            if not file_path.exists():
                raise ConfigurationError(f"Config file not found: {file_path}")
            data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
        try:
            config = Config(**data)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc
        return apply_env_overrides(config, env_prefix=env_prefix)


def apply_env_overrides(config: Config, env_prefix: str = CONFIG_ENV_PREFIX) -> Config:
    data_url = os.getenv(f"{env_prefix}DATA_SERVICE_URL")
    api_key = os.getenv(f"{env_prefix}OPENROUTER_API_KEY")
    store_path = os.getenv(f"{env_prefix}STORE_PATH")
    lookback = _get_env_int(f"{env_prefix}LOOKBACK_HOURS")

    updates: Dict[str, Any] = {}
    if data_url:
        updates["data_service"] = config.data_service.model_copy(update={"base_url": data_url})
    if api_key:
        updates["ai"] = config.ai.model_copy(update={"api_key": api_key})
    if store_path:
        updates["storage"] = config.storage.model_copy(update={"path": store_path})
    if lookback is not None and lookback > 0:
        updates["analysis"] = config.analysis.model_copy(update={"lookback_hours": lookback})
    return config.model_copy(update=updates) if updates else config


def _get_env_int(key: str) -> int | None:
    raw = os.getenv(key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None
