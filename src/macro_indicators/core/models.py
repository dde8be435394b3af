"""Shared data models used across modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class Trend(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    SIDEWAYS = "sideways"
    INSUFFICIENT_DATA = "insufficient_data"


class Sentiment(str, Enum):
    EXTREME_FEAR = "extreme_fear"
    FEAR = "fear"
    NEUTRAL = "neutral"
    GREED = "greed"
    EXTREME_GREED = "extreme_greed"
    UNKNOWN = "unknown"


class VolatilityOverview(str, Enum):
    HIGH = "high_volatility"
    MODERATE = "moderate_volatility"
    LOW = "low_volatility"
    INSUFFICIENT_DATA = "insufficient_data"


class CycleStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED_BUSY = "skipped_busy"
    SKIPPED_NO_DATA = "skipped_no_data"


@dataclass(frozen=True)
class HourlyAggregate:
    hour_timestamp: int
    value: float
    original_timestamp: int


@dataclass(frozen=True)
class PairAggregate:
    hour_timestamp: int
    fields: Dict[str, Any]
    original_timestamp: int


@dataclass(frozen=True)
class SentimentSnapshot:
    value: Optional[float]
    classification: Optional[str]
    timestamp: Any = None


@dataclass(frozen=True)
class MacroDataset:
    sp500: List[HourlyAggregate] = field(default_factory=list)
    currency: List[PairAggregate] = field(default_factory=list)
    fear_greed: Optional[SentimentSnapshot] = None
    collected_at: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return not self.sp500 and not self.currency and self.fear_greed is None


@dataclass(frozen=True)
class ScalarMetrics:
    current: Optional[float]
    overall_change: Optional[float]
    trend: Trend
    recent_trend: Optional[Trend] = None
    data_points: Optional[int] = None
    volatility: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "current": self.current,
            "overallChange": self.overall_change,
            "trend": self.trend.value,
        }
        if self.recent_trend is not None:
            out["recentTrend"] = self.recent_trend.value
        if self.data_points is not None:
            out["dataPoints"] = self.data_points
        if self.volatility is not None:
            out["volatility"] = self.volatility
        return out


@dataclass(frozen=True)
class SentimentMetrics:
    current: Optional[float]
    classification: Optional[str]
    sentiment: Sentiment
    timestamp: Any = None
    observed: bool = True

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "current": self.current,
            "classification": self.classification,
            "sentiment": self.sentiment.value,
        }
        if self.observed:
            out["timestamp"] = self.timestamp
        return out


@dataclass(frozen=True)
class PairMetrics:
    current: float
    overall_change: float
    trend: Trend
    volatility: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current": self.current,
            "overallChange": self.overall_change,
            "trend": self.trend.value,
            "volatility": self.volatility,
        }


@dataclass(frozen=True)
class CurrencyMetrics:
    pairs: Dict[str, PairMetrics]
    overview: VolatilityOverview
    avg_volatility: Optional[float] = None
    data_points: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "pairs": {name: pair.to_dict() for name, pair in self.pairs.items()},
            "overview": self.overview.value,
        }
        if self.avg_volatility is not None:
            out["avgVolatility"] = self.avg_volatility
        if self.data_points is not None:
            out["dataPoints"] = self.data_points
        return out


@dataclass(frozen=True)
class MacroMetrics:
    sp500: ScalarMetrics
    fear_greed: SentimentMetrics
    currency: CurrencyMetrics

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sp500": self.sp500.to_dict(),
            "fearGreed": self.fear_greed.to_dict(),
            "currency": self.currency.to_dict(),
        }


@dataclass(frozen=True)
class AnalysisBrief:
    generated_at: datetime
    lookback_hours: int
    sp500_section: str
    fear_greed_section: str
    currency_section: str
    prompt: str
    metrics: MacroMetrics


@dataclass
class NarrationResult:
    sp500_analysis: str
    fear_greed_analysis: str
    currency_analysis: str
    analysis_summary: str
    fear_greed_value: Any = None
    created_at: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.extra,
            "sp500_analysis": self.sp500_analysis,
            "fear_greed_analysis": self.fear_greed_analysis,
            "currency_analysis": self.currency_analysis,
            "analysis_summary": self.analysis_summary,
            "fear_greed_value": self.fear_greed_value,
            "createdAt": self.created_at,
        }


@dataclass
class AnalysisRecord:
    analysis_time: str
    analysis: Dict[str, Any]
    service_version: str
    model: str
    provider: str
    data_collection_period: str
    id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "analysisTime": self.analysis_time,
            "analysis": self.analysis,
            "serviceVersion": self.service_version,
            "model": self.model,
            "provider": self.provider,
            "dataCollectionPeriod": self.data_collection_period,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AnalysisRecord":
        return cls(
            id=payload.get("id"),
            analysis_time=payload["analysisTime"],
            analysis=payload.get("analysis", {}),
            service_version=payload.get("serviceVersion", ""),
            model=payload.get("model", ""),
            provider=payload.get("provider", ""),
            data_collection_period=payload.get("dataCollectionPeriod", ""),
        )


@dataclass
class SaveSummary:
    analysis_id: str
    timestamp: str
    fear_greed_value: Any
    created_at: str


@dataclass
class CycleOutcome:
    status: CycleStatus
    summary: Optional[SaveSummary] = None
    metrics: Optional[MacroMetrics] = None
    duration_ms: Optional[float] = None

    @property
    def skipped(self) -> bool:
        return self.status != CycleStatus.COMPLETED
