"""Typed, read-only schema for the published prediction documents.

Every field is optional. Adapters in ``core.adapters`` build these objects
from the raw JSON; nothing mutates them afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


HORIZONS = ("1d", "3d", "5d", "7d")


def _empty_mapping() -> Mapping:
    return MappingProxyType({})


@dataclass(frozen=True)
class Metadata:
    """Producer metadata for one prediction run."""

    prediction_date: str | None = None
    model_epochs: float | None = None


@dataclass(frozen=True)
class BasicInfo:
    data_points: float | None = None
    feature_dimension: float | None = None
    last_known_return: float | None = None


@dataclass(frozen=True)
class HorizonReturn:
    """Expected and cumulative return for one forecast horizon."""

    expected_return: float | None = None
    cumulative_return: float | None = None
    daily_returns: tuple[float | None, ...] = ()


@dataclass(frozen=True)
class RiskMetrics:
    volatility_7d: float | None = None
    volatility_20d: float | None = None
    var_95_7d: float | None = None
    var_99_7d: float | None = None
    sharpe_ratio_7d: float | None = None
    max_drawdown_7d: float | None = None


@dataclass(frozen=True)
class SelectionScores:
    composite_score: float | None = None
    sub_scores: Mapping[str, float | None] = field(default_factory=_empty_mapping)


@dataclass(frozen=True)
class TechnicalSignals:
    predicted_signal: str | None = None
    momentum_5d: float | None = None


@dataclass(frozen=True)
class TrendAnalysis:
    predicted_trend: str | None = None
    trend_strength: float | None = None
    trend_consistency: float | None = None
    trend_change_vs_history: str | None = None


@dataclass(frozen=True)
class ProbabilityDistributions:
    prob_positive_7d: float | None = None
    prob_gain_5pct_7d: float | None = None
    prob_outperform_market_7d: float | None = None


@dataclass(frozen=True)
class StockRecord:
    """All upstream predictions for one ticker."""

    ticker: str
    basic_info: BasicInfo = field(default_factory=BasicInfo)
    horizons: Mapping[str, HorizonReturn] = field(default_factory=_empty_mapping)
    risk_metrics: RiskMetrics = field(default_factory=RiskMetrics)
    selection_scores: SelectionScores = field(default_factory=SelectionScores)
    technical_signals: TechnicalSignals = field(default_factory=TechnicalSignals)
    trend_analysis: TrendAnalysis = field(default_factory=TrendAnalysis)
    probabilities: ProbabilityDistributions = field(default_factory=ProbabilityDistributions)


@dataclass(frozen=True)
class TrainingHistory:
    """Per-epoch training and validation loss."""

    train: tuple[float | None, ...] = ()
    valid: tuple[float | None, ...] = ()


@dataclass(frozen=True)
class PredictionDocument:
    """Parsed ``future.json`` snapshot."""

    version: str
    metadata: Metadata = field(default_factory=Metadata)
    stocks: Mapping[str, StockRecord] = field(default_factory=_empty_mapping)
    training_history: TrainingHistory | None = None

    @property
    def tickers(self) -> list[str]:
        return list(self.stocks.keys())

    def get(self, ticker: str | None) -> StockRecord | None:
        if not ticker:
            return None
        return self.stocks.get(ticker)


@dataclass(frozen=True)
class Recommendation:
    ticker: str
    score: float | None = None
    expected_7d_return: float | None = None
    risk_level: str | None = None


@dataclass(frozen=True)
class AvoidEntry:
    ticker: str
    score: float | None = None
    reason: str | None = None


@dataclass(frozen=True)
class SummaryStats:
    total_stocks_analyzed: float | None = None
    successful_predictions: float | None = None
    average_composite_score: float | None = None
    top_score: float | None = None
    rating_distribution: Mapping[str, float | None] = field(default_factory=_empty_mapping)


@dataclass(frozen=True)
class SummaryDocument:
    """Parsed ``future_summary.json`` snapshot."""

    summary: SummaryStats = field(default_factory=SummaryStats)
    top_recommendations: tuple[Recommendation, ...] = ()
    avoid_list: tuple[AvoidEntry, ...] = ()


@dataclass(frozen=True)
class DashboardData:
    """Everything one page session renders from."""

    document: PredictionDocument
    summary: SummaryDocument | None = None
