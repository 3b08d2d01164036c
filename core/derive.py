"""Pure derivations over a loaded prediction snapshot.

Nothing here caches: every call recomputes from the document and the
current selection. Missing fields are defaulted through ``core.fields``.
Aggregates divide by the total ticker count, so missing values pull means
toward the field default; an empty document yields NaN means.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Callable, Iterable

import pandas as pd

from core import fields
from core.schema import HORIZONS, PredictionDocument, Recommendation, StockRecord, SummaryDocument


BULLISH_SCORE = 60.0
BEARISH_SCORE = 40.0

# Ordered (lower bound, level) pairs; anything at or below the last bound is MINIMAL.
RISK_THRESHOLDS = ((0.05, "HIGH"), (0.02, "MEDIUM"), (0.001, "LOW"))
RISK_LEVELS = ("HIGH", "MEDIUM", "LOW", "MINIMAL")

SIGNALS = ("BUY", "SELL", "HOLD")
RATINGS = ("STRONG_BUY", "BUY", "HOLD", "SELL", "STRONG_SELL")

FRAME_COLUMNS = [
    "ticker",
    "expected_1d",
    "expected_3d",
    "expected_5d",
    "expected_7d",
    "cumulative_7d",
    "last_known_return",
    "volatility",
    "var_95",
    "sharpe_ratio",
    "max_drawdown",
    "composite_score",
    "signal",
    "trend",
    "trend_strength",
    "trend_consistency",
    "prob_positive",
    "prob_gain_5pct",
    "prob_outperform",
]

SORT_FIELDS: dict[str, Callable[[StockRecord | None], float]] = {
    "prediction": lambda record: fields.expected_return(record, "7d"),
    "volatility": fields.volatility,
    "confidence": lambda record: fields.composite_score(record, default=0.0),
    "cumulative": lambda record: fields.cumulative_return(record, "7d"),
    "last_return": fields.last_known_return,
}


def _round_half_up(value: float) -> float:
    if math.isnan(value):
        return math.nan
    return float(math.floor(value + 0.5))


def _record_row(record: StockRecord) -> dict[str, object]:
    return {
        "ticker": record.ticker,
        "expected_1d": fields.expected_return(record, "1d"),
        "expected_3d": fields.expected_return(record, "3d"),
        "expected_5d": fields.expected_return(record, "5d"),
        "expected_7d": fields.expected_return(record, "7d"),
        "cumulative_7d": fields.cumulative_return(record, "7d"),
        "last_known_return": fields.last_known_return(record),
        "volatility": fields.volatility(record),
        "var_95": fields.value_at_risk(record),
        "sharpe_ratio": fields.sharpe_ratio(record),
        "max_drawdown": fields.max_drawdown(record),
        "composite_score": fields.composite_score(record),
        "signal": fields.technical_signal(record),
        "trend": fields.predicted_trend(record),
        "trend_strength": fields.trend_strength(record),
        "trend_consistency": fields.trend_consistency(record),
        "prob_positive": fields.probability(record, "prob_positive_7d"),
        "prob_gain_5pct": fields.probability(record, "prob_gain_5pct_7d"),
        "prob_outperform": fields.probability(record, "prob_outperform_market_7d"),
    }


def stock_frame(document: PredictionDocument, tickers: Iterable[str] | None = None) -> pd.DataFrame:
    """One defaulted row per ticker, in document (or given) order."""
    selected = document.tickers if tickers is None else list(tickers)
    rows = [_record_row(document.stocks[ticker]) for ticker in selected if ticker in document.stocks]
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def _mean(frame: pd.DataFrame, column: str) -> float:
    if frame.empty:
        return math.nan
    return float(frame[column].mean())


# ---------------------------------------------------------------------------
# Filter / sort / top-N
# ---------------------------------------------------------------------------

def filter_tickers(tickers: Iterable[str], term: str | None) -> list[str]:
    """Case-insensitive substring match on the ticker symbol."""
    needle = (term or "").lower()
    return [ticker for ticker in tickers if needle in ticker.lower()]


def sort_tickers(
    document: PredictionDocument,
    tickers: Iterable[str],
    key: str,
    order: str = "desc",
) -> list[str]:
    """Order tickers by one supported field; a missing field sorts as 0."""
    ordered = list(tickers)
    accessor = SORT_FIELDS.get(key)
    if accessor is None:
        return ordered
    ordered.sort(key=lambda ticker: accessor(document.get(ticker)), reverse=order != "asc")
    return ordered


def visible_tickers(document: PredictionDocument, search: str, sort_key: str, sort_order: str) -> list[str]:
    """Filtered then sorted tickers for the stock views."""
    return sort_tickers(document, filter_tickers(document.tickers, search), sort_key, sort_order)


def top_performers(document: PredictionDocument, limit: int = 10) -> list[str]:
    """Highest 7-day expected return first."""
    return sort_tickers(document, document.tickers, "prediction", "desc")[:limit]


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MarketAverages:
    expected_return: float
    volatility: float
    composite_score: float
    sharpe_ratio: float


@dataclass(frozen=True)
class RiskOverview:
    volatility: float
    sharpe_ratio: float
    max_drawdown: float


@dataclass(frozen=True)
class ProbabilityOverview:
    positive: float
    gain_5pct: float
    outperform_market: float


@dataclass(frozen=True)
class ReturnRange:
    mean: float
    minimum: float
    maximum: float


def market_averages(document: PredictionDocument) -> MarketAverages:
    frame = stock_frame(document)
    return MarketAverages(
        expected_return=_mean(frame, "expected_7d"),
        volatility=_mean(frame, "volatility"),
        composite_score=_mean(frame, "composite_score"),
        sharpe_ratio=_mean(frame, "sharpe_ratio"),
    )


def risk_overview(document: PredictionDocument) -> RiskOverview:
    frame = stock_frame(document)
    return RiskOverview(
        volatility=_mean(frame, "volatility"),
        sharpe_ratio=_mean(frame, "sharpe_ratio"),
        max_drawdown=_mean(frame, "max_drawdown"),
    )


def probability_overview(document: PredictionDocument) -> ProbabilityOverview:
    frame = stock_frame(document)
    return ProbabilityOverview(
        positive=_mean(frame, "prob_positive"),
        gain_5pct=_mean(frame, "prob_gain_5pct"),
        outperform_market=_mean(frame, "prob_outperform"),
    )


def return_range(document: PredictionDocument) -> ReturnRange:
    frame = stock_frame(document)
    if frame.empty:
        return ReturnRange(mean=math.nan, minimum=math.nan, maximum=math.nan)
    returns = frame["expected_7d"]
    return ReturnRange(mean=float(returns.mean()), minimum=float(returns.min()), maximum=float(returns.max()))


# ---------------------------------------------------------------------------
# Categorical buckets
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Bucket:
    key: str
    label: str
    count: int
    percent: float
    color: str


def _bucket(key: str, label: str, count: int, total: int, color: str) -> Bucket:
    percent = _round_half_up(count / total * 100) if total else math.nan
    return Bucket(key=key, label=label, count=int(count), percent=percent, color=color)


def sentiment_buckets(document: PredictionDocument) -> list[Bucket]:
    """Bullish above 60, bearish below 40, neutral otherwise; missing scores count as 50."""
    scores = stock_frame(document)["composite_score"]
    total = len(scores)
    bullish = int((scores > BULLISH_SCORE).sum())
    bearish = int((scores < BEARISH_SCORE).sum())
    neutral = total - bullish - bearish
    return [
        _bucket("bullish", "Bullish", bullish, total, "#10B981"),
        _bucket("bearish", "Bearish", bearish, total, "#EF4444"),
        _bucket("neutral", "Neutral", neutral, total, "#6B7280"),
    ]


def classify_risk(volatility: float) -> str:
    """Map a 7-day volatility to a fixed risk level."""
    for bound, level in RISK_THRESHOLDS:
        if volatility > bound:
            return level
    return "MINIMAL"


def risk_buckets(document: PredictionDocument) -> dict[str, int]:
    counts = {level: 0 for level in RISK_LEVELS}
    for ticker in document.tickers:
        counts[classify_risk(fields.volatility(document.get(ticker)))] += 1
    return counts


def signal_distribution(document: PredictionDocument) -> dict[str, int]:
    signals = stock_frame(document)["signal"]
    return {signal: int((signals == signal).sum()) for signal in SIGNALS}


@dataclass(frozen=True)
class TrendDistribution:
    uptrends: int
    downtrends: int
    average_consistency: float


def trend_distribution(document: PredictionDocument) -> TrendDistribution:
    frame = stock_frame(document)
    return TrendDistribution(
        uptrends=int((frame["trend"] == "UPTREND").sum()),
        downtrends=int((frame["trend"] == "DOWNTREND").sum()),
        average_consistency=_mean(frame, "trend_consistency"),
    )


# ---------------------------------------------------------------------------
# Chart series
# ---------------------------------------------------------------------------

def horizon_series(record: StockRecord | None) -> pd.DataFrame:
    """Expected and cumulative return per horizon, in percent."""
    columns = ["period", "days", "expected_pct", "cumulative_pct"]
    if record is None:
        return pd.DataFrame(columns=columns)
    rows = [
        {
            "period": horizon,
            "days": int(horizon.rstrip("d")),
            "expected_pct": fields.expected_return(record, horizon) * 100,
            "cumulative_pct": fields.cumulative_return(record, horizon) * 100,
        }
        for horizon in HORIZONS
    ]
    return pd.DataFrame(rows, columns=columns)


def daily_return_series(record: StockRecord | None) -> pd.DataFrame:
    """Per-day 7-day path with its running cumulative sum, in percent."""
    returns = pd.Series(fields.daily_returns(record), dtype="float64")
    return pd.DataFrame(
        {
            "day": range(1, len(returns) + 1),
            "return_pct": returns * 100,
            "cumulative_pct": returns.cumsum() * 100,
        }
    )


def risk_return_points(document: PredictionDocument, tickers: Iterable[str]) -> pd.DataFrame:
    frame = stock_frame(document, tickers)
    return pd.DataFrame(
        {
            "ticker": frame["ticker"].str.upper(),
            "risk_pct": frame["volatility"] * 100,
            "return_pct": frame["expected_7d"] * 100,
            "probability_pct": frame["prob_positive"] * 100,
            "composite_score": frame["composite_score"],
        }
    )


def comparison_rows(document: PredictionDocument, tickers: Iterable[str], limit: int = 15) -> pd.DataFrame:
    frame = stock_frame(document, list(tickers)[:limit])
    return pd.DataFrame(
        {
            "ticker": frame["ticker"].str.upper(),
            "expected_1d_pct": frame["expected_1d"] * 100,
            "expected_7d_pct": frame["expected_7d"] * 100,
            "cumulative_7d_pct": frame["cumulative_7d"] * 100,
            "volatility_pct": frame["volatility"] * 100,
            "composite_score": frame["composite_score"],
        }
    )


def training_curve(document: PredictionDocument) -> pd.DataFrame | None:
    """Loss per epoch; a missing validation loss plots as 0."""
    history = document.training_history
    if history is None or not history.train:
        return None
    train = [math.nan if value is None else value for value in history.train]
    valid = [fields.ratio(history.valid[idx]) if idx < len(history.valid) else 0.0 for idx in range(len(train))]
    return pd.DataFrame({"epoch": range(1, len(train) + 1), "train": train, "valid": valid})


# ---------------------------------------------------------------------------
# Model + summary views
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ModelInfo:
    ticker_count: int
    feature_dimension: float | None
    data_points: float | None
    model_epochs: float | None


def model_info(document: PredictionDocument) -> ModelInfo:
    """Model facts as reported by the first record in the document."""
    first = next(iter(document.stocks.values()), None)
    return ModelInfo(
        ticker_count=len(document.stocks),
        feature_dimension=first.basic_info.feature_dimension if first is not None else None,
        data_points=first.basic_info.data_points if first is not None else None,
        model_epochs=document.metadata.model_epochs,
    )


def success_rate(summary: SummaryDocument | None) -> float:
    """Successful predictions as a percent of analysed tickers; NaN when unknown."""
    if summary is None:
        return math.nan
    total = fields.to_float(summary.summary.total_stocks_analyzed)
    successful = fields.to_float(summary.summary.successful_predictions)
    if total is None or successful is None or total == 0:
        return math.nan
    return successful / total * 100


def rating_distribution(summary: SummaryDocument | None) -> list[Bucket]:
    labels = {
        "STRONG_BUY": ("Strong buy", "#10B981"),
        "BUY": ("Buy", "#34D399"),
        "HOLD": ("Hold", "#FBBF24"),
        "SELL": ("Sell", "#F87171"),
        "STRONG_SELL": ("Strong sell", "#EF4444"),
    }
    distribution = summary.summary.rating_distribution if summary is not None else {}
    counts = {rating: int(fields.ratio(distribution.get(rating))) for rating in RATINGS}
    total = sum(counts.values())
    return [
        _bucket(rating, labels[rating][0], counts[rating], total, labels[rating][1])
        for rating in RATINGS
    ]


@dataclass(frozen=True)
class PortfolioSuggestions:
    conservative: tuple[Recommendation, ...]
    balanced: tuple[Recommendation, ...]
    growth: tuple[Recommendation, ...]


def portfolio_suggestions(summary: SummaryDocument | None) -> PortfolioSuggestions:
    """Three model portfolios drawn from the producer's recommendations."""
    picks = list(summary.top_recommendations) if summary is not None else []
    conservative = [item for item in picks if item.risk_level == "LOW"][:3]
    growth = sorted(picks, key=lambda item: fields.ratio(item.expected_7d_return), reverse=True)[:3]
    return PortfolioSuggestions(
        conservative=tuple(conservative),
        balanced=tuple(picks[:4]),
        growth=tuple(growth),
    )
