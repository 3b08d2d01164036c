"""Versioned adapters from raw JSON payloads to ``core.schema`` objects."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable

from core.fields import to_float
from core.schema import (
    AvoidEntry,
    BasicInfo,
    HorizonReturn,
    Metadata,
    PredictionDocument,
    ProbabilityDistributions,
    Recommendation,
    RiskMetrics,
    SelectionScores,
    StockRecord,
    SummaryDocument,
    SummaryStats,
    TechnicalSignals,
    TrainingHistory,
    TrendAnalysis,
)


COMPREHENSIVE = "comprehensive"
DAILY = "daily"


class UnsupportedDocumentError(ValueError):
    """Raised when no adapter is registered for a document's shape."""


def _section(raw: Any, key: str) -> dict[str, Any]:
    """Return a nested object, or an empty dict when absent or malformed."""
    if not isinstance(raw, dict):
        return {}
    value = raw.get(key)
    return value if isinstance(value, dict) else {}


def _optional_text(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text_value = str(value).strip()
    return text_value or None


def _float_sequence(value: Any) -> tuple[float | None, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(to_float(item) for item in value)


def _float_mapping(raw: dict[str, Any], skip: tuple[str, ...] = ()) -> MappingProxyType:
    return MappingProxyType({str(key): to_float(value) for key, value in raw.items() if key not in skip})


def _adapt_horizons(raw: dict[str, Any]) -> MappingProxyType:
    horizons: dict[str, HorizonReturn] = {}
    for label, payload in raw.items():
        if not isinstance(payload, dict):
            continue
        horizons[str(label)] = HorizonReturn(
            expected_return=to_float(payload.get("expected_return")),
            cumulative_return=to_float(payload.get("cumulative_return")),
            daily_returns=_float_sequence(payload.get("daily_returns")),
        )
    return MappingProxyType(horizons)


def _adapt_record(ticker: str, raw: Any) -> StockRecord:
    basic = _section(raw, "basic_info")
    risk = _section(raw, "risk_metrics")
    scores = _section(raw, "selection_scores")
    signals = _section(raw, "technical_signals")
    trend = _section(raw, "trend_analysis")
    probabilities = _section(raw, "probability_distributions")

    return StockRecord(
        ticker=ticker,
        basic_info=BasicInfo(
            data_points=to_float(basic.get("data_points")),
            feature_dimension=to_float(basic.get("feature_dimension")),
            last_known_return=to_float(basic.get("last_known_return")),
        ),
        horizons=_adapt_horizons(_section(raw, "multi_horizon_returns")),
        risk_metrics=RiskMetrics(
            volatility_7d=to_float(risk.get("volatility_7d")),
            volatility_20d=to_float(risk.get("volatility_20d")),
            var_95_7d=to_float(risk.get("var_95_7d")),
            var_99_7d=to_float(risk.get("var_99_7d")),
            sharpe_ratio_7d=to_float(risk.get("sharpe_ratio_7d")),
            max_drawdown_7d=to_float(risk.get("max_drawdown_7d")),
        ),
        selection_scores=SelectionScores(
            composite_score=to_float(scores.get("composite_score")),
            sub_scores=_float_mapping(scores, skip=("composite_score",)),
        ),
        technical_signals=TechnicalSignals(
            predicted_signal=_optional_text(signals.get("predicted_signal")),
            momentum_5d=to_float(signals.get("momentum_5d")),
        ),
        trend_analysis=TrendAnalysis(
            predicted_trend=_optional_text(trend.get("predicted_trend")),
            trend_strength=to_float(trend.get("trend_strength")),
            trend_consistency=to_float(trend.get("trend_consistency")),
            trend_change_vs_history=_optional_text(trend.get("trend_change_vs_history")),
        ),
        probabilities=ProbabilityDistributions(
            prob_positive_7d=to_float(probabilities.get("prob_positive_7d")),
            prob_gain_5pct_7d=to_float(probabilities.get("prob_gain_5pct_7d")),
            prob_outperform_market_7d=to_float(probabilities.get("prob_outperform_market_7d")),
        ),
    )


def _adapt_training_history(raw: dict[str, Any]) -> TrainingHistory | None:
    history = _section(raw, "training_history")
    if not history:
        return None
    return TrainingHistory(
        train=_float_sequence(history.get("train")),
        valid=_float_sequence(history.get("valid")),
    )


def _adapt_comprehensive(raw: dict[str, Any]) -> PredictionDocument:
    metadata = _section(raw, "metadata")
    predictions = _section(raw, "comprehensive_predictions")

    return PredictionDocument(
        version=COMPREHENSIVE,
        metadata=Metadata(
            prediction_date=_optional_text(metadata.get("prediction_date")),
            model_epochs=to_float(metadata.get("model_epochs")),
        ),
        stocks=MappingProxyType(
            {str(ticker): _adapt_record(str(ticker), payload) for ticker, payload in predictions.items()}
        ),
        training_history=_adapt_training_history(raw),
    )


PREDICTION_ADAPTERS: dict[str, Callable[[dict[str, Any]], PredictionDocument]] = {
    COMPREHENSIVE: _adapt_comprehensive,
}


def detect_version(raw: Any) -> str | None:
    """Identify which producer revision emitted a raw prediction document."""
    if not isinstance(raw, dict):
        return None
    if "comprehensive_predictions" in raw:
        return COMPREHENSIVE
    if "daily_predictions" in raw:
        return DAILY
    return None


def adapt_prediction_document(raw: Any) -> PredictionDocument:
    """
    Build a typed prediction document from parsed JSON.

    Raises:
        UnsupportedDocumentError: When the payload is not an object or its
            version has no registered adapter.
    """
    version = detect_version(raw)
    if version is None:
        raise UnsupportedDocumentError("Prediction document has no recognised predictions section")

    adapter = PREDICTION_ADAPTERS.get(version)
    if adapter is None:
        raise UnsupportedDocumentError(f"No adapter registered for '{version}' prediction documents")
    return adapter(raw)


def adapt_summary_document(raw: Any) -> SummaryDocument:
    """Build a typed summary document from parsed JSON."""
    if not isinstance(raw, dict):
        raise UnsupportedDocumentError("Summary document must be a JSON object")

    summary = _section(raw, "summary")
    recommendations = [
        Recommendation(
            ticker=str(ticker),
            score=to_float(payload.get("score")),
            expected_7d_return=to_float(payload.get("expected_7d_return")),
            risk_level=_optional_text(payload.get("risk_level")),
        )
        for ticker, payload in _section(raw, "top_recommendations").items()
        if isinstance(payload, dict)
    ]
    avoid = [
        AvoidEntry(
            ticker=str(ticker),
            score=to_float(payload.get("score")),
            reason=_optional_text(payload.get("reason")),
        )
        for ticker, payload in _section(raw, "avoid_list").items()
        if isinstance(payload, dict)
    ]

    return SummaryDocument(
        summary=SummaryStats(
            total_stocks_analyzed=to_float(summary.get("total_stocks_analyzed")),
            successful_predictions=to_float(summary.get("successful_predictions")),
            average_composite_score=to_float(summary.get("average_composite_score")),
            top_score=to_float(summary.get("top_score")),
            rating_distribution=_float_mapping(_section(summary, "rating_distribution")),
        ),
        top_recommendations=tuple(recommendations),
        avoid_list=tuple(avoid),
    )
