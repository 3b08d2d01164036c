"""Request parsing and JSON payload helpers for Foresight UI API routes."""

from __future__ import annotations

import math
from typing import Any

from core import derive, fields
from core.formatting import prediction_day
from core.schema import DashboardData, Recommendation
from core.view_state import ViewState


def parse_int(raw_value: str | None, default: int, min_value: int, max_value: int) -> int:
    """Parse bounded int from request args."""
    try:
        value = int(raw_value) if raw_value is not None else default
    except (TypeError, ValueError):
        value = default
    return max(min_value, min(max_value, value))


def _number(value: float | None, digits: int = 6) -> float | None:
    """JSON-safe rounding; NaN and missing values become null."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    return round(float(value), digits)


def serialize_stock(data: DashboardData, ticker: str) -> dict[str, Any]:
    """Defaulted per-ticker fields for the headless endpoint."""
    record = data.document.get(ticker)
    return {
        "ticker": ticker,
        "expected_return_1d": _number(fields.expected_return(record, "1d")),
        "expected_return_7d": _number(fields.expected_return(record, "7d")),
        "cumulative_return_7d": _number(fields.cumulative_return(record, "7d")),
        "last_known_return": _number(fields.last_known_return(record)),
        "volatility_7d": _number(fields.volatility(record)),
        "sharpe_ratio_7d": _number(fields.sharpe_ratio(record)),
        "composite_score": _number(fields.composite_score(record)),
        "technical_signal": fields.technical_signal(record),
        "predicted_trend": fields.predicted_trend(record),
        "risk_level": derive.classify_risk(fields.volatility(record)),
    }


def _serialize_recommendation(item: Recommendation) -> dict[str, Any]:
    return {
        "ticker": item.ticker,
        "score": _number(item.score),
        "expected_7d_return": _number(item.expected_7d_return),
        "risk_level": fields.categorical(item.risk_level),
    }


def dashboard_payload(data: DashboardData, state: ViewState, limit: int) -> dict[str, Any]:
    """Convert the derived dashboard views to an API payload."""
    document = data.document
    tickers = derive.visible_tickers(document, state.search, state.sort_key, state.sort_order)
    averages = derive.market_averages(document)

    payload: dict[str, Any] = {
        "meta": {
            "version": document.version,
            "prediction_date": prediction_day(document.metadata, fallback=None),
            "model_epochs": _number(document.metadata.model_epochs),
            "total_tickers": len(document.stocks),
            "displayed_count": len(tickers[:limit]),
        },
        "view": {
            "search": state.search,
            "sort": state.sort_key,
            "order": state.sort_order,
        },
        "averages": {
            "expected_return_7d": _number(averages.expected_return),
            "volatility_7d": _number(averages.volatility),
            "composite_score": _number(averages.composite_score),
            "sharpe_ratio_7d": _number(averages.sharpe_ratio),
        },
        "sentiment": [
            {"key": item.key, "count": item.count, "percent": _number(item.percent)}
            for item in derive.sentiment_buckets(document)
        ],
        "risk_levels": derive.risk_buckets(document),
        "signals": derive.signal_distribution(document),
        "top_performers": derive.top_performers(document),
        "stocks": [serialize_stock(data, ticker) for ticker in tickers[:limit]],
        "summary": None,
    }

    if data.summary is not None:
        payload["summary"] = {
            "success_rate_pct": _number(derive.success_rate(data.summary), 2),
            "ratings": {item.key: item.count for item in derive.rating_distribution(data.summary)},
            "top_recommendations": [_serialize_recommendation(item) for item in data.summary.top_recommendations],
            "avoid_list": [
                {"ticker": item.ticker, "score": _number(item.score), "reason": fields.text(item.reason)}
                for item in data.summary.avoid_list
            ],
        }

    return payload
