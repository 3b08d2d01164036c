"""Default-substitution policy for optional prediction fields.

All derivations read record fields through these helpers so the fallback
for a missing value is decided in one place:

- ratio fields (returns, volatility, probabilities) fall back to ``0.0``
- score fields fall back to ``50.0``
- categorical fields fall back to ``"UNKNOWN"``
- free text falls back to ``"N/A"``
"""

from __future__ import annotations

import math
from typing import Any

from core.schema import HorizonReturn, StockRecord


RATIO_DEFAULT = 0.0
SCORE_DEFAULT = 50.0
CATEGORICAL_DEFAULT = "UNKNOWN"
TEXT_DEFAULT = "N/A"

LONG_HORIZON = "7d"


def to_float(value: Any) -> float | None:
    """Convert optional numeric values to a finite float, or ``None``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def is_missing(value: Any) -> bool:
    return to_float(value) is None


def ratio(value: Any, default: float = RATIO_DEFAULT) -> float:
    number = to_float(value)
    return default if number is None else number


def score(value: Any, default: float = SCORE_DEFAULT) -> float:
    number = to_float(value)
    return default if number is None else number


def categorical(value: Any, default: str = CATEGORICAL_DEFAULT) -> str:
    if value is None:
        return default
    text_value = str(value).strip()
    return text_value or default


def text(value: Any, default: str = TEXT_DEFAULT) -> str:
    if value is None:
        return default
    if isinstance(value, float) and not math.isfinite(value):
        return default
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text_value = str(value).strip()
    return text_value or default


def _horizon(record: StockRecord | None, horizon: str) -> HorizonReturn | None:
    if record is None:
        return None
    return record.horizons.get(horizon)


def expected_return(record: StockRecord | None, horizon: str = LONG_HORIZON) -> float:
    item = _horizon(record, horizon)
    return ratio(item.expected_return if item is not None else None)


def cumulative_return(record: StockRecord | None, horizon: str = LONG_HORIZON) -> float:
    item = _horizon(record, horizon)
    return ratio(item.cumulative_return if item is not None else None)


def daily_returns(record: StockRecord | None, horizon: str = LONG_HORIZON) -> list[float]:
    """Daily return path with missing days counted as flat."""
    item = _horizon(record, horizon)
    if item is None:
        return []
    return [ratio(value) for value in item.daily_returns]


def last_known_return(record: StockRecord | None) -> float:
    return ratio(record.basic_info.last_known_return if record is not None else None)


def volatility(record: StockRecord | None) -> float:
    return ratio(record.risk_metrics.volatility_7d if record is not None else None)


def volatility_20d(record: StockRecord | None) -> float:
    return ratio(record.risk_metrics.volatility_20d if record is not None else None)


def sharpe_ratio(record: StockRecord | None) -> float:
    return ratio(record.risk_metrics.sharpe_ratio_7d if record is not None else None)


def max_drawdown(record: StockRecord | None) -> float:
    return ratio(record.risk_metrics.max_drawdown_7d if record is not None else None)


def value_at_risk(record: StockRecord | None) -> float:
    return ratio(record.risk_metrics.var_95_7d if record is not None else None)


def value_at_risk_99(record: StockRecord | None) -> float:
    return ratio(record.risk_metrics.var_99_7d if record is not None else None)


def composite_score(record: StockRecord | None, default: float = SCORE_DEFAULT) -> float:
    return score(record.selection_scores.composite_score if record is not None else None, default=default)


def technical_signal(record: StockRecord | None) -> str:
    return categorical(record.technical_signals.predicted_signal if record is not None else None)


def momentum(record: StockRecord | None) -> float:
    """Five-day momentum from the technical signals."""
    return ratio(record.technical_signals.momentum_5d if record is not None else None)


def predicted_trend(record: StockRecord | None) -> str:
    return categorical(record.trend_analysis.predicted_trend if record is not None else None)


def trend_strength(record: StockRecord | None) -> float:
    return ratio(record.trend_analysis.trend_strength if record is not None else None)


def trend_consistency(record: StockRecord | None) -> float:
    return ratio(record.trend_analysis.trend_consistency if record is not None else None)


def trend_change(record: StockRecord | None) -> str:
    return categorical(record.trend_analysis.trend_change_vs_history if record is not None else None)


def probability(record: StockRecord | None, name: str) -> float:
    """Read one of the ``prob_*_7d`` fields by name."""
    if record is None:
        return RATIO_DEFAULT
    return ratio(getattr(record.probabilities, name, None))
