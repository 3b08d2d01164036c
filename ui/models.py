"""UI view models for stock rows, cards and the detail panel."""

from __future__ import annotations

from dataclasses import dataclass

from core import fields
from core.formatting import format_number, format_percentage, format_score
from core.schema import StockRecord
from ui.widgets import (
    LevelBadge,
    performance_rating,
    risk_level,
    sign_class,
    signal_badge_variant,
    signal_variant,
    trend_badge_variant,
    trend_change_variant,
    trend_icon,
)


@dataclass
class StockViewModel:
    """Table, card and detail payload for one ticker."""

    ticker: str
    symbol: str
    expected_1d: str
    expected_3d: str
    expected_5d: str
    expected_7d: str
    cumulative_7d: str
    last_known_return: str
    composite_score: str
    sharpe_ratio: str
    volatility: str
    volatility_20d: str
    value_at_risk: str
    value_at_risk_99: str
    max_drawdown: str
    signal: str
    trend: str
    trend_strength: str
    trend_consistency: str
    trend_change: str
    momentum_5d: str
    data_points: str
    icon: str
    expected_class: str
    cumulative_class: str
    momentum_class: str
    score_variant: str
    signal_variant: str
    trend_variant: str
    trend_change_variant: str
    risk: LevelBadge
    rating: LevelBadge


def build_stock_view(record: StockRecord) -> StockViewModel:
    expected_7d = fields.expected_return(record, "7d")
    cumulative_7d = fields.cumulative_return(record, "7d")
    score = fields.composite_score(record)
    signal = fields.technical_signal(record)
    trend = fields.predicted_trend(record)
    trend_change = fields.trend_change(record)
    momentum = fields.momentum(record)

    return StockViewModel(
        ticker=record.ticker,
        symbol=record.ticker.upper(),
        expected_1d=format_percentage(fields.expected_return(record, "1d")),
        expected_3d=format_percentage(fields.expected_return(record, "3d")),
        expected_5d=format_percentage(fields.expected_return(record, "5d")),
        expected_7d=format_percentage(expected_7d),
        cumulative_7d=format_percentage(cumulative_7d),
        last_known_return=format_percentage(fields.last_known_return(record)),
        composite_score=format_score(score),
        sharpe_ratio=format_number(fields.sharpe_ratio(record)),
        volatility=format_percentage(fields.volatility(record), 4),
        volatility_20d=format_percentage(fields.volatility_20d(record), 4),
        value_at_risk=format_percentage(fields.value_at_risk(record)),
        value_at_risk_99=format_percentage(fields.value_at_risk_99(record)),
        max_drawdown=format_percentage(fields.max_drawdown(record)),
        signal=signal,
        trend=trend,
        trend_strength=format_percentage(fields.trend_strength(record)),
        trend_consistency=format_percentage(fields.trend_consistency(record)),
        trend_change=trend_change,
        momentum_5d=format_percentage(momentum),
        data_points=fields.text(record.basic_info.data_points),
        icon=trend_icon(expected_7d),
        expected_class=sign_class(expected_7d),
        cumulative_class=sign_class(cumulative_7d),
        momentum_class=sign_class(momentum),
        score_variant=signal_variant(score),
        signal_variant=signal_badge_variant(signal),
        trend_variant=trend_badge_variant(trend),
        trend_change_variant=trend_change_variant(trend_change),
        risk=risk_level(fields.volatility(record)),
        rating=performance_rating(score),
    )
