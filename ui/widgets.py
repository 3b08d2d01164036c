"""Conditional styling helpers and small data carriers for dashboard widgets."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Callable

from core.derive import classify_risk
from core.view_state import TABS, ViewState


TAB_LABELS = {
    "overview": "📊 Market Overview",
    "stocks": "📈 Stock Analysis",
    "trends": "📉 AI Insights",
    "analysis": "🔍 Deep Analysis",
    "recommendations": "🎯 Recommendations",
}


@dataclass(frozen=True)
class StatTile:
    """One headline number on the dashboard header."""

    title: str
    value: str
    subtitle: str = ""
    icon: str = ""
    color: str = "blue"


@dataclass(frozen=True)
class TabSpec:
    key: str
    label: str
    url: str
    active: bool


@dataclass(frozen=True)
class LevelBadge:
    level: str
    variant: str
    label: str
    css_class: str


def tab_strip(state: ViewState, url_for_state: Callable[[ViewState], str]) -> list[TabSpec]:
    return [
        TabSpec(key=tab, label=TAB_LABELS[tab], url=url_for_state(state.set_tab(tab)), active=tab == state.active_tab)
        for tab in TABS
    ]


def signal_variant(score: float) -> str:
    if score > 60:
        return "success"
    if score < 40:
        return "danger"
    return "warning"


def signal_badge_variant(signal: str) -> str:
    if signal == "BUY":
        return "success"
    if signal == "SELL":
        return "danger"
    return "warning"


def trend_badge_variant(trend: str) -> str:
    return "success" if trend == "UPTREND" else "danger"


def trend_change_variant(change: str) -> str:
    if change == "IMPROVING":
        return "success"
    if change == "DETERIORATING":
        return "danger"
    return "warning"


def trend_icon(expected_return: float) -> str:
    if expected_return > 0.03:
        return "🚀"
    if expected_return > 0.01:
        return "📈"
    if expected_return > -0.01:
        return "➡️"
    if expected_return > -0.03:
        return "📉"
    return "💀"


_RISK_BADGES = {
    "HIGH": ("danger", "🔥 High risk", "text-red"),
    "MEDIUM": ("warning", "⚠️ Medium risk", "text-amber"),
    "LOW": ("success", "✅ Low risk", "text-green"),
    "MINIMAL": ("info", "🛡️ Minimal risk", "text-blue"),
}


def risk_level(volatility: float) -> LevelBadge:
    level = classify_risk(volatility)
    variant, label, css_class = _RISK_BADGES[level]
    return LevelBadge(level=level, variant=variant, label=label, css_class=css_class)


def performance_rating(score: float) -> LevelBadge:
    if score >= 90:
        return LevelBadge("EXCELLENT", "success", "🏆 Excellent", "text-green")
    if score >= 75:
        return LevelBadge("VERY_GOOD", "success", "⭐ Very good", "text-green")
    if score >= 60:
        return LevelBadge("GOOD", "info", "👍 Good", "text-blue")
    if score >= 40:
        return LevelBadge("FAIR", "warning", "🤔 Fair", "text-amber")
    return LevelBadge("POOR", "danger", "👎 Poor", "text-red")


def sign_class(value: float) -> str:
    return "positive" if value >= 0 else "negative"


def success_rate_label(rate: float) -> str:
    if math.isnan(rate):
        return "N/A"
    if rate == 100:
        return "100%"
    return f"{rate:.1f}%"
