"""Immutable UI selection state and its named transitions."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Mapping


TABS = ("overview", "stocks", "trends", "analysis", "recommendations")
SORT_KEYS = ("prediction", "volatility", "confidence", "cumulative", "last_return")
SORT_ORDERS = ("desc", "asc")
VIEW_MODES = ("table", "cards", "chart")
THEMES = ("light", "dark")


def _pick(value: str | None, allowed: tuple[str, ...], default: str) -> str:
    if value is None:
        return default
    candidate = value.strip().lower()
    return candidate if candidate in allowed else default


@dataclass(frozen=True)
class ViewState:
    """What the viewer has selected; carried in the query string, never stored."""

    search: str = ""
    sort_key: str = SORT_KEYS[0]
    sort_order: str = SORT_ORDERS[0]
    active_tab: str = TABS[0]
    selected_ticker: str = ""
    view_mode: str = VIEW_MODES[0]
    theme: str = THEMES[0]

    @property
    def is_dark(self) -> bool:
        return self.theme == "dark"

    def set_search(self, term: str | None) -> "ViewState":
        return replace(self, search=(term or "").strip())

    def set_sort_key(self, key: str | None) -> "ViewState":
        return replace(self, sort_key=_pick(key, SORT_KEYS, self.sort_key))

    def set_sort_order(self, order: str | None) -> "ViewState":
        return replace(self, sort_order=_pick(order, SORT_ORDERS, self.sort_order))

    def set_tab(self, tab: str | None) -> "ViewState":
        return replace(self, active_tab=_pick(tab, TABS, self.active_tab))

    def select_ticker(self, ticker: str | None) -> "ViewState":
        return replace(self, selected_ticker=(ticker or "").strip())

    def clear_selection(self) -> "ViewState":
        return replace(self, selected_ticker="")

    def set_view_mode(self, mode: str | None) -> "ViewState":
        return replace(self, view_mode=_pick(mode, VIEW_MODES, self.view_mode))

    def toggle_theme(self) -> "ViewState":
        return replace(self, theme="light" if self.is_dark else "dark")

    @classmethod
    def from_args(cls, args: Mapping[str, str]) -> "ViewState":
        """Rebuild state from request args, ignoring unknown values."""
        state = cls()
        state = state.set_search(args.get("q"))
        state = state.set_sort_key(args.get("sort"))
        state = state.set_sort_order(args.get("order"))
        state = state.set_tab(args.get("tab"))
        state = state.select_ticker(args.get("stock"))
        state = state.set_view_mode(args.get("view"))
        if _pick(args.get("theme"), THEMES, state.theme) != state.theme:
            state = state.toggle_theme()
        return state

    def to_args(self) -> dict[str, str]:
        """Query-string form; fields at their default are omitted."""
        defaults = ViewState()
        pairs = {
            "q": (self.search, defaults.search),
            "sort": (self.sort_key, defaults.sort_key),
            "order": (self.sort_order, defaults.sort_order),
            "tab": (self.active_tab, defaults.active_tab),
            "stock": (self.selected_ticker, defaults.selected_ticker),
            "view": (self.view_mode, defaults.view_mode),
            "theme": (self.theme, defaults.theme),
        }
        return {name: value for name, (value, default) in pairs.items() if value != default}
