"""Tests for the immutable view-state value."""

from dataclasses import FrozenInstanceError

import pytest

from core.view_state import ViewState


def test_defaults():
    state = ViewState()
    assert state.active_tab == "overview"
    assert state.sort_key == "prediction"
    assert state.sort_order == "desc"
    assert state.view_mode == "table"
    assert not state.is_dark


def test_is_frozen():
    with pytest.raises(FrozenInstanceError):
        ViewState().search = "x"


class TestTransitions:
    def test_transitions_return_new_values(self):
        state = ViewState()
        updated = state.set_search("  aa ")
        assert updated.search == "aa"
        assert state.search == ""

    def test_invalid_values_are_ignored(self):
        state = ViewState().set_sort_key("price").set_tab("nowhere").set_view_mode("grid").set_sort_order("up")
        assert state == ViewState()

    def test_case_insensitive_choices(self):
        assert ViewState().set_tab("Stocks").active_tab == "stocks"

    def test_select_and_clear(self):
        state = ViewState().select_ticker("AAPL")
        assert state.selected_ticker == "AAPL"
        assert state.clear_selection().selected_ticker == ""

    def test_toggle_theme(self):
        state = ViewState().toggle_theme()
        assert state.is_dark
        assert not state.toggle_theme().is_dark


class TestQueryArgs:
    def test_default_state_has_no_args(self):
        assert ViewState().to_args() == {}

    def test_round_trip(self):
        state = (
            ViewState()
            .set_search("aa")
            .set_sort_key("volatility")
            .set_sort_order("asc")
            .set_tab("stocks")
            .select_ticker("AAPL")
            .set_view_mode("cards")
            .toggle_theme()
        )
        args = state.to_args()
        assert args == {
            "q": "aa",
            "sort": "volatility",
            "order": "asc",
            "tab": "stocks",
            "stock": "AAPL",
            "view": "cards",
            "theme": "dark",
        }
        assert ViewState.from_args(args) == state

    def test_from_args_ignores_garbage(self):
        assert ViewState.from_args({"sort": "nope", "theme": "neon", "tab": ""}) == ViewState()
