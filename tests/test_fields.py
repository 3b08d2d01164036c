"""Tests for the optional-field default policy."""

import math

import pytest

from core import fields
from core.schema import StockRecord
from conftest import build_document, raw_record


@pytest.mark.parametrize("value", [None, math.nan, math.inf, -math.inf, "x", True, [1]])
def test_to_float_rejects_non_finite_and_non_numeric(value):
    assert fields.to_float(value) is None


def test_to_float_accepts_numbers_and_numeric_strings():
    assert fields.to_float(3) == 3.0
    assert fields.to_float("0.25") == 0.25


class TestCategoryDefaults:
    def test_ratio_default(self):
        assert fields.ratio(None) == 0.0

    def test_real_zero_is_kept(self):
        assert fields.ratio(0.0) == 0.0
        assert fields.score(0.0) == 0.0

    def test_score_default(self):
        assert fields.score(math.nan) == 50.0

    def test_categorical_default(self):
        assert fields.categorical(None) == "UNKNOWN"
        assert fields.categorical("  ") == "UNKNOWN"

    def test_text_default(self):
        assert fields.text(None) == "N/A"

    def test_text_integral_float(self):
        assert fields.text(64.0) == "64"


class TestRecordAccessors:
    def test_missing_record(self):
        assert fields.expected_return(None) == 0.0
        assert fields.composite_score(None) == 50.0
        assert fields.technical_signal(None) == "UNKNOWN"
        assert fields.daily_returns(None) == []

    def test_empty_record(self):
        record = StockRecord(ticker="X")
        assert fields.volatility(record) == 0.0
        assert fields.sharpe_ratio(record) == 0.0
        assert fields.composite_score(record) == 50.0
        assert fields.composite_score(record, default=0.0) == 0.0
        assert fields.predicted_trend(record) == "UNKNOWN"
        assert fields.probability(record, "prob_positive_7d") == 0.0

    def test_populated_record(self):
        document = build_document(
            {"X": raw_record(expected_7d=0.02, volatility=0.03, composite=70, signal="BUY", trend="UPTREND")}
        )
        record = document.get("X")
        assert fields.expected_return(record) == 0.02
        assert fields.volatility(record) == 0.03
        assert fields.composite_score(record) == 70.0
        assert fields.technical_signal(record) == "BUY"
        assert fields.predicted_trend(record) == "UPTREND"

    def test_daily_returns_missing_days_are_flat(self):
        document = build_document({"X": raw_record(daily_returns=[0.01, None, 0.02])})
        assert fields.daily_returns(document.get("X")) == [0.01, 0.0, 0.02]

    def test_unknown_probability_name(self):
        record = StockRecord(ticker="X")
        assert fields.probability(record, "prob_anything") == 0.0

    def test_deep_analysis_accessors(self, sample_document):
        record = sample_document.get("TSLA")
        assert fields.volatility_20d(record) == 0.0655
        assert fields.value_at_risk_99(record) == -0.1337
        assert fields.momentum(record) == -0.0229
        assert fields.trend_change(record) == "DETERIORATING"

    def test_deep_analysis_defaults(self, sample_document):
        record = sample_document.get("JPM")
        assert fields.volatility_20d(record) == 0.0
        assert fields.value_at_risk_99(record) == 0.0
        assert fields.momentum(record) == 0.0
        assert fields.trend_change(record) == "UNKNOWN"
