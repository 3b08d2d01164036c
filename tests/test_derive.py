"""Tests for the derivation layer: filter, sort, aggregates, buckets and chart series.

All tests use in-memory documents; no network access required.
"""

import math

import pytest

from core import derive
from core.adapters import adapt_summary_document
from conftest import build_document, raw_record


@pytest.fixture
def trio():
    return build_document(
        {
            "AAPL": raw_record(expected_7d=0.02, volatility=0.03, composite=70, cumulative_7d=0.021, last_return=0.01),
            "MSFT": raw_record(expected_7d=0.005, volatility=0.01, composite=50, cumulative_7d=0.004, last_return=-0.02),
            "baaz": raw_record(expected_7d=-0.01, volatility=0.06, composite=30, cumulative_7d=-0.012, last_return=0.03),
        }
    )


# =====================================================================
# FILTER / SORT
# =====================================================================

class TestFilter:
    def test_case_insensitive_substring(self):
        assert derive.filter_tickers(["AAPL", "MSFT", "baaz"], "aa") == ["AAPL", "baaz"]

    def test_empty_term_keeps_all(self):
        assert derive.filter_tickers(["AAPL", "MSFT"], "") == ["AAPL", "MSFT"]

    def test_none_term_keeps_all(self):
        assert derive.filter_tickers(["AAPL"], None) == ["AAPL"]

    def test_no_match(self):
        assert derive.filter_tickers(["AAPL", "MSFT"], "zz") == []


class TestSort:
    def test_prediction_desc(self, trio):
        assert derive.sort_tickers(trio, trio.tickers, "prediction", "desc") == ["AAPL", "MSFT", "baaz"]

    def test_prediction_asc(self, trio):
        assert derive.sort_tickers(trio, trio.tickers, "prediction", "asc") == ["baaz", "MSFT", "AAPL"]

    def test_volatility(self, trio):
        assert derive.sort_tickers(trio, trio.tickers, "volatility", "desc") == ["baaz", "AAPL", "MSFT"]

    def test_confidence(self, trio):
        assert derive.sort_tickers(trio, trio.tickers, "confidence", "asc") == ["baaz", "MSFT", "AAPL"]

    def test_cumulative(self, trio):
        assert derive.sort_tickers(trio, trio.tickers, "cumulative", "desc") == ["AAPL", "MSFT", "baaz"]

    def test_last_return(self, trio):
        assert derive.sort_tickers(trio, trio.tickers, "last_return", "desc") == ["baaz", "AAPL", "MSFT"]

    def test_unknown_key_keeps_order(self, trio):
        assert derive.sort_tickers(trio, ["MSFT", "baaz", "AAPL"], "bogus", "desc") == ["MSFT", "baaz", "AAPL"]

    @pytest.mark.parametrize("key", ["prediction", "volatility", "confidence", "cumulative", "last_return"])
    def test_missing_field_sorts_as_zero(self, key):
        document = build_document(
            {
                "POS": raw_record(expected_7d=0.01, volatility=0.01, composite=10, cumulative_7d=0.01, last_return=0.01),
                "MISSING": raw_record(),
                "NEG": raw_record(expected_7d=-0.01, volatility=-0.01, composite=-10, cumulative_7d=-0.01, last_return=-0.01),
            }
        )
        assert derive.sort_tickers(document, document.tickers, key, "desc") == ["POS", "MISSING", "NEG"]

    def test_visible_tickers_filters_then_sorts(self, trio):
        assert derive.visible_tickers(trio, "aa", "prediction", "asc") == ["baaz", "AAPL"]

    def test_top_performers_limit(self):
        document = build_document({f"T{i:02d}": raw_record(expected_7d=i / 100) for i in range(15)})
        top = derive.top_performers(document)
        assert len(top) == 10
        assert top[0] == "T14"
        assert top[-1] == "T05"


# =====================================================================
# AGGREGATES
# =====================================================================

class TestAggregates:
    def test_market_averages(self, trio):
        averages = derive.market_averages(trio)
        assert averages.expected_return == pytest.approx(0.005)
        assert averages.composite_score == pytest.approx(50.0)
        assert averages.volatility == pytest.approx(0.1 / 3)

    def test_all_missing_means_equal_defaults(self):
        document = build_document({"A": raw_record(), "B": raw_record(), "C": raw_record()})
        averages = derive.market_averages(document)
        assert averages.expected_return == 0.0
        assert averages.volatility == 0.0
        assert averages.sharpe_ratio == 0.0
        assert averages.composite_score == 50.0

    def test_missing_values_count_in_divisor(self):
        document = build_document({"A": raw_record(expected_7d=0.03), "B": raw_record(), "C": raw_record()})
        assert derive.market_averages(document).expected_return == pytest.approx(0.01)

    def test_empty_document_is_nan(self):
        document = build_document({})
        assert math.isnan(derive.market_averages(document).expected_return)
        assert math.isnan(derive.risk_overview(document).volatility)
        assert math.isnan(derive.probability_overview(document).positive)
        assert math.isnan(derive.return_range(document).maximum)

    def test_return_range(self, trio):
        span = derive.return_range(trio)
        assert span.maximum == 0.02
        assert span.minimum == -0.01

    def test_probability_overview(self):
        document = build_document({"A": raw_record(prob_positive=0.6), "B": raw_record(prob_positive=0.4)})
        assert derive.probability_overview(document).positive == pytest.approx(0.5)


# =====================================================================
# BUCKETS
# =====================================================================

class TestBuckets:
    def test_sentiment_thirds(self, trio):
        buckets = {item.key: item for item in derive.sentiment_buckets(trio)}
        assert buckets["bullish"].count == 1
        assert buckets["bearish"].count == 1
        assert buckets["neutral"].count == 1
        assert all(item.percent == 33 for item in buckets.values())

    def test_sentiment_boundaries_are_neutral(self):
        document = build_document({"A": raw_record(composite=60), "B": raw_record(composite=40)})
        buckets = {item.key: item.count for item in derive.sentiment_buckets(document)}
        assert buckets == {"bullish": 0, "bearish": 0, "neutral": 2}

    def test_missing_score_is_neutral(self):
        document = build_document({"A": raw_record()})
        buckets = {item.key: item.count for item in derive.sentiment_buckets(document)}
        assert buckets["neutral"] == 1

    def test_percent_rounds_half_up(self):
        document = build_document(
            {"A": raw_record(composite=90), **{f"N{i}": raw_record(composite=50) for i in range(7)}}
        )
        bullish = next(item for item in derive.sentiment_buckets(document) if item.key == "bullish")
        assert bullish.percent == 13

    def test_empty_document_percent_is_nan(self):
        buckets = derive.sentiment_buckets(build_document({}))
        assert all(item.count == 0 and math.isnan(item.percent) for item in buckets)

    @pytest.mark.parametrize(
        "volatility, level",
        [(0.06, "HIGH"), (0.05, "MEDIUM"), (0.03, "MEDIUM"), (0.02, "LOW"), (0.005, "LOW"), (0.001, "MINIMAL"), (0.0, "MINIMAL")],
    )
    def test_classify_risk(self, volatility, level):
        assert derive.classify_risk(volatility) == level

    def test_risk_buckets(self, trio):
        assert derive.risk_buckets(trio) == {"HIGH": 1, "MEDIUM": 1, "LOW": 1, "MINIMAL": 0}

    def test_signal_distribution_ignores_unknown(self):
        document = build_document(
            {"A": raw_record(signal="BUY"), "B": raw_record(signal="BUY"), "C": raw_record(signal="SELL"), "D": raw_record()}
        )
        assert derive.signal_distribution(document) == {"BUY": 2, "SELL": 1, "HOLD": 0}

    def test_trend_distribution(self):
        document = build_document(
            {"A": raw_record(trend="UPTREND"), "B": raw_record(trend="DOWNTREND"), "C": raw_record(trend="UPTREND")}
        )
        trends = derive.trend_distribution(document)
        assert trends.uptrends == 2
        assert trends.downtrends == 1


# =====================================================================
# CHART SERIES
# =====================================================================

class TestSeries:
    def test_horizon_series(self, sample_document):
        series = derive.horizon_series(sample_document.get("AAPL"))
        assert list(series["period"]) == ["1d", "3d", "5d", "7d"]
        assert series["expected_pct"].iloc[-1] == pytest.approx(1.84)

    def test_horizon_series_missing_horizon_defaults(self, sample_document):
        series = derive.horizon_series(sample_document.get("JPM"))
        assert series["expected_pct"].iloc[2] == 0.0

    def test_horizon_series_no_record(self):
        assert derive.horizon_series(None).empty

    def test_daily_return_series(self, sample_document):
        series = derive.daily_return_series(sample_document.get("MSFT"))
        assert len(series) == 7
        assert series["return_pct"].iloc[2] == 0.0
        assert series["cumulative_pct"].iloc[-1] == pytest.approx(0.59)

    def test_daily_return_series_absent(self, sample_document):
        assert derive.daily_return_series(sample_document.get("JPM")).empty

    def test_risk_return_points_follow_selection(self, trio):
        points = derive.risk_return_points(trio, ["baaz", "AAPL"])
        assert list(points["ticker"]) == ["BAAZ", "AAPL"]
        assert points["risk_pct"].iloc[0] == pytest.approx(6.0)

    def test_comparison_rows_limit(self):
        document = build_document({f"T{i:02d}": raw_record() for i in range(20)})
        assert len(derive.comparison_rows(document, document.tickers)) == 15

    def test_training_curve(self, sample_document):
        curve = derive.training_curve(sample_document)
        assert len(curve) == 8
        assert curve["valid"].iloc[6] == 0.0

    def test_training_curve_absent(self, trio):
        assert derive.training_curve(trio) is None


# =====================================================================
# MODEL + SUMMARY VIEWS
# =====================================================================

class TestSummaryViews:
    def test_model_info_from_first_record(self, sample_document):
        info = derive.model_info(sample_document)
        assert info.ticker_count == 5
        assert info.feature_dimension == 64.0
        assert info.model_epochs == 120.0

    def test_model_info_empty(self):
        info = derive.model_info(build_document({}))
        assert info.ticker_count == 0
        assert info.feature_dimension is None

    def test_success_rate(self, sample_summary):
        assert derive.success_rate(sample_summary) == 100.0

    def test_success_rate_unknown(self):
        assert math.isnan(derive.success_rate(None))
        assert math.isnan(derive.success_rate(adapt_summary_document({"summary": {"total_stocks_analyzed": 0}})))

    def test_rating_distribution(self, sample_summary):
        ratings = {item.key: (item.count, item.percent) for item in derive.rating_distribution(sample_summary)}
        assert ratings["HOLD"] == (2, 40)
        assert ratings["STRONG_SELL"] == (0, 0)

    def test_portfolio_suggestions(self, sample_summary):
        picks = derive.portfolio_suggestions(sample_summary)
        assert [item.ticker for item in picks.conservative] == ["MSFT", "JPM"]
        assert [item.ticker for item in picks.balanced] == ["NVDA", "AAPL", "MSFT", "JPM"]
        assert [item.ticker for item in picks.growth] == ["NVDA", "AAPL", "MSFT"]

    def test_portfolio_suggestions_without_summary(self):
        picks = derive.portfolio_suggestions(None)
        assert picks.conservative == ()
        assert picks.growth == ()
