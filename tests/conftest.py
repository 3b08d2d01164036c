"""Shared fixtures for Foresight dashboard tests."""

import json
import shutil
import sys
from pathlib import Path

import pytest

# Ensure project root is importable
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from core.adapters import adapt_prediction_document, adapt_summary_document  # noqa: E402
from core.sanitizer import parse_document_text  # noqa: E402

PUBLIC = ROOT / "public"


def raw_record(
    expected_7d=None,
    cumulative_7d=None,
    volatility=None,
    composite=None,
    signal=None,
    trend=None,
    last_return=None,
    sharpe=None,
    prob_positive=None,
    daily_returns=None,
):
    """Build one raw ``comprehensive_predictions`` entry; ``None`` fields are omitted."""
    record = {
        "basic_info": {"data_points": 500, "feature_dimension": 32},
        "multi_horizon_returns": {},
        "risk_metrics": {},
        "selection_scores": {},
        "technical_signals": {},
        "trend_analysis": {},
        "probability_distributions": {},
    }
    seven_day = {}
    if expected_7d is not None:
        seven_day["expected_return"] = expected_7d
    if cumulative_7d is not None:
        seven_day["cumulative_return"] = cumulative_7d
    if daily_returns is not None:
        seven_day["daily_returns"] = daily_returns
    if seven_day:
        record["multi_horizon_returns"]["7d"] = seven_day
    if last_return is not None:
        record["basic_info"]["last_known_return"] = last_return
    if volatility is not None:
        record["risk_metrics"]["volatility_7d"] = volatility
    if sharpe is not None:
        record["risk_metrics"]["sharpe_ratio_7d"] = sharpe
    if composite is not None:
        record["selection_scores"]["composite_score"] = composite
    if signal is not None:
        record["technical_signals"]["predicted_signal"] = signal
    if trend is not None:
        record["trend_analysis"]["predicted_trend"] = trend
    if prob_positive is not None:
        record["probability_distributions"]["prob_positive_7d"] = prob_positive
    return record


def raw_document(stocks, prediction_date="2025-01-15T09:30:00", epochs=100, training_history=None):
    payload = {
        "metadata": {"prediction_date": prediction_date, "model_epochs": epochs},
        "comprehensive_predictions": stocks,
    }
    if training_history is not None:
        payload["training_history"] = training_history
    return payload


def build_document(stocks, **kwargs):
    """Adapt an in-memory raw document."""
    return adapt_prediction_document(raw_document(stocks, **kwargs))


@pytest.fixture
def sample_document():
    """The bundled sample snapshot, parsed exactly as the loader does."""
    text = (PUBLIC / "future.json").read_text(encoding="utf-8")
    return adapt_prediction_document(parse_document_text(text))


@pytest.fixture
def sample_summary():
    text = (PUBLIC / "future_summary.json").read_text(encoding="utf-8")
    return adapt_summary_document(parse_document_text(text))


@pytest.fixture
def public_dir(tmp_path):
    """A writable copy of the bundled sample documents."""
    target = tmp_path / "public"
    target.mkdir()
    for name in ("future.json", "future_summary.json"):
        shutil.copy(PUBLIC / name, target / name)
    return target


@pytest.fixture
def write_document(tmp_path):
    """Write raw text or a JSON-serialisable payload into a temp public dir."""
    target = tmp_path / "docs"
    target.mkdir()

    def _write(name, payload):
        text = payload if isinstance(payload, str) else json.dumps(payload)
        (target / name).write_text(text, encoding="utf-8")
        return target

    return _write
