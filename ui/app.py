"""Local read-only Flask UI for the Foresight prediction dashboard."""

from __future__ import annotations

import logging
import os
from pathlib import Path
import sys
import tempfile
from typing import Any

MPL_CONFIG_DIR = os.path.join(tempfile.gettempdir(), "matplotlib")
os.environ.setdefault("MPLCONFIGDIR", MPL_CONFIG_DIR)
os.makedirs(MPL_CONFIG_DIR, exist_ok=True)

import matplotlib

matplotlib.use("Agg")

from flask import Flask, abort, got_request_exception, jsonify, render_template, request, send_file, url_for
from plotly.offline import get_plotlyjs

# Make `python ui/app.py` work without external PYTHONPATH setup.
THIS_DIR = Path(__file__).resolve().parent
PROJECT_DIR = THIS_DIR.parent
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))

from config.settings import (
    COMPARISON_LIMIT,
    DATA_BASE_URL,
    FETCH_TIMEOUT_SECONDS,
    LOGS_DIR,
    PRIMARY_DOCUMENT,
    REPORTS_DIR,
    SUMMARY_DOCUMENT,
    TOP_PERFORMERS_LIMIT,
)
from core import derive, fields
from core.formatting import format_large_number, format_number, format_percentage, format_score, prediction_day
from core.loader import STATUS_READY, DashboardLoader
from core.schema import DashboardData
from core.view_state import ViewState
from ui.api import dashboard_payload, parse_int
from ui.charts import (
    build_bucket_pie,
    build_comparison_bars,
    build_daily_returns_chart,
    build_horizon_chart,
    build_probability_scatter,
    build_risk_return_scatter,
    build_training_chart,
    ensure_static_chart,
)
from ui.models import build_stock_view
from ui.utils.pdf_exporter import build_stock_pdf
from ui.widgets import StatTile, success_rate_label, tab_strip


UI_DIR = THIS_DIR
STATIC_DIR = UI_DIR / "static"

LOADING_POLL_SECONDS = 3
API_MAX_STOCKS = 500

PLOTLY_VENDOR_RELATIVE_PATH = "vendor/plotly.min.js"
PLOTLY_VENDOR_PATH = STATIC_DIR / PLOTLY_VENDOR_RELATIVE_PATH

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

logging.getLogger("werkzeug").setLevel(logging.WARNING)
logging.getLogger("matplotlib").setLevel(logging.WARNING)


def _configure_ui_logger() -> logging.Logger:
    """Configure file + console logging for the UI and the loader thread."""
    logs_dir = Path(LOGS_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / "ui.log"

    logger = logging.getLogger("foresight")
    logger.setLevel(logging.INFO)
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT)
    has_file = any(isinstance(handler, logging.FileHandler) for handler in logger.handlers)
    has_console = any(
        type(handler) is logging.StreamHandler for handler in logger.handlers
    )

    if not has_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    if not has_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logging.getLogger("foresight.ui")


def _stat_tiles(data: DashboardData) -> list[StatTile]:
    """Headline tiles shown above every tab."""
    document = data.document
    averages = derive.market_averages(document)
    info = derive.model_info(document)
    epochs = format_number(info.model_epochs, 1) if info.model_epochs else "N/A"

    return [
        StatTile("Feature dimension", fields.text(info.feature_dimension), "AI feature vector", "🧠", "blue"),
        StatTile("Avg 7-day expected", format_percentage(averages.expected_return), "Expected return", "📈", "green"),
        StatTile("Avg volatility", format_percentage(averages.volatility, 4), "7-day volatility", "📊", "yellow"),
        StatTile("Composite score", format_score(averages.composite_score), "Average score", "🎯", "purple"),
        StatTile("Avg Sharpe ratio", format_number(averages.sharpe_ratio), "7-day Sharpe", "⚖️", "blue"),
        StatTile("Model epochs", epochs, "Training epochs", "🔁", "red"),
    ]


def _overview_context(data: DashboardData, state: ViewState, tickers: list[str]) -> dict[str, Any]:
    document = data.document
    buckets = derive.sentiment_buckets(document)
    return {
        "sentiment": buckets,
        "sentiment_chart": build_bucket_pie(buckets, "Market sentiment", dark=state.is_dark),
        "risk_return_chart": build_risk_return_scatter(
            derive.risk_return_points(document, tickers), dark=state.is_dark
        ),
        "rows": [build_stock_view(document.stocks[ticker]) for ticker in tickers],
    }


def _stocks_context(data: DashboardData, state: ViewState, tickers: list[str]) -> dict[str, Any]:
    document = data.document
    context: dict[str, Any] = {
        "rows": [build_stock_view(document.stocks[ticker]) for ticker in tickers],
        "comparison_chart": None,
        "selected": None,
        "horizon_chart": None,
        "daily_chart": None,
    }
    if state.view_mode == "chart" and tickers:
        context["comparison_chart"] = build_comparison_bars(
            derive.comparison_rows(document, tickers, limit=COMPARISON_LIMIT), dark=state.is_dark
        )

    record = document.get(state.selected_ticker)
    if record is not None:
        context["selected"] = build_stock_view(record)
        context["horizon_chart"] = build_horizon_chart(record, dark=state.is_dark)
        context["daily_chart"] = build_daily_returns_chart(record, dark=state.is_dark)
    return context


def _trends_context(data: DashboardData, state: ViewState, tickers: list[str]) -> dict[str, Any]:
    document = data.document
    curve = derive.training_curve(document)
    return {
        "signals": derive.signal_distribution(document),
        "risk": derive.risk_overview(document),
        "probabilities": derive.probability_overview(document),
        "trends": derive.trend_distribution(document),
        "probability_chart": build_probability_scatter(
            derive.risk_return_points(document, tickers), dark=state.is_dark
        ),
        "training_chart": build_training_chart(curve, dark=state.is_dark) if curve is not None else None,
        "picker": [build_stock_view(record) for record in document.stocks.values()],
    }


def _analysis_context(data: DashboardData, state: ViewState, tickers: list[str]) -> dict[str, Any]:
    document = data.document
    return {
        "top_rows": [
            build_stock_view(document.stocks[ticker])
            for ticker in derive.top_performers(document, limit=TOP_PERFORMERS_LIMIT)
        ],
        "risk_buckets": derive.risk_buckets(document),
        "return_range": derive.return_range(document),
        "model": derive.model_info(document),
    }


def _recommendations_context(data: DashboardData, state: ViewState, tickers: list[str]) -> dict[str, Any]:
    summary = data.summary
    if summary is None:
        return {"summary": None}
    ratings = derive.rating_distribution(summary)
    counts = {item.key: item.count for item in ratings}
    return {
        "summary": summary,
        "success_rate": success_rate_label(derive.success_rate(summary)),
        "ratings": ratings,
        "rating_counts": counts,
        "sell_count": counts["SELL"] + counts["STRONG_SELL"],
        "rating_chart": build_bucket_pie(ratings, "Rating distribution", dark=state.is_dark),
        "portfolios": derive.portfolio_suggestions(summary),
    }


TAB_CONTEXT_BUILDERS = {
    "overview": _overview_context,
    "stocks": _stocks_context,
    "trends": _trends_context,
    "analysis": _analysis_context,
    "recommendations": _recommendations_context,
}


def create_app(
    base_url: str | Path | None = None,
    primary_document: str = PRIMARY_DOCUMENT,
    summary_document: str | None = SUMMARY_DOCUMENT,
    timeout: float | None = FETCH_TIMEOUT_SECONDS,
    load_async: bool = True,
    reports_dir: str | Path | None = None,
) -> Flask:
    """Create and configure the local Flask application."""
    app = Flask(
        __name__,
        template_folder=str(UI_DIR / "templates"),
        static_folder=str(STATIC_DIR),
    )
    app.config["TEMPLATES_AUTO_RELOAD"] = True
    app.config["SEND_FILE_MAX_AGE_DEFAULT"] = 86400

    reports_path = Path(reports_dir) if reports_dir is not None else Path(REPORTS_DIR)
    charts_dir = reports_path / "charts"
    pdf_dir = reports_path / "pdf"

    logger = _configure_ui_logger()
    logger.info("UI app initialized")

    if not PLOTLY_VENDOR_PATH.exists():
        try:
            PLOTLY_VENDOR_PATH.parent.mkdir(parents=True, exist_ok=True)
            PLOTLY_VENDOR_PATH.write_text(get_plotlyjs(), encoding="utf-8")
            logger.info("Wrote local Plotly bundle: %s", PLOTLY_VENDOR_PATH)
        except OSError as exc:
            logger.warning("Failed to write local Plotly bundle: %s", exc)

    loader = DashboardLoader(
        base_url=base_url if base_url is not None else DATA_BASE_URL,
        primary_document=primary_document,
        summary_document=summary_document,
        timeout=timeout,
    )
    app.extensions["foresight_loader"] = loader
    if load_async:
        loader.start()
    else:
        loader.load()

    app.add_template_filter(format_percentage, "pct")
    app.add_template_filter(format_score, "score")
    app.add_template_filter(format_number, "num")
    app.add_template_filter(format_large_number, "large")

    def state_url(state: ViewState, endpoint: str = "index") -> str:
        return url_for(endpoint, **state.to_args())

    app.add_template_global(state_url, "state_url")

    @app.route("/")
    def index() -> str:
        """Dashboard with tabs, search, sorting and summary tiles; loading screen until data arrives."""
        state = ViewState.from_args(request.args)
        data = loader.data
        if data is None:
            return render_template("loading.html", state=state, poll_seconds=LOADING_POLL_SECONDS)

        document = data.document
        tickers = derive.visible_tickers(document, state.search, state.sort_key, state.sort_order)
        tab_context = TAB_CONTEXT_BUILDERS[state.active_tab](data, state, tickers)

        return render_template(
            "index.html",
            state=state,
            tabs=tab_strip(state, state_url),
            tiles=_stat_tiles(data),
            prediction_date=prediction_day(document.metadata),
            total_tickers=len(document.stocks),
            displayed_count=len(tickers),
            plotly_script_url=url_for("static", filename=PLOTLY_VENDOR_RELATIVE_PATH),
            tab=tab_context,
        )

    @app.route("/api/status")
    def load_status():
        """Expose load status for the loading screen; failures read as still loading."""
        return jsonify({"status": "ready" if loader.status == STATUS_READY else "loading"})

    @app.route("/api/dashboard")
    def dashboard_api():
        """Headless API endpoint for the dashboard."""
        data = loader.data
        if data is None:
            return jsonify({"status": "loading"}), 503
        state = ViewState.from_args(request.args)
        limit = parse_int(request.args.get("limit"), API_MAX_STOCKS, 1, API_MAX_STOCKS)
        return jsonify(dashboard_payload(data, state, limit))

    @app.route("/export/pdf/<ticker>")
    def export_pdf(ticker: str):
        """Export one ticker's predictions as a local PDF snapshot."""
        data = loader.data
        if data is None:
            abort(503)
        record = data.document.get(ticker)
        if record is None:
            logger.warning("PDF export requested unknown ticker %s", ticker)
            abort(404)

        stock = build_stock_view(record)
        day = prediction_day(data.document.metadata)
        chart_path = ensure_static_chart(record, day, charts_dir)

        pdf_path = build_stock_pdf(
            ticker=stock.ticker,
            prediction_day=day,
            signal=stock.signal,
            rating_label=stock.rating.label.split(" ", 1)[-1],
            expected_7d_positive=stock.expected_class == "positive",
            metric_lines=[
                f"Composite score: {stock.composite_score}",
                f"7-day volatility: {stock.volatility} ({stock.risk.level})",
                f"Sharpe ratio: {stock.sharpe_ratio}",
                f"Value at risk (95%): {stock.value_at_risk}",
                f"Value at risk (99%): {stock.value_at_risk_99}",
                f"Max drawdown: {stock.max_drawdown}",
                f"Trend: {stock.trend} (strength {stock.trend_strength})",
                f"5-day momentum: {stock.momentum_5d} ({stock.trend_change} vs history)",
                f"Last known return: {stock.last_known_return}",
            ],
            horizon_lines=[
                f"1 day: {stock.expected_1d}",
                f"3 days: {stock.expected_3d}",
                f"5 days: {stock.expected_5d}",
                f"7 days: {stock.expected_7d} (cumulative {stock.cumulative_7d})",
            ],
            disclaimer="Disclaimer: model output only. Foresight displays upstream predictions and gives no advice.",
            horizon_chart_path=chart_path,
            output_dir=pdf_dir,
        )

        return send_file(
            pdf_path,
            as_attachment=True,
            download_name=pdf_path.name,
            mimetype="application/pdf",
        )

    def _log_unhandled_exception(sender: Flask, exception: Exception, **_: Any) -> None:
        logger.exception("Unhandled UI exception: %s", exception)

    got_request_exception.connect(_log_unhandled_exception, app)

    return app


app = create_app()


if __name__ == "__main__":
    app.run(host="127.0.0.1", port=5000, debug=False)
