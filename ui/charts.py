"""Chart and chart-cache helpers for the Foresight UI."""

from __future__ import annotations

from pathlib import Path
import re

from matplotlib.figure import Figure
import pandas as pd
import plotly.graph_objects as go
from plotly.offline import plot

from core.derive import Bucket, daily_return_series, horizon_series
from core.schema import StockRecord


PLOT_CONFIG = {"displaylogo": False, "responsive": True}


def _template(dark: bool) -> str:
    return "plotly_dark" if dark else "plotly_white"


def _to_div(figure: go.Figure, dark: bool, height: int = 360) -> str:
    figure.update_layout(
        template=_template(dark),
        height=height,
        margin={"l": 40, "r": 20, "t": 40, "b": 40},
        legend={"orientation": "h", "y": 1.12},
        paper_bgcolor="rgba(0,0,0,0)",
    )
    return plot(figure, output_type="div", include_plotlyjs=False, config=PLOT_CONFIG)


def build_horizon_chart(record: StockRecord, dark: bool = False) -> str:
    """Expected vs cumulative return across the 1/3/5/7-day horizons."""
    series = horizon_series(record)
    figure = go.Figure()
    figure.add_trace(
        go.Scatter(
            x=series["period"],
            y=series["expected_pct"],
            mode="lines+markers",
            name="Expected",
            hovertemplate="%{x}: %{y:.3f}%<extra></extra>",
        )
    )
    figure.add_trace(
        go.Scatter(
            x=series["period"],
            y=series["cumulative_pct"],
            mode="lines+markers",
            name="Cumulative",
            line={"dash": "dash"},
            hovertemplate="%{x}: %{y:.3f}%<extra></extra>",
        )
    )
    figure.update_layout(title=f"{record.ticker.upper()} multi-horizon outlook", yaxis={"title": "Return (%)"})
    return _to_div(figure, dark)


def build_daily_returns_chart(record: StockRecord, dark: bool = False) -> str | None:
    series = daily_return_series(record)
    if series.empty:
        return None
    figure = go.Figure()
    figure.add_trace(go.Bar(x=series["day"], y=series["return_pct"], name="Daily"))
    figure.add_trace(go.Scatter(x=series["day"], y=series["cumulative_pct"], mode="lines+markers", name="Cumulative"))
    figure.update_layout(
        title="Predicted 7-day path",
        xaxis={"title": "Day", "dtick": 1},
        yaxis={"title": "Return (%)"},
    )
    return _to_div(figure, dark)


def build_bucket_pie(buckets: list[Bucket], title: str, dark: bool = False) -> str:
    """Pie of bucket counts (sentiment, ratings)."""
    figure = go.Figure(
        go.Pie(
            labels=[item.label for item in buckets],
            values=[item.count for item in buckets],
            marker={"colors": [item.color for item in buckets]},
            hole=0.35,
            sort=False,
        )
    )
    figure.update_layout(title=title)
    return _to_div(figure, dark, height=320)


def build_risk_return_scatter(points: pd.DataFrame, dark: bool = False) -> str:
    figure = go.Figure(
        go.Scatter(
            x=points["risk_pct"],
            y=points["return_pct"],
            mode="markers+text",
            text=points["ticker"],
            textposition="top center",
            marker={
                "size": 12,
                "color": points["composite_score"],
                "colorscale": "RdYlGn",
                "showscale": True,
                "colorbar": {"title": "Score"},
            },
            hovertemplate="%{text}<br>Volatility: %{x:.3f}%<br>Expected: %{y:.3f}%<extra></extra>",
        )
    )
    figure.update_layout(
        title="Risk vs expected 7-day return",
        xaxis={"title": "7-day volatility (%)"},
        yaxis={"title": "Expected return (%)"},
    )
    return _to_div(figure, dark)


def build_probability_scatter(points: pd.DataFrame, dark: bool = False) -> str:
    figure = go.Figure(
        go.Scatter(
            x=points["risk_pct"],
            y=points["probability_pct"],
            mode="markers",
            text=points["ticker"],
            marker={"size": 11, "color": points["composite_score"], "colorscale": "Viridis", "showscale": True},
            hovertemplate="%{text}<br>Volatility: %{x:.3f}%<br>P(gain): %{y:.1f}%<extra></extra>",
        )
    )
    figure.update_layout(
        title="Risk vs probability of a positive week",
        xaxis={"title": "7-day volatility (%)"},
        yaxis={"title": "Probability (%)"},
    )
    return _to_div(figure, dark)


def build_comparison_bars(rows: pd.DataFrame, dark: bool = False) -> str:
    figure = go.Figure()
    for column, label in [
        ("expected_1d_pct", "1-day expected"),
        ("expected_7d_pct", "7-day expected"),
        ("cumulative_7d_pct", "7-day cumulative"),
        ("volatility_pct", "Volatility"),
    ]:
        figure.add_trace(go.Bar(x=rows["ticker"], y=rows[column], name=label))
    figure.update_layout(barmode="group", title="Multi-horizon comparison", yaxis={"title": "%"})
    return _to_div(figure, dark, height=420)


def build_training_chart(curve: pd.DataFrame, dark: bool = False) -> str:
    figure = go.Figure()
    figure.add_trace(go.Scatter(x=curve["epoch"], y=curve["train"], mode="lines", name="Training loss"))
    figure.add_trace(go.Scatter(x=curve["epoch"], y=curve["valid"], mode="lines", name="Validation loss"))
    figure.update_layout(title="Model training history", xaxis={"title": "Epoch"}, yaxis={"title": "Loss"})
    return _to_div(figure, dark)


def plot_horizon_chart(record: StockRecord, output_path: Path) -> None:
    """Save static horizon chart for PDF export."""
    series = horizon_series(record)
    fig = Figure(figsize=(9, 3.6))
    ax = fig.add_subplot(111)

    ax.plot(series["period"], series["expected_pct"], marker="o", label="Expected", linewidth=1.6)
    ax.plot(series["period"], series["cumulative_pct"], marker="s", linestyle="--", label="Cumulative", linewidth=1.2)
    ax.axhline(0, color="grey", linewidth=0.8)
    ax.legend(loc="upper left")
    ax.set_title(f"{record.ticker.upper()} Multi-Horizon Outlook")
    ax.set_ylabel("Return (%)")
    ax.grid(alpha=0.25)
    fig.tight_layout()
    fig.savefig(output_path, dpi=130)


def ensure_static_chart(record: StockRecord, prediction_day: str, charts_dir: Path) -> Path:
    """Generate the static horizon chart once per prediction day and reuse it."""
    charts_dir.mkdir(parents=True, exist_ok=True)
    stem = re.sub(r"[^A-Za-z0-9._-]+", "_", f"{record.ticker}_{prediction_day}")
    chart_file = charts_dir / f"{stem}_horizons.png"
    if not chart_file.exists():
        plot_horizon_chart(record, chart_file)
    return chart_file
