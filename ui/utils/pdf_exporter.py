"""PDF export helpers for Foresight ticker snapshots."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
import re

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from config.settings import REPORTS_DIR


PDF_DIR = Path(REPORTS_DIR) / "pdf"

POSITIVE_RGB = (0.12, 0.54, 0.27)
NEGATIVE_RGB = (0.77, 0.30, 0.12)


def build_stock_pdf(
    *,
    ticker: str,
    prediction_day: str,
    signal: str,
    rating_label: str,
    expected_7d_positive: bool,
    metric_lines: list[str],
    horizon_lines: list[str],
    disclaimer: str,
    horizon_chart_path: Path,
    output_dir: Path = PDF_DIR,
) -> Path:
    """Generate a local one-ticker prediction snapshot."""
    output_dir.mkdir(parents=True, exist_ok=True)

    stem = re.sub(r"[^A-Za-z0-9._-]+", "_", f"{ticker}_prediction_{prediction_day}")
    output_path = output_dir / f"{stem}.pdf"

    pdf = canvas.Canvas(str(output_path), pagesize=A4)
    width, height = A4
    left_margin = 0.75 * inch
    top = height - 0.75 * inch
    y = top

    def draw_title(text: str, size: int = 16) -> None:
        nonlocal y
        pdf.setFont("Helvetica-Bold", size)
        pdf.drawString(left_margin, y, text)
        y -= 0.28 * inch

    def draw_line(text: str, bold: bool = False, color: tuple[float, float, float] | None = None) -> None:
        nonlocal y
        pdf.setFont("Helvetica-Bold" if bold else "Helvetica", 10)
        if color is not None:
            pdf.setFillColorRGB(*color)
        else:
            pdf.setFillColor(colors.black)

        if y < 0.8 * inch:
            pdf.showPage()
            y = top

        pdf.drawString(left_margin, y, text)
        y -= 0.2 * inch
        pdf.setFillColor(colors.black)

    draw_title("Foresight Prediction Snapshot")
    draw_line(f"Ticker: {ticker.upper()}", bold=True)
    draw_line(f"Prediction date: {prediction_day}")
    draw_line(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    draw_line(f"Technical signal: {signal}", bold=True, color=POSITIVE_RGB if expected_7d_positive else NEGATIVE_RGB)
    draw_line(f"Rating: {rating_label}")

    y -= 0.08 * inch
    draw_line("Risk and score:", bold=True)
    for line in metric_lines:
        draw_line(f"- {line}")

    y -= 0.05 * inch
    draw_line("Expected returns by horizon:", bold=True)
    for line in horizon_lines:
        draw_line(f"- {line}")

    y -= 0.05 * inch
    draw_line(disclaimer, bold=True)

    if horizon_chart_path.exists():
        desired_height = 2.8 * inch
        if y < desired_height + 1.0 * inch:
            pdf.showPage()
            y = top
        img_width = width - (2 * left_margin)
        pdf.drawImage(
            str(horizon_chart_path),
            left_margin,
            y - desired_height,
            width=img_width,
            height=desired_height,
            preserveAspectRatio=True,
        )
        y -= desired_height + 0.2 * inch
    else:
        draw_line("Horizon chart: not available")

    pdf.save()
    return output_path
