"""Number-to-text converters used by the dashboard templates and reports.

Each formatter accepts ``None``, NaN or any non-numeric value and returns
``"N/A"`` for them; none of them raise.
"""

from __future__ import annotations

from typing import Any

from core.fields import to_float
from core.schema import Metadata


NOT_AVAILABLE = "N/A"
TINY_PERCENTAGE = "<0.001%"


def _decimals(decimals: Any, default: int = 2) -> int:
    try:
        return max(0, min(20, int(decimals)))
    except (TypeError, ValueError):
        return default


def _fixed(number: float, decimals: int) -> str:
    # Adding 0.0 folds -0.0 into 0.0.
    return f"{number + 0.0:.{decimals}f}"


def format_number(value: Any, decimals: int = 2) -> str:
    """Fixed-point rendering."""
    number = to_float(value)
    if number is None:
        return NOT_AVAILABLE
    return _fixed(number, _decimals(decimals))


def format_percentage(value: Any, decimals: int = 2) -> str:
    """
    Render a ratio as a percentage.

    Precision grows as the magnitude shrinks so small moves stay visible:
    below 0.1% three decimals, below 0.01% four, and anything under 0.001%
    collapses to ``<0.001%``.
    """
    number = to_float(value)
    if number is None:
        return NOT_AVAILABLE

    percentage = number * 100
    magnitude = abs(percentage)
    if percentage != 0:
        if magnitude < 0.001:
            return TINY_PERCENTAGE
        if magnitude < 0.01:
            return f"{_fixed(percentage, 4)}%"
        if magnitude < 0.1:
            return f"{_fixed(percentage, 3)}%"
    return f"{_fixed(percentage, _decimals(decimals))}%"


def format_score(value: Any, decimals: int = 2) -> str:
    """Scores of 10 and above get one decimal, smaller ones ``decimals``."""
    number = to_float(value)
    if number is None:
        return NOT_AVAILABLE
    if abs(number) >= 10:
        return _fixed(number, 1)
    return _fixed(number, _decimals(decimals))


def format_large_number(value: Any) -> str:
    """Abbreviate thousands and millions, pass smaller values through."""
    number = to_float(value)
    if number is None:
        return NOT_AVAILABLE
    if number >= 1_000_000:
        return f"{number / 1_000_000:.1f}M"
    if number >= 1_000:
        return f"{number / 1_000:.1f}K"
    if number.is_integer():
        return str(int(number))
    return str(number)


def prediction_day(metadata: Metadata | None, fallback: str = NOT_AVAILABLE) -> str:
    """Date part of the producer's ISO ``prediction_date``."""
    if metadata is None or not metadata.prediction_date:
        return fallback
    return metadata.prediction_date.split("T")[0] or fallback
