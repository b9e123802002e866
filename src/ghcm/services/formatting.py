"""Number formatting for insight text."""

from __future__ import annotations

import string
from typing import Any

from ghcm.models.metrics import round_half_up


def format_number(value: float | None) -> str:
    """Thousands-separated number; floats keep up to two decimals."""
    if value is None:
        return "0"
    if isinstance(value, float) and not value.is_integer():
        return f"{value:,.2f}".rstrip("0").rstrip(".")
    return f"{int(value):,}"


def format_percentage(value: float | None) -> str:
    if value is None:
        return "0%"
    return f"{value:.2f}".rstrip("0").rstrip(".") + "%"


def format_currency(value: float | None) -> str:
    if value is None:
        return "$0.00"
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


class InsightFormatter(string.Formatter):
    """``str.format`` with extra specs: ``num``, ``int``, ``pct`` and ``usd``.

    >>> InsightFormatter().format("{rate:pct} of {n:num}", rate=12.5, n=1200)
    '12.5% of 1,200'
    """

    def format_field(self, value: Any, format_spec: str) -> str:
        match format_spec:
            case "num":
                return format_number(value)
            case "int":
                return format_number(round_half_up(value or 0))
            case "pct":
                return format_percentage(value)
            case "usd":
                return format_currency(value)
            case _:
                return super().format_field(value, format_spec)
