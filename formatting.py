"""Display formatting for money, ratios and month keys."""

from __future__ import annotations

MONTH_ABBREVIATIONS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def format_currency(value: float) -> str:
    """Format as Brazilian reais, e.g. R$ 1.234,56."""
    amount = float(value or 0.0)
    grouped = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if amount < 0 else ""
    return f"{sign}R$ {grouped}"


def format_number(value: float) -> str:
    return f"{float(value or 0.0):.2f}"


def format_percent(value: float) -> str:
    return f"{format_number(value)}%"


def format_multiplier(value: float) -> str:
    return f"{format_number(value)}x"


def format_count(value: int) -> str:
    return f"{int(value or 0):,}".replace(",", ".")


def month_label(key: str, short_year: bool = False) -> str:
    """Turn a YYYY-MM key into 'Jan/2025' (or 'Jan/25')."""
    try:
        year, month = str(key).split("-")
        month_number = int(month)
    except ValueError:
        return str(key)
    if not 1 <= month_number <= 12:
        return str(key)
    name = MONTH_ABBREVIATIONS[month_number - 1]
    return f"{name}/{year[2:] if short_year else year}"
