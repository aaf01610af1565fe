"""
Display formatters for report output.
Deterministic string formatting for numbers, percentages, prices, and dates.
"""

import math
from datetime import datetime, date
from typing import Optional, Union


NOT_AVAILABLE = "N/A"


class FormatterError(Exception):
    """Raised when formatter input validation fails."""
    pass


def _check_numeric(value, label: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FormatterError(f"{label} must be numeric, got {type(value)}")


def format_number(value: Optional[float]) -> str:
    """
    Format a magnitude with K/M/B suffix and 2 decimals.

    Args:
        value: Number to format

    Returns:
        Formatted string (e.g., "1.50M", "950.00"); "N/A" for missing values
    """
    if value is None:
        return NOT_AVAILABLE

    _check_numeric(value, "Number value")

    if not math.isfinite(value):
        return NOT_AVAILABLE

    if value >= 1e9:
        return f"{value/1e9:.2f}B"
    elif value >= 1e6:
        return f"{value/1e6:.2f}M"
    elif value >= 1e3:
        return f"{value/1e3:.2f}K"
    else:
        return f"{value:.2f}"


def format_percentage(value: Optional[float]) -> str:
    """
    Format a percent value with explicit sign and 2 decimals.

    Args:
        value: Percent value (12.5 = 12.5%)

    Returns:
        Formatted percentage string (e.g., "+12.50%", "-3.10%")
    """
    if value is None:
        return NOT_AVAILABLE

    _check_numeric(value, "Percentage value")

    if not math.isfinite(value):
        return NOT_AVAILABLE

    sign = '+' if value >= 0 else ''
    return f"{sign}{value:.2f}%"


def format_currency(value: Optional[float]) -> str:
    """Dollar amount with K/M/B suffix (e.g., "$1.50M")."""
    formatted = format_number(value)
    if formatted == NOT_AVAILABLE:
        return formatted
    return f"${formatted}"


def format_price(value: Optional[float]) -> str:
    """
    Token price with precision scaled to magnitude.

    Sub-cent prices keep significant digits (e.g., "$0.00001234").
    """
    if value is None:
        return NOT_AVAILABLE

    _check_numeric(value, "Price value")

    if not math.isfinite(value):
        return NOT_AVAILABLE

    if value >= 1:
        return f"${value:,.4f}"
    elif value >= 0.01:
        return f"${value:.6f}"
    else:
        return f"${value:.8f}"


def format_date_display(date_input: Union[str, date, datetime]) -> str:
    """
    Format date as "Month D, YYYY".

    Args:
        date_input: Date as string, date object, or datetime object

    Returns:
        Formatted date string (e.g., "July 15, 2025")
    """
    if date_input is None:
        return NOT_AVAILABLE

    if isinstance(date_input, str):
        try:
            if 'T' in date_input:
                date_obj = datetime.fromisoformat(date_input.replace('Z', '+00:00')).date()
            else:
                date_obj = date.fromisoformat(date_input)
        except ValueError:
            raise FormatterError(f"Invalid date string: {date_input}")
    elif isinstance(date_input, datetime):
        date_obj = date_input.date()
    elif isinstance(date_input, date):
        date_obj = date_input
    else:
        raise FormatterError(f"Date must be string, date, or datetime, got {type(date_input)}")

    return date_obj.strftime("%B %d, %Y")
