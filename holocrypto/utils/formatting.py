"""Missing-value-safe number formatting for display fields."""

from __future__ import annotations

import math
from typing import Any


UNAVAILABLE = "—"


def coerce_number(value: Any) -> float | None:
    """
    Coerce a numeric or numeric-string value to a finite float.
    Returns None for anything else (None, bools, junk strings, NaN, inf).
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            # integers past float range
            return None
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            number = float(s)
        except ValueError:
            return None
    else:
        return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


def format_number(value: Any, max_fraction_digits: int = 2, prefix: str = "") -> str:
    """
    Grouped en-US rendering with at most `max_fraction_digits` decimals.
    Trailing zeros are trimmed, so 1234.50 renders as "1,234.5".
    """
    try:
        number = coerce_number(value)
        if number is None:
            return UNAVAILABLE

        digits = max(0, int(max_fraction_digits))
        text = f"{abs(number):,.{digits}f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")

        sign = "-" if number < 0 and text.strip("0,.") else ""
        return f"{sign}{prefix}{text}"
    except (TypeError, ValueError, OverflowError):
        return UNAVAILABLE


def format_percent(value: Any) -> str:
    """Signed two-decimal percent, e.g. "+1.23%" or "-0.5%"."""
    number = coerce_number(value)
    if number is None:
        return UNAVAILABLE

    rounded = round(number, 2)
    text = format_number(rounded, max_fraction_digits=2)
    if rounded > 0:
        return f"+{text}%"
    return f"{text}%"
