# stockscope/formatting.py
from __future__ import annotations
from typing import Any
from stockscope.sanitizer import as_number


def format_number(value: Any, decimals: int = 2) -> str:
    num = as_number(value)
    if num is None:
        return "N/A"
    return f"{num:.{decimals}f}"


def percentage_change(current: Any, previous: Any) -> str:
    """Change from ``previous`` to ``current`` as ``"x.xx%"``, or ``""`` when it is undefined."""
    cur, prev = as_number(current), as_number(previous)
    if cur is None or prev is None or prev == 0:
        return ""
    return format_number((cur / prev - 1) * 100) + "%"


def plain_number(value: Any) -> str:
    """Fixed-point text without trailing zeros: 8.0 -> "8", 1234567.0 -> "1234567", never exponent notation."""
    num = as_number(value)
    if num is None:
        return "N/A"
    return f"{num:f}".rstrip("0").rstrip(".")
