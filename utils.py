"""
Utility functions for QuickInvoice
"""
from __future__ import annotations
import math
import os
from datetime import date, datetime
from typing import Any, Tuple, Union

INVALID_DATE = "Invalid date"

_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d")
_DAY_ABBREVIATIONS = ["Mo", "Tu", "We", "Th", "Fr", "Sa", "Su"]


def parse_date(s: str) -> date:
    """
    Parse YYYY-MM-DD or YYYY/MM/DD date string.
    ISO timestamps (e.g. createdAt values) are reduced to their date part.
    Raises ValueError for anything else.
    """
    text = s.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return datetime.fromisoformat(text.replace("Z", "+00:00")).date()


def to_date(value: Union[date, datetime, str]) -> date:
    """Coerce a date, datetime or date string to a date"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_date(value)


def format_slash_date(d: date) -> str:
    """Format date as YYYY/MM/DD"""
    return f"{d.year:04d}/{d.month:02d}/{d.day:02d}"


def format_long_date(value: Any) -> str:
    """'January 6, 2025' or the invalid-date placeholder"""
    try:
        d = to_date(value)
    except (TypeError, ValueError, AttributeError):
        return INVALID_DATE
    return f"{d:%B} {d.day}, {d.year}"


def format_short_date(value: Any) -> str:
    """'Jan 6, 2025' or the invalid-date placeholder"""
    try:
        d = to_date(value)
    except (TypeError, ValueError, AttributeError):
        return INVALID_DATE
    return f"{d:%b} {d.day}, {d.year}"


def day_of_week(value: Any) -> str:
    """Two letter weekday abbreviation (Mo..Su), empty when unparsable"""
    try:
        return _DAY_ABBREVIATIONS[to_date(value).weekday()]
    except (TypeError, ValueError, AttributeError):
        return ""


def safe_float(x: Any, default: float = 0.0) -> float:
    """Convert value to a finite float safely, returning default on error"""
    if isinstance(x, bool):
        return default
    try:
        value = float(x)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value):
        return default
    return value


def format_amount(amount: Any) -> str:
    """Format amount as dollars with two decimals; malformed amounts show $0.00"""
    return f"${safe_float(amount):.2f}"


def app_dir() -> str:
    """
    Get application data directory.
    QUICK_INVOICE_HOME overrides the default ~/Library/Application Support/QuickInvoice.
    Creates directory if it doesn't exist.
    """
    path = os.environ.get("QUICK_INVOICE_HOME")
    if not path:
        base = os.path.expanduser("~/Library/Application Support")
        path = os.path.join(base, "QuickInvoice")
    os.makedirs(path, exist_ok=True)
    return path


def range_labels(start: Any, end: Any) -> Tuple[str, str]:
    """
    Labels for an invoice period: ('Jan 6', 'January 9').
    Unparsable dates are returned as given.
    """
    try:
        s = to_date(start)
        start_label = f"{s:%b} {s.day}"
    except (TypeError, ValueError, AttributeError):
        start_label = str(start)
    try:
        e = to_date(end)
        end_label = f"{e:%B} {e.day}"
    except (TypeError, ValueError, AttributeError):
        end_label = str(end)
    return start_label, end_label


def generate_invoice_title(name: str, lastname: str, start: Any, end: Any) -> str:
    """Default invoice title, e.g. 'Invoice John Doe Jan 6 to January 9'"""
    start_label, end_label = range_labels(start, end)
    return f"Invoice {name} {lastname} {start_label} to {end_label}"
