"""
Calendar and key normalization helpers.

Every join in the engine (rules, leaves, ledger, holidays, audit rows) goes
through the canonical date string ``YYYY-MM-DD`` and the normalized employee
id produced here.  Pure functions, no I/O.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

# Index matches date.weekday(): Monday == 0
DAY_CODES: tuple[str, ...] = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")

_DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d-%b-%Y",
    "%m/%d/%Y",
)


def day_code(value: date) -> str:
    """Three-letter weekday code, e.g. ``"MON"``."""
    return DAY_CODES[value.weekday()]


def normalize_day(value: Any) -> str:
    """Normalize a weekday cell ("monday", "Mon ", "MON") to ``"MON"``.

    Empty values normalize to ``""`` so they never match a real day.
    """
    if value is None:
        return ""
    return str(value).strip().upper()[:3]


def parse_safe_date(value: Any) -> date | None:
    """Parse a cell value into a date, or None if it is not a date.

    Accepts ``date``/``datetime`` objects and strings in ISO, ``YYYY/MM/DD``,
    ``DD-Mon-YYYY`` or ``MM/DD/YYYY`` form.  A trailing time part on an ISO
    string is ignored.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_date(value: date) -> str:
    """Canonical date string used as the join key everywhere."""
    return value.strftime("%Y-%m-%d")


def coerce_text(value: Any) -> str:
    """String coercion that treats None as empty and strips whitespace."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def normalize_employee_id(value: Any) -> str:
    """Case/space-normalized employee id."""
    return coerce_text(value).lower()


def composite_key(employee_id: str, date_str: str) -> str:
    """Pipe-joined ``employee|date`` key for leave, ledger and audit rows."""
    return f"{employee_id}|{date_str}"
