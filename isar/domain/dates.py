"""Date helpers for roster weeks and report months."""
from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Any, Tuple

from .errors import InvalidDateError

WEDNESDAY = 2


def parse_date(value: Any) -> date:
    """Validate a YYYY-MM-DD value. Times or other trailing text are rejected."""
    if not value:
        raise InvalidDateError("Date value is required")
    if not isinstance(value, str):
        raise InvalidDateError(f"Date must be a YYYY-MM-DD string: {value!r}")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError as exc:
        raise InvalidDateError(f"Date must be in YYYY-MM-DD format: {value}") from exc


def week_bounds(day: date, start_weekday: int = WEDNESDAY) -> Tuple[date, date]:
    """Return the first and last day of the roster week containing ``day``."""
    offset = (day.weekday() - start_weekday) % 7
    start = day - timedelta(days=offset)
    return start, start + timedelta(days=6)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    _, days = calendar.monthrange(year, month)
    return date(year, month, 1), date(year, month, days)
