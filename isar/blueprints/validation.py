"""Coercion of JSON and query values shared by the API blueprints."""
from __future__ import annotations

from decimal import InvalidOperation
from typing import Any

from ..domain.errors import InvalidValueError
from ..domain.finance import to_decimal


def parse_int(value: Any, field: str) -> int:
    """Return ``value`` as an int; JSON booleans and fractional text are refused."""
    if isinstance(value, bool):
        raise InvalidValueError(f"{field} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidValueError(f"{field} must be an integer") from exc


def is_amount(value: Any) -> bool:
    """Blank, a number, or numeric text."""
    if value is None or value == "":
        return True
    if isinstance(value, bool):
        return False
    try:
        return to_decimal(value).is_finite()
    except InvalidOperation:
        return False
