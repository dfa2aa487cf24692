"""Roster queries and edits used by the schedule endpoints."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from flask import current_app

from ..dao import schedule_dao
from ..dao.schedule_dao import SqliteScheduleStore
from ..domain.dates import week_bounds
from ..domain.errors import ConcurrentModificationError
from ..domain.models import CopyResult
from .colors import user_color
from .copy_forward import copy_forward


def current_week(today: Optional[date] = None) -> tuple[date, date]:
    day = today or date.today()
    return week_bounds(day, int(current_app.config["WEEK_START_WEEKDAY"]))


def list_week(start: date, end: date) -> List[Dict[str, Any]]:
    slots = schedule_dao.list_slots(start, end)
    for slot in slots:
        slot["imam_color"] = user_color(slot["imam_id"])
        slot["bilal_color"] = user_color(slot["bilal_id"])
    return slots


def copy_week(start: date, user_id: Optional[int]) -> CopyResult:
    return copy_forward(start, SqliteScheduleStore(), user_id=user_id)


def update_slot(
    schedule_id: int,
    imam_id: Optional[int],
    bilal_id: Optional[int],
    user_id: Optional[int],
    expected_version: Optional[int] = None,
) -> Optional[Dict[str, Any]]:
    """Apply a manual edit. Returns ``None`` when the slot does not exist."""
    updated = schedule_dao.update_slot(schedule_id, imam_id, bilal_id, user_id, expected_version)
    if updated:
        return schedule_dao.get_slot(schedule_id)
    current = schedule_dao.get_slot(schedule_id)
    if current is None:
        return None
    raise ConcurrentModificationError(schedule_id, int(expected_version or 0), int(current["version"]))
