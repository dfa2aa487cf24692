from __future__ import annotations

import sqlite3
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from ..domain.models import UnavailabilityRecord
from . import db


def unavailability_between(start: date, end: date) -> List[UnavailabilityRecord]:
    rows = db.query_all(
        "SELECT user_id, date, prayer_time, is_available, reason FROM availability "
        "WHERE is_available = 0 AND date BETWEEN ? AND ?",
        (start.isoformat(), end.isoformat()),
    )
    return [
        UnavailabilityRecord(
            person_id=int(row["user_id"]),
            date=date.fromisoformat(row["date"]),
            prayer_time=row["prayer_time"],
            is_available=bool(row["is_available"]),
            reason=row["reason"],
        )
        for row in rows
    ]


def list_between(
    start: date,
    end: date,
    user_id: Optional[int] = None,
    only_unavailable: bool = True,
) -> List[Dict[str, Any]]:
    sql = (
        "SELECT a.id, a.user_id, u.name AS user_name, a.date, a.prayer_time, a.is_available, a.reason "
        "FROM availability a LEFT JOIN users u ON a.user_id = u.id "
        "WHERE a.date BETWEEN ? AND ?"
    )
    params: list[Any] = [start.isoformat(), end.isoformat()]
    if user_id is not None:
        sql += " AND a.user_id = ?"
        params.append(user_id)
    if only_unavailable:
        sql += " AND a.is_available = 0"
    sql += f" ORDER BY a.date, {db.prayer_order('a.prayer_time')}, u.name"
    return [
        {**dict(row), "is_available": bool(row["is_available"])}
        for row in db.query_all(sql, params)
    ]


def upcoming_for_user(user_id: int, from_date: date, limit: int = 20) -> List[Dict[str, Any]]:
    rows = db.query_all(
        f"SELECT date, prayer_time FROM availability "
        f"WHERE user_id = ? AND date >= ? AND is_available = 0 "
        f"ORDER BY date, {db.prayer_order()} LIMIT ?",
        (user_id, from_date.isoformat(), limit),
    )
    return [{"date": date.fromisoformat(row["date"]), "prayer_time": row["prayer_time"]} for row in rows]


def mark_unavailable(
    conn: sqlite3.Connection,
    user_id: int,
    day: date,
    prayer_times: Iterable[str],
    reason: Optional[str],
) -> List[str]:
    """Upsert ``is_available = 0`` for each prayer time. Does not commit."""
    recorded: List[str] = []
    for prayer_time in prayer_times:
        conn.execute(
            "INSERT INTO availability(user_id, date, prayer_time, is_available, reason) VALUES (?, ?, ?, 0, ?) "
            "ON CONFLICT(user_id, date, prayer_time) DO UPDATE SET "
            "is_available = 0, reason = excluded.reason, updated_at = datetime('now')",
            (user_id, day.isoformat(), prayer_time, reason),
        )
        recorded.append(prayer_time)
    return recorded


def cancel_unavailable(conn: sqlite3.Connection, user_id: int, day: date, prayer_times: Iterable[str]) -> List[str]:
    """Delete leave records; returns the prayer times that had one. Does not commit."""
    cancelled: List[str] = []
    for prayer_time in prayer_times:
        cur = conn.execute(
            "DELETE FROM availability WHERE user_id = ? AND date = ? AND prayer_time = ? AND is_available = 0",
            (user_id, day.isoformat(), prayer_time),
        )
        if cur.rowcount > 0:
            cancelled.append(prayer_time)
    return cancelled
