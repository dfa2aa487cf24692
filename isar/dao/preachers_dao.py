from __future__ import annotations

import sqlite3
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from . import db


class DuplicatePreacherEmailError(ValueError):
    """Raised when another preacher already uses the email address."""


def list_preachers(active_only: bool = False) -> List[Dict[str, Any]]:
    sql = "SELECT id, name, phone, email, photo, is_active, created_at FROM preachers"
    if active_only:
        sql += " WHERE is_active = 1"
    sql += " ORDER BY name"
    return [{**dict(row), "is_active": bool(row["is_active"])} for row in db.query_all(sql)]


def _ensure_email_free(email: Optional[str], exclude_id: Optional[int] = None) -> None:
    if not email:
        return
    sql = "SELECT id FROM preachers WHERE email = ?"
    params: list[Any] = [email]
    if exclude_id is not None:
        sql += " AND id != ?"
        params.append(exclude_id)
    if db.query_one(sql, params):
        raise DuplicatePreacherEmailError("Email already exists")


def create_preacher(name: str, phone: Optional[str], email: Optional[str]) -> int:
    _ensure_email_free(email)
    return db.insert(
        "INSERT INTO preachers(name, phone, email, is_active) VALUES (?, ?, ?, 1)",
        (name, phone, email),
    )


def update_preacher(preacher_id: int, payload: Dict[str, Any]) -> int:
    email = payload.get("email") or None
    _ensure_email_free(email, exclude_id=preacher_id)
    return db.execute(
        "UPDATE preachers SET name = ?, phone = ?, email = ?, is_active = ?, updated_at = datetime('now') "
        "WHERE id = ?",
        (
            payload["name"],
            payload.get("phone") or None,
            email,
            1 if payload.get("is_active", True) else 0,
            preacher_id,
        ),
    )


def deactivate_preacher(preacher_id: int) -> int:
    return db.execute(
        "UPDATE preachers SET is_active = 0, updated_at = datetime('now') WHERE id = ?", (preacher_id,)
    )


def list_schedules(start: Optional[date] = None, end: Optional[date] = None) -> List[Dict[str, Any]]:
    sql = """
        SELECT ps.id, ps.schedule_date, ps.notes, ps.subuh_preacher_id, ps.maghrib_preacher_id,
               sp.name AS subuh_preacher_name, mp.name AS maghrib_preacher_name,
               ps.created_at, ps.updated_at
        FROM preacher_schedules ps
        LEFT JOIN preachers sp ON ps.subuh_preacher_id = sp.id
        LEFT JOIN preachers mp ON ps.maghrib_preacher_id = mp.id
    """
    params: list[Any] = []
    if start and end:
        sql += " WHERE ps.schedule_date BETWEEN ? AND ?"
        params.extend([start.isoformat(), end.isoformat()])
    sql += " ORDER BY ps.schedule_date"
    return [dict(row) for row in db.query_all(sql, params)]


def upsert_schedules(conn: sqlite3.Connection, schedules: Iterable[Dict[str, Any]], user_id: Optional[int]) -> int:
    """Insert or update one row per schedule_date. Does not commit."""
    count = 0
    for item in schedules:
        conn.execute(
            """
            INSERT INTO preacher_schedules(schedule_date, subuh_preacher_id, maghrib_preacher_id, notes, created_by)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(schedule_date) DO UPDATE SET
                subuh_preacher_id = excluded.subuh_preacher_id,
                maghrib_preacher_id = excluded.maghrib_preacher_id,
                notes = excluded.notes,
                updated_at = datetime('now')
            """,
            (
                item["schedule_date"],
                item.get("subuh_preacher_id") or None,
                item.get("maghrib_preacher_id") or None,
                item.get("notes") or None,
                user_id,
            ),
        )
        count += 1
    return count


def delete_schedule(schedule_id: Optional[int] = None, schedule_date: Optional[str] = None) -> int:
    if schedule_id is not None:
        return db.execute("DELETE FROM preacher_schedules WHERE id = ?", (schedule_id,))
    return db.execute("DELETE FROM preacher_schedules WHERE schedule_date = ?", (schedule_date,))
