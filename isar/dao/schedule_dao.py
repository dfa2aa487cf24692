"""Data access for duty slots."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Iterator, List, Optional, Sequence

from ..domain.models import DutyAssignment, UnavailabilityRecord
from . import availability_dao, db


def _to_assignment(row: sqlite3.Row) -> DutyAssignment:
    return DutyAssignment(
        date=date.fromisoformat(row["date"]),
        prayer_time=row["prayer_time"],
        imam_id=row["imam_id"],
        bilal_id=row["bilal_id"],
    )


def assignments_between(start: date, end: date) -> List[DutyAssignment]:
    rows = db.query_all(
        f"""
        SELECT date, prayer_time, imam_id, bilal_id
        FROM schedules
        WHERE date BETWEEN ? AND ?
        ORDER BY date, {db.prayer_order()}
        """,
        (start.isoformat(), end.isoformat()),
    )
    return [_to_assignment(row) for row in rows]


def list_slots(start: date, end: date) -> List[Dict[str, Any]]:
    rows = db.query_all(
        f"""
        SELECT s.id, s.date, s.prayer_time, s.imam_id, s.bilal_id, s.version,
               i.name AS imam_name, b.name AS bilal_name, s.updated_at
        FROM schedules s
        LEFT JOIN users i ON s.imam_id = i.id
        LEFT JOIN users b ON s.bilal_id = b.id
        WHERE s.date BETWEEN ? AND ?
        ORDER BY s.date, {db.prayer_order('s.prayer_time')}
        """,
        (start.isoformat(), end.isoformat()),
    )
    return [dict(row) for row in rows]


def get_slot(schedule_id: int) -> Optional[Dict[str, Any]]:
    row = db.query_one(
        "SELECT id, date, prayer_time, imam_id, bilal_id, version FROM schedules WHERE id = ?",
        (schedule_id,),
    )
    return dict(row) if row else None


def upsert_slots(conn: sqlite3.Connection, rows: Sequence[DutyAssignment], user_id: Optional[int]) -> int:
    """Insert or overwrite imam/bilal per (date, prayer_time). Does not commit."""
    conn.executemany(
        """
        INSERT INTO schedules (date, prayer_time, imam_id, bilal_id, created_by, modified_by)
        VALUES (?, ?, ?, ?, ?, ?)
        ON CONFLICT(date, prayer_time) DO UPDATE SET
            imam_id = excluded.imam_id,
            bilal_id = excluded.bilal_id,
            modified_by = excluded.modified_by,
            version = schedules.version + 1,
            updated_at = datetime('now')
        """,
        [
            (row.date.isoformat(), row.prayer_time, row.imam_id, row.bilal_id, user_id, user_id)
            for row in rows
        ],
    )
    return len(rows)


def update_slot(
    schedule_id: int,
    imam_id: Optional[int],
    bilal_id: Optional[int],
    user_id: Optional[int],
    expected_version: Optional[int] = None,
) -> int:
    sql = (
        "UPDATE schedules SET imam_id = ?, bilal_id = ?, modified_by = ?, "
        "version = version + 1, updated_at = datetime('now') WHERE id = ?"
    )
    params: list[Any] = [imam_id, bilal_id, user_id, schedule_id]
    if expected_version is not None:
        sql += " AND version = ?"
        params.append(expected_version)
    return db.execute(sql, params)


def delete_slot(schedule_id: int) -> int:
    return db.execute("DELETE FROM schedules WHERE id = ?", (schedule_id,))


class SqliteScheduleStore:
    """Schedule store backed by the request's SQLite connection."""

    def __init__(self) -> None:
        self._conn: Optional[sqlite3.Connection] = None

    def assignments_between(self, start: date, end: date) -> List[DutyAssignment]:
        return assignments_between(start, end)

    def unavailability_between(self, start: date, end: date) -> List[UnavailabilityRecord]:
        return availability_dao.unavailability_between(start, end)

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with db.transaction() as conn:
            self._conn = conn
            try:
                yield conn
            finally:
                self._conn = None

    def upsert_assignments(self, rows: Sequence[DutyAssignment], user_id: Optional[int] = None) -> int:
        if self._conn is None:
            raise RuntimeError("upsert_assignments must run inside transaction()")
        return upsert_slots(self._conn, rows, user_id)
