from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

from . import db

ACTIVE_STATUSES = ("pending", "approved")
STATUSES = ("pending", "approved", "rejected")


def _to_dict(row) -> Dict[str, Any]:
    payload = dict(row)
    payload["equipment"] = json.loads(payload.pop("equipment_json") or "[]")
    payload["agreed_terms"] = bool(payload["agreed_terms"])
    return payload


def bookings_on(event_date: str) -> List[Dict[str, Any]]:
    rows = db.query_all(
        "SELECT id, event_title, event_time, event_session, status FROM bookings "
        "WHERE event_date = ? AND status IN (?, ?)",
        (event_date, *ACTIVE_STATUSES),
    )
    return [dict(row) for row in rows]


def slot_taken(event_date: str, event_session: str) -> bool:
    row = db.query_one(
        "SELECT id FROM bookings WHERE event_date = ? AND event_session = ? AND status IN (?, ?)",
        (event_date, event_session, *ACTIVE_STATUSES),
    )
    return row is not None


def list_bookings(status: Optional[str], page: int, limit: int) -> Tuple[List[Dict[str, Any]], int]:
    where = ""
    params: list[Any] = []
    if status and status != "all":
        where = "WHERE b.status = ?"
        params.append(status)
    total_row = db.query_one(f"SELECT COUNT(1) AS total FROM bookings b {where}", params)
    rows = db.query_all(
        f"""
        SELECT b.*, u.name AS approved_by_name
        FROM bookings b
        LEFT JOIN users u ON b.approved_by = u.id
        {where}
        ORDER BY b.created_at DESC, b.id DESC
        LIMIT ? OFFSET ?
        """,
        [*params, limit, (page - 1) * limit],
    )
    return [_to_dict(row) for row in rows], int(total_row["total"]) if total_row else 0


def create_booking(payload: Dict[str, Any]) -> int:
    return db.insert(
        """
        INSERT INTO bookings(
            applicant_name, ic_number, address, home_phone, mobile_phone,
            event_title, event_date, event_day, event_time, event_session,
            guest_count, equipment_json, equipment_other, agreed_terms
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            payload["applicant_name"],
            payload["ic_number"],
            payload["address"],
            payload.get("home_phone") or None,
            payload["mobile_phone"],
            payload["event_title"],
            payload["event_date"],
            payload["event_day"],
            payload["event_time"],
            payload["event_session"],
            int(payload["guest_count"]),
            json.dumps(payload.get("equipment") or [], ensure_ascii=False),
            payload.get("equipment_other") or None,
            1 if payload.get("agreed_terms") else 0,
        ),
    )


def update_status(booking_id: int, status: str, user_id: Optional[int], rejection_reason: Optional[str]) -> int:
    decided = status != "pending"
    return db.execute(
        "UPDATE bookings SET status = ?, approved_by = ?, "
        "approved_at = CASE WHEN ? THEN datetime('now') END, rejection_reason = ? "
        "WHERE id = ?",
        (
            status,
            user_id if decided else None,
            1 if decided else 0,
            rejection_reason if status == "rejected" else None,
            booking_id,
        ),
    )


def delete_booking(booking_id: int) -> int:
    return db.execute("DELETE FROM bookings WHERE id = ?", (booking_id,))
