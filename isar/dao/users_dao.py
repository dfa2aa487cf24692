from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from . import db

_COLUMNS = "id, name, email, role, phone, is_active"


def _to_dict(row) -> Dict[str, Any]:
    return {
        "id": int(row["id"]),
        "name": row["name"],
        "email": row["email"],
        "role": row["role"],
        "phone": row["phone"],
        "is_active": bool(row["is_active"]),
    }


def list_users(role: Optional[str] = None, include_inactive: bool = False) -> List[Dict[str, Any]]:
    sql = f"SELECT {_COLUMNS} FROM users"
    clauses: list[str] = []
    params: list[Any] = []
    if role:
        clauses.append("role = ?")
        params.append(role)
    if not include_inactive:
        clauses.append("is_active = 1")
    if clauses:
        sql += " WHERE " + " AND ".join(clauses)
    sql += " ORDER BY name"
    return [_to_dict(row) for row in db.query_all(sql, params)]


def get_user(user_id: int) -> Optional[Dict[str, Any]]:
    row = db.query_one(f"SELECT {_COLUMNS} FROM users WHERE id = ?", (user_id,))
    return _to_dict(row) if row else None


def find_active_by_phones(phones: Iterable[str]) -> Optional[Dict[str, Any]]:
    candidates = list(dict.fromkeys(phones))
    if not candidates:
        return None
    placeholders = ", ".join("?" for _ in candidates)
    row = db.query_one(
        f"SELECT {_COLUMNS} FROM users WHERE phone IN ({placeholders}) AND is_active = 1 ORDER BY id LIMIT 1",
        candidates,
    )
    return _to_dict(row) if row else None


def authenticate(email: str, password: str) -> Optional[Dict[str, Any]]:
    row = db.query_one(
        f"SELECT {_COLUMNS}, password_hash FROM users WHERE email = ? AND is_active = 1",
        (email,),
    )
    if not row or not row["password_hash"]:
        return None
    if not check_password_hash(row["password_hash"], password):
        return None
    return _to_dict(row)


def create_user(payload: Dict[str, Any]) -> int:
    password = payload.get("password")
    return db.insert(
        "INSERT INTO users(name, email, password_hash, role, phone, is_active) VALUES (?, ?, ?, ?, ?, ?)",
        (
            payload["name"],
            payload["email"],
            generate_password_hash(password) if password else None,
            payload["role"],
            payload.get("phone"),
            1 if payload.get("is_active", True) else 0,
        ),
    )
