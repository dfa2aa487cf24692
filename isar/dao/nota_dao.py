"""Storage for the special donation note (nota penerimaan sumbangan khas)."""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, Iterable, List, Mapping, Optional

from . import db

AMOUNT_FIELDS = (
    "previous_opening",
    "previous_receipts",
    "previous_spending",
    "previous_closing",
    "current_opening",
    "current_receipts",
    "current_spending",
    "current_closing",
)


class DuplicateNoteRowError(ValueError):
    """Raised when a rename would give a year two rows for one sub-category."""


def _to_dict(row) -> Dict[str, Any]:
    return {**dict(row), "auto_generated": bool(row["auto_generated"])}


def rows_for_year(year: int) -> List[Dict[str, Any]]:
    rows = db.query_all(
        f"SELECT id, year, sub_category, {', '.join(AMOUNT_FIELDS)}, auto_generated "
        "FROM special_donation_notes WHERE year = ? ORDER BY id",
        (year,),
    )
    return [_to_dict(row) for row in rows]


def find_row(conn: sqlite3.Connection, year: int, sub_category: str) -> Optional[sqlite3.Row]:
    return conn.execute(
        "SELECT * FROM special_donation_notes WHERE year = ? AND sub_category = ?",
        (year, sub_category),
    ).fetchone()


def create_defaults(conn: sqlite3.Connection, year: int, sub_categories: Iterable[str]) -> None:
    """Insert zero rows for any missing sub-category. Does not commit."""
    conn.executemany(
        "INSERT OR IGNORE INTO special_donation_notes(year, sub_category) VALUES (?, ?)",
        [(year, name) for name in sub_categories],
    )


def save_row(
    conn: sqlite3.Connection,
    year: int,
    sub_category: str,
    amounts: Mapping[str, float],
    *,
    auto_generated: bool,
    user_id: Optional[int],
) -> int:
    """Insert or overwrite the row for ``(year, sub_category)``. Does not commit."""
    values = [amounts.get(field, 0.0) for field in AMOUNT_FIELDS]
    updates = ", ".join(f"{field} = excluded.{field}" for field in AMOUNT_FIELDS)
    conn.execute(
        f"""
        INSERT INTO special_donation_notes(
            year, sub_category, {', '.join(AMOUNT_FIELDS)}, auto_generated, created_by
        ) VALUES (?, ?, {', '.join('?' for _ in AMOUNT_FIELDS)}, ?, ?)
        ON CONFLICT(year, sub_category) DO UPDATE SET
            {updates},
            auto_generated = excluded.auto_generated,
            updated_by = excluded.created_by,
            updated_at = datetime('now')
        """,
        (year, sub_category, *values, 1 if auto_generated else 0, user_id),
    )
    row = find_row(conn, year, sub_category)
    return int(row["id"])


def update_row(row_id: int, sub_category: str, amounts: Mapping[str, float], user_id: Optional[int]) -> int:
    clash = db.query_one(
        "SELECT other.id FROM special_donation_notes other "
        "JOIN special_donation_notes target ON target.id = ? "
        "WHERE other.year = target.year AND other.sub_category = ? AND other.id != target.id",
        (row_id, sub_category),
    )
    if clash:
        raise DuplicateNoteRowError(f"{sub_category} already has a row for that year")
    assignments = ", ".join(f"{field} = ?" for field in AMOUNT_FIELDS)
    return db.execute(
        f"UPDATE special_donation_notes SET sub_category = ?, {assignments}, auto_generated = 0, "
        "updated_by = ?, updated_at = datetime('now') WHERE id = ?",
        (sub_category, *(amounts.get(field, 0.0) for field in AMOUNT_FIELDS), user_id, row_id),
    )


def delete_row(row_id: int) -> int:
    return db.execute("DELETE FROM special_donation_notes WHERE id = ?", (row_id,))


def _sums_by_sub_category(
    conn: sqlite3.Connection, amount_column: str, category_column: str, sub_category_column: str,
    category: str, year: int,
) -> Dict[str, float]:
    rows = conn.execute(
        f"""
        SELECT {sub_category_column} AS sub_category, COALESCE(SUM({amount_column}), 0) AS total
        FROM financial_transactions
        WHERE {category_column} = ?
          AND {sub_category_column} IS NOT NULL
          AND strftime('%Y', transaction_date) = ?
        GROUP BY {sub_category_column}
        """,
        (category, f"{year:04d}"),
    ).fetchall()
    return {row["sub_category"]: float(row["total"]) for row in rows}


def receipts_by_sub_category(conn: sqlite3.Connection, category: str, year: int) -> Dict[str, float]:
    return _sums_by_sub_category(conn, "credit_amount", "category_receipt", "sub_category_receipt", category, year)


def spending_by_sub_category(conn: sqlite3.Connection, category: str, year: int) -> Dict[str, float]:
    return _sums_by_sub_category(
        conn, "debit_amount", "category_expenditure", "sub_category_expenditure", category, year
    )
