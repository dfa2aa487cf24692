"""Data access for bank statements and their transactions."""

from __future__ import annotations

import sqlite3
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from ..domain.finance import to_decimal
from ..domain.models import EXPENDITURE, RECEIPT, UNCATEGORIZED
from . import db

AMOUNT_COLUMNS = ("debit_amount", "credit_amount", "balance")

_TRANSACTION_COLUMNS = (
    "transaction_date",
    "customer_eft_no",
    "transaction_code",
    "transaction_description",
    "ref_cheque_no",
    "servicing_branch",
    "debit_amount",
    "credit_amount",
    "balance",
    "sender_recipient_name",
    "payment_details",
    "transaction_type",
)


class DuplicateStatementError(ValueError):
    """Raised when a statement for the same month already exists."""


def list_statements() -> List[Dict[str, Any]]:
    rows = db.query_all(
        """
        SELECT bs.id, bs.filename, bs.upload_date, bs.month, bs.year, bs.uploaded_by,
               bs.total_transactions, bs.opening_balance, u.name AS uploader_name,
               (SELECT COUNT(1) FROM financial_transactions ft
                 WHERE ft.statement_id = bs.id AND ft.transaction_type != 'uncategorized') AS categorized_count
        FROM bank_statements bs
        LEFT JOIN users u ON bs.uploaded_by = u.id
        ORDER BY bs.year DESC, bs.month DESC, bs.upload_date DESC
        """
    )
    return [dict(row) for row in rows]


def default_transaction_type(debit_amount: Any, credit_amount: Any) -> str:
    """Type a fresh statement line from whichever side carries money."""
    if to_decimal(debit_amount) > 0:
        return EXPENDITURE
    if to_decimal(credit_amount) > 0:
        return RECEIPT
    return UNCATEGORIZED


def _stored_amount(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(to_decimal(value))


def create_statement(
    conn: sqlite3.Connection,
    *,
    month: int,
    year: int,
    filename: Optional[str],
    uploaded_by: Optional[int],
    opening_balance: Optional[float],
    transactions: Iterable[Dict[str, Any]],
) -> int:
    """Insert a statement and its already-parsed lines. Does not commit."""
    existing = conn.execute(
        "SELECT id FROM bank_statements WHERE month = ? AND year = ?", (month, year)
    ).fetchone()
    if existing:
        raise DuplicateStatementError(f"Penyata bank untuk {month}/{year} sudah wujud")

    cur = conn.execute(
        "INSERT INTO bank_statements(filename, month, year, uploaded_by, opening_balance) VALUES (?, ?, ?, ?, ?)",
        (filename, month, year, uploaded_by, opening_balance),
    )
    statement_id = int(cur.lastrowid)

    payload = []
    for txn in transactions:
        row = dict(txn)
        for column in AMOUNT_COLUMNS:
            row[column] = _stored_amount(row.get(column))
        if not row.get("transaction_type"):
            row["transaction_type"] = default_transaction_type(row["debit_amount"], row["credit_amount"])
        payload.append((statement_id, *(row.get(column) for column in _TRANSACTION_COLUMNS)))

    placeholders = ", ".join("?" for _ in range(len(_TRANSACTION_COLUMNS) + 1))
    conn.executemany(
        f"INSERT INTO financial_transactions(statement_id, {', '.join(_TRANSACTION_COLUMNS)}) VALUES ({placeholders})",
        payload,
    )
    conn.execute(
        "UPDATE bank_statements SET total_transactions = ? WHERE id = ?", (len(payload), statement_id)
    )
    return statement_id


def list_transactions(statement_id: Optional[int] = None) -> List[Dict[str, Any]]:
    sql = "SELECT * FROM financial_transactions"
    params: list[Any] = []
    if statement_id is not None:
        sql += " WHERE statement_id = ?"
        params.append(statement_id)
    sql += " ORDER BY transaction_date, id"
    return [dict(row) for row in db.query_all(sql, params)]


def categorize_transaction(transaction_id: int, payload: Dict[str, Any], user_id: Optional[int]) -> int:
    transaction_type = payload["transaction_type"]
    is_receipt = transaction_type == RECEIPT
    is_expenditure = transaction_type == EXPENDITURE
    return db.execute(
        """
        UPDATE financial_transactions SET
            transaction_type = ?,
            category_receipt = ?,
            sub_category_receipt = ?,
            investment_type = ?,
            investment_institution = ?,
            category_expenditure = ?,
            sub_category_expenditure = ?,
            notes = ?,
            categorized_by = ?,
            categorized_at = datetime('now')
        WHERE id = ?
        """,
        (
            transaction_type,
            payload.get("category_receipt") if is_receipt else None,
            payload.get("sub_category_receipt") if is_receipt else None,
            payload.get("investment_type") if is_receipt else None,
            payload.get("investment_institution") if is_receipt else None,
            payload.get("category_expenditure") if is_expenditure else None,
            payload.get("sub_category_expenditure") if is_expenditure else None,
            payload.get("notes"),
            user_id,
            transaction_id,
        ),
    )


def categorized_between(start: date, end: date) -> List[Dict[str, Any]]:
    rows = db.query_all(
        """
        SELECT id, statement_id, transaction_date, transaction_description, sender_recipient_name,
               debit_amount, credit_amount, transaction_type, category_receipt, category_expenditure
        FROM financial_transactions
        WHERE date(transaction_date) BETWEEN ? AND ?
          AND transaction_type IN ('receipt', 'expenditure')
        ORDER BY transaction_date, id
        """,
        (start.isoformat(), end.isoformat()),
    )
    return [dict(row) for row in rows]


def january_opening_balance(year: int) -> Optional[float]:
    row = db.query_one(
        "SELECT opening_balance FROM bank_statements "
        "WHERE year = ? AND month = 1 AND opening_balance IS NOT NULL ORDER BY id LIMIT 1",
        (year,),
    )
    return row["opening_balance"] if row else None


def earliest_opening_balance() -> Optional[float]:
    row = db.query_one(
        "SELECT opening_balance FROM bank_statements "
        "WHERE opening_balance IS NOT NULL AND opening_balance != 0 ORDER BY year, month LIMIT 1"
    )
    return row["opening_balance"] if row else None


def net_before(day: date) -> float:
    row = db.query_one(
        "SELECT COALESCE(SUM(credit_amount), 0) - COALESCE(SUM(debit_amount), 0) AS net "
        "FROM financial_transactions WHERE date(transaction_date) < ?",
        (day.isoformat(),),
    )
    return float(row["net"]) if row else 0.0
