"""Monthly cash book."""
from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, Iterable

from ..dao import finance_dao
from ..domain.dates import month_bounds
from ..domain.finance import ZERO, to_decimal
from ..domain.models import EXPENDITURE, RECEIPT


def build_cash_book(rows: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Attach a running balance to each categorised line and sum per category.

    ``rows`` must already be in date order.
    """
    receipts: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    expenditures: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    running = ZERO
    lines = []
    for row in rows:
        credit = to_decimal(row.get("credit_amount"))
        debit = to_decimal(row.get("debit_amount"))
        running += credit - debit
        txn_type = row.get("transaction_type")
        if txn_type == RECEIPT and row.get("category_receipt"):
            receipts[row["category_receipt"]] += credit
        elif txn_type == EXPENDITURE and row.get("category_expenditure"):
            expenditures[row["category_expenditure"]] += debit
        lines.append(
            {
                **row,
                "amount": float(credit if txn_type == RECEIPT else debit),
                "running_balance": float(running),
            }
        )

    return {
        "transactions": lines,
        "receipts_by_category": {name: float(value) for name, value in receipts.items()},
        "expenditures_by_category": {name: float(value) for name, value in expenditures.items()},
        "total_receipts": float(sum(receipts.values(), ZERO)),
        "total_expenditures": float(sum(expenditures.values(), ZERO)),
        "balance": float(running),
    }


def cash_book(year: int, month: int) -> Dict[str, Any]:
    start, end = month_bounds(year, month)
    book = build_cash_book(finance_dao.categorized_between(start, end))
    book.update({"year": year, "month": month})
    return book
