"""Special donation note: trust-fund balances per sub-category for a year and the one before."""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..config import (
    SPECIAL_DONATION_RECEIPT_CATEGORY,
    SPECIAL_DONATION_SPENDING_CATEGORY,
    SPECIAL_DONATION_SUBCATEGORIES,
)
from ..dao import db, nota_dao
from ..domain.finance import ZERO, to_decimal

logger = logging.getLogger(__name__)

PERIODS = ("previous", "current")
MEASURES = ("opening", "receipts", "spending", "closing")


def closing_balance(opening: Decimal, receipts: Decimal, spending: Decimal) -> Decimal:
    return opening + receipts - spending


def generated_amounts(
    existing: Optional[Mapping[str, Any]],
    receipts: Mapping[str, Decimal],
    spending: Mapping[str, Decimal],
) -> Dict[str, float]:
    """Fill one row from transaction sums, keeping any opening balances already entered.

    ``receipts`` and ``spending`` are keyed by period.
    """
    amounts: Dict[str, float] = {}
    for period in PERIODS:
        opening = to_decimal(existing[f"{period}_opening"]) if existing else ZERO
        received = receipts.get(period, ZERO)
        spent = spending.get(period, ZERO)
        amounts[f"{period}_opening"] = float(opening)
        amounts[f"{period}_receipts"] = float(received)
        amounts[f"{period}_spending"] = float(spent)
        amounts[f"{period}_closing"] = float(closing_balance(opening, received, spent))
    return amounts


def totals(rows: Iterable[Mapping[str, Any]]) -> Dict[str, Dict[str, float]]:
    sums = {field: ZERO for field in nota_dao.AMOUNT_FIELDS}
    for row in rows:
        for field in nota_dao.AMOUNT_FIELDS:
            sums[field] += to_decimal(row.get(field))
    return {
        period: {measure: float(sums[f"{period}_{measure}"]) for measure in MEASURES}
        for period in PERIODS
    }


def parse_amounts(payload: Mapping[str, Any]) -> Dict[str, float]:
    """Read the eight amount fields of a manual entry.

    A missing closing balance is derived from the other three figures of its period.
    Raises ``ValueError`` for anything that is not a number.
    """
    amounts: Dict[str, Decimal] = {}
    for field in nota_dao.AMOUNT_FIELDS:
        value = payload.get(field)
        if isinstance(value, bool):
            raise ValueError(f"{field} must be a number")
        try:
            amount = to_decimal(value)
        except InvalidOperation as exc:
            raise ValueError(f"{field} must be a number") from exc
        if not amount.is_finite():
            raise ValueError(f"{field} must be a number")
        amounts[field] = amount

    for period in PERIODS:
        if payload.get(f"{period}_closing") in (None, ""):
            amounts[f"{period}_closing"] = closing_balance(
                amounts[f"{period}_opening"], amounts[f"{period}_receipts"], amounts[f"{period}_spending"]
            )
    return {field: float(value) for field, value in amounts.items()}


def note_for_year(year: int) -> Dict[str, Any]:
    """Return the note for ``year``, seeding the default sub-categories on first view."""
    rows = nota_dao.rows_for_year(year)
    if not rows:
        with db.transaction() as conn:
            nota_dao.create_defaults(conn, year, SPECIAL_DONATION_SUBCATEGORIES)
        rows = nota_dao.rows_for_year(year)
    return {
        "year": year,
        "rows": rows,
        "sub_categories": list(SPECIAL_DONATION_SUBCATEGORIES),
        "totals": totals(rows),
    }


def _decimal_sums(sums: Mapping[str, float]) -> Dict[str, Decimal]:
    return {name: to_decimal(total) for name, total in sums.items()}


def auto_generate(year: int, user_id: Optional[int]) -> List[str]:
    """Recompute receipts, spending and closing balances from categorised transactions."""
    with db.transaction() as conn:
        receipts = {
            "current": _decimal_sums(nota_dao.receipts_by_sub_category(conn, SPECIAL_DONATION_RECEIPT_CATEGORY, year)),
            "previous": _decimal_sums(
                nota_dao.receipts_by_sub_category(conn, SPECIAL_DONATION_RECEIPT_CATEGORY, year - 1)
            ),
        }
        spending = {
            "current": _decimal_sums(nota_dao.spending_by_sub_category(conn, SPECIAL_DONATION_SPENDING_CATEGORY, year)),
            "previous": _decimal_sums(
                nota_dao.spending_by_sub_category(conn, SPECIAL_DONATION_SPENDING_CATEGORY, year - 1)
            ),
        }
        for sub_category in SPECIAL_DONATION_SUBCATEGORIES:
            amounts = generated_amounts(
                nota_dao.find_row(conn, year, sub_category),
                {period: sums.get(sub_category, ZERO) for period, sums in receipts.items()},
                {period: sums.get(sub_category, ZERO) for period, sums in spending.items()},
            )
            nota_dao.save_row(conn, year, sub_category, amounts, auto_generated=True, user_id=user_id)

    logger.info("Special donation note for %s regenerated by user %s", year, user_id)
    return list(SPECIAL_DONATION_SUBCATEGORIES)
