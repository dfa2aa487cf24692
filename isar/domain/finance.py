"""Report taxonomy and derived report structures for the yearly statement."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .models import EXPENDITURE, RECEIPT

ZERO = Decimal("0")

MONTH_LABELS: tuple[str, ...] = (
    "JAN", "FEB", "MAC", "APR", "MEI", "JUN", "JUL", "OGS", "SEPT", "OKT", "NOV", "DIS",
)


def to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class CategoryMap:
    """Many-to-one mapping from raw transaction categories to report categories."""

    receipt_categories: Tuple[str, ...]
    expenditure_categories: Tuple[str, ...]
    receipt_mapping: Mapping[str, str]
    expenditure_mapping: Mapping[str, str]
    receipt_fallback: str
    expenditure_fallback: str

    @classmethod
    def from_config(cls, payload: Mapping[str, Any]) -> "CategoryMap":
        receipts = payload["receipts"]
        expenditures = payload["expenditures"]
        category_map = cls(
            receipt_categories=tuple(receipts["categories"]),
            expenditure_categories=tuple(expenditures["categories"]),
            receipt_mapping=dict(receipts.get("mapping", {})),
            expenditure_mapping=dict(expenditures.get("mapping", {})),
            receipt_fallback=receipts["fallback"],
            expenditure_fallback=expenditures["fallback"],
        )
        category_map.validate()
        return category_map

    def validate(self) -> None:
        for kind, categories, mapping, fallback in (
            (RECEIPT, self.receipt_categories, self.receipt_mapping, self.receipt_fallback),
            (EXPENDITURE, self.expenditure_categories, self.expenditure_mapping, self.expenditure_fallback),
        ):
            if fallback not in categories:
                raise ValueError(f"{kind} fallback {fallback!r} is not a report category")
            unknown = sorted(set(mapping.values()) - set(categories))
            if unknown:
                raise ValueError(f"{kind} mapping targets unknown report categories: {', '.join(unknown)}")

    def categories_for(self, transaction_type: str) -> Tuple[str, ...]:
        if transaction_type == RECEIPT:
            return self.receipt_categories
        if transaction_type == EXPENDITURE:
            return self.expenditure_categories
        raise ValueError(f"Unsupported transaction type: {transaction_type}")

    def resolve(self, transaction_type: str, raw_category: str) -> Tuple[str, bool]:
        """Return ``(report_category, was_mapped)`` for a raw category."""
        if transaction_type == RECEIPT:
            mapping, fallback = self.receipt_mapping, self.receipt_fallback
        elif transaction_type == EXPENDITURE:
            mapping, fallback = self.expenditure_mapping, self.expenditure_fallback
        else:
            raise ValueError(f"Unsupported transaction type: {transaction_type}")
        if raw_category in mapping:
            return mapping[raw_category], True
        return fallback, False


@dataclass(frozen=True)
class OpeningBalanceAnchor:
    """Inputs for the year's opening balance.

    An explicit January balance wins. Without one, the balance is rebuilt
    from the earliest recorded anchor plus the net movement of every
    transaction dated before the year.
    """

    january_balance: Optional[Decimal] = None
    prior_net: Decimal = ZERO
    earliest_balance: Optional[Decimal] = None

    def resolve(self) -> Decimal:
        if self.january_balance is not None:
            return self.january_balance
        return (self.earliest_balance or ZERO) + self.prior_net


@dataclass
class MonthlySeries:
    months: List[Decimal] = field(default_factory=lambda: [ZERO] * 12)
    total: Decimal = ZERO

    def add(self, month: int, amount: Decimal) -> None:
        self.months[month - 1] += amount
        self.total += amount

    def __getitem__(self, month: int) -> Decimal:
        return self.months[month - 1]

    @classmethod
    def summed(cls, series: Iterable["MonthlySeries"]) -> "MonthlySeries":
        result = cls()
        for item in series:
            for index, amount in enumerate(item.months, start=1):
                result.add(index, amount)
        return result

    def as_dict(self) -> Dict[str, Any]:
        return {"months": [float(value) for value in self.months], "total": float(self.total)}


@dataclass
class YearlyReport:
    year: int
    receipt_categories: Tuple[str, ...]
    expenditure_categories: Tuple[str, ...]
    receipts: Dict[str, MonthlySeries]
    expenditures: Dict[str, MonthlySeries]
    receipt_totals: MonthlySeries
    expenditure_totals: MonthlySeries
    surplus_deficit: MonthlySeries
    opening_balances: MonthlySeries
    closing_balances: MonthlySeries
    unmapped_categories: List[str] = field(default_factory=list)

    @property
    def year_opening_balance(self) -> Decimal:
        return self.opening_balances.months[0]

    @property
    def year_closing_balance(self) -> Decimal:
        return self.closing_balances.months[-1]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "months": list(MONTH_LABELS),
            "receipts": {
                "categories": list(self.receipt_categories),
                "data": {name: self.receipts[name].as_dict() for name in self.receipt_categories},
                "totals": self.receipt_totals.as_dict(),
            },
            "expenditures": {
                "categories": list(self.expenditure_categories),
                "data": {name: self.expenditures[name].as_dict() for name in self.expenditure_categories},
                "totals": self.expenditure_totals.as_dict(),
            },
            "surplus_deficit": self.surplus_deficit.as_dict(),
            "opening_balances": self.opening_balances.as_dict(),
            "closing_balances": self.closing_balances.as_dict(),
            "unmapped_categories": list(self.unmapped_categories),
        }
