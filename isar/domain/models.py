"""Domain dataclasses for iSAR duty rosters and financial records."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

PRAYER_TIMES: tuple[str, ...] = ("Subuh", "Zohor", "Asar", "Maghrib", "Isyak")
PRAYER_PRIORITY: Dict[str, int] = {name: index for index, name in enumerate(PRAYER_TIMES)}

RECEIPT = "receipt"
EXPENDITURE = "expenditure"
UNCATEGORIZED = "uncategorized"
TRANSACTION_TYPES: tuple[str, ...] = (RECEIPT, EXPENDITURE, UNCATEGORIZED)

ROLES: tuple[str, ...] = ("admin", "head_imam", "imam", "bilal", "inventory_staff", "bendahari")


def prayer_sort_key(prayer_time: str) -> int:
    return PRAYER_PRIORITY.get(prayer_time, len(PRAYER_TIMES))


@dataclass(frozen=True)
class DutyAssignment:
    """One prayer slot on one date; ``None`` means the role is unassigned."""

    date: date
    prayer_time: str
    imam_id: Optional[int] = None
    bilal_id: Optional[int] = None

    @property
    def slot(self) -> tuple[date, str]:
        return self.date, self.prayer_time

    def as_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "prayer_time": self.prayer_time,
            "imam_id": self.imam_id,
            "bilal_id": self.bilal_id,
        }


@dataclass(frozen=True)
class UnavailabilityRecord:
    person_id: int
    date: date
    prayer_time: str
    is_available: bool = False
    reason: Optional[str] = None


@dataclass(frozen=True)
class ConflictRecord:
    date: date
    prayer_time: str
    imam_id: Optional[int]
    bilal_id: Optional[int]
    imam_unavailable: bool
    bilal_unavailable: bool

    def as_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "prayer_time": self.prayer_time,
            "imam_id": self.imam_id,
            "bilal_id": self.bilal_id,
            "imam_unavailable": self.imam_unavailable,
            "bilal_unavailable": self.bilal_unavailable,
        }


@dataclass
class CopyResult:
    created: List[DutyAssignment] = field(default_factory=list)
    conflicts: List[ConflictRecord] = field(default_factory=list)


@dataclass(frozen=True)
class TransactionRecord:
    """A bank-statement line as seen by the report aggregator."""

    date: date
    debit_amount: Optional[Decimal]
    credit_amount: Optional[Decimal]
    report_category_raw: Optional[str]
    transaction_type: str
