"""Domain types for iSAR rosters and finance."""

from .errors import (
    ConcurrentModificationError,
    InvalidDateError,
    NoPriorScheduleError,
    TransactionAbortedError,
    UnmappedCategoryWarning,
)
from .finance import CategoryMap, MonthlySeries, OpeningBalanceAnchor, YearlyReport
from .models import (
    PRAYER_TIMES,
    ConflictRecord,
    CopyResult,
    DutyAssignment,
    TransactionRecord,
    UnavailabilityRecord,
)

__all__ = [
    "PRAYER_TIMES",
    "CategoryMap",
    "ConcurrentModificationError",
    "ConflictRecord",
    "CopyResult",
    "DutyAssignment",
    "InvalidDateError",
    "MonthlySeries",
    "NoPriorScheduleError",
    "OpeningBalanceAnchor",
    "TransactionAbortedError",
    "TransactionRecord",
    "UnavailabilityRecord",
    "UnmappedCategoryWarning",
    "YearlyReport",
]
