"""Carry last week's imam/bilal roster into the following week.

Each slot of the previous week is moved forward seven days. People who
declared themselves unavailable for the new slot are removed from it and
the slot is reported as a conflict so the head imam can reassign it by
hand. The slot itself is still written with the free role intact.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import ContextManager, Dict, Iterable, List, Optional, Protocol, Sequence, Set, Tuple

from ..domain.errors import NoPriorScheduleError
from ..domain.models import (
    ConflictRecord,
    CopyResult,
    DutyAssignment,
    UnavailabilityRecord,
    prayer_sort_key,
)

logger = logging.getLogger(__name__)

WEEK = timedelta(days=7)

UnavailabilityIndex = Dict[Tuple[date, str], Set[int]]


class ScheduleStore(Protocol):
    def assignments_between(self, start: date, end: date) -> List[DutyAssignment]: ...

    def unavailability_between(self, start: date, end: date) -> List[UnavailabilityRecord]: ...

    def upsert_assignments(self, rows: Sequence[DutyAssignment], user_id: Optional[int] = None) -> int: ...

    def transaction(self) -> ContextManager[object]: ...


def week_span(start: date) -> Tuple[date, date]:
    return start, start + timedelta(days=6)


def unavailability_index(records: Iterable[UnavailabilityRecord]) -> UnavailabilityIndex:
    index: Dict[Tuple[date, str], Set[int]] = defaultdict(set)
    for record in records:
        if record.is_available:
            continue
        index[(record.date, record.prayer_time)].add(record.person_id)
    return dict(index)


def shift_assignments(previous: Iterable[DutyAssignment], unavailable: UnavailabilityIndex) -> CopyResult:
    result = CopyResult()
    for assignment in previous:
        new_date = assignment.date + WEEK
        blocked = unavailable.get((new_date, assignment.prayer_time), set())
        imam_unavailable = assignment.imam_id is not None and assignment.imam_id in blocked
        bilal_unavailable = assignment.bilal_id is not None and assignment.bilal_id in blocked

        shifted = DutyAssignment(
            date=new_date,
            prayer_time=assignment.prayer_time,
            imam_id=None if imam_unavailable else assignment.imam_id,
            bilal_id=None if bilal_unavailable else assignment.bilal_id,
        )
        if imam_unavailable or bilal_unavailable:
            result.conflicts.append(
                ConflictRecord(
                    date=shifted.date,
                    prayer_time=shifted.prayer_time,
                    imam_id=shifted.imam_id,
                    bilal_id=shifted.bilal_id,
                    imam_unavailable=imam_unavailable,
                    bilal_unavailable=bilal_unavailable,
                )
            )
        result.created.append(shifted)
    return result


def copy_forward(target_week_start: date, store: ScheduleStore, *, user_id: Optional[int] = None) -> CopyResult:
    """Copy the week before ``target_week_start`` into the week starting on it.

    Raises ``NoPriorScheduleError`` without writing anything when the
    previous week is empty. The upsert runs inside ``store.transaction()``;
    a failing store aborts the whole week.
    """
    previous_start = target_week_start - WEEK
    previous = sorted(
        store.assignments_between(*week_span(previous_start)),
        key=lambda a: (a.date, prayer_sort_key(a.prayer_time)),
    )
    if not previous:
        raise NoPriorScheduleError(
            f"No schedules found for the previous week ({previous_start.isoformat()})"
        )

    unavailable = unavailability_index(store.unavailability_between(*week_span(target_week_start)))
    result = shift_assignments(previous, unavailable)

    with store.transaction():
        store.upsert_assignments(result.created, user_id)

    logger.info(
        "Copied %d slots from week %s to week %s (%d conflicts)",
        len(result.created),
        previous_start.isoformat(),
        target_week_start.isoformat(),
        len(result.conflicts),
    )
    for conflict in result.conflicts:
        logger.info(
            "Conflict on %s %s: imam_unavailable=%s bilal_unavailable=%s",
            conflict.date.isoformat(),
            conflict.prayer_time,
            conflict.imam_unavailable,
            conflict.bilal_unavailable,
        )
    return result


__all__ = ["ScheduleStore", "copy_forward", "shift_assignments", "unavailability_index", "week_span"]
