"""Exceptions shared by the iSAR services and data access layer."""
from __future__ import annotations


class NoPriorScheduleError(LookupError):
    """Raised when the week before a copy-forward target has no duty slots."""


class TransactionAbortedError(RuntimeError):
    """Raised when an atomic write failed and was rolled back."""


class ConcurrentModificationError(RuntimeError):
    """Raised when a slot was changed by someone else since it was read."""

    def __init__(self, schedule_id: int, expected_version: int, actual_version: int) -> None:
        super().__init__(
            f"Schedule {schedule_id} was modified concurrently "
            f"(expected version {expected_version}, found {actual_version})"
        )
        self.schedule_id = schedule_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class UnmappedCategoryWarning(UserWarning):
    """A raw transaction category had no report-category mapping."""


class InvalidDateError(ValueError):
    """Raised when a date query parameter is malformed."""


class InvalidValueError(ValueError):
    """Raised when a request field is not a usable number."""
