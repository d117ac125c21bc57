from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidTimeError(ValidationError):
    """Raised when a time-of-day string cannot be parsed."""


class InvalidDayError(ValidationError):
    """Raised when a weekday token cannot be parsed."""


class InvalidScheduleError(ValidationError):
    """Raised when a schedule window has a non-positive duration."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class ScheduleConflictError(DomainError):
    """Raised by write operations rejected because of a schedule conflict.

    `conflicts` holds whatever the conflict check produced: `ConflictResult`
    objects for classes, message strings for timetable entries, or
    `BatchConflict` objects for bulk generation.
    """

    def __init__(self, message: str, conflicts: Sequence[object]):
        super().__init__(message)
        self.conflicts = list(conflicts)
