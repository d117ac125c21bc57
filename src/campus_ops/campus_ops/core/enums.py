from __future__ import annotations

from datetime import date
from enum import Enum, IntEnum


class Weekday(IntEnum):
    """Canonical day of the week.

    The ordinal matches `date.weekday()` and is the only day ordering used
    for sorting and comparison.
    """

    MON = 0
    TUE = 1
    WED = 2
    THU = 3
    FRI = 4
    SAT = 5
    SUN = 6

    @property
    def abbrev(self) -> str:
        return self.name.capitalize()

    @property
    def full_name(self) -> str:
        return _FULL_DAY_NAMES[self]

    @classmethod
    def of(cls, value: date) -> "Weekday":
        """Weekday of a date or datetime."""
        return cls(value.weekday())


_FULL_DAY_NAMES = {
    Weekday.MON: "Monday",
    Weekday.TUE: "Tuesday",
    Weekday.WED: "Wednesday",
    Weekday.THU: "Thursday",
    Weekday.FRI: "Friday",
    Weekday.SAT: "Saturday",
    Weekday.SUN: "Sunday",
}


class RecordStatus(str, Enum):
    """Lifecycle flag stored on class and timetable rows."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Standing(str, Enum):
    """Disciplinary state of a student, independent of fees."""

    ACTIVE = "Active"
    PENDING = "Pending"
    ALUMNI = "Alumni"
    SUSPENDED = "Suspended"
    EXPELLED = "Expelled"

    @property
    def is_blocked(self) -> bool:
        return self in (Standing.SUSPENDED, Standing.EXPELLED)


class StatusColor(str, Enum):
    """Colour hint for the scan terminal on a permitted entry."""

    GREEN = "GREEN"
    ORANGE = "ORANGE"
    RED = "RED"


class GateDecision(str, Enum):
    """Terminal outcome of a single gate scan."""

    SUCCESS = "success"
    PARTIAL = "partial"
    DEFAULTER = "defaulter"
    BLOCKED = "blocked"
    UNKNOWN = "unknown"
    NO_CLASS_TODAY = "no_class_today"
    TOO_EARLY = "too_early"
    TOO_LATE = "too_late"
    ERROR = "error"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]

    @property
    def message_template(self) -> str:
        return _MESSAGE_TEMPLATES[self]

    @property
    def permits_entry(self) -> bool:
        return self in (GateDecision.SUCCESS, GateDecision.PARTIAL)

    def render(self, **context: object) -> str:
        return self.message_template.format(**context)


_HTTP_STATUS = {
    GateDecision.SUCCESS: 200,
    GateDecision.PARTIAL: 200,
    GateDecision.DEFAULTER: 403,
    GateDecision.BLOCKED: 403,
    GateDecision.NO_CLASS_TODAY: 403,
    GateDecision.TOO_EARLY: 403,
    GateDecision.TOO_LATE: 403,
    GateDecision.UNKNOWN: 404,
    GateDecision.ERROR: 500,
}

_MESSAGE_TEMPLATES = {
    GateDecision.SUCCESS: "Entry Permitted - Fees Paid",
    GateDecision.PARTIAL: "Entry Permitted - Balance: {currency} {balance:,}",
    GateDecision.DEFAULTER: "Entry Denied - FEES PENDING",
    GateDecision.BLOCKED: "Entry Denied - Student is {standing}",
    GateDecision.UNKNOWN: 'Student ID "{code}" not found',
    GateDecision.NO_CLASS_TODAY: "Entry Denied - NO CLASS TODAY ({day}) - Class days: {class_days}",
    GateDecision.TOO_EARLY: "Entry Denied - TOO EARLY - Class starts at {start}. Entry opens at {opens}",
    GateDecision.TOO_LATE: "Entry Denied - TOO LATE - Class ended at {end}",
    GateDecision.ERROR: "Server error during scan",
}
