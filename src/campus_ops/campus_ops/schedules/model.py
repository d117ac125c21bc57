from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from ..common.timeparse import format_days, parse_days, try_parse_time
from ..core.constants import MINUTES_PER_DAY, UNASSIGNED_ROOM
from ..core.enums import RecordStatus, Weekday
from ..core.exceptions import InvalidDayError, InvalidScheduleError

logger = logging.getLogger(__name__)


def normalize_room(value: Optional[str]) -> Optional[str]:
    """Blank and "TBD" rooms mean "no room assigned"."""
    if value is None:
        return None
    value = str(value).strip()
    if not value or value.upper() == UNASSIGNED_ROOM:
        return None
    return value


@dataclass(frozen=True)
class ClassRecord:
    """Stored class with its recurring weekly slot (times kept as entered)."""

    class_id: int
    title: str
    days: tuple[str, ...] = ()
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    room_number: Optional[str] = None
    status: RecordStatus = RecordStatus.ACTIVE
    teacher_name: Optional[str] = None
    subject: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "classId": self.class_id,
            "title": self.title,
            "days": list(self.days),
            "startTime": self.start_time,
            "endTime": self.end_time,
            "roomNumber": self.room_number,
            "status": self.status.value,
            "teacherName": self.teacher_name,
            "subject": self.subject,
        }


@dataclass(frozen=True)
class TimetableEntry:
    """Stored one-day timetable slot of a class."""

    entry_id: int
    class_id: int
    teacher_id: int
    subject: str
    day: str
    start_time: str
    end_time: str
    room: Optional[str] = None
    status: RecordStatus = RecordStatus.ACTIVE
    class_title: Optional[str] = None
    teacher_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "classId": self.class_id,
            "className": self.class_title,
            "teacherId": self.teacher_id,
            "teacherName": self.teacher_name,
            "subject": self.subject,
            "day": self.day,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "room": self.room,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class EntryCandidate:
    """Proposed timetable slot, before it is persisted."""

    class_id: int
    teacher_id: int
    subject: str
    day: str
    start_time: str
    end_time: str
    room: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "classId": self.class_id,
            "teacherId": self.teacher_id,
            "subject": self.subject,
            "day": self.day,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "room": self.room,
        }


@dataclass(frozen=True)
class ScheduleWindow:
    """A set of weekdays plus a [start, end) minute range.

    `end` may be None only for windows read from legacy class records that
    never stored an end time.
    """

    days: frozenset[Weekday]
    start: int
    end: Optional[int]
    room: Optional[str] = None
    teacher_id: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "days", frozenset(self.days))
        object.__setattr__(self, "room", normalize_room(self.room))

        if not 0 <= self.start < MINUTES_PER_DAY:
            raise InvalidScheduleError(f"Start minute out of range: {self.start}")
        if self.end is not None:
            if not 0 < self.end <= MINUTES_PER_DAY:
                raise InvalidScheduleError(f"End minute out of range: {self.end}")
            if self.start >= self.end:
                raise InvalidScheduleError("Start time must be before end time")


@dataclass(frozen=True)
class Unscheduled:
    """A class whose schedule is not (validly) configured."""

    reason: str


ClassSchedule = Union[ScheduleWindow, Unscheduled]


def schedule_for_class(record: ClassRecord) -> ClassSchedule:
    """Build the schedule variant of a stored class.

    Malformed legacy data yields Unscheduled instead of a zero-based window.
    """
    if not record.days or not record.start_time:
        return Unscheduled("no schedule configured")

    try:
        days = parse_days(record.days)
    except InvalidDayError as e:
        logger.warning("Class %s has invalid days %r: %s", record.class_id, record.days, e)
        return Unscheduled("invalid days")

    start = try_parse_time(record.start_time)
    if start is None:
        logger.warning("Class %s has invalid start time %r", record.class_id, record.start_time)
        return Unscheduled("invalid start time")

    end = try_parse_time(record.end_time) if record.end_time else None
    if record.end_time and end is None:
        logger.warning("Class %s has invalid end time %r", record.class_id, record.end_time)

    try:
        return ScheduleWindow(days=days, start=start, end=end, room=record.room_number)
    except InvalidScheduleError as e:
        logger.warning("Class %s has unusable schedule: %s", record.class_id, e)
        return Unscheduled("non-positive duration")


@dataclass(frozen=True)
class ConflictResult:
    """One existing class that blocks a candidate's room/day/time."""

    conflicting_label: str
    overlapping_days: tuple[Weekday, ...]
    overlapping_time_range: str
    resource_label: str

    @property
    def message(self) -> str:
        return (
            f'Schedule Conflict: {self.resource_label} is already occupied by "{self.conflicting_label}" '
            f"on {format_days(self.overlapping_days)} from {self.overlapping_time_range}"
        )

    def to_dict(self) -> dict:
        return {
            "conflictingClass": self.conflicting_label,
            "conflictingDays": [d.abbrev for d in self.overlapping_days],
            "conflictingTime": self.overlapping_time_range,
            "room": self.resource_label,
        }


@dataclass(frozen=True)
class BatchConflict:
    """Conflicts found for one candidate of a bulk request."""

    index: int
    candidate: EntryCandidate
    conflicts: Sequence[str] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {"index": self.index, "entry": self.candidate.to_dict(), "conflicts": list(self.conflicts)}
