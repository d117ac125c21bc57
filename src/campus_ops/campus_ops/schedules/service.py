from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..common.timeparse import parse_day, parse_days, parse_time, try_parse_time
from ..common.validators import optional_text, require_non_empty, require_positive_int
from ..core.constants import MINUTES_PER_DAY, UNASSIGNED_ROOM
from ..core.enums import RecordStatus
from ..core.exceptions import InvalidScheduleError, NotFoundError, ScheduleConflictError, ValidationError
from .conflicts import ScheduleConflictService
from .model import ClassRecord, EntryCandidate, ScheduleWindow, TimetableEntry, normalize_room
from .repository import ClassRepository, TimetableRepository

logger = logging.getLogger(__name__)


def _class_window(
    days: Sequence[str],
    start_time: Optional[str],
    end_time: Optional[str],
    room: Optional[str],
    *,
    open_end: bool = False,
) -> Optional[ScheduleWindow]:
    """Validated weekly slot, or None when the class is left unscheduled.

    `open_end` accepts a stored legacy slot that never had an end time.
    """
    if not days and not start_time and not end_time:
        return None
    if not days or not start_time or not (end_time or open_end):
        raise ValidationError("Days, start time and end time must be provided together")

    return ScheduleWindow(
        days=parse_days(days),
        start=parse_time(start_time),
        end=parse_time(end_time) if end_time else None,
        room=room,
    )


class ClassService:
    """Use case: create/update classes without double-booking a room."""

    def __init__(self, classes: ClassRepository, conflicts: ScheduleConflictService):
        self._classes = classes
        self._conflicts = conflicts

    def get_class(self, class_id: int) -> ClassRecord:
        record = self._classes.get_by_id(int(class_id))
        if not record:
            raise NotFoundError("Class not found")
        return record

    def create_class(
        self,
        *,
        title: str,
        days: Sequence[str] = (),
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        room_number: Optional[str] = None,
        teacher_name: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> int:
        title = require_non_empty(title, "Class title")
        window = _class_window(days, start_time, end_time, room_number)
        if window is not None:
            self._reject_conflicts(window, exclude_id=None)

        return self._classes.create(
            title=title,
            days=self._stored_days(window),
            start_time=optional_text(start_time),
            end_time=optional_text(end_time),
            room_number=normalize_room(room_number) or UNASSIGNED_ROOM,
            teacher_name=optional_text(teacher_name),
            subject=optional_text(subject),
        )

    def update_class(
        self,
        class_id: int,
        *,
        title: Optional[str] = None,
        days: Optional[Sequence[str]] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        room_number: Optional[str] = None,
        status: Optional[RecordStatus] = None,
        teacher_name: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> ClassRecord:
        """Apply changes on top of the stored class; None means "unchanged"."""
        current = self.get_class(class_id)
        merged = replace(
            current,
            title=require_non_empty(title, "Class title") if title is not None else current.title,
            days=tuple(days) if days is not None else current.days,
            start_time=start_time if start_time is not None else current.start_time,
            end_time=end_time if end_time is not None else current.end_time,
            room_number=room_number if room_number is not None else current.room_number,
            status=status or current.status,
            teacher_name=teacher_name if teacher_name is not None else current.teacher_name,
            subject=subject if subject is not None else current.subject,
        )

        schedule_unchanged = days is None and start_time is None and end_time is None
        window = _class_window(
            merged.days, merged.start_time, merged.end_time, merged.room_number, open_end=schedule_unchanged
        )
        if window is not None and merged.status == RecordStatus.ACTIVE:
            self._reject_conflicts(window, exclude_id=current.class_id)

        merged = replace(
            merged,
            days=self._stored_days(window),
            room_number=normalize_room(merged.room_number) or UNASSIGNED_ROOM,
        )
        self._classes.update(
            class_id=merged.class_id,
            title=merged.title,
            days=merged.days,
            start_time=merged.start_time,
            end_time=merged.end_time,
            room_number=merged.room_number,
            status=merged.status,
            teacher_name=merged.teacher_name,
            subject=merged.subject,
        )
        return merged

    def _reject_conflicts(self, window: ScheduleWindow, *, exclude_id: Optional[int]) -> None:
        conflicts = self._conflicts.find_class_room_conflicts(window, exclude_id=exclude_id)
        if conflicts:
            logger.info("Class schedule rejected: %s", conflicts[0].message)
            raise ScheduleConflictError(conflicts[0].message, conflicts)

    @staticmethod
    def _stored_days(window: Optional[ScheduleWindow]) -> tuple[str, ...]:
        if window is None:
            return ()
        return tuple(d.abbrev for d in sorted(window.days))


class TimetableService:
    """Use case: maintain timetable entries (single, update, bulk)."""

    def __init__(
        self,
        timetable: TimetableRepository,
        classes: ClassRepository,
        conflicts: ScheduleConflictService,
    ):
        self._timetable = timetable
        self._classes = classes
        self._conflicts = conflicts

    def get_entry(self, entry_id: int) -> TimetableEntry:
        entry = self._timetable.get_by_id(int(entry_id))
        if not entry:
            raise NotFoundError("Timetable entry not found")
        return entry

    def list_entries(
        self,
        *,
        class_id: Optional[int] = None,
        teacher_id: Optional[int] = None,
        day: Optional[str] = None,
        status: Optional[RecordStatus] = None,
    ) -> list[TimetableEntry]:
        """Entries ordered by weekday, then start time."""
        entries = self._timetable.list_entries(
            class_id=class_id,
            teacher_id=teacher_id,
            day=parse_day(day) if day else None,
            status=status,
        )
        return sorted(entries, key=self._sort_key)

    def create_entry(self, candidate: EntryCandidate) -> int:
        candidate = self._validated(candidate)
        self._reject_conflicts(candidate, exclude_id=None)
        return self._timetable.create(candidate)

    def update_entry(
        self,
        entry_id: int,
        *,
        teacher_id: Optional[int] = None,
        subject: Optional[str] = None,
        day: Optional[str] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        room: Optional[str] = None,
        status: Optional[RecordStatus] = None,
    ) -> EntryCandidate:
        current = self.get_entry(entry_id)
        candidate = EntryCandidate(
            class_id=current.class_id,
            teacher_id=teacher_id if teacher_id is not None else current.teacher_id,
            subject=subject if subject is not None else current.subject,
            day=day if day is not None else current.day,
            start_time=start_time if start_time is not None else current.start_time,
            end_time=end_time if end_time is not None else current.end_time,
            room=room if room is not None else current.room,
        )
        candidate = self._validated(candidate)
        new_status = status or current.status
        if new_status == RecordStatus.ACTIVE:
            self._reject_conflicts(candidate, exclude_id=current.entry_id)

        self._timetable.update(entry_id=current.entry_id, candidate=candidate, status=new_status)
        return candidate

    def bulk_generate(self, class_id: int, candidates: Sequence[EntryCandidate]) -> list[int]:
        """Create all entries of a class or none of them."""
        if not candidates:
            raise ValidationError("classId and entries array are required")

        class_record = self._classes.get_by_id(int(class_id))
        if not class_record:
            raise NotFoundError("Class not found")

        fallback_room = normalize_room(class_record.room_number)
        prepared = [
            self._validated(replace(c, class_id=class_record.class_id, room=normalize_room(c.room) or fallback_room))
            for c in candidates
        ]

        batch_conflicts = self._conflicts.check_batch(prepared)
        if batch_conflicts:
            logger.info(
                "Bulk generation for class %s rejected: %d of %d entries conflict",
                class_record.class_id,
                len(batch_conflicts),
                len(prepared),
            )
            raise ScheduleConflictError("Schedule conflicts detected", batch_conflicts)

        ids = self._timetable.create_many(prepared)
        logger.info("Bulk-generated %d timetable entries for %s", len(ids), class_record.title)
        return ids

    def delete_entry(self, entry_id: int) -> None:
        if not self._timetable.delete(int(entry_id)):
            raise NotFoundError("Timetable entry not found")

    def clear_class(self, class_id: int) -> int:
        return self._timetable.delete_for_class(int(class_id))

    def _validated(self, candidate: EntryCandidate) -> EntryCandidate:
        class_id = require_positive_int(candidate.class_id, "Class")
        if not self._classes.get_by_id(class_id):
            raise NotFoundError("Class not found")

        day = parse_day(candidate.day)
        start = parse_time(candidate.start_time)
        end = parse_time(candidate.end_time)
        if start >= end:
            raise InvalidScheduleError("Start time must be before end time")

        return EntryCandidate(
            class_id=class_id,
            teacher_id=require_positive_int(candidate.teacher_id, "Teacher"),
            subject=require_non_empty(candidate.subject, "Subject"),
            day=day.full_name,
            start_time=candidate.start_time.strip(),
            end_time=candidate.end_time.strip(),
            room=normalize_room(candidate.room),
        )

    def _reject_conflicts(self, candidate: EntryCandidate, *, exclude_id: Optional[int]) -> None:
        conflicts = self._conflicts.find_entry_conflicts(candidate, exclude_id=exclude_id)
        if conflicts:
            raise ScheduleConflictError("Schedule conflict detected", conflicts)

    @staticmethod
    def _sort_key(entry: TimetableEntry) -> tuple[int, int]:
        try:
            day_order = int(parse_day(entry.day))
        except ValidationError:
            day_order = 7
        start = try_parse_time(entry.start_time)
        return day_order, start if start is not None else MINUTES_PER_DAY
