"""Schedule conflict detection.

Two checks share the same primitives (`parse_time`, `overlaps`, `shared_days`):

- class level: a class's recurring weekly slot against the other active
  classes booked into the same room;
- timetable level: a single-day timetable slot against every active entry on
  that weekday, by teacher and by room. A bulk request is also checked
  against itself.

Both only answer "does this collide with what is stored right now"; callers
must run them before persisting and serialize concurrent writes themselves.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.timeparse import parse_day, try_parse_time
from ..core.enums import Weekday
from ..core.exceptions import InvalidDayError
from .model import (
    BatchConflict,
    ConflictResult,
    EntryCandidate,
    ScheduleWindow,
    TimetableEntry,
    normalize_room,
    schedule_for_class,
)
from .overlap import overlaps, shared_days
from .repository import ClassRepository, TimetableRepository

logger = logging.getLogger(__name__)


class ScheduleConflictService:
    def __init__(self, classes: ClassRepository, timetable: TimetableRepository):
        self._classes = classes
        self._timetable = timetable

    # ---- class level (room only) ----

    def find_class_room_conflicts(
        self, candidate: ScheduleWindow, *, exclude_id: Optional[int] = None
    ) -> list[ConflictResult]:
        """Every active class that occupies the candidate's room at an overlapping time.

        An unassigned room ("TBD" or empty) never conflicts.
        """
        if candidate.room is None or not candidate.days:
            return []
        if candidate.end is None:
            logger.warning("Room check skipped for %s: candidate has no end time", candidate.room)
            return []

        results: list[ConflictResult] = []
        for existing in self._classes.list_active_in_room(room=candidate.room, exclude_id=exclude_id):
            window = schedule_for_class(existing)
            if not isinstance(window, ScheduleWindow) or window.end is None:
                continue

            days = shared_days(candidate.days, window.days)
            if not days:
                continue
            if not overlaps(candidate.start, candidate.end, window.start, window.end):
                continue

            results.append(
                ConflictResult(
                    conflicting_label=existing.title,
                    overlapping_days=days,
                    overlapping_time_range=f"{existing.start_time}-{existing.end_time}",
                    resource_label=candidate.room,
                )
            )

        return results

    def find_class_room_conflict(
        self, candidate: ScheduleWindow, *, exclude_id: Optional[int] = None
    ) -> Optional[ConflictResult]:
        """First conflicting class, or None when the write may proceed."""
        conflicts = self.find_class_room_conflicts(candidate, exclude_id=exclude_id)
        return conflicts[0] if conflicts else None

    # ---- timetable level (teacher and room) ----

    def find_entry_conflicts(self, candidate: EntryCandidate, *, exclude_id: Optional[int] = None) -> list[str]:
        """Human-readable description of every collision of one timetable slot.

        A candidate with unreadable day/times or a non-positive duration is not
        checked here; the write path rejects it separately.
        """
        slot = self._slot(candidate)
        if slot is None:
            return []

        day, start, end = slot
        room = normalize_room(candidate.room)
        conflicts: list[str] = []
        for existing in self._timetable.list_active_on_day(day=day, exclude_id=exclude_id):
            if not self._entry_overlaps(existing, start, end):
                continue

            time_range = f"{existing.start_time}-{existing.end_time}"
            if existing.teacher_id == candidate.teacher_id:
                class_name = existing.class_title or "Unknown"
                conflicts.append(f'Teacher already has "{existing.subject}" in {class_name} at {time_range}')
            if _same_room(room, existing.room):
                conflicts.append(f'Room "{room}" is already booked for "{existing.subject}" at {time_range}')

        return conflicts

    def check_batch(self, candidates: Sequence[EntryCandidate]) -> list[BatchConflict]:
        """Check every candidate against stored entries and against the earlier
        candidates of the same batch; only conflicting ones are returned."""
        found: list[BatchConflict] = []
        earlier: list[tuple[int, Weekday, int, int, EntryCandidate]] = []
        for index, candidate in enumerate(candidates):
            conflicts = self.find_entry_conflicts(candidate)

            slot = self._slot(candidate)
            if slot is not None:
                day, start, end = slot
                conflicts.extend(self._batch_collisions(candidate, day, start, end, earlier))
                earlier.append((index, day, start, end, candidate))

            if conflicts:
                found.append(BatchConflict(index=index, candidate=candidate, conflicts=tuple(conflicts)))
        return found

    @staticmethod
    def _batch_collisions(
        candidate: EntryCandidate,
        day: Weekday,
        start: int,
        end: int,
        earlier: Sequence[tuple[int, Weekday, int, int, EntryCandidate]],
    ) -> list[str]:
        room = normalize_room(candidate.room)
        conflicts: list[str] = []
        for other_index, other_day, other_start, other_end, other in earlier:
            if other_day != day or not overlaps(start, end, other_start, other_end):
                continue

            time_range = f"{other.start_time}-{other.end_time}"
            entry_label = f"entry #{other_index + 1} of this batch"
            if other.teacher_id == candidate.teacher_id:
                conflicts.append(f'Teacher is also given "{other.subject}" at {time_range} ({entry_label})')
            if _same_room(room, other.room):
                conflicts.append(f'Room "{room}" is also booked for "{other.subject}" at {time_range} ({entry_label})')
        return conflicts

    @staticmethod
    def _slot(candidate: EntryCandidate) -> Optional[tuple[Weekday, int, int]]:
        try:
            day = parse_day(candidate.day)
        except InvalidDayError:
            logger.warning("Conflict check skipped: invalid day %r", candidate.day)
            return None

        start = try_parse_time(candidate.start_time)
        end = try_parse_time(candidate.end_time)
        if start is None or end is None or start >= end:
            logger.warning(
                "Conflict check skipped: unusable slot %r-%r", candidate.start_time, candidate.end_time
            )
            return None
        return day, start, end

    @staticmethod
    def _entry_overlaps(existing: TimetableEntry, start: int, end: int) -> bool:
        existing_start = try_parse_time(existing.start_time)
        existing_end = try_parse_time(existing.end_time)
        if existing_start is None or existing_end is None:
            logger.warning("Timetable entry %s has unreadable times, ignored", existing.entry_id)
            return False
        return overlaps(start, end, existing_start, existing_end)


def _same_room(room: Optional[str], other: Optional[str]) -> bool:
    other = normalize_room(other)
    return bool(room and other and room.lower() == other.lower())
