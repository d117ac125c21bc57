from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import RecordStatus, Weekday
from .model import ClassRecord, EntryCandidate, TimetableEntry


class ClassRepository(Protocol):
    def get_by_id(self, class_id: int) -> Optional[ClassRecord]:
        raise NotImplementedError

    def list_active_in_room(self, *, room: str, exclude_id: Optional[int] = None) -> Sequence[ClassRecord]:
        """Active classes booked into `room`, minus the one being edited."""

        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        days: Sequence[str],
        start_time: Optional[str],
        end_time: Optional[str],
        room_number: Optional[str],
        teacher_name: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        class_id: int,
        title: str,
        days: Sequence[str],
        start_time: Optional[str],
        end_time: Optional[str],
        room_number: Optional[str],
        status: RecordStatus,
        teacher_name: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError


class TimetableRepository(Protocol):
    def get_by_id(self, entry_id: int) -> Optional[TimetableEntry]:
        raise NotImplementedError

    def list_active_on_day(self, *, day: Weekday, exclude_id: Optional[int] = None) -> Sequence[TimetableEntry]:
        raise NotImplementedError

    def list_for_class_on_day(self, *, class_id: int, day: Weekday) -> Sequence[TimetableEntry]:
        """Active entries of one class on one weekday."""

        raise NotImplementedError

    def list_entries(
        self,
        *,
        class_id: Optional[int] = None,
        teacher_id: Optional[int] = None,
        day: Optional[Weekday] = None,
        status: Optional[RecordStatus] = None,
    ) -> Sequence[TimetableEntry]:
        raise NotImplementedError

    def create(self, candidate: EntryCandidate) -> int:
        raise NotImplementedError

    def create_many(self, candidates: Sequence[EntryCandidate]) -> list[int]:
        """Insert all candidates in one transaction. Returns new entry ids."""

        raise NotImplementedError

    def update(self, *, entry_id: int, candidate: EntryCandidate, status: RecordStatus) -> bool:
        raise NotImplementedError

    def delete(self, entry_id: int) -> bool:
        raise NotImplementedError

    def delete_for_class(self, class_id: int) -> int:
        raise NotImplementedError
