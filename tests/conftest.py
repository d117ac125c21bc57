from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from src.campus_ops.campus_ops.common.timeparse import parse_day
from src.campus_ops.campus_ops.core.enums import RecordStatus
from src.campus_ops.campus_ops.gatekeeper.model import Receipt, Student
from src.campus_ops.campus_ops.gatekeeper.service import GateService
from src.campus_ops.campus_ops.schedules.conflicts import ScheduleConflictService
from src.campus_ops.campus_ops.schedules.model import ClassRecord, EntryCandidate, TimetableEntry
from src.campus_ops.campus_ops.schedules.service import ClassService, TimetableService

# 2026-10-19 is a Monday.
MONDAY = datetime(2026, 10, 19)


class InMemoryClasses:
    def __init__(self):
        self.by_id: dict[int, ClassRecord] = {}
        self._id = 0

    def add(self, **fields) -> ClassRecord:
        self._id += 1
        record = ClassRecord(class_id=self._id, **fields)
        self.by_id[record.class_id] = record
        return record

    def get_by_id(self, class_id: int) -> Optional[ClassRecord]:
        return self.by_id.get(class_id)

    def list_active_in_room(self, *, room: str, exclude_id: Optional[int] = None):
        return [
            c
            for c in self.by_id.values()
            if c.status == RecordStatus.ACTIVE
            and (c.room_number or "").lower() == room.lower()
            and c.class_id != exclude_id
        ]

    def create(self, *, title, days, start_time, end_time, room_number, teacher_name=None, subject=None) -> int:
        return self.add(
            title=title,
            days=tuple(days),
            start_time=start_time,
            end_time=end_time,
            room_number=room_number,
            teacher_name=teacher_name,
            subject=subject,
        ).class_id

    def update(self, *, class_id, title, days, start_time, end_time, room_number, status, teacher_name=None, subject=None):
        if class_id not in self.by_id:
            return False
        self.by_id[class_id] = replace(
            self.by_id[class_id],
            title=title,
            days=tuple(days),
            start_time=start_time,
            end_time=end_time,
            room_number=room_number,
            status=status,
            teacher_name=teacher_name,
            subject=subject,
        )
        return True


class InMemoryTimetable:
    def __init__(self, classes: InMemoryClasses):
        self._classes = classes
        self.by_id: dict[int, TimetableEntry] = {}
        self._id = 0
        self.create_many_calls = 0

    def add(self, **fields) -> TimetableEntry:
        self._id += 1
        entry = TimetableEntry(entry_id=self._id, **fields)
        self.by_id[entry.entry_id] = entry
        return entry

    def _from_candidate(self, entry_id: int, candidate: EntryCandidate, status=RecordStatus.ACTIVE) -> TimetableEntry:
        klass = self._classes.get_by_id(candidate.class_id)
        return TimetableEntry(
            entry_id=entry_id,
            class_id=candidate.class_id,
            teacher_id=candidate.teacher_id,
            subject=candidate.subject,
            day=candidate.day,
            start_time=candidate.start_time,
            end_time=candidate.end_time,
            room=candidate.room,
            status=status,
            class_title=klass.title if klass else None,
        )

    def get_by_id(self, entry_id: int) -> Optional[TimetableEntry]:
        return self.by_id.get(entry_id)

    def list_active_on_day(self, *, day, exclude_id=None):
        return [
            e
            for e in self.by_id.values()
            if e.status == RecordStatus.ACTIVE and parse_day(e.day) == day and e.entry_id != exclude_id
        ]

    def list_for_class_on_day(self, *, class_id, day):
        return [e for e in self.list_active_on_day(day=day) if e.class_id == class_id]

    def list_entries(self, *, class_id=None, teacher_id=None, day=None, status=None):
        items = list(self.by_id.values())
        if class_id is not None:
            items = [e for e in items if e.class_id == class_id]
        if teacher_id is not None:
            items = [e for e in items if e.teacher_id == teacher_id]
        if day is not None:
            items = [e for e in items if parse_day(e.day) == day]
        if status is not None:
            items = [e for e in items if e.status == status]
        return items

    def create(self, candidate: EntryCandidate) -> int:
        self._id += 1
        self.by_id[self._id] = self._from_candidate(self._id, candidate)
        return self._id

    def create_many(self, candidates):
        self.create_many_calls += 1
        return [self.create(c) for c in candidates]

    def update(self, *, entry_id, candidate, status):
        if entry_id not in self.by_id:
            return False
        self.by_id[entry_id] = self._from_candidate(entry_id, candidate, status)
        return True

    def delete(self, entry_id: int) -> bool:
        return self.by_id.pop(entry_id, None) is not None

    def delete_for_class(self, class_id: int) -> int:
        ids = [i for i, e in self.by_id.items() if e.class_id == class_id]
        for i in ids:
            del self.by_id[i]
        return len(ids)


class InMemoryStudents:
    def __init__(self):
        self.by_pk: dict[int, Student] = {}
        self.receipts: dict[str, tuple[int, Receipt]] = {}
        self.touched: list[tuple[int, datetime]] = []

    def add(self, student: Student) -> Student:
        self.by_pk[student.pk] = student
        for version, receipt_id in enumerate(student.receipt_ids, start=1):
            self.receipts[receipt_id] = (student.pk, Receipt(receipt_id=receipt_id, version=version))
        return student

    def get_by_pk(self, pk: int) -> Optional[Student]:
        return self.by_pk.get(pk)

    def find_by_receipt_token(self, token: str):
        found = self.receipts.get(token)
        if not found:
            return None
        pk, receipt = found
        return self.by_pk[pk], receipt

    def find_by_code(self, code: str) -> Optional[Student]:
        for s in self.by_pk.values():
            if s.student_id == code or s.barcode_id == code:
                return s
        return None

    def find_by_barcode_ci(self, code: str) -> Optional[Student]:
        for s in self.by_pk.values():
            if s.barcode_id and s.barcode_id.lower() == code.lower():
                return s
        return None

    def search(self, query: str, limit: int):
        q = query.lower()
        hits = [
            s
            for s in self.by_pk.values()
            if q in s.name.lower()
            or q in s.student_id.lower()
            or q in (s.phone or "").lower()
            or q in (s.barcode_id or "").lower()
        ]
        return hits[:limit]

    def touch_last_scanned(self, pk: int, at: datetime) -> None:
        self.touched.append((pk, at))

    def count_with_barcode(self) -> int:
        return sum(1 for s in self.by_pk.values() if s.barcode_id)

    def set_barcode_id(self, pk: int, barcode_id: str) -> bool:
        self.by_pk[pk] = replace(self.by_pk[pk], barcode_id=barcode_id)
        return True

    def increment_reprint(self, pk: int) -> int:
        student = self.by_pk[pk]
        self.by_pk[pk] = replace(student, reprint_count=student.reprint_count + 1)
        return self.by_pk[pk].reprint_count


@pytest.fixture
def classes_repo() -> InMemoryClasses:
    return InMemoryClasses()


@pytest.fixture
def timetable_repo(classes_repo) -> InMemoryTimetable:
    return InMemoryTimetable(classes_repo)


@pytest.fixture
def students_repo() -> InMemoryStudents:
    return InMemoryStudents()


@pytest.fixture
def conflict_service(classes_repo, timetable_repo) -> ScheduleConflictService:
    return ScheduleConflictService(classes_repo, timetable_repo)


@pytest.fixture
def class_service(classes_repo, conflict_service) -> ClassService:
    return ClassService(classes_repo, conflict_service)


@pytest.fixture
def timetable_service(timetable_repo, classes_repo, conflict_service) -> TimetableService:
    return TimetableService(timetable_repo, classes_repo, conflict_service)


@pytest.fixture
def gate_service(students_repo, classes_repo, timetable_repo) -> GateService:
    return GateService(students_repo, classes_repo, timetable_repo, clock=lambda: MONDAY.replace(hour=16))
