from __future__ import annotations

from typing import Optional, Sequence

from ..common.timeparse import parse_day
from ..core.enums import RecordStatus, Weekday
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_time_text, db_cursor, fetchall, fetchone
from .model import EntryCandidate, TimetableEntry
from .repository import TimetableRepository

_SELECT = """
    SELECT
        t.entry_id, t.class_id, t.teacher_id, t.subject, t.day,
        t.start_time, t.end_time, t.room, t.status,
        c.title AS class_title,
        tc.name AS teacher_name
    FROM timetable_entries t
    LEFT JOIN classes c ON c.class_id = t.class_id
    LEFT JOIN teachers tc ON tc.teacher_id = t.teacher_id
"""


def _to_entry(r: dict) -> TimetableEntry:
    return TimetableEntry(
        entry_id=int(r["entry_id"]),
        class_id=int(r["class_id"]),
        teacher_id=int(r["teacher_id"]),
        subject=r["subject"],
        day=r["day"],
        start_time=as_time_text(r["start_time"]) or "",
        end_time=as_time_text(r["end_time"]) or "",
        room=r.get("room"),
        status=RecordStatus(r.get("status") or RecordStatus.ACTIVE.value),
        class_title=r.get("class_title"),
        teacher_name=r.get("teacher_name"),
    )


def _insert_params(candidate: EntryCandidate) -> tuple:
    return (
        int(candidate.class_id),
        int(candidate.teacher_id),
        candidate.subject,
        parse_day(candidate.day).full_name,
        candidate.start_time,
        candidate.end_time,
        candidate.room,
        RecordStatus.ACTIVE.value,
    )


_INSERT = """
    INSERT INTO timetable_entries(class_id, teacher_id, subject, day, start_time, end_time, room, status)
    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
"""


class MySQLTimetableRepository(TimetableRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, entry_id: int) -> Optional[TimetableEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE t.entry_id=%s", (int(entry_id),))
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def list_active_on_day(self, *, day: Weekday, exclude_id: Optional[int] = None) -> Sequence[TimetableEntry]:
        clauses = ["t.day=%s", "t.status=%s"]
        params: list[object] = [day.full_name, RecordStatus.ACTIVE.value]
        if exclude_id is not None:
            clauses.append("t.entry_id<>%s")
            params.append(int(exclude_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE {' AND '.join(clauses)} ORDER BY t.entry_id", tuple(params))
            return [_to_entry(r) for r in fetchall(cur)]

    def list_for_class_on_day(self, *, class_id: int, day: Weekday) -> Sequence[TimetableEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE t.class_id=%s AND t.day=%s AND t.status=%s ORDER BY t.entry_id",
                (int(class_id), day.full_name, RecordStatus.ACTIVE.value),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def list_entries(
        self,
        *,
        class_id: Optional[int] = None,
        teacher_id: Optional[int] = None,
        day: Optional[Weekday] = None,
        status: Optional[RecordStatus] = None,
    ) -> Sequence[TimetableEntry]:
        clauses: list[str] = []
        params: list[object] = []
        if class_id is not None:
            clauses.append("t.class_id=%s")
            params.append(int(class_id))
        if teacher_id is not None:
            clauses.append("t.teacher_id=%s")
            params.append(int(teacher_id))
        if day is not None:
            clauses.append("t.day=%s")
            params.append(day.full_name)
        if status is not None:
            clauses.append("t.status=%s")
            params.append(status.value)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} {where}", tuple(params))
            return [_to_entry(r) for r in fetchall(cur)]

    def create(self, candidate: EntryCandidate) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_INSERT, _insert_params(candidate))
            return int(cur.lastrowid)

    def create_many(self, candidates: Sequence[EntryCandidate]) -> list[int]:
        ids: list[int] = []
        with db_cursor(self._conn_factory) as (_, cur):
            for candidate in candidates:
                cur.execute(_INSERT, _insert_params(candidate))
                ids.append(int(cur.lastrowid))
        return ids

    def update(self, *, entry_id: int, candidate: EntryCandidate, status: RecordStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE timetable_entries
                SET class_id=%s, teacher_id=%s, subject=%s, day=%s, start_time=%s, end_time=%s,
                    room=%s, status=%s
                WHERE entry_id=%s
                """,
                (*_insert_params(candidate)[:-1], status.value, int(entry_id)),
            )
            return cur.rowcount > 0

    def delete(self, entry_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM timetable_entries WHERE entry_id=%s", (int(entry_id),))
            return cur.rowcount > 0

    def delete_for_class(self, class_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM timetable_entries WHERE class_id=%s", (int(class_id),))
            return int(cur.rowcount)
