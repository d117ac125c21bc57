from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import RecordStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_time_text, db_cursor, fetchall, fetchone, join_csv, split_csv
from .model import ClassRecord
from .repository import ClassRepository

_COLUMNS = "class_id, title, days, start_time, end_time, room_number, status, teacher_name, subject"


def _to_record(r: dict) -> ClassRecord:
    return ClassRecord(
        class_id=int(r["class_id"]),
        title=r["title"],
        days=split_csv(r.get("days")),
        start_time=as_time_text(r.get("start_time")),
        end_time=as_time_text(r.get("end_time")),
        room_number=r.get("room_number"),
        status=RecordStatus(r.get("status") or RecordStatus.ACTIVE.value),
        teacher_name=r.get("teacher_name"),
        subject=r.get("subject"),
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: int) -> Optional[ClassRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM classes WHERE class_id=%s", (int(class_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_active_in_room(self, *, room: str, exclude_id: Optional[int] = None) -> Sequence[ClassRecord]:
        clauses = ["room_number=%s", "status=%s"]
        params: list[object] = [room, RecordStatus.ACTIVE.value]
        if exclude_id is not None:
            clauses.append("class_id<>%s")
            params.append(int(exclude_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM classes WHERE {where} ORDER BY class_id", tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO classes(title, days, start_time, end_time, room_number, status, teacher_name, subject)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    title,
                    join_csv(days),
                    start_time,
                    end_time,
                    room_number,
                    RecordStatus.ACTIVE.value,
                    teacher_name,
                    subject,
                ),
            )
            return int(cur.lastrowid)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE classes
                SET title=%s, days=%s, start_time=%s, end_time=%s, room_number=%s,
                    status=%s, teacher_name=%s, subject=%s
                WHERE class_id=%s
                """,
                (
                    title,
                    join_csv(days),
                    start_time,
                    end_time,
                    room_number,
                    status.value,
                    teacher_name,
                    subject,
                    int(class_id),
                ),
            )
            return cur.rowcount > 0
