from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import Standing
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Receipt, Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)

_SELECT = """
    SELECT
        s.id, s.student_id, s.barcode_id, s.name, s.father_name, s.phone, s.photo_url,
        s.standing, s.total_fee, s.paid_amount, s.class_id, s.reprint_count, s.last_scanned_at,
        c.title AS class_name
    FROM students s
    LEFT JOIN classes c ON c.class_id = s.class_id
"""

_STANDINGS = {s.value.lower(): s for s in Standing}


def _standing(value: Optional[str]) -> Standing:
    """Stored standing, case-insensitive. Unknown values are treated as suspended."""
    if not value or not str(value).strip():
        return Standing.ACTIVE

    standing = _STANDINGS.get(str(value).strip().lower())
    if standing is None:
        logger.warning("Unknown student standing %r, treating as %s", value, Standing.SUSPENDED.value)
        return Standing.SUSPENDED
    return standing


def _to_student(r: dict) -> Student:
    return Student(
        pk=int(r["id"]),
        student_id=r["student_id"],
        name=r["name"],
        standing=_standing(r.get("standing")),
        total_fee=Decimal(r.get("total_fee") or 0),
        paid_amount=Decimal(r.get("paid_amount") or 0),
        class_id=int(r["class_id"]) if r.get("class_id") is not None else None,
        class_name=r.get("class_name"),
        barcode_id=r.get("barcode_id"),
        father_name=r.get("father_name"),
        phone=r.get("phone"),
        photo_url=r.get("photo_url"),
        reprint_count=int(r.get("reprint_count") or 0),
        last_scanned_at=r.get("last_scanned_at"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_pk(self, pk: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE s.id=%s", (int(pk),))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def find_by_receipt_token(self, token: str) -> Optional[tuple[Student, Receipt]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                JOIN receipts r ON r.student_pk = s.id
                WHERE r.receipt_id=%s
                """,
                (token,),
            )
            r = fetchone(cur)
            if not r:
                return None

            cur.execute("SELECT receipt_id, version FROM receipts WHERE receipt_id=%s", (token,))
            receipt_row = fetchone(cur)

        receipt = Receipt(receipt_id=receipt_row["receipt_id"], version=int(receipt_row["version"] or 1))
        return _to_student(r), receipt

    def find_by_code(self, code: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE BINARY s.student_id=%s OR BINARY s.barcode_id=%s LIMIT 1",
                (code, code),
            )
            r = fetchone(cur)
            return _to_student(r) if r else None

    def find_by_barcode_ci(self, code: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE LOWER(s.barcode_id)=LOWER(%s) LIMIT 1", (code,))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def search(self, query: str, limit: int) -> Sequence[Student]:
        pattern = f"%{query.lower()}%"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                WHERE LOWER(s.name) LIKE %s
                   OR LOWER(s.student_id) LIKE %s
                   OR LOWER(COALESCE(s.phone, '')) LIKE %s
                   OR LOWER(COALESCE(s.barcode_id, '')) LIKE %s
                ORDER BY s.name
                LIMIT %s
                """,
                (pattern, pattern, pattern, pattern, int(limit)),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def touch_last_scanned(self, pk: int, at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE students SET last_scanned_at=%s WHERE id=%s", (at, int(pk)))

    def count_with_barcode(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS c FROM students WHERE barcode_id IS NOT NULL AND barcode_id<>''")
            r = fetchone(cur)
            return int(r["c"]) if r else 0

    def set_barcode_id(self, pk: int, barcode_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE students SET barcode_id=%s WHERE id=%s", (barcode_id, int(pk)))
            return cur.rowcount > 0

    def increment_reprint(self, pk: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE students SET reprint_count=reprint_count+1 WHERE id=%s", (int(pk),))
            cur.execute("SELECT reprint_count FROM students WHERE id=%s", (int(pk),))
            r = fetchone(cur)
            return int(r["reprint_count"]) if r else 0
