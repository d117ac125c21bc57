from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional, Sequence

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on error."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def as_time_text(value: Any) -> Optional[str]:
    """Normalize a stored time to the text form the parsers accept.

    Columns may be VARCHAR ("04:00 PM", "16:00") or MySQL TIME, which
    mysql-connector returns as datetime.timedelta or datetime.time.
    """

    if value is None:
        return None

    if isinstance(value, str):
        return value.strip() or None

    if isinstance(value, time):
        return value.strftime("%H:%M")

    if isinstance(value, timedelta):
        total_minutes = (int(value.total_seconds()) % 86400) // 60
        return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def split_csv(value: Optional[str]) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(part.strip() for part in str(value).split(",") if part.strip())


def join_csv(values: Sequence[str]) -> str:
    return ",".join(v.strip() for v in values if v and v.strip())
