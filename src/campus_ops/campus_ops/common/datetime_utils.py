from __future__ import annotations

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo


def now_local(tz_name: Optional[str] = None) -> datetime:
    """Current wall-clock time of the campus (naive).

    Note: Wrapped so tests can patch/mock easier.
    """
    if tz_name:
        return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)
    return datetime.now()


def minutes_since_midnight(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute
