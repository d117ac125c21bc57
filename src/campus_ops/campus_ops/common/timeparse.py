"""Time-of-day and weekday normalisation.

Every component that compares class times, timetable slots or the gate clock
goes through this module, so a time is always an `int` of minutes since
midnight and a day is always a `Weekday`.
"""
from __future__ import annotations

import re
from typing import Iterable, Optional

from ..core.constants import MINUTES_PER_DAY
from ..core.enums import Weekday
from ..core.exceptions import InvalidDayError, InvalidTimeError

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?(?:\s*([AaPp][Mm]))?$")

_DAY_PREFIXES = {day.abbrev.lower(): day for day in Weekday}


def parse_time(text: str) -> int:
    """Parse "HH:MM[:SS]" (24h) or "hh:mm AM/PM" (12h) into minutes since midnight.

    Seconds, as MySQL TIME columns render them, are accepted and dropped.

    Raises InvalidTimeError for anything else, so a malformed value can never
    be mistaken for midnight.
    """
    if not isinstance(text, str):
        raise InvalidTimeError(f"Invalid time value: {text!r}")

    match = _TIME_RE.match(text.strip())
    if not match:
        raise InvalidTimeError(f"Invalid time format: {text!r}")

    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = match.group(3)
    period = match.group(4)

    if minutes > 59 or (seconds is not None and int(seconds) > 59):
        raise InvalidTimeError(f"Invalid time value: {text!r}")

    if period is None:
        if hours > 23:
            raise InvalidTimeError(f"Invalid time value: {text!r}")
        return hours * 60 + minutes

    if not 1 <= hours <= 12:
        raise InvalidTimeError(f"Invalid time value: {text!r}")

    hours = hours % 12
    if period.upper() == "PM":
        hours += 12
    return hours * 60 + minutes


def try_parse_time(text: Optional[str]) -> Optional[int]:
    """Like parse_time, but returns None for missing or malformed input."""
    if text is None:
        return None
    try:
        return parse_time(text)
    except InvalidTimeError:
        return None


def parse_day(text: str) -> Weekday:
    """Parse "Mon", "monday", "WED", ... into a Weekday (first three letters)."""
    if not isinstance(text, str):
        raise InvalidDayError(f"Invalid day value: {text!r}")

    key = text.strip()[:3].lower()
    day = _DAY_PREFIXES.get(key)
    if day is None:
        raise InvalidDayError(f"Invalid day: {text!r}")
    return day


def parse_days(values: Iterable[str]) -> frozenset[Weekday]:
    return frozenset(parse_day(v) for v in values)


def format_time_24(minutes: int) -> str:
    minutes = int(minutes) % MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_time_12(minutes: int) -> str:
    """Display format used on the scan terminal, e.g. "3:05 PM"."""
    minutes = int(minutes) % MINUTES_PER_DAY
    hours, mins = divmod(minutes, 60)
    period = "PM" if hours >= 12 else "AM"
    display_hour = hours % 12 or 12
    return f"{display_hour}:{mins:02d} {period}"


def format_days(days: Iterable[Weekday]) -> str:
    return ", ".join(d.abbrev for d in sorted(days))
