from __future__ import annotations

from typing import Iterable

from ..core.enums import Weekday


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open interval overlap: [a_start, a_end) vs [b_start, b_end).

    Touching intervals (a_end == b_start) do not overlap.
    """
    return a_start < b_end and b_start < a_end


def shared_days(days_a: Iterable[Weekday], days_b: Iterable[Weekday]) -> tuple[Weekday, ...]:
    """Days present in both sets, in weekday order. Empty means no day conflict."""
    return tuple(sorted(set(days_a) & set(days_b)))


def contains(start: int, end: int, minute: int) -> bool:
    """Closed containment used for "is this session running right now"."""
    return start <= minute <= end
