from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import minutes_since_midnight
from ..common.timeparse import format_days, format_time_12
from ..core.constants import (
    ENTRY_CLOSES_AFTER_MINUTES,
    ENTRY_OPENS_BEFORE_MINUTES,
    FALLBACK_SESSION_MINUTES,
)
from ..core.enums import GateDecision, Weekday
from ..schedules.model import ClassSchedule, ScheduleWindow


@dataclass(frozen=True)
class WindowVerdict:
    """Outcome of the time-window stage; `decision` is None when entry may proceed."""

    decision: Optional[GateDecision] = None
    message: Optional[str] = None
    opens_at: Optional[int] = None
    closes_at: Optional[int] = None

    @property
    def allowed(self) -> bool:
        return self.decision is None


@dataclass(frozen=True)
class EntryWindowPolicy:
    """Decide whether `now` falls inside a class's entry window.

    The window is [start - opens_before, end + closes_after], both edges
    inclusive. Classes stored without an end time close at start + fallback.
    Sessions crossing midnight are not supported.
    """

    opens_before: int = ENTRY_OPENS_BEFORE_MINUTES
    closes_after: int = ENTRY_CLOSES_AFTER_MINUTES
    fallback_session: int = FALLBACK_SESSION_MINUTES
    deny_unscheduled: bool = False

    def window_for(self, schedule: ScheduleWindow) -> tuple[int, int]:
        opens = schedule.start - self.opens_before
        if schedule.end is None:
            closes = schedule.start + self.fallback_session
        else:
            closes = schedule.end + self.closes_after
        return opens, closes

    def evaluate(self, schedule: ClassSchedule, now: datetime) -> WindowVerdict:
        today = Weekday.of(now)

        if not isinstance(schedule, ScheduleWindow):
            if self.deny_unscheduled:
                return WindowVerdict(
                    decision=GateDecision.NO_CLASS_TODAY,
                    message=GateDecision.NO_CLASS_TODAY.render(day=today.abbrev, class_days="none"),
                )
            return WindowVerdict()

        if today not in schedule.days:
            return WindowVerdict(
                decision=GateDecision.NO_CLASS_TODAY,
                message=GateDecision.NO_CLASS_TODAY.render(
                    day=today.abbrev, class_days=format_days(schedule.days)
                ),
            )

        opens, closes = self.window_for(schedule)
        current = minutes_since_midnight(now)

        if current < opens:
            return WindowVerdict(
                decision=GateDecision.TOO_EARLY,
                message=GateDecision.TOO_EARLY.render(
                    start=format_time_12(schedule.start), opens=format_time_12(opens)
                ),
                opens_at=opens,
                closes_at=closes,
            )

        if current > closes:
            ended = schedule.end if schedule.end is not None else schedule.start + self.fallback_session
            return WindowVerdict(
                decision=GateDecision.TOO_LATE,
                message=GateDecision.TOO_LATE.render(end=format_time_12(ended)),
                opens_at=opens,
                closes_at=closes,
            )

        return WindowVerdict(opens_at=opens, closes_at=closes)
