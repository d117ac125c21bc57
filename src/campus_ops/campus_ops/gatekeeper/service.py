"""Gate scan decision engine.

A scan walks a fixed pipeline and stops at the first stage that produces a
terminal decision:

    identify -> standing -> financial -> schedule lookup -> time window -> decision

Business outcomes (unknown code, defaulter, too early, ...) are returned as a
`GateResult`; only unexpected collaborator failures end up as `ERROR`.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import minutes_since_midnight, now_local
from ..common.timeparse import format_time_12, try_parse_time
from ..common.validators import require_min_length
from ..core.constants import (
    DEFAULT_CURRENCY_LABEL,
    MIN_SEARCH_QUERY_LENGTH,
    RECEIPT_TOKEN_PREFIX,
    SEARCH_RESULT_LIMIT,
    UNASSIGNED_ROOM,
    UNASSIGNED_TEACHER,
)
from ..core.enums import GateDecision, Weekday
from ..schedules.model import Unscheduled, schedule_for_class
from ..schedules.overlap import contains
from ..schedules.repository import ClassRepository, TimetableRepository
from .model import (
    CurrentSession,
    FinancialStatus,
    GateResult,
    ScanContext,
    StudentSummary,
    money_value,
    summaries,
)
from .policy import EntryWindowPolicy
from .repository import StudentRepository

logger = logging.getLogger(__name__)


class GateService:
    def __init__(
        self,
        students: StudentRepository,
        classes: ClassRepository,
        timetable: TimetableRepository,
        *,
        policy: Optional[EntryWindowPolicy] = None,
        currency_label: str = DEFAULT_CURRENCY_LABEL,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._students = students
        self._classes = classes
        self._timetable = timetable
        self._policy = policy or EntryWindowPolicy()
        self._currency = currency_label
        self._clock = clock or now_local

    def scan(self, code: str, *, now: Optional[datetime] = None) -> GateResult:
        code = (code or "").strip()
        ctx = ScanContext(code=code, now=now or self._clock())
        try:
            result = self._run(ctx)
        except Exception:
            logger.exception("Gate scan failed for code %r", code)
            return GateResult(decision=GateDecision.ERROR, message=GateDecision.ERROR.message_template)

        logger.info(
            "Gate scan %r -> %s%s",
            code,
            result.decision.value,
            f" ({ctx.student.student_id})" if ctx.student else "",
        )
        return result

    def search(self, query: str) -> list[StudentSummary]:
        query = require_min_length((query or "").strip(), "Search query", MIN_SEARCH_QUERY_LENGTH)
        return summaries(self._students.search(query, SEARCH_RESULT_LIMIT))

    def _run(self, ctx: ScanContext) -> GateResult:
        # identify
        self._identify(ctx)
        student = ctx.student
        if student is None:
            return GateResult(decision=GateDecision.UNKNOWN, message=GateDecision.UNKNOWN.render(code=ctx.code))

        # standing
        if student.standing.is_blocked:
            return GateResult(
                decision=GateDecision.BLOCKED,
                message=GateDecision.BLOCKED.render(standing=student.standing.value),
                student=student,
            )

        # financial
        ctx.financial = FinancialStatus.of(student)
        if ctx.financial.is_defaulter:
            return self._result(ctx, GateDecision.DEFAULTER, GateDecision.DEFAULTER.message_template)

        # schedule lookup
        self._lookup_schedule(ctx)

        # time window
        verdict = self._policy.evaluate(ctx.schedule, ctx.now)
        if not verdict.allowed:
            return self._result(ctx, verdict.decision, verdict.message)

        # decision
        if ctx.financial.is_cleared:
            result = self._result(ctx, GateDecision.SUCCESS, GateDecision.SUCCESS.message_template)
        else:
            result = self._result(
                ctx,
                GateDecision.PARTIAL,
                GateDecision.PARTIAL.render(currency=self._currency, balance=money_value(ctx.financial.balance)),
            )

        self._students.touch_last_scanned(student.pk, ctx.now)
        return result

    def _identify(self, ctx: ScanContext) -> None:
        if ctx.code.startswith(RECEIPT_TOKEN_PREFIX):
            found = self._students.find_by_receipt_token(ctx.code)
            if found is not None:
                ctx.student, ctx.receipt = found
                return

        ctx.student = self._students.find_by_code(ctx.code) or self._students.find_by_barcode_ci(ctx.code)

    def _lookup_schedule(self, ctx: ScanContext) -> None:
        student = ctx.student
        if student is None or student.class_id is None:
            ctx.schedule = Unscheduled("no class enrolled")
            return

        ctx.enrolled_class = self._classes.get_by_id(student.class_id)
        if ctx.enrolled_class is None:
            logger.warning("Student %s references missing class %s", student.student_id, student.class_id)
            ctx.schedule = Unscheduled("enrolled class not found")
            return

        ctx.schedule = schedule_for_class(ctx.enrolled_class)
        ctx.current_session = self._current_session(student.class_id, ctx.now)

    def _current_session(self, class_id: int, now: datetime) -> Optional[CurrentSession]:
        """Timetable entry of the class running right now, if any (inclusive bounds)."""
        minute = minutes_since_midnight(now)
        for entry in self._timetable.list_for_class_on_day(class_id=class_id, day=Weekday.of(now)):
            start = try_parse_time(entry.start_time)
            end = try_parse_time(entry.end_time)
            if start is None or end is None:
                continue
            if contains(start, end, minute):
                return CurrentSession(
                    subject=entry.subject,
                    teacher_name=entry.teacher_name or UNASSIGNED_TEACHER,
                    room=entry.room or UNASSIGNED_ROOM,
                    start_time=entry.start_time,
                    end_time=entry.end_time,
                )
        return None

    def _result(self, ctx: ScanContext, decision: GateDecision, message: str) -> GateResult:
        return GateResult(
            decision=decision,
            message=message,
            student=ctx.student,
            financial=ctx.financial,
            enrolled_class=ctx.enrolled_class,
            current_session=ctx.current_session,
            receipt=ctx.receipt,
            schedule_info=self._schedule_info(ctx),
            scanned_at=ctx.now if decision.permits_entry else None,
        )

    @staticmethod
    def _schedule_info(ctx: ScanContext) -> dict:
        info: dict = {
            "currentTime": format_time_12(minutes_since_midnight(ctx.now)),
            "currentDay": Weekday.of(ctx.now).abbrev,
        }
        record = ctx.enrolled_class
        if record is not None:
            info["classStartTime"] = record.start_time
            info["classEndTime"] = record.end_time
            info["classDays"] = list(record.days)
            if record.teacher_name:
                info["teacherName"] = record.teacher_name
        return info
