from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .common.datetime_utils import now_local
from .core.constants import DEFAULT_BARCODE_PREFIX, DEFAULT_CURRENCY_LABEL
from .database.connection import DatabaseConnection, DBConfig
from .gatekeeper.barcode import BarcodeService
from .gatekeeper.mysql_student_repository import MySQLStudentRepository
from .gatekeeper.policy import EntryWindowPolicy
from .gatekeeper.service import GateService
from .schedules.conflicts import ScheduleConflictService
from .schedules.mysql_class_repository import MySQLClassRepository
from .schedules.mysql_timetable_repository import MySQLTimetableRepository
from .schedules.service import ClassService, TimetableService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    classes_repo: MySQLClassRepository
    timetable_repo: MySQLTimetableRepository
    students_repo: MySQLStudentRepository

    conflict_service: ScheduleConflictService
    class_service: ClassService
    timetable_service: TimetableService
    gate_service: GateService
    barcode_service: BarcodeService


def build_container(
    *,
    db_config: dict,
    timezone: Optional[str] = None,
    deny_unscheduled: bool = False,
    barcode_prefix: str = DEFAULT_BARCODE_PREFIX,
    currency_label: str = DEFAULT_CURRENCY_LABEL,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    def clock():
        return now_local(timezone)

    classes_repo = MySQLClassRepository(conn)
    timetable_repo = MySQLTimetableRepository(conn)
    students_repo = MySQLStudentRepository(conn)

    conflict_service = ScheduleConflictService(classes_repo, timetable_repo)
    class_service = ClassService(classes_repo, conflict_service)
    timetable_service = TimetableService(timetable_repo, classes_repo, conflict_service)
    gate_service = GateService(
        students_repo,
        classes_repo,
        timetable_repo,
        policy=EntryWindowPolicy(deny_unscheduled=deny_unscheduled),
        currency_label=currency_label,
        clock=clock,
    )
    barcode_service = BarcodeService(students_repo, prefix=barcode_prefix, clock=clock)

    return Container(
        conn=conn,
        classes_repo=classes_repo,
        timetable_repo=timetable_repo,
        students_repo=students_repo,
        conflict_service=conflict_service,
        class_service=class_service,
        timetable_service=timetable_service,
        gate_service=gate_service,
        barcode_service=barcode_service,
    )
