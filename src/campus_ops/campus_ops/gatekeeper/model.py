from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence, Union

from ..core.enums import GateDecision, Standing, StatusColor
from ..schedules.model import ClassRecord, ClassSchedule

Money = Union[int, float, Decimal]


@dataclass(frozen=True)
class Student:
    """Scannable identity as stored by the admissions side."""

    pk: int
    student_id: str
    name: str
    standing: Standing = Standing.ACTIVE
    total_fee: Money = 0
    paid_amount: Money = 0
    class_id: Optional[int] = None
    class_name: Optional[str] = None
    barcode_id: Optional[str] = None
    father_name: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    receipt_ids: tuple[str, ...] = ()
    reprint_count: int = 0
    last_scanned_at: Optional[datetime] = None


@dataclass(frozen=True)
class Receipt:
    receipt_id: str
    version: int


@dataclass(frozen=True)
class FinancialStatus:
    total_due: Money
    paid: Money
    balance: Money

    @classmethod
    def of(cls, student: Student) -> "FinancialStatus":
        total_due = student.total_fee or 0
        paid = student.paid_amount or 0
        return cls(total_due=total_due, paid=paid, balance=max(0, total_due - paid))

    @property
    def is_defaulter(self) -> bool:
        """Nothing paid against a non-zero fee."""
        return self.paid == 0 and self.total_due > 0

    @property
    def is_cleared(self) -> bool:
        return self.balance <= 0


@dataclass(frozen=True)
class CurrentSession:
    subject: str
    teacher_name: str
    room: str
    start_time: str
    end_time: str

    def to_dict(self) -> dict:
        return {
            "subject": self.subject,
            "teacher": self.teacher_name,
            "room": self.room,
            "startTime": self.start_time,
            "endTime": self.end_time,
        }


@dataclass
class ScanContext:
    """Built up stage by stage during one scan; discarded afterwards."""

    code: str
    now: datetime
    student: Optional[Student] = None
    receipt: Optional[Receipt] = None
    financial: Optional[FinancialStatus] = None
    enrolled_class: Optional[ClassRecord] = None
    schedule: Optional[ClassSchedule] = None
    current_session: Optional[CurrentSession] = None


def money_value(value: Money) -> Union[int, float]:
    number = float(value)
    return int(number) if number.is_integer() else number


@dataclass(frozen=True)
class GateResult:
    decision: GateDecision
    message: str
    student: Optional[Student] = None
    financial: Optional[FinancialStatus] = None
    enrolled_class: Optional[ClassRecord] = None
    current_session: Optional[CurrentSession] = None
    receipt: Optional[Receipt] = None
    schedule_info: dict = field(default_factory=dict)
    scanned_at: Optional[datetime] = None

    @property
    def http_status(self) -> int:
        return self.decision.http_status

    @property
    def status_color(self) -> Optional[StatusColor]:
        if not self.decision.permits_entry or self.financial is None:
            return None
        if not self.financial.is_cleared:
            return StatusColor.RED
        if self.current_session is None:
            return StatusColor.ORANGE
        return StatusColor.GREEN

    def to_payload(self) -> dict:
        payload: dict = {
            "success": self.decision.permits_entry,
            "status": self.decision.value,
            "message": self.message,
        }

        if self.student is not None:
            student: dict = {
                "id": self.student.student_id,
                "name": self.student.name,
                "class": self.student.class_name,
                "standing": self.student.standing.value,
            }
            if self.financial is not None:
                student["balance"] = money_value(self.financial.balance)
                student["totalFee"] = money_value(self.financial.total_due)
                student["paidAmount"] = money_value(self.financial.paid)
            if self.student.photo_url:
                student["photo"] = self.student.photo_url
            payload["student"] = student

        if self.current_session is not None:
            payload["currentSession"] = self.current_session.to_dict()

        if self.schedule_info:
            payload["schedule"] = dict(self.schedule_info)

        color = self.status_color
        if color is not None:
            payload["statusColor"] = color.value

        if self.receipt is not None:
            payload["usedReceipt"] = {"receiptId": self.receipt.receipt_id, "version": self.receipt.version}

        if self.scanned_at is not None:
            payload["scannedAt"] = self.scanned_at.isoformat()

        return payload


@dataclass(frozen=True)
class StudentSummary:
    """Row returned by the manual search at the gate."""

    student_id: str
    name: str
    class_name: Optional[str]
    barcode_id: Optional[str]
    standing: Standing

    def to_dict(self) -> dict:
        return {
            "studentId": self.student_id,
            "name": self.name,
            "class": self.class_name,
            "barcodeId": self.barcode_id,
            "standing": self.standing.value,
        }


def summaries(students: Sequence[Student]) -> list[StudentSummary]:
    return [
        StudentSummary(
            student_id=s.student_id,
            name=s.name,
            class_name=s.class_name,
            barcode_id=s.barcode_id,
            standing=s.standing,
        )
        for s in students
    ]
