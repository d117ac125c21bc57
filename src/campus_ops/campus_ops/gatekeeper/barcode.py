from __future__ import annotations

import io
import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

import qrcode

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_BARCODE_PREFIX
from ..core.exceptions import NotFoundError
from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)


def format_barcode_id(prefix: str, year: int, sequence: int) -> str:
    """e.g. EDW-2026-007"""
    return f"{prefix}-{year}-{sequence:03d}"


def render_qr_png(data: str) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class BarcodeService:
    """ID cards: barcode id assignment, QR rendering and reprint tracking."""

    def __init__(
        self,
        students: StudentRepository,
        *,
        prefix: str = DEFAULT_BARCODE_PREFIX,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._students = students
        self._prefix = prefix
        self._clock = clock or now_local

    def _get(self, pk: int) -> Student:
        student = self._students.get_by_pk(int(pk))
        if not student:
            raise NotFoundError("Student not found")
        return student

    def generate(self, pk: int) -> Student:
        """Assign a barcode id unless the student already has one."""
        student = self._get(pk)
        if student.barcode_id:
            return student

        sequence = self._students.count_with_barcode() + 1
        barcode_id = format_barcode_id(self._prefix, self._clock().year, sequence)
        self._students.set_barcode_id(student.pk, barcode_id)
        logger.info("Barcode %s assigned to %s", barcode_id, student.student_id)
        return replace(student, barcode_id=barcode_id)

    def qr_png(self, pk: int) -> bytes:
        """QR image of the code printed on the card (barcode id, or student id before one is assigned)."""
        student = self._get(pk)
        return render_qr_png(student.barcode_id or student.student_id)

    def record_reprint(self, pk: int) -> Student:
        student = self._get(pk)
        count = self._students.increment_reprint(student.pk)
        logger.info("Reprint recorded for %s: copy #%d", student.student_id, count)
        return replace(student, reprint_count=count)
