from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Receipt, Student


class StudentRepository(Protocol):
    def get_by_pk(self, pk: int) -> Optional[Student]:
        raise NotImplementedError

    def find_by_receipt_token(self, token: str) -> Optional[tuple[Student, Receipt]]:
        """Student owning a printed receipt with exactly this id."""

        raise NotImplementedError

    def find_by_code(self, code: str) -> Optional[Student]:
        """Exact match on student id or barcode id."""

        raise NotImplementedError

    def find_by_barcode_ci(self, code: str) -> Optional[Student]:
        raise NotImplementedError

    def search(self, query: str, limit: int) -> Sequence[Student]:
        """Substring match on name, student id, phone or barcode id (case-insensitive)."""

        raise NotImplementedError

    def touch_last_scanned(self, pk: int, at: datetime) -> None:
        raise NotImplementedError

    def count_with_barcode(self) -> int:
        raise NotImplementedError

    def set_barcode_id(self, pk: int, barcode_id: str) -> bool:
        raise NotImplementedError

    def increment_reprint(self, pk: int) -> int:
        """Bump the card reprint counter; returns the new value."""

        raise NotImplementedError
