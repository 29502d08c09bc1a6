from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_employee_and_date(self, employee_id: str, day: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert(self, record: AttendanceRecord) -> None:
        """Replace whatever is stored for (employee_id, date)."""

        raise NotImplementedError

    def list_for_month(self, employee_id: str, month: int, year: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
