from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..storage.kv_store import KeyValueStore
from .model import AttendanceRecord
from .repository import AttendanceRepository


class KVAttendanceRepository(AttendanceRepository):
    """One blob per employee and month: {"YYYY-MM-DD": record}."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    @staticmethod
    def _key(employee_id: str, month: int, year: int) -> str:
        return f"hr_attendance:{employee_id}:{year:04d}-{month:02d}"

    def get_for_employee_and_date(self, employee_id: str, day: date) -> Optional[AttendanceRecord]:
        data = self._store.get(self._key(employee_id, day.month, day.year)) or {}
        raw = data.get(day.isoformat())
        return AttendanceRecord.from_dict(raw) if raw else None

    def upsert(self, record: AttendanceRecord) -> None:
        key = self._key(record.employee_id, record.date.month, record.date.year)
        data = dict(self._store.get(key) or {})
        data[record.date.isoformat()] = record.to_dict()
        self._store.set(key, data)

    def list_for_month(self, employee_id: str, month: int, year: int) -> Sequence[AttendanceRecord]:
        data = self._store.get(self._key(employee_id, month, year)) or {}
        return [AttendanceRecord.from_dict(data[k]) for k in sorted(data)]
