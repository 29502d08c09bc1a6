from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import RequestStatus
from ..storage.kv_store import KeyValueStore
from .model import LeaveAttendanceEntry, LeaveBalance, LeaveRequest, LeaveTransaction
from .repository import LeaveAttendanceRepository, LeaveLedgerRepository, LeaveRequestRepository


def _ledger_key(employee_id: str, year: int) -> str:
    return f"hr_leave_ledger:{employee_id}:{int(year)}"


class KVLeaveLedgerRepository(LeaveLedgerRepository):
    def __init__(self, store: KeyValueStore):
        self._store = store

    def get_balance(self, employee_id: str, year: int) -> Optional[LeaveBalance]:
        data = self._store.get(_ledger_key(employee_id, year))
        if not data or not data.get("balance"):
            return None
        return LeaveBalance.from_dict(data["balance"])

    def list_transactions(self, employee_id: str, year: int) -> Sequence[LeaveTransaction]:
        data = self._store.get(_ledger_key(employee_id, year)) or {}
        return [LeaveTransaction.from_dict(t) for t in data.get("transactions") or []]

    def save(self, balance: LeaveBalance, transactions: Sequence[LeaveTransaction]) -> None:
        self._store.set(
            _ledger_key(balance.employee_id, balance.year),
            {
                "balance": balance.to_dict(),
                "transactions": [t.to_dict() for t in transactions],
            },
        )


_REQUEST_PREFIX = "hr_leave_request:"


class KVLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, store: KeyValueStore):
        self._store = store

    def create(self, request: LeaveRequest) -> str:
        self._store.set(f"{_REQUEST_PREFIX}{request.request_id}", request.to_dict())
        return request.request_id

    def get(self, request_id: str) -> Optional[LeaveRequest]:
        data = self._store.get(f"{_REQUEST_PREFIX}{request_id}")
        return LeaveRequest.from_dict(data) if data else None

    def update(self, request: LeaveRequest) -> bool:
        key = f"{_REQUEST_PREFIX}{request.request_id}"
        if self._store.get(key) is None:
            return False
        self._store.set(key, request.to_dict())
        return True

    def list_for_employee(
        self,
        employee_id: str,
        *,
        year: Optional[int] = None,
        status: Optional[RequestStatus] = None,
    ) -> Sequence[LeaveRequest]:
        out = []
        for key in self._store.keys(_REQUEST_PREFIX):
            data = self._store.get(key)
            if not data or data.get("employee_id") != employee_id:
                continue
            req = LeaveRequest.from_dict(data)
            if year is not None and req.year != int(year):
                continue
            if status is not None and req.status != status:
                continue
            out.append(req)
        out.sort(key=lambda r: (r.start_date, r.created_at))
        return out


class KVLeaveAttendanceRepository(LeaveAttendanceRepository):
    def __init__(self, store: KeyValueStore):
        self._store = store

    @staticmethod
    def _key(employee_id: str) -> str:
        return f"hr_leave_attendance:{employee_id}"

    def add_entries(self, entries: Sequence[LeaveAttendanceEntry]) -> int:
        added = 0
        by_employee: dict[str, list[LeaveAttendanceEntry]] = {}
        for entry in entries:
            by_employee.setdefault(entry.employee_id, []).append(entry)

        for employee_id, new_entries in by_employee.items():
            current = list(self._store.get(self._key(employee_id)) or [])
            seen = {(e["leave_id"], e["date"]) for e in current}
            for entry in new_entries:
                marker = (entry.leave_id, entry.date.isoformat())
                if marker in seen:
                    continue
                seen.add(marker)
                current.append(entry.to_dict())
                added += 1
            self._store.set(self._key(employee_id), current)
        return added

    def list_for_employee(
        self,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[LeaveAttendanceEntry]:
        entries = [LeaveAttendanceEntry.from_dict(e) for e in self._store.get(self._key(employee_id)) or []]
        if start_date is not None:
            entries = [e for e in entries if e.date >= start_date]
        if end_date is not None:
            entries = [e for e in entries if e.date <= end_date]
        return sorted(entries, key=lambda e: e.date)
