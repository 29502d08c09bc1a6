from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import LeaveAttendanceEntry, LeaveBalance, LeaveRequest, LeaveTransaction


class LeaveLedgerRepository(Protocol):
    def get_balance(self, employee_id: str, year: int) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def list_transactions(self, employee_id: str, year: int) -> Sequence[LeaveTransaction]:
        raise NotImplementedError

    def save(self, balance: LeaveBalance, transactions: Sequence[LeaveTransaction]) -> None:
        """Persist the balance snapshot together with its full transaction list in one write."""

        raise NotImplementedError


class LeaveRequestRepository(Protocol):
    def create(self, request: LeaveRequest) -> str:
        raise NotImplementedError

    def get(self, request_id: str) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def update(self, request: LeaveRequest) -> bool:
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: str,
        *,
        year: Optional[int] = None,
        status: Optional[RequestStatus] = None,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError


class LeaveAttendanceRepository(Protocol):
    def add_entries(self, entries: Sequence[LeaveAttendanceEntry]) -> int:
        """Store entries not already present for (leave_id, date); returns how many were added."""

        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[LeaveAttendanceEntry]:
        raise NotImplementedError
