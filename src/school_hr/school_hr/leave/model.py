from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Dict, Mapping, Optional

from ..common.datetime_utils import parse_iso_date
from ..core.enums import DayMark, LeaveAttendanceStatus, LeaveType, PaidBy, RequestStatus, TransactionSource


@dataclass(frozen=True)
class LeaveBalance:
    """Remaining entitled days per leave type for one (employee, year)."""

    employee_id: str
    year: int
    balances: Mapping[LeaveType, float]
    last_updated_at: datetime
    locked: bool = False

    def remaining(self, leave_type: LeaveType) -> float:
        return float(self.balances.get(leave_type, 0))

    def with_changes(
        self,
        *,
        balances: Optional[Mapping[LeaveType, float]] = None,
        locked: Optional[bool] = None,
        updated_at: datetime,
    ) -> "LeaveBalance":
        merged: Dict[LeaveType, float] = dict(self.balances)
        if balances:
            merged.update(balances)
        return replace(
            self,
            balances=merged,
            locked=self.locked if locked is None else locked,
            last_updated_at=updated_at,
        )

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "year": self.year,
            "balances": {t.value: v for t, v in self.balances.items()},
            "last_updated_at": self.last_updated_at.isoformat(),
            "locked": self.locked,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LeaveBalance":
        return cls(
            employee_id=str(data["employee_id"]),
            year=int(data["year"]),
            balances={LeaveType(k): float(v) for k, v in (data.get("balances") or {}).items()},
            last_updated_at=datetime.fromisoformat(data["last_updated_at"]),
            locked=bool(data.get("locked", False)),
        )


@dataclass(frozen=True)
class LeaveTransaction:
    """Append-only usage record; used totals are recomputed from these."""

    transaction_id: str
    employee_id: str
    year: int
    leave_type: LeaveType
    days: float
    created_at: datetime
    source: TransactionSource

    def to_dict(self) -> dict:
        return {
            "transaction_id": self.transaction_id,
            "employee_id": self.employee_id,
            "year": self.year,
            "leave_type": self.leave_type.value,
            "days": self.days,
            "created_at": self.created_at.isoformat(),
            "source": self.source.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LeaveTransaction":
        return cls(
            transaction_id=str(data["transaction_id"]),
            employee_id=str(data["employee_id"]),
            year=int(data["year"]),
            leave_type=LeaveType(data["leave_type"]),
            days=float(data["days"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            source=TransactionSource(data["source"]),
        )


@dataclass(frozen=True)
class LeaveRequest:
    request_id: str
    employee_id: str
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: float
    year: int
    status: RequestStatus
    affects_salary: bool
    affects_insurance: bool
    paid_by: PaidBy
    created_at: datetime
    insurance_decision_applied: Optional[bool] = None
    notes: Optional[str] = None
    decided_at: Optional[datetime] = None

    @property
    def approved(self) -> bool:
        return self.status == RequestStatus.APPROVED

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "employee_id": self.employee_id,
            "leave_type": self.leave_type.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "total_days": self.total_days,
            "year": self.year,
            "status": self.status.value,
            "approved": self.approved,
            "affects_salary": self.affects_salary,
            "affects_insurance": self.affects_insurance,
            "paid_by": self.paid_by.value,
            "created_at": self.created_at.isoformat(),
            "insurance_decision_applied": self.insurance_decision_applied,
            "notes": self.notes,
            "decided_at": self.decided_at.isoformat() if self.decided_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LeaveRequest":
        decided_at = data.get("decided_at")
        return cls(
            request_id=str(data["request_id"]),
            employee_id=str(data["employee_id"]),
            leave_type=LeaveType(data["leave_type"]),
            start_date=parse_iso_date(data["start_date"]),
            end_date=parse_iso_date(data["end_date"]),
            total_days=float(data["total_days"]),
            year=int(data["year"]),
            status=RequestStatus(data["status"]),
            affects_salary=bool(data["affects_salary"]),
            affects_insurance=bool(data["affects_insurance"]),
            paid_by=PaidBy(data["paid_by"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            insurance_decision_applied=data.get("insurance_decision_applied"),
            notes=data.get("notes"),
            decided_at=datetime.fromisoformat(decided_at) if decided_at else None,
        )


@dataclass(frozen=True)
class LeaveAttendanceEntry:
    """One calendar day of an approved leave, as attendance sees it."""

    entry_id: str
    employee_id: str
    date: date
    status: LeaveAttendanceStatus
    leave_id: str
    paid_days: bool
    insurance_covered: bool
    counts_as_absent: bool

    def to_dict(self) -> dict:
        return {
            "entry_id": self.entry_id,
            "employee_id": self.employee_id,
            "date": self.date.isoformat(),
            "status": self.status.value,
            "leave_id": self.leave_id,
            "paid_days": self.paid_days,
            "insurance_covered": self.insurance_covered,
            "counts_as_absent": self.counts_as_absent,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LeaveAttendanceEntry":
        return cls(
            entry_id=str(data["entry_id"]),
            employee_id=str(data["employee_id"]),
            date=parse_iso_date(data["date"]),
            status=LeaveAttendanceStatus(data["status"]),
            leave_id=str(data["leave_id"]),
            paid_days=bool(data["paid_days"]),
            insurance_covered=bool(data["insurance_covered"]),
            counts_as_absent=bool(data["counts_as_absent"]),
        )


@dataclass(frozen=True)
class LeaveImpactSummary:
    deducted_days: float = 0
    insurance_included_days: float = 0
    insurance_excluded_days: float = 0


@dataclass(frozen=True)
class DayResolution:
    status: DayMark
    leave_id: Optional[str] = None


@dataclass(frozen=True)
class EmployeeLeaveSummary:
    employee_id: str
    year: int
    balance: Optional[LeaveBalance]
    requests: list = field(default_factory=list)
