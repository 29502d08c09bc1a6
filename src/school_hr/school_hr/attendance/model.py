from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Optional

from ..common.datetime_utils import parse_hhmm_minutes, parse_iso_date
from ..core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_WORK_END, DEFAULT_WORK_START
from ..core.enums import AttendanceStatus, LeaveType


@dataclass(frozen=True)
class SchedulePolicy:
    """Work schedule the daily status is derived against."""

    work_start: str = DEFAULT_WORK_START
    work_end: str = DEFAULT_WORK_END
    late_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES

    @property
    def start_minutes(self) -> int:
        return parse_hhmm_minutes(self.work_start) or 0

    @property
    def end_minutes(self) -> int:
        return parse_hhmm_minutes(self.work_end) or 0


def build_attendance_id(employee_id: str, day: date) -> str:
    return f"ATT-{employee_id}-{day.isoformat()}"


@dataclass(frozen=True)
class AttendanceRecord:
    record_id: str
    employee_id: str
    date: date
    check_in_time: Optional[str]
    check_out_time: Optional[str]
    status: AttendanceStatus
    late_minutes: int = 0
    early_leave_minutes: int = 0
    notes: Optional[str] = None
    leave_type: Optional[LeaveType] = None

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "employee_id": self.employee_id,
            "date": self.date.isoformat(),
            "check_in_time": self.check_in_time,
            "check_out_time": self.check_out_time,
            "status": self.status.value,
            "late_minutes": self.late_minutes,
            "early_leave_minutes": self.early_leave_minutes,
            "notes": self.notes,
            "leave_type": self.leave_type.value if self.leave_type else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AttendanceRecord":
        leave_type = data.get("leave_type")
        return cls(
            record_id=str(data["record_id"]),
            employee_id=str(data["employee_id"]),
            date=parse_iso_date(data["date"]),
            check_in_time=data.get("check_in_time"),
            check_out_time=data.get("check_out_time"),
            status=AttendanceStatus(data["status"]),
            late_minutes=int(data.get("late_minutes") or 0),
            early_leave_minutes=int(data.get("early_leave_minutes") or 0),
            notes=data.get("notes"),
            leave_type=LeaveType(leave_type) if leave_type else None,
        )


@dataclass(frozen=True)
class AttendanceSummary:
    employee_id: str
    month: int
    year: int
    total_absent_days: int = 0
    total_late_minutes: int = 0
    total_early_leave_minutes: int = 0
    present_days: int = 0
    leave_days: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
