from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import as_date, parse_hhmm_minutes
from ..core.enums import AttendanceStatus
from ..leave.model import LeaveRequest
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, AttendanceSummary, SchedulePolicy, build_attendance_id

_DEFAULT_FACTORY = AttendanceStrategyFactory()


def find_approved_leave(employee_id: str, day: date, leaves: Iterable[LeaveRequest]) -> Optional[LeaveRequest]:
    for leave in leaves:
        if leave.employee_id == employee_id and leave.approved and leave.covers(day):
            return leave
    return None


def build_daily_attendance_record(
    employee_id: str,
    day,
    *,
    check_in: Optional[str] = None,
    check_out: Optional[str] = None,
    notes: Optional[str] = None,
    approved_leaves: Iterable[LeaveRequest] = (),
    policy: Optional[SchedulePolicy] = None,
    factory: Optional[AttendanceStrategyFactory] = None,
) -> AttendanceRecord:
    """Derive one day's record. Same inputs always give an equal record."""
    policy = policy or SchedulePolicy()
    factory = factory or _DEFAULT_FACTORY
    day = as_date(day)

    leave = find_approved_leave(employee_id, day, approved_leaves)
    in_minutes = parse_hhmm_minutes(check_in)
    out_minutes = parse_hhmm_minutes(check_out)

    strategy = factory.for_day(check_in=in_minutes, check_out=out_minutes, policy=policy, leave=leave)
    decision = strategy.decide(check_in=in_minutes, check_out=out_minutes, policy=policy, leave=leave)

    return AttendanceRecord(
        record_id=build_attendance_id(employee_id, day),
        employee_id=employee_id,
        date=day,
        check_in_time=check_in or None,
        check_out_time=check_out or None,
        status=decision.status,
        late_minutes=decision.late_minutes,
        early_leave_minutes=decision.early_leave_minutes,
        notes=notes,
        leave_type=decision.leave_type,
    )


def build_monthly_summary(
    employee_id: str,
    month: int,
    year: int,
    records: Iterable[AttendanceRecord],
) -> AttendanceSummary:
    absent = late = early = present = on_leave = 0
    for r in records:
        if r.employee_id != employee_id or r.date.month != month or r.date.year != year:
            continue
        if r.status == AttendanceStatus.ABSENT:
            absent += 1
        elif r.status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE):
            present += 1
        elif r.status == AttendanceStatus.ON_LEAVE:
            on_leave += 1
        late += r.late_minutes
        early += r.early_leave_minutes

    return AttendanceSummary(
        employee_id=employee_id,
        month=month,
        year=year,
        total_absent_days=absent,
        total_late_minutes=late,
        total_early_leave_minutes=early,
        present_days=present,
        leave_days=on_leave,
    )
