from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional

from ..common.datetime_utils import as_date, month_bounds, working_days_in_month
from ..common.validators import require_month, require_non_empty
from ..core.constants import DEFAULT_WEEKEND_DAYS
from ..core.exceptions import NotFoundError
from ..employees.repository import EmployeeRepository
from ..leave.model import LeaveRequest
from ..leave.service import LeaveRequestService
from ..payroll.model import PayrollAttendanceSummary
from .engine import build_daily_attendance_record, build_monthly_summary
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, AttendanceSummary, SchedulePolicy
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        leaves: LeaveRequestService,
        *,
        policy: Optional[SchedulePolicy] = None,
        weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._leaves = leaves
        self._policy = policy or SchedulePolicy()
        self._weekend_days = tuple(weekend_days)
        self._factory = strategy_factory or AttendanceStrategyFactory()

    @property
    def policy(self) -> SchedulePolicy:
        return self._policy

    def record_day(
        self,
        employee_id: str,
        day,
        *,
        check_in: Optional[str] = None,
        check_out: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        """Rebuild the day's record from scratch and store it over any previous one."""
        employee_id = require_non_empty(employee_id, "employee_id")
        if self._employees.get_by_id(employee_id) is None:
            raise NotFoundError(f"Employee {employee_id} not found")
        day = as_date(day)

        record = build_daily_attendance_record(
            employee_id,
            day,
            check_in=check_in,
            check_out=check_out,
            notes=notes,
            approved_leaves=self._leaves.approved_leaves(employee_id, day, day),
            policy=self._policy,
            factory=self._factory,
        )
        self._attendance.upsert(record)
        logger.info(
            "Attendance %s %s: status=%s late=%s early=%s",
            employee_id,
            day.isoformat(),
            record.status.value,
            record.late_minutes,
            record.early_leave_minutes,
        )
        return record

    def _rederive(self, records: Iterable[AttendanceRecord], leaves: Iterable[LeaveRequest]) -> List[AttendanceRecord]:
        """Rebuild stored records against the current approved leaves.

        Leave approved after a day was recorded still turns that day into OnLeave.
        """
        leaves = list(leaves)
        return [
            build_daily_attendance_record(
                r.employee_id,
                r.date,
                check_in=r.check_in_time,
                check_out=r.check_out_time,
                notes=r.notes,
                approved_leaves=leaves,
                policy=self._policy,
                factory=self._factory,
            )
            for r in records
        ]

    def get_day(self, employee_id: str, day: date) -> Optional[AttendanceRecord]:
        day = as_date(day)
        record = self._attendance.get_for_employee_and_date(employee_id, day)
        if record is None:
            return None
        (current,) = self._rederive([record], self._leaves.approved_leaves(employee_id, day, day))
        return current

    def monthly_summary(self, employee_id: str, month: int, year: int) -> AttendanceSummary:
        month = require_month(month)
        start, end = month_bounds(month, int(year))
        records = self._rederive(
            self._attendance.list_for_month(employee_id, month, int(year)),
            self._leaves.approved_leaves(employee_id, start, end),
        )
        return build_monthly_summary(employee_id, month, int(year), records)

    def payroll_attendance(self, employee_id: str, month: int, year: int) -> PayrollAttendanceSummary:
        summary = self.monthly_summary(employee_id, month, year)
        return PayrollAttendanceSummary(
            total_working_days=working_days_in_month(summary.month, summary.year, weekend_days=self._weekend_days),
            present_days=summary.present_days,
            absent_days=summary.total_absent_days,
            delay_minutes=summary.total_late_minutes,
        )
