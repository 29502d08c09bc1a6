from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Callable, Optional, Sequence, Union

from ..common.datetime_utils import count_overlap_days, inclusive_days, iter_dates, month_bounds, now_local
from ..core.enums import DayMark, LeaveAttendanceStatus, LeaveType, RequestStatus, TransactionSource
from ..core.exceptions import (
    DomainError,
    GenderIneligible,
    InsufficientBalance,
    InvalidRequestState,
    NotFoundError,
    PolicyCapExceeded,
    RequestDurationExceeded,
    ValidationError,
)
from ..employees.repository import EmployeeRepository
from ..payroll.model import LeaveUsageSummary
from .ledger import LeaveBalanceLedger
from .model import (
    DayResolution,
    EmployeeLeaveSummary,
    LeaveAttendanceEntry,
    LeaveImpactSummary,
    LeaveRequest,
)
from .policy import LeavePolicy, coerce_leave_type
from .repository import LeaveAttendanceRepository, LeaveRequestRepository

logger = logging.getLogger(__name__)

_BALANCE_CHECKED = frozenset({LeaveType.ANNUAL, LeaveType.CASUAL})

_ATTENDANCE_STATUS = {
    LeaveType.SICK: LeaveAttendanceStatus.SICK_LEAVE,
    LeaveType.MATERNITY: LeaveAttendanceStatus.MATERNITY_LEAVE,
    LeaveType.CHILD_CARE: LeaveAttendanceStatus.CHILDCARE_LEAVE,
    LeaveType.CASUAL: LeaveAttendanceStatus.CASUAL_LEAVE,
    LeaveType.ANNUAL: LeaveAttendanceStatus.ANNUAL_LEAVE,
    LeaveType.UNPAID: LeaveAttendanceStatus.UNPAID_LEAVE,
}


@dataclass(frozen=True)
class UsageResult:
    ok: bool
    error: Optional[DomainError] = None


def month_usage_days(leave: LeaveRequest, month: int, year: int) -> float:
    """Days of `leave` charged to the month, scaled so the whole range sums to `total_days`."""
    span = inclusive_days(leave.start_date, leave.end_date)
    overlap = count_overlap_days(leave.start_date, leave.end_date, month, year)
    if span <= 0 or overlap <= 0:
        return 0.0
    return leave.total_days * overlap / span


class LeaveRequestService:
    """Leave request lifecycle: PENDING -> APPROVED | REJECTED.

    Submission checks caps against every live request (pending and approved);
    approval re-checks against approved totals only, then debits the ledger
    and writes one attendance override per day for leave that affects attendance.
    """

    def __init__(
        self,
        requests: LeaveRequestRepository,
        leave_attendance: LeaveAttendanceRepository,
        ledger: LeaveBalanceLedger,
        employees: EmployeeRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._requests = requests
        self._leave_attendance = leave_attendance
        self._ledger = ledger
        self._employees = employees
        self._clock = clock

    def _totals(self, employee_id: str, year: int, leave_type: LeaveType, statuses: set[RequestStatus]) -> float:
        return sum(
            r.total_days
            for r in self._requests.list_for_employee(employee_id, year=year)
            if r.leave_type == leave_type and r.status in statuses
        )

    @staticmethod
    def _check_caps(policy: LeavePolicy, used_total: float, days: float) -> None:
        if policy.has_max_duration and policy.max_days_per_request and days > policy.max_days_per_request:
            raise RequestDurationExceeded(
                f"{policy.name} requests are limited to {policy.max_days_per_request:g} days"
            )
        if policy.yearly_cap > 0 and used_total + days > policy.yearly_cap:
            raise PolicyCapExceeded(f"{policy.name} exceeds the yearly limit of {policy.yearly_cap:g} days")

    def add_leave_request(
        self,
        *,
        employee_id: str,
        leave_type: Union[LeaveType, str],
        start_date: date,
        end_date: date,
        total_days: Optional[float] = None,
        notes: Optional[str] = None,
        insurance_decision_applied: Optional[bool] = None,
    ) -> LeaveRequest:
        leave_type = coerce_leave_type(leave_type)
        if end_date < start_date:
            raise ValidationError("End date must be on or after start date")
        days = float(total_days) if total_days is not None else float(inclusive_days(start_date, end_date))
        if days <= 0:
            raise ValidationError("Leave days must be positive")

        if not self._employees.get_by_id(employee_id):
            raise NotFoundError(f"Employee {employee_id} not found")

        year = start_date.year
        policy = self._ledger.get_policy_for_employee(employee_id, leave_type, year)
        if not self._ledger.is_eligible(employee_id, leave_type, year):
            raise GenderIneligible(f"{policy.name} is not available for this employee")

        live = {RequestStatus.PENDING, RequestStatus.APPROVED}
        self._check_caps(policy, self._totals(employee_id, year, leave_type, live), days)

        if leave_type in _BALANCE_CHECKED:
            balance = self._ledger.get_balance(employee_id, year)
            if balance is not None and days > balance.remaining(leave_type):
                raise InsufficientBalance(f"Insufficient {policy.name.lower()} balance")

        request = LeaveRequest(
            request_id=str(uuid.uuid4()),
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            total_days=days,
            year=year,
            status=RequestStatus.PENDING,
            affects_salary=policy.affects_salary,
            affects_insurance=policy.affects_insurance,
            paid_by=policy.paid_by,
            created_at=self._clock(),
            insurance_decision_applied=(
                (True if insurance_decision_applied is None else bool(insurance_decision_applied))
                if leave_type == LeaveType.SICK
                else None
            ),
            notes=(notes or "").strip() or None,
        )
        self._requests.create(request)
        logger.info(
            "Leave request %s created: employee=%s type=%s days=%s",
            request.request_id,
            employee_id,
            leave_type.value,
            days,
        )
        return request

    def get_request(self, request_id: str) -> LeaveRequest:
        request = self._requests.get(request_id)
        if not request:
            raise NotFoundError("Leave request not found")
        return request

    def approve_leave_request(self, request_id: str) -> LeaveRequest:
        request = self.get_request(request_id)

        with self._ledger.hold(request.employee_id, request.year):
            # Re-read under the lock so two approvals cannot both see PENDING.
            request = self.get_request(request_id)
            if request.status != RequestStatus.PENDING:
                raise InvalidRequestState("Leave request has already been decided")

            employee_id, year, leave_type = request.employee_id, request.year, request.leave_type
            policy = self._ledger.get_policy_for_employee(employee_id, leave_type, year)
            if not self._ledger.is_eligible(employee_id, leave_type, year):
                raise GenderIneligible(f"{policy.name} is not available for this employee")

            self._check_caps(
                policy,
                self._totals(employee_id, year, leave_type, {RequestStatus.APPROVED}),
                request.total_days,
            )

            if leave_type in _BALANCE_CHECKED:
                balance = self._ledger.get_balance(employee_id, year)
                if balance is None or request.total_days > balance.remaining(leave_type):
                    raise InsufficientBalance(f"Insufficient {policy.name.lower()} balance")

            self._ledger.apply_usage(
                employee_id,
                leave_type,
                request.total_days,
                year=year,
                source=TransactionSource.LEAVE_REQUEST,
                approved=True,
            )

            approved = replace(request, status=RequestStatus.APPROVED, decided_at=self._clock())
            self._requests.update(approved)

            if policy.affects_attendance:
                added = self._leave_attendance.add_entries(self._attendance_entries(approved, policy))
                logger.debug("Generated %s leave attendance entries for request %s", added, request_id)

        logger.info("Leave request %s approved", request_id)
        return approved

    @staticmethod
    def _attendance_entries(request: LeaveRequest, policy: LeavePolicy) -> list[LeaveAttendanceEntry]:
        if request.leave_type == LeaveType.SICK:
            insurance_covered = bool(request.insurance_decision_applied)
        else:
            insurance_covered = policy.counts_for_insurance
        return [
            LeaveAttendanceEntry(
                entry_id=f"{request.request_id}:{day.isoformat()}",
                employee_id=request.employee_id,
                date=day,
                status=_ATTENDANCE_STATUS[request.leave_type],
                leave_id=request.request_id,
                paid_days=policy.is_paid,
                insurance_covered=insurance_covered,
                counts_as_absent=policy.counts_as_absent,
            )
            for day in iter_dates(request.start_date, request.end_date)
        ]

    def reject_leave_request(self, request_id: str) -> LeaveRequest:
        """Reject a request.

        Rejecting an already-approved request only flips its status: the ledger
        debit and generated attendance entries are kept.
        """
        request = self.get_request(request_id)
        if request.status == RequestStatus.REJECTED:
            return request
        if request.status == RequestStatus.APPROVED:
            logger.warning(
                "Leave request %s rejected after approval; ledger debit and attendance entries are kept",
                request_id,
            )

        rejected = replace(request, status=RequestStatus.REJECTED, decided_at=self._clock())
        self._requests.update(rejected)
        logger.info("Leave request %s rejected", request_id)
        return rejected

    def list_requests(
        self,
        employee_id: str,
        *,
        year: Optional[int] = None,
        status: Optional[RequestStatus] = None,
    ) -> Sequence[LeaveRequest]:
        return self._requests.list_for_employee(employee_id, year=year, status=status)

    def approved_leaves(self, employee_id: str, start: date, end: date) -> list[LeaveRequest]:
        """Approved requests overlapping [start, end], across year boundaries."""
        out = []
        # Requests are filed under the year they start in; one may begin the year before.
        for year in range(start.year - 1, end.year + 1):
            for r in self._requests.list_for_employee(employee_id, year=year, status=RequestStatus.APPROVED):
                if r.start_date <= end and r.end_date >= start:
                    out.append(r)
        return out

    def get_employee_leave_summary(self, employee_id: str, year: int) -> EmployeeLeaveSummary:
        return EmployeeLeaveSummary(
            employee_id=employee_id,
            year=int(year),
            balance=self._ledger.get_balance(employee_id, year),
            requests=list(self._requests.list_for_employee(employee_id, year=year)),
        )

    def resolve_attendance_status(self, employee_id: str, day: date, current: DayMark) -> DayResolution:
        if current != DayMark.ABSENT:
            return DayResolution(status=current)
        for leave in self.approved_leaves(employee_id, day, day):
            if leave.covers(day):
                return DayResolution(status=DayMark.LEAVE, leave_id=leave.request_id)
        return DayResolution(status=DayMark.ABSENT)

    def calculate_leave_impact(self, employee_id: str, month: int, year: int) -> LeaveImpactSummary:
        start, end = month_bounds(month, year)
        deducted = included = excluded = 0
        for leave in self.approved_leaves(employee_id, start, end):
            share = month_usage_days(leave, month, year)
            if share <= 0:
                continue
            if leave.affects_salary:
                deducted += share
            if leave.affects_insurance:
                excluded += share
            else:
                included += share
        return LeaveImpactSummary(
            deducted_days=deducted,
            insurance_included_days=included,
            insurance_excluded_days=excluded,
        )

    def build_leave_usage_summary(self, employee_id: str, month: int, year: int) -> LeaveUsageSummary:
        """Per-type leave days for the month, with the annual/casual balance available to it.

        The available balance is what the ledger still holds plus what this
        month's approved leave already consumed. Each request is charged by its
        `total_days`, spread evenly over its date range.
        """
        start, end = month_bounds(month, year)
        days = {t: 0.0 for t in LeaveType}
        for leave in self.approved_leaves(employee_id, start, end):
            days[leave.leave_type] += month_usage_days(leave, month, year)

        balance = self._ledger.get_balance(employee_id, year)
        annual_left = balance.remaining(LeaveType.ANNUAL) if balance else 0.0
        casual_left = balance.remaining(LeaveType.CASUAL) if balance else 0.0
        return LeaveUsageSummary(
            annual_days=days[LeaveType.ANNUAL],
            casual_days=days[LeaveType.CASUAL],
            sick_days=days[LeaveType.SICK],
            maternity_days=days[LeaveType.MATERNITY],
            child_care_days=days[LeaveType.CHILD_CARE],
            unpaid_days=days[LeaveType.UNPAID],
            annual_balance=annual_left + days[LeaveType.ANNUAL],
            casual_balance=casual_left + days[LeaveType.CASUAL],
        )

    def apply_leave_usage(
        self,
        employee_id: str,
        leave_type: Union[LeaveType, str],
        days: float,
        *,
        year: int,
        source: TransactionSource = TransactionSource.ATTENDANCE,
        approved: bool = False,
    ) -> UsageResult:
        """Ledger debit reported as a result value instead of an exception."""
        try:
            self._ledger.apply_usage(employee_id, leave_type, days, year=year, source=source, approved=approved)
        except DomainError as e:
            logger.info("Leave usage refused for employee=%s: %s", employee_id, e.message)
            return UsageResult(ok=False, error=e)
        return UsageResult(ok=True)
