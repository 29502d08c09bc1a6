from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.school_hr.school_hr.attendance.kv_attendance_repository import KVAttendanceRepository
from src.school_hr.school_hr.attendance.model import SchedulePolicy
from src.school_hr.school_hr.attendance.service import AttendanceService
from src.school_hr.school_hr.core.enums import LeaveType
from src.school_hr.school_hr.core.exceptions import NotFoundError, ValidationError
from src.school_hr.school_hr.employees.kv_employee_repository import KVEmployeeRepository
from src.school_hr.school_hr.employees.model import Employee
from src.school_hr.school_hr.leave.kv_leave_repository import (
    KVLeaveAttendanceRepository,
    KVLeaveLedgerRepository,
    KVLeaveRequestRepository,
)
from src.school_hr.school_hr.leave.ledger import LeaveBalanceLedger
from src.school_hr.school_hr.leave.service import LeaveRequestService
from src.school_hr.school_hr.payroll.accounts import Account, KVAccountDirectory, KVLedgerSink
from src.school_hr.school_hr.payroll.drafts import KVPayrollDraftRepository
from src.school_hr.school_hr.payroll.model import PayrollComponents
from src.school_hr.school_hr.payroll.posting import KVPostingRepository, PayrollPostingService
from src.school_hr.school_hr.payroll.service import PayrollService
from src.school_hr.school_hr.payroll.settings import InsuranceSettings, PayrollSettings
from src.school_hr.school_hr.payroll.settings_repository import KVPayrollSettingsRepository
from src.school_hr.school_hr.storage.kv_store import InMemoryKeyValueStore

CHART = [
    Account("A1", "5100", "Salary Expense"),
    Account("A2", "5110", "Incentives"),
    Account("A3", "5120", "Allowances"),
    Account("A4", "5130", "Employer Insurance Expense"),
    Account("A5", "2100", "Insurance Payable"),
    Account("A6", "2200", "Tax Payable"),
    Account("A7", "2300", "Emergency Fund"),
    Account("A8", "1010", "Cash"),
]


def _clock():
    return datetime(2025, 3, 1, 9, 0, 0)


class _Env:
    def __init__(self):
        store = InMemoryKeyValueStore()
        employees = KVEmployeeRepository(store)
        employees.save(
            Employee(
                employee_id="E1",
                full_name="Alice",
                gender="Female",
                hire_date=date(2020, 1, 1),
                monthly_gross_salary=6600,
            )
        )
        ledger = LeaveBalanceLedger(KVLeaveLedgerRepository(store), employees, clock=_clock)
        self.leaves = LeaveRequestService(
            KVLeaveRequestRepository(store),
            KVLeaveAttendanceRepository(store),
            ledger,
            employees,
            clock=_clock,
        )
        self.attendance = AttendanceService(
            KVAttendanceRepository(store),
            employees,
            self.leaves,
            policy=SchedulePolicy("08:00", "14:00", 10),
            weekend_days=(4, 5),
        )
        accounts = KVAccountDirectory(store)
        accounts.save_all(CHART)
        self.ledger = KVLedgerSink(store, clock=_clock)
        self.postings = PayrollPostingService(KVPostingRepository(store), accounts, self.ledger, clock=_clock)
        self.payroll = PayrollService(
            employees,
            self.attendance,
            self.leaves,
            KVPayrollSettingsRepository(store),
            KVPayrollDraftRepository(store),
            self.postings,
        )


@pytest.fixture()
def env():
    return _Env()


def test_row_combines_attendance_and_settings(env):
    env.attendance.record_day("E1", date(2025, 3, 3), check_in="09:00", check_out="14:00")
    env.attendance.record_day("E1", date(2025, 3, 4))

    row = env.payroll.prepare_row("E1", 3, 2025)

    assert row.basic_salary == 6600
    assert row.gross_salary == 6600
    assert row.absences_deduction == 300
    assert row.lateness_deduction == 37.5
    assert row.insurance_employee == 726
    assert row.insurance_employer == 1237.5
    assert row.tax == 138.41
    assert row.net_salary == 5398.09
    assert row.approved is False


def test_sick_leave_days_are_unpaid(env):
    req = env.leaves.add_leave_request(
        employee_id="E1",
        leave_type=LeaveType.SICK,
        start_date=date(2025, 3, 10),
        end_date=date(2025, 3, 11),
    )
    env.leaves.approve_leave_request(req.request_id)

    row = env.payroll.prepare_row("E1", 3, 2025)

    assert row.absences_deduction == 600


def test_components_feed_gross_and_overrides(env):
    env.payroll.save_settings(PayrollSettings(insurance=InsuranceSettings(employee_percent=10, employer_percent=20)))

    row = env.payroll.prepare_row(
        "E1",
        3,
        2025,
        PayrollComponents(basic_salary=5000, incentives=400, allowances=600, non_insurable_amount=1000),
    )

    assert row.gross_salary == 6000
    assert row.insurance_employee == 500
    assert row.insurance_employer == 1000


def test_unknown_employee(env):
    with pytest.raises(NotFoundError):
        env.payroll.prepare_row("NOPE", 3, 2025)


def test_month_run_draft_approve_post(env):
    rows = env.payroll.prepare_month(3, 2025)
    assert [r.employee_id for r in rows] == ["E1"]
    assert env.payroll.get_draft(3, 2025) == rows

    approved = env.payroll.approve_draft(3, 2025)
    assert all(r.approved for r in approved)

    posting = env.payroll.post_month(3, 2025, posted_by="hr-admin")

    entry = env.ledger.get_entry(posting.journal_entry_id)
    assert entry.total_debit == entry.total_credit
    assert entry.total_debit == Decimal("7837.50")
    with pytest.raises(ValidationError):
        env.payroll.save_draft(3, 2025, approved)


def test_approve_without_draft(env):
    with pytest.raises(NotFoundError):
        env.payroll.approve_draft(3, 2025)


def _approve(env, leave_type, start, end, **kwargs):
    req = env.leaves.add_leave_request(
        employee_id="E1",
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        **kwargs,
    )
    env.leaves.approve_leave_request(req.request_id)
    return req


def test_absence_recorded_before_sick_leave_is_charged_once(env):
    env.attendance.record_day("E1", date(2025, 3, 10))
    _approve(env, LeaveType.SICK, date(2025, 3, 10), date(2025, 3, 10))

    row = env.payroll.prepare_row("E1", 3, 2025)

    assert env.attendance.payroll_attendance("E1", 3, 2025).absent_days == 0
    assert row.absences_deduction == 300


def test_absence_covered_by_annual_leave_is_paid(env):
    env.attendance.record_day("E1", date(2025, 3, 10))
    _approve(env, LeaveType.ANNUAL, date(2025, 3, 10), date(2025, 3, 10))

    row = env.payroll.prepare_row("E1", 3, 2025)

    assert row.absences_deduction == 0
    assert row.net_salary == pytest.approx(row.gross_salary - row.insurance_employee - row.tax)


def test_leave_usage_follows_requested_days_not_calendar_span(env):
    _approve(env, LeaveType.SICK, date(2025, 3, 7), date(2025, 3, 9), total_days=1)

    usage = env.leaves.build_leave_usage_summary("E1", 3, 2025)
    row = env.payroll.prepare_row("E1", 3, 2025)

    assert usage.sick_days == 1
    assert row.absences_deduction == 300
