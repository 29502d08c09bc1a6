from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

from ..core.enums import Gender


@dataclass(frozen=True)
class EmployeePayrollInput:
    employee_id: str
    gender: Optional[Gender]
    monthly_gross_salary: float
    daily_wage: Optional[float] = None


@dataclass(frozen=True)
class PayrollAttendanceSummary:
    """Attendance figures the payroll engine consumes for one month."""

    total_working_days: int
    present_days: int = 0
    absent_days: float = 0
    delay_minutes: int = 0
    delay_deduction_amount: Optional[float] = None


@dataclass(frozen=True)
class LeaveUsageSummary:
    annual_days: float = 0
    casual_days: float = 0
    sick_days: float = 0
    maternity_days: float = 0
    child_care_days: float = 0
    unpaid_days: float = 0
    annual_balance: float = 0
    casual_balance: float = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PayrollMonthContext:
    month: int
    year: int


@dataclass(frozen=True)
class PayrollCalculationInput:
    employee: EmployeePayrollInput
    attendance: PayrollAttendanceSummary
    leave_usage: LeaveUsageSummary
    context: PayrollMonthContext


@dataclass(frozen=True)
class PayrollDeductions:
    absence_deduction: float
    delay_deduction: float


@dataclass(frozen=True)
class PayrollCalculationResult:
    employee_id: str
    total_working_days: float
    paid_days: float
    unpaid_days: float
    daily_wage: float
    gross_salary: float
    deductions: PayrollDeductions
    applies_insurance: bool
    net_pay_before_tax: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PayrollComponents:
    """Per-employee inputs entered during payroll review."""

    basic_salary: Optional[float] = None
    incentives: float = 0
    allowances: float = 0
    non_insurable_amount: float = 0
    non_taxable_amount: float = 0
    leave_deduction: float = 0


@dataclass(frozen=True)
class PayrollRow:
    """One employee's settings-adjusted payroll line, as posted to the ledger."""

    employee_id: str
    basic_salary: float
    incentives: float
    allowances: float
    gross_salary: float
    absences_deduction: float
    lateness_deduction: float
    leave_deduction: float
    insurance_employee: float
    insurance_employer: float
    tax: float
    emergency_fund: float
    net_salary: float
    approved: bool = False

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PayrollRow":
        return cls(
            employee_id=str(data["employee_id"]),
            basic_salary=float(data.get("basic_salary") or 0),
            incentives=float(data.get("incentives") or 0),
            allowances=float(data.get("allowances") or 0),
            gross_salary=float(data.get("gross_salary") or 0),
            absences_deduction=float(data.get("absences_deduction") or 0),
            lateness_deduction=float(data.get("lateness_deduction") or 0),
            leave_deduction=float(data.get("leave_deduction") or 0),
            insurance_employee=float(data.get("insurance_employee") or 0),
            insurance_employer=float(data.get("insurance_employer") or 0),
            tax=float(data.get("tax") or 0),
            emergency_fund=float(data.get("emergency_fund") or 0),
            net_salary=float(data.get("net_salary") or 0),
            approved=bool(data.get("approved", False)),
        )
