from __future__ import annotations

import logging
from dataclasses import dataclass

from ...common.money import clamp_non_negative
from ...core.constants import DEFAULT_WAGE_DIVISOR_DAYS, WORK_HOURS_PER_DAY
from ...core.enums import Gender
from ...core.exceptions import GenderSalaryInconsistency
from ..model import (
    EmployeePayrollInput,
    LeaveUsageSummary,
    PayrollAttendanceSummary,
    PayrollCalculationInput,
    PayrollCalculationResult,
    PayrollDeductions,
)
from .base import PayrollCalculator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedLeave:
    annual_paid: float
    casual_paid: float
    annual_excess: float
    casual_excess: float
    sick: float
    maternity: float
    child_care: float
    unpaid: float

    @property
    def unpaid_days(self) -> float:
        return self.sick + self.maternity + self.child_care + self.unpaid + self.annual_excess + self.casual_excess


def normalize_leave_usage(usage: LeaveUsageSummary) -> NormalizedLeave:
    """Clamp every figure at zero; annual/casual beyond balance become unpaid days."""
    annual = clamp_non_negative(usage.annual_days)
    casual = clamp_non_negative(usage.casual_days)
    annual_balance = clamp_non_negative(usage.annual_balance)
    casual_balance = clamp_non_negative(usage.casual_balance)
    return NormalizedLeave(
        annual_paid=min(annual, annual_balance),
        casual_paid=min(casual, casual_balance),
        annual_excess=clamp_non_negative(annual - annual_balance),
        casual_excess=clamp_non_negative(casual - casual_balance),
        sick=clamp_non_negative(usage.sick_days),
        maternity=clamp_non_negative(usage.maternity_days),
        child_care=clamp_non_negative(usage.child_care_days),
        unpaid=clamp_non_negative(usage.unpaid_days),
    )


def resolve_daily_wage(employee: EmployeePayrollInput, attendance: PayrollAttendanceSummary) -> float:
    if employee.daily_wage and employee.daily_wage > 0:
        return float(employee.daily_wage)
    divisor = attendance.total_working_days if attendance.total_working_days > 0 else DEFAULT_WAGE_DIVISOR_DAYS
    return employee.monthly_gross_salary / divisor


def resolve_delay_deduction(attendance: PayrollAttendanceSummary, daily_wage: float) -> float:
    if attendance.delay_deduction_amount is not None:
        return float(attendance.delay_deduction_amount)
    if attendance.total_working_days <= 0:
        return 0.0
    hourly_rate = daily_wage / WORK_HOURS_PER_DAY
    return clamp_non_negative(attendance.delay_minutes / 60 * hourly_rate)


class StandardPayrollCalculator(PayrollCalculator):
    """Standard monthly rule: gross minus unpaid days and lateness, not below 0."""

    def calculate(self, data: PayrollCalculationInput) -> PayrollCalculationResult:
        employee, attendance, usage = data.employee, data.attendance, data.leave_usage

        if employee.gender == Gender.MALE and (usage.maternity_days > 0 or usage.child_care_days > 0):
            raise GenderSalaryInconsistency("Maternity or child-care leave is not allowed for male employees")

        daily_wage = resolve_daily_wage(employee, attendance)
        delay_deduction = resolve_delay_deduction(attendance, daily_wage)
        leave = normalize_leave_usage(usage)

        total_working_days = clamp_non_negative(attendance.total_working_days)
        unpaid_days = clamp_non_negative(leave.unpaid_days + clamp_non_negative(attendance.absent_days))
        paid_days = clamp_non_negative(total_working_days - unpaid_days)
        absence_deduction = clamp_non_negative(unpaid_days * daily_wage)

        gross = employee.monthly_gross_salary
        net = clamp_non_negative(gross - absence_deduction - delay_deduction)
        logger.debug(
            "Payroll %s %s/%s: daily_wage=%.2f unpaid_days=%s absence=%.2f delay=%.2f net=%.2f",
            employee.employee_id,
            data.context.month,
            data.context.year,
            daily_wage,
            unpaid_days,
            absence_deduction,
            delay_deduction,
            net,
        )

        return PayrollCalculationResult(
            employee_id=employee.employee_id,
            total_working_days=total_working_days,
            paid_days=paid_days,
            unpaid_days=unpaid_days,
            daily_wage=daily_wage,
            gross_salary=gross,
            deductions=PayrollDeductions(absence_deduction=absence_deduction, delay_deduction=delay_deduction),
            applies_insurance=leave.child_care <= 0,
            net_pay_before_tax=net,
        )


def calculate_monthly_payroll(data: PayrollCalculationInput) -> PayrollCalculationResult:
    return StandardPayrollCalculator().calculate(data)
