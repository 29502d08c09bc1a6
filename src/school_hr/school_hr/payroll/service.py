from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Mapping, Optional, Sequence

from ..attendance.service import AttendanceService
from ..common.money import clamp_non_negative, round_money
from ..common.validators import require_month
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..leave.policy import resolve_employee_gender
from ..leave.service import LeaveRequestService
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .drafts import PayrollDraftRepository
from .model import (
    EmployeePayrollInput,
    PayrollCalculationInput,
    PayrollComponents,
    PayrollMonthContext,
    PayrollRow,
)
from .posting import PayrollPosting, PayrollPostingService
from .settings import PayrollSettings
from .settings_calculator import SettingsImpactInput, calculate_payroll_settings_impact
from .settings_repository import PayrollSettingsRepository

logger = logging.getLogger(__name__)


def _money(value: float) -> float:
    return float(round_money(value))


class PayrollService:
    """Monthly payroll run: prepare rows, review as a draft, approve, post."""

    def __init__(
        self,
        employees: EmployeeRepository,
        attendance: AttendanceService,
        leaves: LeaveRequestService,
        settings: PayrollSettingsRepository,
        drafts: PayrollDraftRepository,
        postings: PayrollPostingService,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._employees = employees
        self._attendance = attendance
        self._leaves = leaves
        self._settings = settings
        self._drafts = drafts
        self._postings = postings
        self._calculator = calculator or StandardPayrollCalculator()

    def get_settings(self) -> PayrollSettings:
        return self._settings.load()

    def save_settings(self, settings: PayrollSettings) -> PayrollSettings:
        self._settings.save(settings)
        logger.info("Payroll settings replaced")
        return settings

    def prepare_row(
        self,
        employee_id: str,
        month: int,
        year: int,
        components: Optional[PayrollComponents] = None,
    ) -> PayrollRow:
        month = require_month(month)
        year = int(year)
        components = components or PayrollComponents()

        employee = self._employees.get_by_id(employee_id)
        if employee is None:
            raise NotFoundError(f"Employee {employee_id} not found")

        basic = components.basic_salary if components.basic_salary is not None else employee.monthly_gross_salary
        result = self._calculator.calculate(
            PayrollCalculationInput(
                employee=EmployeePayrollInput(
                    employee_id=employee.employee_id,
                    gender=resolve_employee_gender(employee),
                    monthly_gross_salary=float(basic or 0),
                    daily_wage=employee.daily_wage,
                ),
                attendance=self._attendance.payroll_attendance(employee_id, month, year),
                leave_usage=self._leaves.build_leave_usage_summary(employee_id, month, year),
                context=PayrollMonthContext(month=month, year=year),
            )
        )

        absences = result.deductions.absence_deduction
        lateness = result.deductions.delay_deduction
        leave_deduction = clamp_non_negative(components.leave_deduction)
        gross = clamp_non_negative(basic) + clamp_non_negative(components.incentives) + clamp_non_negative(components.allowances)

        insurable = None
        if not result.applies_insurance:
            insurable = 0.0
        elif components.non_insurable_amount:
            insurable = clamp_non_negative(gross - components.non_insurable_amount)

        taxable = None
        if components.non_taxable_amount:
            # Deductions still reduce the taxable figure when part of gross is exempt.
            taxable = clamp_non_negative(gross - components.non_taxable_amount - absences - lateness - leave_deduction)

        impact = calculate_payroll_settings_impact(
            SettingsImpactInput(
                base_salary=basic,
                incentives=components.incentives,
                allowances=components.allowances,
                attendance_deduction=absences + lateness,
                leave_deduction=leave_deduction,
                settings=self._settings.load(),
                insurable_earnings=insurable,
                taxable_earnings=taxable,
            )
        )

        row = PayrollRow(
            employee_id=employee.employee_id,
            basic_salary=_money(clamp_non_negative(basic)),
            incentives=_money(clamp_non_negative(components.incentives)),
            allowances=_money(clamp_non_negative(components.allowances)),
            gross_salary=0.0,
            absences_deduction=_money(absences),
            lateness_deduction=_money(lateness),
            leave_deduction=_money(leave_deduction),
            insurance_employee=_money(impact.insurance_employee),
            insurance_employer=_money(impact.insurance_employer),
            tax=_money(impact.tax_deduction),
            emergency_fund=_money(impact.emergency_fund_deduction),
            net_salary=0.0,
        )
        # Gross and net from the rounded parts so posted rows always balance to the cent.
        gross_salary = _money(row.basic_salary + row.incentives + row.allowances)
        net = (
            gross_salary
            - row.absences_deduction
            - row.lateness_deduction
            - row.leave_deduction
            - row.insurance_employee
            - row.tax
            - row.emergency_fund
        )
        row = replace(row, gross_salary=gross_salary, net_salary=_money(clamp_non_negative(net)))
        logger.debug("Prepared payroll row %s %02d/%s: net=%.2f", employee_id, month, year, row.net_salary)
        return row

    def prepare_month(
        self,
        month: int,
        year: int,
        *,
        components: Optional[Mapping[str, PayrollComponents]] = None,
        employee_ids: Optional[Iterable[str]] = None,
    ) -> List[PayrollRow]:
        """Prepare rows for the given (or all) employees and store them as the month's draft."""
        components = components or {}
        ids = list(employee_ids) if employee_ids is not None else [e.employee_id for e in self._employees.list_all()]
        rows = [self.prepare_row(emp_id, month, year, components.get(emp_id)) for emp_id in ids]
        return self.save_draft(month, year, rows)

    def save_draft(self, month: int, year: int, rows: Sequence[PayrollRow]) -> List[PayrollRow]:
        month = require_month(month)
        if self._postings.is_month_posted(month, int(year)):
            raise ValidationError(f"Payroll {month:02d}/{year} is posted; reverse it before editing")
        rows = list(rows)
        self._drafts.save(month, int(year), rows)
        logger.info("Saved payroll draft %02d/%s with %s rows", month, year, len(rows))
        return rows

    def get_draft(self, month: int, year: int) -> List[PayrollRow]:
        return self._drafts.get(require_month(month), int(year))

    def approve_draft(
        self,
        month: int,
        year: int,
        *,
        employee_ids: Optional[Iterable[str]] = None,
    ) -> List[PayrollRow]:
        rows = self.get_draft(month, year)
        if not rows:
            raise NotFoundError(f"No payroll draft for {month:02d}/{year}")
        selected = set(employee_ids) if employee_ids is not None else None
        approved = [
            replace(r, approved=True) if selected is None or r.employee_id in selected else r
            for r in rows
        ]
        return self.save_draft(month, year, approved)

    def post_month(
        self,
        month: int,
        year: int,
        *,
        posted_by: str,
        account_codes: Optional[Mapping[str, str]] = None,
    ) -> PayrollPosting:
        return self._postings.post_payroll(
            month=month,
            year=year,
            posted_by=posted_by,
            rows=self.get_draft(month, year),
            account_codes=account_codes,
        )
