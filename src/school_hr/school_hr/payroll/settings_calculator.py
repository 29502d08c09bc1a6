from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..common.money import clamp_non_negative
from .settings import PayrollSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettingsImpactInput:
    base_salary: float
    incentives: float
    allowances: float
    attendance_deduction: float
    leave_deduction: float
    settings: PayrollSettings
    insurable_earnings: Optional[float] = None
    taxable_earnings: Optional[float] = None


@dataclass(frozen=True)
class BreakdownLine:
    rule: str
    amount: float
    note: Optional[str] = None


@dataclass(frozen=True)
class SettingsImpactResult:
    gross_salary: float
    insurance_employee: float
    insurance_employer: float
    tax_deduction: float
    emergency_fund_deduction: float
    net_salary: float
    breakdown: List[BreakdownLine] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "gross_salary": self.gross_salary,
            "insurance_employee": self.insurance_employee,
            "insurance_employer": self.insurance_employer,
            "tax_deduction": self.tax_deduction,
            "emergency_fund_deduction": self.emergency_fund_deduction,
            "net_salary": self.net_salary,
            "breakdown": [{"rule": b.rule, "amount": b.amount, "note": b.note} for b in self.breakdown],
        }


def calculate_tax(taxable_base: float, settings: PayrollSettings) -> float:
    """Flat rate of the single bracket containing the base, applied to the whole base."""
    if not settings.taxes.is_tax_enabled:
        return 0.0
    base = clamp_non_negative(taxable_base)
    if base <= 0:
        return 0.0
    for bracket in sorted(settings.taxes.brackets, key=lambda b: b.from_):
        if bracket.contains(base):
            return clamp_non_negative(base * clamp_non_negative(bracket.percent) / 100)
    return 0.0


def calculate_payroll_settings_impact(data: SettingsImpactInput) -> SettingsImpactResult:
    settings = data.settings
    gross = (
        clamp_non_negative(data.base_salary)
        + clamp_non_negative(data.incentives)
        + clamp_non_negative(data.allowances)
    )
    attendance_deduction = clamp_non_negative(data.attendance_deduction)
    leave_deduction = clamp_non_negative(data.leave_deduction)

    insurable = clamp_non_negative(data.insurable_earnings) if data.insurable_earnings is not None else gross
    if settings.insurance.enabled:
        insurance_employee = clamp_non_negative(insurable * clamp_non_negative(settings.insurance.employee_percent) / 100)
        insurance_employer = clamp_non_negative(insurable * clamp_non_negative(settings.insurance.employer_percent) / 100)
    else:
        insurance_employee = insurance_employer = 0.0

    taxable = data.taxable_earnings
    if taxable is None:
        taxable = gross - attendance_deduction - leave_deduction
    if settings.taxes.apply_after_insurance:
        taxable -= insurance_employee
    tax = calculate_tax(clamp_non_negative(taxable), settings)

    emergency_fund = 0.0
    if settings.emergency_fund.enabled:
        emergency_fund = clamp_non_negative(gross * clamp_non_negative(settings.emergency_fund.percent) / 100)

    net = clamp_non_negative(
        gross - attendance_deduction - leave_deduction - insurance_employee - tax - emergency_fund
    )
    logger.debug(
        "Settings impact: gross=%.2f ins_emp=%.2f ins_er=%.2f tax=%.2f ef=%.2f net=%.2f",
        gross,
        insurance_employee,
        insurance_employer,
        tax,
        emergency_fund,
        net,
    )

    return SettingsImpactResult(
        gross_salary=gross,
        insurance_employee=insurance_employee,
        insurance_employer=insurance_employer,
        tax_deduction=tax,
        emergency_fund_deduction=emergency_fund,
        net_salary=net,
        breakdown=[
            BreakdownLine("insurance.employee", insurance_employee),
            BreakdownLine("insurance.employer", insurance_employer),
            BreakdownLine("tax.flat", tax),
            BreakdownLine("emergency.fund", emergency_fund),
        ],
    )
