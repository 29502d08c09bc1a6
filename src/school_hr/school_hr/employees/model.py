from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..common.datetime_utils import full_years_between, parse_iso_date


@dataclass(frozen=True)
class Employee:
    """Domain entity: the employee attributes the HR core reads.

    `gender` is the raw label as captured ("Male", "Female", "ذكر", "أنثى");
    see `leave.policy.resolve_employee_gender` for the normalized value.
    """

    employee_id: str
    full_name: str
    gender: Optional[str] = None
    national_id: Optional[str] = None
    hire_date: Optional[date] = None
    annual_leave_override: Optional[float] = None
    maternity_eligible: Optional[bool] = None
    monthly_gross_salary: float = 0.0
    daily_wage: Optional[float] = None

    def years_of_service(self, as_of: date) -> Optional[int]:
        if self.hire_date is None:
            return None
        return full_years_between(self.hire_date, as_of)

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "full_name": self.full_name,
            "gender": self.gender,
            "national_id": self.national_id,
            "hire_date": self.hire_date.isoformat() if self.hire_date else None,
            "annual_leave_override": self.annual_leave_override,
            "maternity_eligible": self.maternity_eligible,
            "monthly_gross_salary": self.monthly_gross_salary,
            "daily_wage": self.daily_wage,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Employee":
        hire_date = data.get("hire_date")
        return cls(
            employee_id=str(data["employee_id"]),
            full_name=str(data.get("full_name") or ""),
            gender=data.get("gender"),
            national_id=data.get("national_id"),
            hire_date=parse_iso_date(hire_date) if hire_date else None,
            annual_leave_override=data.get("annual_leave_override"),
            maternity_eligible=data.get("maternity_eligible"),
            monthly_gross_salary=float(data.get("monthly_gross_salary") or 0),
            daily_wage=data.get("daily_wage"),
        )
