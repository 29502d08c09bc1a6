"""Leave policy resolution.

A policy is never stored: it is recomputed from the leave type and the
employee context on every read, so two calls with the same inputs always
produce equal objects.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from ..core import constants as c
from ..core.enums import Gender, GenderRestriction, InsuranceHandledBy, LeaveType, PaidBy
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class LeavePolicy:
    id: LeaveType
    name: str
    allowed_genders: Tuple[Gender, ...]
    yearly_cap: float
    is_paid: bool
    affects_salary: bool
    affects_insurance: bool
    affects_attendance: bool
    counts_as_absent: bool
    paid_by: PaidBy
    insurance_handled_by: InsuranceHandledBy
    gender_restriction: GenderRestriction = GenderRestriction.ALL
    has_max_duration: bool = False
    max_days_per_request: Optional[float] = None

    @property
    def counts_for_insurance(self) -> bool:
        return self.insurance_handled_by != InsuranceHandledBy.NONE

    def to_dict(self) -> dict:
        return {
            "id": self.id.value,
            "name": self.name,
            "allowed_genders": [g.value for g in self.allowed_genders],
            "gender_restriction": self.gender_restriction.value,
            "yearly_cap": self.yearly_cap,
            "is_paid": self.is_paid,
            "affects_salary": self.affects_salary,
            "affects_insurance": self.affects_insurance,
            "affects_attendance": self.affects_attendance,
            "counts_as_absent": self.counts_as_absent,
            "counts_for_insurance": self.counts_for_insurance,
            "paid_by": self.paid_by.value,
            "insurance_handled_by": self.insurance_handled_by.value,
            "has_max_duration": self.has_max_duration,
            "max_days_per_request": self.max_days_per_request,
        }


@dataclass(frozen=True)
class PolicyContext:
    employee_gender: Optional[Gender] = None
    years_of_service: Optional[float] = None
    annual_override: Optional[float] = None


_BOTH = (Gender.MALE, Gender.FEMALE)
_FEMALE = (Gender.FEMALE,)

_BASE_POLICIES = {
    LeaveType.CASUAL: LeavePolicy(
        id=LeaveType.CASUAL,
        name="Casual leave",
        allowed_genders=_BOTH,
        yearly_cap=c.CASUAL_LEAVE_DAYS,
        is_paid=True,
        affects_salary=False,
        affects_insurance=False,
        affects_attendance=False,
        counts_as_absent=False,
        paid_by=PaidBy.SCHOOL,
        insurance_handled_by=InsuranceHandledBy.SCHOOL,
    ),
    LeaveType.ANNUAL: LeavePolicy(
        id=LeaveType.ANNUAL,
        name="Annual leave",
        allowed_genders=_BOTH,
        yearly_cap=0,
        is_paid=True,
        affects_salary=False,
        affects_insurance=False,
        affects_attendance=False,
        counts_as_absent=False,
        paid_by=PaidBy.SCHOOL,
        insurance_handled_by=InsuranceHandledBy.SCHOOL,
    ),
    # Insurance effect of sick leave is decided per request, not here.
    LeaveType.SICK: LeavePolicy(
        id=LeaveType.SICK,
        name="Sick leave",
        allowed_genders=_BOTH,
        yearly_cap=c.SICK_LEAVE_DAYS,
        is_paid=False,
        affects_salary=True,
        affects_insurance=False,
        affects_attendance=True,
        counts_as_absent=True,
        paid_by=PaidBy.SCHOOL,
        insurance_handled_by=InsuranceHandledBy.SCHOOL,
    ),
    LeaveType.CHILD_CARE: LeavePolicy(
        id=LeaveType.CHILD_CARE,
        name="Child-care leave",
        allowed_genders=_FEMALE,
        yearly_cap=c.CHILD_CARE_LEAVE_DAYS,
        is_paid=False,
        affects_salary=True,
        affects_insurance=True,
        affects_attendance=True,
        counts_as_absent=False,
        paid_by=PaidBy.EMPLOYEE,
        insurance_handled_by=InsuranceHandledBy.NONE,
    ),
    LeaveType.MATERNITY: LeavePolicy(
        id=LeaveType.MATERNITY,
        name="Maternity leave",
        allowed_genders=_FEMALE,
        yearly_cap=c.MATERNITY_LEAVE_DAYS,
        is_paid=False,
        affects_salary=False,
        affects_insurance=False,
        affects_attendance=True,
        counts_as_absent=False,
        paid_by=PaidBy.SCHOOL,
        insurance_handled_by=InsuranceHandledBy.SCHOOL,
    ),
    LeaveType.UNPAID: LeavePolicy(
        id=LeaveType.UNPAID,
        name="Unpaid leave",
        allowed_genders=_BOTH,
        yearly_cap=c.UNPAID_LEAVE_DAYS,
        is_paid=False,
        affects_salary=True,
        affects_insurance=True,
        affects_attendance=True,
        counts_as_absent=True,
        paid_by=PaidBy.EMPLOYEE,
        insurance_handled_by=InsuranceHandledBy.NONE,
    ),
}

_DURATION_CAPPED = frozenset({LeaveType.SICK, LeaveType.CHILD_CARE, LeaveType.MATERNITY})


def coerce_leave_type(value: Union[LeaveType, str]) -> LeaveType:
    if isinstance(value, LeaveType):
        return value
    try:
        return LeaveType(str(value).strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown leave type: {value!r}")


def annual_cap(context: PolicyContext) -> float:
    if context.annual_override is not None:
        return float(context.annual_override)
    years = context.years_of_service
    if years is None or years < 1:
        return 0
    if years <= c.ANNUAL_LEAVE_SENIOR_AFTER_YEARS:
        return c.ANNUAL_LEAVE_DAYS_JUNIOR
    return c.ANNUAL_LEAVE_DAYS_SENIOR


def resolve_leave_policy(
    leave_type: Union[LeaveType, str],
    context: Optional[PolicyContext] = None,
) -> LeavePolicy:
    leave_type = coerce_leave_type(leave_type)
    context = context or PolicyContext()
    base = _BASE_POLICIES[leave_type]

    cap = annual_cap(context) if leave_type == LeaveType.ANNUAL else base.yearly_cap

    if len(base.allowed_genders) == 1:
        restriction = GenderRestriction.FEMALE if base.allowed_genders[0] == Gender.FEMALE else GenderRestriction.MALE
    else:
        restriction = GenderRestriction.ALL

    has_max_duration = leave_type in _DURATION_CAPPED
    return replace(
        base,
        yearly_cap=cap,
        gender_restriction=restriction,
        has_max_duration=has_max_duration,
        max_days_per_request=cap if has_max_duration else None,
    )


def is_gender_eligible(policy: LeavePolicy, gender: Optional[Gender]) -> bool:
    # Unknown gender only qualifies for leave open to everyone.
    if gender is None:
        return len(policy.allowed_genders) > 1
    return gender in policy.allowed_genders


def normalize_gender(value: Optional[str]) -> Optional[Gender]:
    if value is None:
        return None
    if isinstance(value, Gender):
        return value
    text = str(value).strip()
    if text in ("Male", "ذكر"):
        return Gender.MALE
    if text in ("Female", "أنثى"):
        return Gender.FEMALE
    return None


def derive_gender_from_national_id(national_id: Optional[str]) -> Optional[Gender]:
    """13th digit of a 14-digit national id: odd for men, even for women."""
    digits = re.sub(r"\D", "", national_id or "")
    if len(digits) != 14:
        return None
    return Gender.FEMALE if int(digits[12]) % 2 == 0 else Gender.MALE


def resolve_employee_gender(employee) -> Optional[Gender]:
    if employee is None:
        return None
    return normalize_gender(getattr(employee, "gender", None)) or derive_gender_from_national_id(
        getattr(employee, "national_id", None)
    )
