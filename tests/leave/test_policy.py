from __future__ import annotations

import pytest

from src.school_hr.school_hr.core.enums import Gender, GenderRestriction, InsuranceHandledBy, LeaveType, PaidBy
from src.school_hr.school_hr.core.exceptions import ValidationError
from src.school_hr.school_hr.employees.model import Employee
from src.school_hr.school_hr.leave.policy import (
    PolicyContext,
    derive_gender_from_national_id,
    is_gender_eligible,
    normalize_gender,
    resolve_employee_gender,
    resolve_leave_policy,
)


def test_same_inputs_resolve_to_equal_policies():
    ctx = PolicyContext(employee_gender=Gender.FEMALE, years_of_service=4, annual_override=None)

    for leave_type in LeaveType:
        assert resolve_leave_policy(leave_type, ctx) == resolve_leave_policy(leave_type, ctx)


@pytest.mark.parametrize(
    "years, override, expected",
    [
        (None, None, 0),
        (0, None, 0),
        (1, None, 21),
        (10, None, 21),
        (11, None, 30),
        (3, 15, 15),
    ],
)
def test_annual_cap_follows_tenure_and_override(years, override, expected):
    policy = resolve_leave_policy(LeaveType.ANNUAL, PolicyContext(years_of_service=years, annual_override=override))
    assert policy.yearly_cap == expected


def test_casual_leave_is_paid_and_neutral():
    policy = resolve_leave_policy("casual")

    assert policy.id == LeaveType.CASUAL
    assert policy.yearly_cap == 6
    assert policy.is_paid is True
    assert policy.affects_salary is False
    assert policy.affects_insurance is False
    assert policy.affects_attendance is False
    assert policy.gender_restriction == GenderRestriction.ALL
    assert policy.has_max_duration is False


def test_sick_leave_counts_as_absence_without_insurance_effect():
    policy = resolve_leave_policy(LeaveType.SICK)

    assert policy.yearly_cap == 180
    assert policy.is_paid is False
    assert policy.counts_as_absent is True
    assert policy.affects_insurance is False
    assert policy.has_max_duration is True
    assert policy.max_days_per_request == 180


def test_child_care_is_female_only_and_paid_by_employee():
    policy = resolve_leave_policy(LeaveType.CHILD_CARE)

    assert policy.allowed_genders == (Gender.FEMALE,)
    assert policy.gender_restriction == GenderRestriction.FEMALE
    assert policy.yearly_cap == 730
    assert policy.affects_salary is True
    assert policy.affects_insurance is True
    assert policy.paid_by == PaidBy.EMPLOYEE
    assert policy.insurance_handled_by == InsuranceHandledBy.NONE
    assert policy.counts_for_insurance is False


def test_maternity_paid_by_school_and_keeps_insurance():
    policy = resolve_leave_policy(LeaveType.MATERNITY)

    assert policy.yearly_cap == 90
    assert policy.is_paid is False
    assert policy.affects_insurance is False
    assert policy.paid_by == PaidBy.SCHOOL
    assert policy.max_days_per_request == 90


def test_unpaid_leave_affects_salary_and_insurance():
    policy = resolve_leave_policy(LeaveType.UNPAID)

    assert policy.yearly_cap == 365
    assert policy.affects_salary is True
    assert policy.affects_insurance is True
    assert policy.counts_as_absent is True


def test_unknown_leave_type_is_rejected():
    with pytest.raises(ValidationError):
        resolve_leave_policy("SABBATICAL")


def test_gender_eligibility():
    maternity = resolve_leave_policy(LeaveType.MATERNITY)
    casual = resolve_leave_policy(LeaveType.CASUAL)

    assert is_gender_eligible(maternity, Gender.FEMALE) is True
    assert is_gender_eligible(maternity, Gender.MALE) is False
    assert is_gender_eligible(maternity, None) is False
    assert is_gender_eligible(casual, None) is True


def test_gender_from_labels_and_national_id():
    assert normalize_gender("ذكر") == Gender.MALE
    assert normalize_gender("أنثى") == Gender.FEMALE
    assert normalize_gender("unknown") is None

    assert derive_gender_from_national_id("29901011234522") == Gender.FEMALE
    assert derive_gender_from_national_id("29901011234512") == Gender.MALE
    assert derive_gender_from_national_id("12345") is None


def test_explicit_gender_wins_over_national_id():
    employee = Employee(employee_id="E9", full_name="Sara", gender="Male", national_id="29901011234522")
    assert resolve_employee_gender(employee) == Gender.MALE

    no_label = Employee(employee_id="E9", full_name="Sara", national_id="29901011234522")
    assert resolve_employee_gender(no_label) == Gender.FEMALE
