from __future__ import annotations

from enum import Enum


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


class GenderRestriction(str, Enum):
    MALE = "male"
    FEMALE = "female"
    ALL = "all"


class LeaveType(str, Enum):
    """Leave type identifiers shared by policies, balances and requests."""

    ANNUAL = "ANNUAL"
    CASUAL = "CASUAL"
    SICK = "SICK"
    CHILD_CARE = "CHILD_CARE"
    MATERNITY = "MATERNITY"
    UNPAID = "UNPAID"


class PaidBy(str, Enum):
    SCHOOL = "SCHOOL"
    EMPLOYEE = "EMPLOYEE"


class InsuranceHandledBy(str, Enum):
    SCHOOL = "school"
    EMPLOYEE = "employee"
    NONE = "none"


class AttendanceStatus(str, Enum):
    """Daily attendance status derived by the attendance engine."""

    PRESENT = "Present"
    LATE = "Late"
    ABSENT = "Absent"
    ON_LEAVE = "OnLeave"
    HOLIDAY = "Holiday"


class LeaveAttendanceStatus(str, Enum):
    SICK_LEAVE = "SICK_LEAVE"
    MATERNITY_LEAVE = "MATERNITY_LEAVE"
    CHILDCARE_LEAVE = "CHILDCARE_LEAVE"
    CASUAL_LEAVE = "CASUAL_LEAVE"
    ANNUAL_LEAVE = "ANNUAL_LEAVE"
    UNPAID_LEAVE = "UNPAID_LEAVE"


class DayMark(str, Enum):
    """Coarse day mark used when reconciling absences against approved leave."""

    ABSENT = "ABSENT"
    LEAVE = "LEAVE"


class RequestStatus(str, Enum):
    """Approval flow state of a leave request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class TransactionSource(str, Enum):
    ATTENDANCE = "attendance"
    MANUAL = "manual"
    LEAVE_REQUEST = "leave_request"


class PostingStatus(str, Enum):
    POSTED = "Posted"
    REVERSED = "Reversed"


class ErrorKind(str, Enum):
    VALIDATION = "Validation"
    NOT_FOUND = "NotFound"
    INVALID_REQUEST_STATE = "InvalidRequestState"
    GENDER_INELIGIBLE = "GenderIneligible"
    POLICY_CAP_EXCEEDED = "PolicyCapExceeded"
    REQUEST_DURATION_EXCEEDED = "RequestDurationExceeded"
    INSUFFICIENT_BALANCE = "InsufficientBalance"
    BALANCE_LOCKED = "BalanceLocked"
    APPROVAL_REQUIRED = "ApprovalRequired"
    GENDER_SALARY_INCONSISTENCY = "GenderSalaryInconsistency"
    ACCOUNT_NOT_FOUND = "AccountNotFound"
    UNBALANCED_ENTRY = "UnbalancedEntry"
    ALREADY_POSTED = "AlreadyPosted"
    NO_APPROVED_ROWS = "NoApprovedRows"
