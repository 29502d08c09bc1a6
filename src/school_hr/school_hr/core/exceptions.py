from __future__ import annotations

from .enums import ErrorKind


class DomainError(Exception):
    """Base exception for business rule violations."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind.value)
        self.message = message or self.kind.value


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class InvalidRequestState(DomainError):
    kind = ErrorKind.INVALID_REQUEST_STATE


class GenderIneligible(DomainError):
    kind = ErrorKind.GENDER_INELIGIBLE


class PolicyCapExceeded(DomainError):
    kind = ErrorKind.POLICY_CAP_EXCEEDED


class RequestDurationExceeded(DomainError):
    kind = ErrorKind.REQUEST_DURATION_EXCEEDED


class InsufficientBalance(DomainError):
    kind = ErrorKind.INSUFFICIENT_BALANCE


class BalanceLocked(DomainError):
    kind = ErrorKind.BALANCE_LOCKED


class ApprovalRequired(DomainError):
    kind = ErrorKind.APPROVAL_REQUIRED


class GenderSalaryInconsistency(DomainError):
    kind = ErrorKind.GENDER_SALARY_INCONSISTENCY


class AccountNotFound(DomainError):
    kind = ErrorKind.ACCOUNT_NOT_FOUND


class UnbalancedEntry(DomainError):
    kind = ErrorKind.UNBALANCED_ENTRY


class AlreadyPosted(DomainError):
    kind = ErrorKind.ALREADY_POSTED


class NoApprovedRows(DomainError):
    kind = ErrorKind.NO_APPROVED_ROWS
