from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from datetime import date, datetime
from typing import Callable, Iterator, Mapping, Optional, Sequence, Union

from ..common.datetime_utils import now_local
from ..common.locks import KeyedLock
from ..core.enums import LeaveType, TransactionSource
from ..core.exceptions import (
    ApprovalRequired,
    BalanceLocked,
    GenderIneligible,
    InsufficientBalance,
    NotFoundError,
    PolicyCapExceeded,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .model import LeaveBalance, LeaveTransaction
from .policy import (
    LeavePolicy,
    PolicyContext,
    coerce_leave_type,
    is_gender_eligible,
    resolve_employee_gender,
    resolve_leave_policy,
)
from .repository import LeaveLedgerRepository

logger = logging.getLogger(__name__)


def policy_context_for(employee: Optional[Employee], year: int) -> PolicyContext:
    """Tenure is measured on January 1st of the ledger year."""
    if employee is None:
        return PolicyContext()
    return PolicyContext(
        employee_gender=resolve_employee_gender(employee),
        years_of_service=employee.years_of_service(date(int(year), 1, 1)),
        annual_override=employee.annual_leave_override,
    )


class LeaveBalanceLedger:
    """Sole writer of leave balance figures.

    Every mutation for an (employee_id, year) pair runs under that pair's lock,
    and the balance snapshot is saved together with its transactions.
    """

    def __init__(
        self,
        ledger: LeaveLedgerRepository,
        employees: EmployeeRepository,
        *,
        locks: Optional[KeyedLock] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._ledger = ledger
        self._employees = employees
        self._locks = locks or KeyedLock()
        self._clock = clock

    @contextmanager
    def hold(self, employee_id: str, year: int) -> Iterator[None]:
        with self._locks.hold(("leave-ledger", str(employee_id), int(year))):
            yield

    def _employee(self, employee_id: str) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    def get_policy_for_employee(self, employee_id: str, leave_type: Union[LeaveType, str], year: int) -> LeavePolicy:
        employee = self._employees.get_by_id(employee_id)
        return resolve_leave_policy(leave_type, policy_context_for(employee, year))

    def _eligible(self, employee: Employee, policy: LeavePolicy) -> bool:
        if not is_gender_eligible(policy, resolve_employee_gender(employee)):
            return False
        if policy.id == LeaveType.MATERNITY and employee.maternity_eligible is False:
            return False
        return True

    def is_eligible(self, employee_id: str, leave_type: Union[LeaveType, str], year: int) -> bool:
        employee = self._employees.get_by_id(employee_id)
        if employee is None:
            return False
        return self._eligible(employee, self.get_policy_for_employee(employee_id, leave_type, year))

    def _materialize(self, employee: Employee, year: int) -> LeaveBalance:
        context = policy_context_for(employee, year)
        balances = {}
        for leave_type in LeaveType:
            policy = resolve_leave_policy(leave_type, context)
            balances[leave_type] = float(policy.yearly_cap) if self._eligible(employee, policy) else 0.0
        return LeaveBalance(
            employee_id=employee.employee_id,
            year=int(year),
            balances=balances,
            last_updated_at=self._clock(),
        )

    def get_balance(self, employee_id: str, year: int) -> Optional[LeaveBalance]:
        """Existing balance, materialized on first access; None for unknown employees."""
        with self.hold(employee_id, year):
            balance = self._ledger.get_balance(employee_id, year)
            if balance is not None:
                return balance
            employee = self._employees.get_by_id(employee_id)
            if employee is None:
                return None
            balance = self._materialize(employee, year)
            self._ledger.save(balance, [])
            logger.info("Materialized leave balance for employee=%s year=%s", employee_id, year)
            return balance

    def _require_balance(self, employee_id: str, year: int) -> LeaveBalance:
        balance = self.get_balance(employee_id, year)
        if balance is None:
            raise NotFoundError(f"No leave balance for employee {employee_id}")
        return balance

    def list_transactions(self, employee_id: str, year: int) -> Sequence[LeaveTransaction]:
        return list(self._ledger.list_transactions(employee_id, year))

    def used_days(self, employee_id: str, year: int, leave_type: Union[LeaveType, str]) -> float:
        leave_type = coerce_leave_type(leave_type)
        return sum(t.days for t in self._ledger.list_transactions(employee_id, year) if t.leave_type == leave_type)

    def adjust_balance(self, employee_id: str, year: int, updates: Mapping[Union[LeaveType, str], float]) -> LeaveBalance:
        normalized = {}
        for key, value in updates.items():
            days = float(value)
            if days < 0:
                raise ValidationError("Leave balance cannot be negative")
            normalized[coerce_leave_type(key)] = days

        with self.hold(employee_id, year):
            balance = self._require_balance(employee_id, year)
            if balance.locked:
                raise BalanceLocked("Leave balance is locked and cannot be changed")
            updated = balance.with_changes(balances=normalized, updated_at=self._clock())
            self._ledger.save(updated, self._ledger.list_transactions(employee_id, year))
            logger.info("Adjusted leave balance employee=%s year=%s %s", employee_id, year, normalized)
            return updated

    def set_lock(self, employee_id: str, year: int, locked: bool) -> LeaveBalance:
        with self.hold(employee_id, year):
            balance = self._require_balance(employee_id, year)
            updated = balance.with_changes(locked=bool(locked), updated_at=self._clock())
            self._ledger.save(updated, self._ledger.list_transactions(employee_id, year))
            return updated

    def lock(self, employee_id: str, year: int) -> LeaveBalance:
        return self.set_lock(employee_id, year, True)

    def unlock(self, employee_id: str, year: int) -> LeaveBalance:
        return self.set_lock(employee_id, year, False)

    def is_locked(self, employee_id: str, year: int) -> bool:
        balance = self._ledger.get_balance(employee_id, year)
        return bool(balance and balance.locked)

    def apply_usage(
        self,
        employee_id: str,
        leave_type: Union[LeaveType, str],
        days: float,
        *,
        year: int,
        source: TransactionSource = TransactionSource.ATTENDANCE,
        approved: bool = False,
    ) -> LeaveTransaction:
        """Debit `days` and append a usage transaction, or raise without changing anything."""
        leave_type = coerce_leave_type(leave_type)
        days = float(days)
        if days <= 0:
            raise ValidationError("Leave days must be positive")

        with self.hold(employee_id, year):
            balance = self._require_balance(employee_id, year)
            employee = self._employee(employee_id)
            policy = resolve_leave_policy(leave_type, policy_context_for(employee, year))

            if balance.locked:
                raise BalanceLocked("Leave balance is locked and cannot be changed")
            if not self._eligible(employee, policy):
                raise GenderIneligible(f"{policy.name} is not available for this employee")
            if leave_type == LeaveType.ANNUAL and not approved:
                raise ApprovalRequired("Annual leave must be approved before it is deducted")

            transactions = list(self._ledger.list_transactions(employee_id, year))
            used = sum(t.days for t in transactions if t.leave_type == leave_type)
            if policy.yearly_cap > 0 and used + days > policy.yearly_cap:
                raise PolicyCapExceeded(f"{policy.name} exceeds the yearly limit of {policy.yearly_cap:g} days")

            current = balance.remaining(leave_type)
            if current - days < 0:
                raise InsufficientBalance(f"Insufficient {policy.name.lower()} balance")

            now = self._clock()
            txn = LeaveTransaction(
                transaction_id=str(uuid.uuid4()),
                employee_id=employee_id,
                year=int(year),
                leave_type=leave_type,
                days=days,
                created_at=now,
                source=source,
            )
            updated = balance.with_changes(balances={leave_type: current - days}, updated_at=now)
            self._ledger.save(updated, transactions + [txn])
            logger.info(
                "Debited %s day(s) of %s for employee=%s year=%s (remaining=%s)",
                days,
                leave_type.value,
                employee_id,
                year,
                current - days,
            )
            return txn
