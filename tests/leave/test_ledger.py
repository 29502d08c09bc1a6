from __future__ import annotations

import itertools
from datetime import date, datetime

import pytest

from src.school_hr.school_hr.core.enums import LeaveType, TransactionSource
from src.school_hr.school_hr.core.exceptions import (
    ApprovalRequired,
    BalanceLocked,
    DomainError,
    GenderIneligible,
    InsufficientBalance,
    NotFoundError,
    PolicyCapExceeded,
    ValidationError,
)
from src.school_hr.school_hr.employees.kv_employee_repository import KVEmployeeRepository
from src.school_hr.school_hr.employees.model import Employee
from src.school_hr.school_hr.leave.kv_leave_repository import KVLeaveLedgerRepository
from src.school_hr.school_hr.leave.ledger import LeaveBalanceLedger
from src.school_hr.school_hr.storage.kv_store import InMemoryKeyValueStore

YEAR = 2025


def _clock():
    return datetime(2025, 3, 1, 9, 0, 0)


def _ledger(*employees: Employee) -> LeaveBalanceLedger:
    store = InMemoryKeyValueStore()
    repo = KVEmployeeRepository(store)
    for e in employees:
        repo.save(e)
    return LeaveBalanceLedger(KVLeaveLedgerRepository(store), repo, clock=_clock)


ALICE = Employee(employee_id="E1", full_name="Alice", gender="Female", hire_date=date(2020, 1, 1))
BOB = Employee(employee_id="E2", full_name="Bob", gender="Male", hire_date=date(2010, 6, 1))


def test_balance_is_materialized_from_policies_on_first_access():
    ledger = _ledger(ALICE, BOB)

    alice = ledger.get_balance("E1", YEAR)
    bob = ledger.get_balance("E2", YEAR)

    assert alice.remaining(LeaveType.ANNUAL) == 21
    assert alice.remaining(LeaveType.CASUAL) == 6
    assert alice.remaining(LeaveType.MATERNITY) == 90
    assert bob.remaining(LeaveType.ANNUAL) == 30
    assert bob.remaining(LeaveType.MATERNITY) == 0
    assert bob.remaining(LeaveType.CHILD_CARE) == 0
    assert ledger.get_balance("E1", YEAR) == alice


def test_unknown_employee_has_no_balance():
    ledger = _ledger(ALICE)

    assert ledger.get_balance("NOPE", YEAR) is None
    with pytest.raises(NotFoundError):
        ledger.apply_usage("NOPE", LeaveType.CASUAL, 1, year=YEAR)


def test_apply_usage_debits_and_records_transaction():
    ledger = _ledger(ALICE)

    txn = ledger.apply_usage("E1", LeaveType.CASUAL, 2, year=YEAR, source=TransactionSource.MANUAL)

    assert txn.days == 2
    assert txn.source == TransactionSource.MANUAL
    assert ledger.get_balance("E1", YEAR).remaining(LeaveType.CASUAL) == 4
    assert ledger.used_days("E1", YEAR, LeaveType.CASUAL) == 2
    assert len(ledger.list_transactions("E1", YEAR)) == 1


def test_annual_usage_requires_approval():
    ledger = _ledger(ALICE)

    with pytest.raises(ApprovalRequired):
        ledger.apply_usage("E1", LeaveType.ANNUAL, 3, year=YEAR)

    ledger.apply_usage("E1", LeaveType.ANNUAL, 3, year=YEAR, approved=True)
    assert ledger.get_balance("E1", YEAR).remaining(LeaveType.ANNUAL) == 18


def test_insufficient_balance_leaves_ledger_untouched():
    ledger = _ledger(ALICE)
    ledger.adjust_balance("E1", YEAR, {LeaveType.CASUAL: 2})

    with pytest.raises(InsufficientBalance):
        ledger.apply_usage("E1", LeaveType.CASUAL, 3, year=YEAR)

    assert ledger.get_balance("E1", YEAR).remaining(LeaveType.CASUAL) == 2
    assert ledger.list_transactions("E1", YEAR) == []


def test_cumulative_usage_cannot_pass_yearly_cap():
    ledger = _ledger(ALICE)
    ledger.adjust_balance("E1", YEAR, {"CASUAL": 10})
    ledger.apply_usage("E1", LeaveType.CASUAL, 4, year=YEAR)

    with pytest.raises(PolicyCapExceeded):
        ledger.apply_usage("E1", LeaveType.CASUAL, 3, year=YEAR)


def test_locked_balance_blocks_mutation():
    ledger = _ledger(ALICE)
    ledger.lock("E1", YEAR)

    assert ledger.is_locked("E1", YEAR) is True
    with pytest.raises(BalanceLocked):
        ledger.apply_usage("E1", LeaveType.CASUAL, 1, year=YEAR)
    with pytest.raises(BalanceLocked):
        ledger.adjust_balance("E1", YEAR, {LeaveType.CASUAL: 1})

    ledger.unlock("E1", YEAR)
    ledger.apply_usage("E1", LeaveType.CASUAL, 1, year=YEAR)
    assert ledger.get_balance("E1", YEAR).remaining(LeaveType.CASUAL) == 5


def test_gender_restricted_usage_is_refused():
    ledger = _ledger(BOB)

    assert ledger.is_eligible("E2", LeaveType.MATERNITY, YEAR) is False
    with pytest.raises(GenderIneligible):
        ledger.apply_usage("E2", LeaveType.MATERNITY, 1, year=YEAR)


def test_maternity_override_zeroes_balance():
    carol = Employee(employee_id="E4", full_name="Carol", gender="Female", maternity_eligible=False)
    ledger = _ledger(carol)

    assert ledger.get_balance("E4", YEAR).remaining(LeaveType.MATERNITY) == 0
    assert ledger.is_eligible("E4", LeaveType.MATERNITY, YEAR) is False


def test_adjust_balance_rejects_negative_values():
    ledger = _ledger(ALICE)

    with pytest.raises(ValidationError):
        ledger.adjust_balance("E1", YEAR, {LeaveType.ANNUAL: -1})


def test_non_positive_usage_is_rejected():
    ledger = _ledger(ALICE)

    with pytest.raises(ValidationError):
        ledger.apply_usage("E1", LeaveType.CASUAL, 0, year=YEAR)


def test_balances_never_go_negative():
    ledger = _ledger(ALICE, BOB)
    amounts = [1, 2.5, 4, 7, 0.5, 3, 10, 1]
    types = [LeaveType.CASUAL, LeaveType.ANNUAL, LeaveType.SICK, LeaveType.MATERNITY, LeaveType.UNPAID]

    for employee_id, leave_type, days in itertools.product(("E1", "E2"), types, amounts):
        try:
            ledger.apply_usage(employee_id, leave_type, days, year=YEAR, approved=True)
        except DomainError:
            pass

    for employee_id in ("E1", "E2"):
        balance = ledger.get_balance(employee_id, YEAR)
        assert all(days >= 0 for days in balance.balances.values())
