from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import pytest

from src.school_hr.school_hr.core.enums import PostingStatus
from src.school_hr.school_hr.core.exceptions import (
    AccountNotFound,
    AlreadyPosted,
    NoApprovedRows,
    NotFoundError,
)
from src.school_hr.school_hr.payroll.accounts import Account, KVAccountDirectory, KVLedgerSink
from src.school_hr.school_hr.payroll.model import PayrollRow
from src.school_hr.school_hr.payroll.posting import KVPostingRepository, PayrollPostingService
from src.school_hr.school_hr.storage.kv_store import InMemoryKeyValueStore

SEVEN_ACCOUNTS = [
    Account("A1", "5100", "Salary Expense"),
    Account("A2", "5110", "Incentives"),
    Account("A3", "5120", "Allowances"),
    Account("A5", "2100", "Social Insurance Payable"),
    Account("A6", "2200", "Income Tax Payable"),
    Account("A7", "2300", "Emergency Fund"),
    Account("A8", "1010", "Main Bank"),
]
EMPLOYER_INSURANCE = Account("A4", "5130", "Employer Insurance Expense")

ROW = PayrollRow(
    employee_id="E1",
    basic_salary=5000,
    incentives=500,
    allowances=300,
    gross_salary=5800,
    absences_deduction=200,
    lateness_deduction=50,
    leave_deduction=0,
    insurance_employee=638,
    insurance_employer=1087.5,
    tax=100,
    emergency_fund=0,
    net_salary=4812,
    approved=True,
)


def _clock():
    return datetime(2025, 4, 1, 10, 0, 0)


class _Env:
    def __init__(self, accounts):
        store = InMemoryKeyValueStore()
        self.accounts = KVAccountDirectory(store)
        self.accounts.save_all(accounts)
        self.ledger = KVLedgerSink(store, clock=_clock)
        self.postings = KVPostingRepository(store)
        self.service = PayrollPostingService(self.postings, self.accounts, self.ledger, clock=_clock)

    def post(self, rows=(ROW,), **kwargs):
        return self.service.post_payroll(month=3, year=2025, posted_by="hr-admin", rows=list(rows), **kwargs)


@pytest.fixture()
def env():
    return _Env(SEVEN_ACCOUNTS + [EMPLOYER_INSURANCE])


def test_post_writes_balanced_journal(env):
    posting = env.post()

    entry = env.ledger.get_entry(posting.journal_entry_id)
    assert entry.total_debit == entry.total_credit == Decimal("6637.50")
    by_account = {l.account_id: (l.debit, l.credit) for l in entry.lines}
    assert by_account["A1"] == (Decimal("4750.00"), Decimal("0"))
    assert by_account["A4"] == (Decimal("1087.50"), Decimal("0"))
    assert by_account["A5"] == (Decimal("0"), Decimal("1725.50"))
    assert by_account["A8"] == (Decimal("0"), Decimal("4812.00"))
    # Zero emergency fund line is dropped.
    assert "A7" not in by_account
    assert posting.status == PostingStatus.POSTED
    assert posting.posted_by == "hr-admin"
    assert env.service.is_month_posted(3, 2025)


def test_second_post_is_refused_and_first_posting_kept(env):
    first = env.post()

    with pytest.raises(AlreadyPosted):
        env.post()

    assert env.service.list_postings() == [first]


def test_only_approved_rows_are_posted(env):
    draft = replace(ROW, employee_id="E2", approved=False)

    posting = env.post(rows=[ROW, draft])

    entry = env.ledger.get_entry(posting.journal_entry_id)
    assert entry.total_debit == Decimal("6637.50")


def test_nothing_approved(env):
    with pytest.raises(NoApprovedRows):
        env.post(rows=[replace(ROW, approved=False)])

    assert env.service.list_postings() == []


def test_explicit_code_must_exist(env):
    with pytest.raises(AccountNotFound):
        env.post(account_codes={"cashOrBank": "9999"})

    assert not env.service.is_month_posted(3, 2025)


def test_explicit_code_overrides_name_match():
    env = _Env(SEVEN_ACCOUNTS + [EMPLOYER_INSURANCE, Account("A9", "1020", "Petty Cash")])

    posting = env.post(account_codes={"cashOrBank": "1020"})

    entry = env.ledger.get_entry(posting.journal_entry_id)
    assert any(l.account_id == "A9" and l.credit == Decimal("4812.00") for l in entry.lines)


def test_employer_insurance_account_only_needed_when_nonzero():
    env = _Env(SEVEN_ACCOUNTS)

    with pytest.raises(AccountNotFound):
        env.post()

    row = replace(ROW, insurance_employer=0)
    posting = env.post(rows=[row])
    entry = env.ledger.get_entry(posting.journal_entry_id)
    assert entry.total_debit == entry.total_credit == Decimal("5550.00")


def test_reverse_then_repost(env):
    posting = env.post()

    reversed_posting = env.service.reverse_posting(month=3, year=2025, reversed_by="auditor")

    assert reversed_posting.id == posting.id
    assert reversed_posting.status == PostingStatus.REVERSED
    assert reversed_posting.reversed_by == "auditor"
    mirror = env.ledger.get_entry(reversed_posting.reversal_journal_id)
    original = env.ledger.get_entry(posting.journal_entry_id)
    assert [(l.debit, l.credit) for l in mirror.lines] == [(l.credit, l.debit) for l in original.lines]
    assert not env.service.is_month_posted(3, 2025)

    again = env.post()
    assert again.id != posting.id
    assert len(env.service.list_postings()) == 2


def test_reverse_without_posting(env):
    with pytest.raises(NotFoundError):
        env.service.reverse_posting(month=3, year=2025, reversed_by="auditor")


def test_legacy_insurance_payable_code_is_honoured():
    env = _Env(SEVEN_ACCOUNTS + [EMPLOYER_INSURANCE, Account("A9", "2150", "Social Security Fund")])

    posting = env.post(account_codes={"employeeInsurancePayable": "2150"})

    entry = env.ledger.get_entry(posting.journal_entry_id)
    assert any(l.account_id == "A9" and l.credit == Decimal("1725.50") for l in entry.lines)
    assert all(l.account_id != "A5" for l in entry.lines)


def test_legacy_insurance_payable_code_must_exist(env):
    with pytest.raises(AccountNotFound):
        env.post(account_codes={"employeeInsurancePayable": "9999"})
