from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple
from uuid import uuid4

from ..common.datetime_utils import now_local
from ..common.locks import KeyedLock
from ..common.money import round_money
from ..common.validators import require_month, require_non_empty
from ..core.enums import PostingStatus
from ..core.exceptions import (
    AccountNotFound,
    AlreadyPosted,
    NoApprovedRows,
    NotFoundError,
    UnbalancedEntry,
)
from ..storage.kv_store import KeyValueStore
from .accounts import AccountDirectory, JournalLine, LedgerSink
from .model import PayrollRow

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# Case-insensitive substrings tried against account names when no explicit code is given.
DEFAULT_ACCOUNT_PATTERNS: Dict[str, Tuple[str, ...]] = {
    "salaryExpense": ("salary expense", "salaries expense", "مصروف رواتب", "رواتب"),
    "incentivesExpense": ("incentive", "حوافز"),
    "allowancesExpense": ("allowance", "بدلات"),
    "employerInsuranceExpense": ("employer insurance", "تأمينات جهة العمل", "تأمينات صاحب العمل"),
    "insurancePayable": ("insurance payable", "تأمينات موظف", "تأمينات الموظفين"),
    "taxPayable": ("tax payable", "taxes", "ضرائب"),
    "emergencyFundPayable": ("emergency fund", "صندوق طوارئ", "الطوارئ"),
    "cashOrBank": ("cash", "bank", "خزينة", "بنك"),
}


# Older callers send the insurance liability code under this name.
ACCOUNT_CODE_ALIASES: Dict[str, Tuple[str, ...]] = {
    "insurancePayable": ("employeeInsurancePayable",),
}


@dataclass(frozen=True)
class PayrollPosting:
    id: str
    payroll_month: int
    payroll_year: int
    journal_entry_id: str
    posted_at: datetime
    posted_by: str
    status: PostingStatus = PostingStatus.POSTED
    reversal_journal_id: Optional[str] = None
    reversed_at: Optional[datetime] = None
    reversed_by: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "payroll_month": self.payroll_month,
            "payroll_year": self.payroll_year,
            "journal_entry_id": self.journal_entry_id,
            "posted_at": self.posted_at.isoformat(),
            "posted_by": self.posted_by,
            "status": self.status.value,
            "reversal_journal_id": self.reversal_journal_id,
            "reversed_at": self.reversed_at.isoformat() if self.reversed_at else None,
            "reversed_by": self.reversed_by,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PayrollPosting":
        reversed_at = data.get("reversed_at")
        return cls(
            id=str(data["id"]),
            payroll_month=int(data["payroll_month"]),
            payroll_year=int(data["payroll_year"]),
            journal_entry_id=str(data["journal_entry_id"]),
            posted_at=datetime.fromisoformat(data["posted_at"]),
            posted_by=str(data.get("posted_by") or ""),
            status=PostingStatus(data.get("status") or PostingStatus.POSTED.value),
            reversal_journal_id=data.get("reversal_journal_id"),
            reversed_at=datetime.fromisoformat(reversed_at) if reversed_at else None,
            reversed_by=data.get("reversed_by"),
        )


class PostingRepository(Protocol):
    def list_all(self) -> List[PayrollPosting]:
        raise NotImplementedError

    def save(self, posting: PayrollPosting) -> None:
        raise NotImplementedError


class KVPostingRepository(PostingRepository):
    KEY = "hr_payroll_postings"

    def __init__(self, store: KeyValueStore):
        self._store = store

    def list_all(self) -> List[PayrollPosting]:
        return [PayrollPosting.from_dict(p) for p in (self._store.get(self.KEY) or [])]

    def save(self, posting: PayrollPosting) -> None:
        postings = [p for p in self.list_all() if p.id != posting.id]
        postings.append(posting)
        postings.sort(key=lambda p: p.posted_at)
        self._store.set(self.KEY, [p.to_dict() for p in postings])


@dataclass(frozen=True)
class PayrollTotals:
    basic_salary: Decimal
    incentives: Decimal
    allowances: Decimal
    absences_deduction: Decimal
    lateness_deduction: Decimal
    leave_deduction: Decimal
    employee_insurance: Decimal
    employer_insurance: Decimal
    taxes: Decimal
    emergency_fund: Decimal
    net_salary: Decimal

    @property
    def salary_expense(self) -> Decimal:
        amount = self.basic_salary - self.absences_deduction - self.lateness_deduction - self.leave_deduction
        return amount if amount > 0 else ZERO


def sum_rows(rows: Sequence[PayrollRow]) -> PayrollTotals:
    def total(attr: str) -> Decimal:
        return round_money(sum(float(getattr(r, attr) or 0) for r in rows))

    return PayrollTotals(
        basic_salary=total("basic_salary"),
        incentives=total("incentives"),
        allowances=total("allowances"),
        absences_deduction=total("absences_deduction"),
        lateness_deduction=total("lateness_deduction"),
        leave_deduction=total("leave_deduction"),
        employee_insurance=total("insurance_employee"),
        employer_insurance=total("insurance_employer"),
        taxes=total("tax"),
        emergency_fund=total("emergency_fund"),
        net_salary=total("net_salary"),
    )


class PayrollPostingService:
    """Turns approved payroll rows into one balanced journal per month."""

    def __init__(
        self,
        postings: PostingRepository,
        accounts: AccountDirectory,
        ledger: LedgerSink,
        *,
        locks: Optional[KeyedLock] = None,
        clock=now_local,
        patterns: Optional[Mapping[str, Sequence[str]]] = None,
    ):
        self._postings = postings
        self._accounts = accounts
        self._ledger = ledger
        self._locks = locks or KeyedLock()
        self._clock = clock
        self._patterns = dict(patterns or DEFAULT_ACCOUNT_PATTERNS)

    def list_postings(self) -> List[PayrollPosting]:
        return self._postings.list_all()

    def _find_posted(self, month: int, year: int) -> Optional[PayrollPosting]:
        for posting in self._postings.list_all():
            if posting.payroll_month == month and posting.payroll_year == year and posting.status == PostingStatus.POSTED:
                return posting
        return None

    def is_month_posted(self, month: int, year: int) -> bool:
        return self._find_posted(month, year) is not None

    def resolve_account_id(self, key: str, code: Optional[str] = None) -> str:
        if code:
            account = self._accounts.find_by_code(code)
            if account is None:
                raise AccountNotFound(f"Account code {code} ({key}) is not in the chart of accounts")
            return account.account_id
        account = self._accounts.find_by_name_pattern(self._patterns.get(key, ()))
        if account is None:
            raise AccountNotFound(f"No account matches {key}")
        return account.account_id

    def build_journal_lines(
        self,
        totals: PayrollTotals,
        account_codes: Optional[Mapping[str, str]] = None,
    ) -> List[JournalLine]:
        codes = account_codes or {}

        def resolve(key: str) -> str:
            code = codes.get(key)
            for alias in ACCOUNT_CODE_ALIASES.get(key, ()):
                code = code or codes.get(alias)
            return self.resolve_account_id(key, code)

        debits = [
            (resolve("salaryExpense"), totals.salary_expense, "Salaries expense"),
            (resolve("incentivesExpense"), totals.incentives, "Incentives expense"),
            (resolve("allowancesExpense"), totals.allowances, "Allowances expense"),
        ]
        if totals.employer_insurance != ZERO:
            debits.append((resolve("employerInsuranceExpense"), totals.employer_insurance, "Employer insurance expense"))

        credits = [
            (
                resolve("insurancePayable"),
                totals.employee_insurance + totals.employer_insurance,
                "Social insurance payable",
            ),
            (resolve("taxPayable"), totals.taxes, "Income tax payable"),
            (resolve("emergencyFundPayable"), totals.emergency_fund, "Emergency fund payable"),
            (resolve("cashOrBank"), totals.net_salary, "Net salaries"),
        ]

        lines = [JournalLine(acc, debit=amount, credit=ZERO, description=d) for acc, amount, d in debits]
        lines += [JournalLine(acc, debit=ZERO, credit=amount, description=d) for acc, amount, d in credits]
        return [l for l in lines if l.debit != ZERO or l.credit != ZERO]

    def post_payroll(
        self,
        *,
        month: int,
        year: int,
        posted_by: str,
        rows: Sequence[PayrollRow],
        account_codes: Optional[Mapping[str, str]] = None,
    ) -> PayrollPosting:
        month = require_month(month)
        year = int(year)
        posted_by = require_non_empty(posted_by, "posted_by")

        with self._locks.hold(("payroll-posting", month, year)):
            if self.is_month_posted(month, year):
                raise AlreadyPosted(f"Payroll for {month:02d}/{year} is already posted")

            approved = [r for r in rows if r.approved]
            if not approved:
                raise NoApprovedRows("No approved payroll rows to post")

            totals = sum_rows(approved)
            lines = self.build_journal_lines(totals, account_codes)

            debit_total = round_money(float(sum((l.debit for l in lines), ZERO)))
            credit_total = round_money(float(sum((l.credit for l in lines), ZERO)))
            if debit_total != credit_total:
                raise UnbalancedEntry(f"Journal is unbalanced: debit {debit_total} != credit {credit_total}")

            journal_id = self._ledger.post_transactions(lines, memo=f"Payroll {month:02d}/{year}")
            posting = PayrollPosting(
                id=str(uuid4()),
                payroll_month=month,
                payroll_year=year,
                journal_entry_id=journal_id,
                posted_at=self._clock(),
                posted_by=posted_by,
            )
            self._postings.save(posting)

        logger.info(
            "Posted payroll %02d/%s: rows=%s debit=%s journal=%s by=%s",
            month,
            year,
            len(approved),
            debit_total,
            journal_id,
            posted_by,
        )
        return posting

    def reverse_posting(self, *, month: int, year: int, reversed_by: str) -> PayrollPosting:
        """Post the mirror journal and mark the month's posting Reversed."""
        month = require_month(month)
        year = int(year)
        reversed_by = require_non_empty(reversed_by, "reversed_by")

        with self._locks.hold(("payroll-posting", month, year)):
            posting = self._find_posted(month, year)
            if posting is None:
                raise NotFoundError(f"No posted payroll for {month:02d}/{year}")

            entry = self._ledger.get_entry(posting.journal_entry_id)
            if entry is None:
                raise NotFoundError(f"Journal entry {posting.journal_entry_id} not found")

            reversal_id = self._ledger.post_transactions(
                [l.mirrored() for l in entry.lines],
                memo=f"Reversal of payroll {month:02d}/{year}",
            )
            reversed_posting = replace(
                posting,
                status=PostingStatus.REVERSED,
                reversal_journal_id=reversal_id,
                reversed_at=self._clock(),
                reversed_by=reversed_by,
            )
            self._postings.save(reversed_posting)

        logger.info("Reversed payroll %02d/%s: journal=%s by=%s", month, year, reversal_id, reversed_by)
        return reversed_posting
