from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Protocol, Sequence
from uuid import uuid4

from ..common.datetime_utils import now_local
from ..storage.kv_store import KeyValueStore


@dataclass(frozen=True)
class Account:
    account_id: str
    code: str
    name: str

    def to_dict(self) -> dict:
        return {"account_id": self.account_id, "code": self.code, "name": self.name}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Account":
        return cls(account_id=str(data["account_id"]), code=str(data.get("code") or ""), name=str(data.get("name") or ""))


@dataclass(frozen=True)
class JournalLine:
    account_id: str
    debit: Decimal
    credit: Decimal
    description: str = ""

    def mirrored(self) -> "JournalLine":
        return JournalLine(self.account_id, debit=self.credit, credit=self.debit, description=self.description)

    def to_dict(self) -> dict:
        return {
            "account_id": self.account_id,
            "debit": str(self.debit),
            "credit": str(self.credit),
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JournalLine":
        return cls(
            account_id=str(data["account_id"]),
            debit=Decimal(str(data.get("debit") or "0")),
            credit=Decimal(str(data.get("credit") or "0")),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class JournalEntry:
    journal_id: str
    memo: str
    created_at: datetime
    lines: tuple

    @property
    def total_debit(self) -> Decimal:
        return sum((l.debit for l in self.lines), Decimal("0"))

    @property
    def total_credit(self) -> Decimal:
        return sum((l.credit for l in self.lines), Decimal("0"))


class AccountDirectory(Protocol):
    def find_by_code(self, code: str) -> Optional[Account]:
        raise NotImplementedError

    def find_by_name_pattern(self, patterns: Sequence[str]) -> Optional[Account]:
        raise NotImplementedError

    def list_all(self) -> List[Account]:
        raise NotImplementedError


class LedgerSink(Protocol):
    """Receives balanced journal lines and returns the journal id."""

    def post_transactions(self, lines: Sequence[JournalLine], *, memo: str = "") -> str:
        raise NotImplementedError

    def get_entry(self, journal_id: str) -> Optional[JournalEntry]:
        raise NotImplementedError


class KVAccountDirectory(AccountDirectory):
    """Chart of accounts kept as one list under ``hr_accounts``."""

    KEY = "hr_accounts"

    def __init__(self, store: KeyValueStore):
        self._store = store

    def list_all(self) -> List[Account]:
        return [Account.from_dict(a) for a in (self._store.get(self.KEY) or [])]

    def save_all(self, accounts: Sequence[Account]) -> None:
        self._store.set(self.KEY, [a.to_dict() for a in accounts])

    def find_by_code(self, code: str) -> Optional[Account]:
        for account in self.list_all():
            if account.code == code:
                return account
        return None

    def find_by_name_pattern(self, patterns: Sequence[str]) -> Optional[Account]:
        lowered = [p.lower() for p in patterns]
        for account in self.list_all():
            name = account.name.lower()
            if any(p in name for p in lowered):
                return account
        return None


class KVLedgerSink(LedgerSink):
    PREFIX = "hr_journal:"

    def __init__(self, store: KeyValueStore, *, clock=now_local):
        self._store = store
        self._clock = clock

    def post_transactions(self, lines: Sequence[JournalLine], *, memo: str = "") -> str:
        journal_id = f"JE-{uuid4().hex[:12].upper()}"
        self._store.set(
            f"{self.PREFIX}{journal_id}",
            {
                "journal_id": journal_id,
                "memo": memo,
                "created_at": self._clock().isoformat(),
                "lines": [l.to_dict() for l in lines],
            },
        )
        return journal_id

    def get_entry(self, journal_id: str) -> Optional[JournalEntry]:
        raw = self._store.get(f"{self.PREFIX}{journal_id}")
        if raw is None:
            return None
        return JournalEntry(
            journal_id=raw["journal_id"],
            memo=raw.get("memo") or "",
            created_at=datetime.fromisoformat(raw["created_at"]),
            lines=tuple(JournalLine.from_dict(l) for l in raw.get("lines") or []),
        )
