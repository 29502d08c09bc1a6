from __future__ import annotations

from typing import List, Protocol, Sequence

from ..storage.kv_store import KeyValueStore
from .model import PayrollRow


class PayrollDraftRepository(Protocol):
    def get(self, month: int, year: int) -> List[PayrollRow]:
        raise NotImplementedError

    def save(self, month: int, year: int, rows: Sequence[PayrollRow]) -> None:
        raise NotImplementedError


class KVPayrollDraftRepository(PayrollDraftRepository):
    def __init__(self, store: KeyValueStore):
        self._store = store

    @staticmethod
    def _key(month: int, year: int) -> str:
        return f"hr_payroll_draft:{year:04d}-{month:02d}"

    def get(self, month: int, year: int) -> List[PayrollRow]:
        return [PayrollRow.from_dict(r) for r in self._store.get(self._key(month, year)) or []]

    def save(self, month: int, year: int, rows: Sequence[PayrollRow]) -> None:
        self._store.set(self._key(month, year), [r.to_dict() for r in rows])
