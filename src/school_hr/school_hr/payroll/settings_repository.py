from __future__ import annotations

from typing import Protocol

from ..storage.kv_store import KeyValueStore
from .settings import PayrollSettings

SETTINGS_KEY = "hr_payroll_settings_v1"


class PayrollSettingsRepository(Protocol):
    def load(self) -> PayrollSettings:
        raise NotImplementedError

    def save(self, settings: PayrollSettings) -> None:
        raise NotImplementedError


class KVPayrollSettingsRepository(PayrollSettingsRepository):
    def __init__(self, store: KeyValueStore):
        self._store = store

    def load(self) -> PayrollSettings:
        return PayrollSettings.from_dict(self._store.get(SETTINGS_KEY))

    def save(self, settings: PayrollSettings) -> None:
        self._store.set(SETTINGS_KEY, settings.to_dict())
