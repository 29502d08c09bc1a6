from __future__ import annotations

from typing import Optional, Sequence

from ..storage.kv_store import KeyValueStore
from .model import Employee
from .repository import EmployeeRepository

_PREFIX = "hr_employee:"


class KVEmployeeRepository(EmployeeRepository):
    def __init__(self, store: KeyValueStore):
        self._store = store

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        data = self._store.get(f"{_PREFIX}{employee_id}")
        return Employee.from_dict(data) if data else None

    def list_all(self) -> Sequence[Employee]:
        out = []
        for key in self._store.keys(_PREFIX):
            data = self._store.get(key)
            if data:
                out.append(Employee.from_dict(data))
        return out

    def save(self, employee: Employee) -> None:
        self._store.set(f"{_PREFIX}{employee.employee_id}", employee.to_dict())
