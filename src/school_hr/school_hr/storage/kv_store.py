from __future__ import annotations

import json
import threading
from typing import Any, Dict, Optional, Protocol, Sequence


class KeyValueStore(Protocol):
    """Opaque blob store the repositories persist into.

    Values are JSON-serializable; implementations encode them as JSON text.
    """

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError

    def keys(self, prefix: str = "") -> Sequence[str]:
        raise NotImplementedError


def encode(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def decode(raw: Optional[str]) -> Optional[Any]:
    if raw is None:
        return None
    return json.loads(raw)


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store; values round-trip through JSON like the MySQL one."""

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            raw = self._data.get(key)
        return decode(raw)

    def set(self, key: str, value: Any) -> None:
        raw = encode(value)
        with self._lock:
            self._data[key] = raw

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self, prefix: str = "") -> Sequence[str]:
        with self._lock:
            return sorted(k for k in self._data if k.startswith(prefix))
