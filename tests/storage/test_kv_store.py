from __future__ import annotations

import pytest

from src.school_hr.school_hr.storage.kv_store import InMemoryKeyValueStore
from src.school_hr.school_hr.storage.mysql_kv_store import MySQLKeyValueStore


def test_in_memory_values_round_trip_as_json():
    store = InMemoryKeyValueStore()
    value = {"name": "مصروف رواتب", "days": [1, 2.5]}

    store.set("hr_accounts", value)
    fetched = store.get("hr_accounts")
    fetched["days"].append(3)

    # Stored text is decoded on every read, so callers cannot mutate it.
    assert store.get("hr_accounts") == value
    assert store.get("missing") is None


def test_in_memory_keys_and_delete():
    store = InMemoryKeyValueStore()
    store.set("hr_journal:JE-2", {})
    store.set("hr_journal:JE-1", {})
    store.set("hr_accounts", [])

    assert store.keys("hr_journal:") == ["hr_journal:JE-1", "hr_journal:JE-2"]
    assert store.delete("hr_accounts") is True
    assert store.delete("hr_accounts") is False


class _FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self.rowcount = 0
        self._rows = []

    def execute(self, sql, params):
        self._conn.statements.append((" ".join(sql.split()), params))
        if sql.lstrip().startswith("SELECT store_value"):
            self._rows = [{"store_value": '{"a": 1}'}] if params[0] == "k" else []
        elif sql.lstrip().startswith("DELETE"):
            self.rowcount = 1

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return self._rows

    def close(self):
        pass


class _FakeConnection:
    def __init__(self, fail=False):
        self.statements = []
        self.committed = 0
        self.rolled_back = 0
        self.closed = 0
        self.fail = fail

    def cursor(self, dictionary=True):
        if self.fail:
            raise RuntimeError("connection lost")
        return _FakeCursor(self)

    def commit(self):
        self.committed += 1

    def rollback(self):
        self.rolled_back += 1

    def close(self):
        self.closed += 1


class _FakeFactory:
    def __init__(self, conn):
        self._conn = conn

    def connect(self):
        return self._conn


def test_mysql_store_reads_and_upserts():
    conn = _FakeConnection()
    store = MySQLKeyValueStore(_FakeFactory(conn))

    assert store.get("k") == {"a": 1}
    assert store.get("other") is None
    store.set("k", {"b": 2})

    sql, params = conn.statements[-1]
    assert sql.startswith("INSERT INTO hr_kv_store(store_key, store_value)")
    assert "ON DUPLICATE KEY UPDATE" in sql
    assert params == ("k", '{"b": 2}')
    assert conn.committed == 3
    assert conn.closed == 3


def test_mysql_store_escapes_like_prefix():
    conn = _FakeConnection()
    store = MySQLKeyValueStore(_FakeFactory(conn))

    store.keys("hr_journal:")

    assert conn.statements[-1][1] == (r"hr\_journal:%",)


def test_mysql_store_rolls_back_on_error():
    conn = _FakeConnection(fail=True)
    store = MySQLKeyValueStore(_FakeFactory(conn))

    with pytest.raises(RuntimeError):
        store.set("k", 1)

    assert conn.rolled_back == 1
    assert conn.closed == 1
