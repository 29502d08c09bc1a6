from __future__ import annotations

from src.school_hr.school_hr.database import bootstrap

DB_CONFIG = {"host": "db", "port": 3306, "user": "hr", "password": "", "database": "school_hr_test"}


class _Cursor:
    def __init__(self, executed):
        self._executed = executed

    def execute(self, sql):
        self._executed.append(sql)


class _Connection:
    def __init__(self, executed):
        self._executed = executed

    def cursor(self):
        return _Cursor(self._executed)

    def commit(self):
        pass

    def close(self):
        pass


def test_bundled_schema_ships_with_package():
    assert bootstrap.DEFAULT_SCHEMA_PATH.is_file()
    assert "hr_kv_store" in bootstrap.DEFAULT_SCHEMA_PATH.read_text(encoding="utf-8")


def test_apply_schema_defaults_to_bundled_file(monkeypatch):
    executed = []
    monkeypatch.setattr(bootstrap.mysql.connector, "connect", lambda **kwargs: _Connection(executed))

    bootstrap.apply_schema(DB_CONFIG)

    assert "`school_hr_test`" in executed[0]
    statements = executed[1:]
    assert len(statements) == 1
    assert "CREATE TABLE IF NOT EXISTS hr_kv_store" in statements[0]
    assert not any(s.lstrip().upper().startswith("USE") for s in statements)


def test_apply_schema_accepts_custom_path(tmp_path, monkeypatch):
    executed = []
    monkeypatch.setattr(bootstrap.mysql.connector, "connect", lambda **kwargs: _Connection(executed))
    schema = tmp_path / "extra.sql"
    schema.write_text("CREATE TABLE a (x INT);\nCREATE TABLE b (y VARCHAR(5) DEFAULT ';');\n", encoding="utf-8")

    bootstrap.apply_schema(DB_CONFIG, schema_path=schema)

    assert executed[1:] == ["CREATE TABLE a (x INT)", "CREATE TABLE b (y VARCHAR(5) DEFAULT ';')"]
