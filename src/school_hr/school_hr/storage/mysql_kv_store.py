from __future__ import annotations

from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .kv_store import KeyValueStore, decode, encode


class MySQLKeyValueStore(KeyValueStore):
    def __init__(self, conn_factory: DatabaseConnection, *, table: str = "hr_kv_store"):
        self._conn_factory = conn_factory
        self._table = table

    def get(self, key: str) -> Optional[Any]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT store_value FROM {self._table} WHERE store_key=%s",
                (key,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return decode(row["store_value"])

    def set(self, key: str, value: Any) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO {self._table}(store_key, store_value)
                VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE store_value=VALUES(store_value), updated_at=CURRENT_TIMESTAMP
                """,
                (key, encode(value)),
            )

    def delete(self, key: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM {self._table} WHERE store_key=%s", (key,))
            return cur.rowcount > 0

    def keys(self, prefix: str = "") -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT store_key FROM {self._table} WHERE store_key LIKE %s ORDER BY store_key",
                (prefix.replace("%", r"\%").replace("_", r"\_") + "%",),
            )
            return [r["store_key"] for r in fetchall(cur)]
