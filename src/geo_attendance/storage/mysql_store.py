from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import KeyValueStore

KV_TABLE = "kv_store"


class MySQLKeyValueStore(KeyValueStore):
    def __init__(self, conn_factory: DatabaseConnection, *, table: str = KV_TABLE):
        self._conn_factory = conn_factory
        self._table = table

    def get_item(self, key: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT storage_value FROM {self._table} WHERE storage_key=%s",
                (key,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return row["storage_value"]

    def set_item(self, key: str, value: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO {self._table}(storage_key, storage_value)
                VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE storage_value=VALUES(storage_value)
                """,
                (key, value),
            )

    def remove_item(self, key: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM {self._table} WHERE storage_key=%s", (key,))
