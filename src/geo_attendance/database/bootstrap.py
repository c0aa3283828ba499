from __future__ import annotations

from typing import List, Mapping

from ..storage.mysql_store import KV_TABLE
from .connection import DBConfig, DatabaseConnection
from .mysql_base import db_cursor

KV_TABLE_DDL = f"""
CREATE TABLE IF NOT EXISTS {KV_TABLE} (
    storage_key VARCHAR(191) NOT NULL PRIMARY KEY,
    storage_value LONGTEXT NOT NULL,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP
) CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci
"""


def ensure_database_exists(db_config: Mapping) -> None:
    target = DBConfig.from_mapping(db_config)
    conn = DatabaseConnection(target).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def ensure_kv_table(db_config: Mapping) -> None:
    """Create the database and the key-value table if missing (idempotent)."""
    ensure_database_exists(db_config)
    conn_factory = DatabaseConnection(DBConfig.from_mapping(db_config))
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        cur.execute(KV_TABLE_DDL)


def list_tables(db_config: Mapping) -> List[str]:
    conn_factory = DatabaseConnection(DBConfig.from_mapping(db_config))
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [str(row[0]) for row in cur.fetchall()]
