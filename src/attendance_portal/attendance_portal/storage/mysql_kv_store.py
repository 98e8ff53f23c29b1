from __future__ import annotations

from typing import Mapping, Optional

from .connection import DatabaseConnection
from .mysql_base import db_cursor, fetchone

_UPSERT_SQL = """
    INSERT INTO portal_storage(storage_key, storage_value)
    VALUES(%s,%s)
    ON DUPLICATE KEY UPDATE storage_value=VALUES(storage_value)
"""


class MySQLKeyValueStore:
    """Blob store persisted in the `portal_storage` table (see database/schema.sql)."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, key: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT storage_value FROM portal_storage WHERE storage_key=%s",
                (str(key),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return row["storage_value"]

    def set(self, key: str, value: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_UPSERT_SQL, (str(key), value))

    def set_many(self, items: Mapping[str, str]) -> None:
        if not items:
            return
        # One connection, one commit: either every key is rewritten or none is.
        with db_cursor(self._conn_factory) as (_, cur):
            for key, value in items.items():
                cur.execute(_UPSERT_SQL, (str(key), value))

    def delete(self, key: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM portal_storage WHERE storage_key=%s", (str(key),))
