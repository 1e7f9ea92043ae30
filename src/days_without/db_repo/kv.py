from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Protocol


class DbProtocol(Protocol):
    def _connect(self) -> sqlite3.Connection: ...


class KeyValueMixin:
    def kv_set(self: DbProtocol, key: str, value: bytes) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO kv_store(key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value=excluded.value,
                    updated_at=excluded.updated_at
                """,
                (key, sqlite3.Binary(value), datetime.now().isoformat(timespec="seconds")),
            )

    def kv_get(self: DbProtocol, key: str) -> bytes | None:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return bytes(row["value"]) if row else None

    def kv_delete(self: DbProtocol, key: str) -> bool:
        with self._connect() as conn:
            cur = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        return cur.rowcount > 0
