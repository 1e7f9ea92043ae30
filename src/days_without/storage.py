from __future__ import annotations

import logging
import sqlite3
from typing import Protocol

from days_without.db import Database
from days_without.errors import LoadError, SaveError

logger = logging.getLogger(__name__)

HABIT_CARDS_KEY = "com.dayswithout.habitcards"
RESTART_HISTORY_PREFIX = "RestartHistory_"


def history_key(habit_id: str) -> str:
    return f"{RESTART_HISTORY_PREFIX}{habit_id}"


def user_prefix(user_id: int) -> str:
    return f"user:{user_id}:"


class KeyValueStorage(Protocol):
    def save(self, key: str, data: bytes) -> None: ...
    def load(self, key: str) -> bytes | None: ...
    def clear(self, key: str) -> None: ...


class SqliteKeyValueStorage:
    def __init__(self, db: Database) -> None:
        self.db = db

    def save(self, key: str, data: bytes) -> None:
        try:
            self.db.kv_set(key, data)
        except sqlite3.Error as exc:
            logger.exception("kv save failed key=%s", key)
            raise SaveError(exc) from exc

    def load(self, key: str) -> bytes | None:
        try:
            return self.db.kv_get(key)
        except sqlite3.Error as exc:
            logger.exception("kv load failed key=%s", key)
            raise LoadError(exc) from exc

    def clear(self, key: str) -> None:
        try:
            self.db.kv_delete(key)
        except sqlite3.Error as exc:
            logger.exception("kv clear failed key=%s", key)
            raise SaveError(exc) from exc


class ScopedStorage:
    def __init__(self, inner: KeyValueStorage, prefix: str) -> None:
        self.inner = inner
        self.prefix = prefix

    def save(self, key: str, data: bytes) -> None:
        self.inner.save(self.prefix + key, data)

    def load(self, key: str) -> bytes | None:
        return self.inner.load(self.prefix + key)

    def clear(self, key: str) -> None:
        self.inner.clear(self.prefix + key)


def storage_for_user(db: Database, user_id: int) -> ScopedStorage:
    return ScopedStorage(SqliteKeyValueStorage(db), user_prefix(user_id))
