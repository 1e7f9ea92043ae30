from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Protocol

from days_without.models import UserProfile


class DbProtocol(Protocol):
    def _connect(self) -> sqlite3.Connection: ...


def _row_to_profile(row: sqlite3.Row) -> UserProfile:
    return UserProfile(
        user_id=row["user_id"],
        chat_id=row["chat_id"],
        last_seen_at=datetime.fromisoformat(row["last_seen_at"]),
        tier=row["tier"],
    )


class UserMixin:
    def upsert_user_profile(self: DbProtocol, user_id: int, chat_id: int, seen_at: datetime) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO user_profiles(user_id, chat_id, last_seen_at)
                VALUES (?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    chat_id=excluded.chat_id,
                    last_seen_at=excluded.last_seen_at
                """,
                (user_id, chat_id, seen_at.isoformat()),
            )

    def get_user_profile(self: DbProtocol, user_id: int) -> UserProfile | None:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT p.user_id, p.chat_id, p.last_seen_at, t.tier
                FROM user_profiles p
                LEFT JOIN user_tiers t ON t.user_id = p.user_id
                WHERE p.user_id = ?
                """,
                (user_id,),
            ).fetchone()
        return _row_to_profile(row) if row else None

    def get_all_user_profiles(self: DbProtocol) -> list[UserProfile]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT p.user_id, p.chat_id, p.last_seen_at, t.tier
                FROM user_profiles p
                LEFT JOIN user_tiers t ON t.user_id = p.user_id
                ORDER BY p.user_id ASC
                """
            ).fetchall()
        return [_row_to_profile(r) for r in rows]

    def get_user_tier(self: DbProtocol, user_id: int) -> str | None:
        with self._connect() as conn:
            row = conn.execute("SELECT tier FROM user_tiers WHERE user_id = ?", (user_id,)).fetchone()
        return str(row["tier"]) if row else None

    def set_user_tier(self: DbProtocol, user_id: int, tier: str, now: datetime) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO user_tiers(user_id, tier, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    tier=excluded.tier,
                    updated_at=excluded.updated_at
                """,
                (user_id, tier, now.isoformat()),
            )
