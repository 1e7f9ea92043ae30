from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Protocol


class UserStatus(str, Enum):
    BASIC = "basic"
    ELEVATED = "elevated"


_CARD_LIMITS: dict[UserStatus, int] = {
    UserStatus.BASIC: 3,
    UserStatus.ELEVATED: 6,
}

_ALIASES: dict[str, UserStatus] = {
    "basic": UserStatus.BASIC,
    "free": UserStatus.BASIC,
    "default": UserStatus.BASIC,
    "elevated": UserStatus.ELEVATED,
    "pro": UserStatus.ELEVATED,
    "premium": UserStatus.ELEVATED,
}


def max_cards_limit(status: UserStatus) -> int:
    return _CARD_LIMITS[status]


def normalize_status_input(raw: str | None) -> UserStatus | None:
    if raw is None:
        return None
    key = raw.strip().lower()
    if not key:
        return None
    return _ALIASES.get(key)


class UserStatusProvider(Protocol):
    def get_current_status(self) -> UserStatus: ...


class TierStore(Protocol):
    def get_user_tier(self, user_id: int) -> str | None: ...


class StaticUserStatusProvider:
    def __init__(self, status: UserStatus = UserStatus.BASIC) -> None:
        self.status = status

    def get_current_status(self) -> UserStatus:
        return self.status


class DatabaseUserStatusProvider:
    """Resolves a user's tier: configured elevated ids win, then the stored tier, then basic."""

    def __init__(self, db: TierStore, user_id: int, elevated_user_ids: Iterable[int] = ()) -> None:
        self.db = db
        self.user_id = user_id
        self.elevated_user_ids = frozenset(elevated_user_ids)

    def get_current_status(self) -> UserStatus:
        if self.user_id in self.elevated_user_ids:
            return UserStatus.ELEVATED
        stored = normalize_status_input(self.db.get_user_tier(self.user_id))
        return stored or UserStatus.BASIC
