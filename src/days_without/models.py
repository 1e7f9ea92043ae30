from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

import regex

from days_without.periods import elapsed_whole_days

MAX_TITLE_LENGTH = 17
MAX_REASON_LENGTH = 30
COLOR_COUNT = 8
DEFAULT_COLOR_ID = 1


def new_habit_id() -> str:
    return str(uuid.uuid4())


def visible_length(text: str) -> int:
    """Number of user-perceived characters (grapheme clusters) in ``text``."""
    return len(regex.findall(r"\X", text))


@dataclass(frozen=True)
class HabitCard:
    id: str
    title: str
    start_date: datetime
    color_id: int = DEFAULT_COLOR_ID

    def days_count(self, now: datetime) -> int:
        return elapsed_whole_days(self.start_date, now)


@dataclass(frozen=True)
class RestartRecord:
    id: str
    days: int
    reason: str
    period_start: datetime
    period_end: datetime


@dataclass(frozen=True)
class UserProfile:
    user_id: int
    chat_id: int
    last_seen_at: datetime
    tier: str | None
