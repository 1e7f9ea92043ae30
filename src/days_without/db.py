from __future__ import annotations

from days_without.db_repo import BaseDatabase, KeyValueMixin, UserMixin
from days_without.models import HabitCard, RestartRecord, UserProfile

__all__ = ["Database", "HabitCard", "RestartRecord", "UserProfile"]


class Database(BaseDatabase, KeyValueMixin, UserMixin):
    pass
