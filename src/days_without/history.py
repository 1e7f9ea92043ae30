from __future__ import annotations

import logging

from days_without.converters import decode_records, encode_records
from days_without.errors import LoadError
from days_without.models import RestartRecord
from days_without.storage import KeyValueStorage, history_key

logger = logging.getLogger(__name__)


class RestartHistoryLog:
    def __init__(self, storage: KeyValueStorage) -> None:
        self.storage = storage

    def _load(self, habit_id: str) -> list[RestartRecord]:
        data = self.storage.load(history_key(habit_id))
        if data is None:
            return []
        return decode_records(data)

    def get_history(self, habit_id: str) -> list[RestartRecord]:
        """Records for one habit, newest first."""
        try:
            return self._load(habit_id)
        except LoadError:
            logger.warning("restart history unreadable habit_id=%s", habit_id, exc_info=True)
            return []

    def add_record(self, habit_id: str, record: RestartRecord) -> None:
        # Unreadable history must not be overwritten with a one-record list.
        records = self._load(habit_id)
        records.insert(0, record)
        self.storage.save(history_key(habit_id), encode_records(records))

    def clear(self, habit_id: str) -> None:
        self.storage.clear(history_key(habit_id))
