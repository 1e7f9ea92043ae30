from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from days_without.converters import decode_cards, encode_cards
from days_without.errors import (
    CardAlreadyExists,
    CardNotFound,
    LimitExceeded,
    LoadError,
    SaveError,
    TitleTooLong,
)
from days_without.models import MAX_TITLE_LENGTH, HabitCard, visible_length
from days_without.storage import HABIT_CARDS_KEY, KeyValueStorage
from days_without.tiers import UserStatusProvider, max_cards_limit

logger = logging.getLogger(__name__)


class HabitStore:
    """In-memory cache of habit cards backed by key-value storage.

    The whole list is written back on every mutation. A failed write rolls the
    cache back to its previous state before the error is re-raised, so the
    cache never diverges from what was last persisted.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        status_provider: UserStatusProvider,
        key: str = HABIT_CARDS_KEY,
    ) -> None:
        self.storage = storage
        self.status_provider = status_provider
        self.key = key
        self._cards: list[HabitCard] = self._load()

    def _load(self) -> list[HabitCard]:
        try:
            data = self.storage.load(self.key)
            if data is None:
                return []
            return decode_cards(data)
        except LoadError:
            logger.warning("habit cards could not be loaded key=%s, starting empty", self.key, exc_info=True)
            return []

    def _persist(self) -> None:
        self.storage.save(self.key, encode_cards(self._cards))

    def _index_of(self, card_id: str) -> int:
        for idx, card in enumerate(self._cards):
            if card.id == card_id:
                return idx
        raise CardNotFound(card_id)

    @staticmethod
    def _validate_title(title: str) -> None:
        if visible_length(title) > MAX_TITLE_LENGTH:
            raise TitleTooLong(MAX_TITLE_LENGTH)

    def get_all(self) -> list[HabitCard]:
        return list(self._cards)

    def get(self, card_id: str) -> HabitCard:
        return self._cards[self._index_of(card_id)]

    def max_cards_limit(self) -> int:
        return max_cards_limit(self.status_provider.get_current_status())

    def can_create_new_card(self) -> bool:
        return len(self._cards) < self.max_cards_limit()

    def displayable_cards(self) -> list[HabitCard]:
        # A downgraded tier hides the extra cards instead of deleting them.
        return self._cards[: self.max_cards_limit()]

    def create(self, card: HabitCard) -> None:
        self._validate_title(card.title)
        if any(c.id == card.id for c in self._cards):
            raise CardAlreadyExists(card.id)
        limit = self.max_cards_limit()
        if len(self._cards) >= limit:
            raise LimitExceeded(current=len(self._cards), max_limit=limit)

        self._cards.append(card)
        try:
            self._persist()
        except SaveError:
            self._cards.pop()
            logger.warning("create rolled back card_id=%s", card.id)
            raise
        logger.info("habit created card_id=%s", card.id)

    def update(self, card: HabitCard) -> None:
        idx = self._index_of(card.id)
        self._validate_title(card.title)

        previous = self._cards[idx]
        self._cards[idx] = card
        try:
            self._persist()
        except SaveError:
            self._cards[idx] = previous
            logger.warning("update rolled back card_id=%s", card.id)
            raise

    def update_title(self, card_id: str, title: str) -> HabitCard:
        updated = replace(self.get(card_id), title=title)
        self.update(updated)
        return updated

    def update_start_date(self, card_id: str, start_date: datetime) -> HabitCard:
        updated = replace(self.get(card_id), start_date=start_date)
        self.update(updated)
        return updated

    def delete(self, card_id: str) -> None:
        idx = self._index_of(card_id)
        removed = self._cards.pop(idx)
        try:
            self._persist()
        except SaveError:
            self._cards.insert(idx, removed)
            logger.warning("delete rolled back card_id=%s", card_id)
            raise
        logger.info("habit deleted card_id=%s", card_id)
