from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from days_without.db import Database
from days_without.errors import EmptyTitle, ReasonTooLong, SaveError, StorageError
from days_without.habit_store import HabitStore
from days_without.history import RestartHistoryLog
from days_without.models import (
    DEFAULT_COLOR_ID,
    MAX_REASON_LENGTH,
    HabitCard,
    RestartRecord,
    new_habit_id,
    visible_length,
)
from days_without.periods import PeriodSnapshot, period_snapshot
from days_without.storage import storage_for_user
from days_without.tiers import DatabaseUserStatusProvider, UserStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CardView:
    card: HabitCard
    period: PeriodSnapshot


@dataclass(frozen=True)
class Dashboard:
    cards: list[CardView]
    status: UserStatus
    total_cards: int
    max_cards: int
    can_add: bool


@dataclass(frozen=True)
class RestartOutcome:
    card: HabitCard
    record: RestartRecord


def normalize_title(raw: str | None) -> str:
    title = (raw or "").strip()
    if not title:
        raise EmptyTitle()
    return title


def start_habit(
    store: HabitStore,
    title: str,
    started_at: datetime,
    color_id: int = DEFAULT_COLOR_ID,
) -> HabitCard:
    card = HabitCard(
        id=new_habit_id(),
        title=normalize_title(title),
        start_date=started_at,
        color_id=color_id,
    )
    store.create(card)
    return card


def rename_habit(store: HabitStore, card_id: str, title: str) -> HabitCard:
    return store.update_title(card_id, normalize_title(title))


def restart_habit(
    store: HabitStore,
    history: RestartHistoryLog,
    card_id: str,
    reason: str | None,
    now: datetime,
) -> RestartOutcome:
    text = (reason or "").strip()
    if visible_length(text) > MAX_REASON_LENGTH:
        raise ReasonTooLong(MAX_REASON_LENGTH)

    card = store.get(card_id)
    record = RestartRecord(
        id=new_habit_id(),
        days=card.days_count(now),
        reason=text,
        period_start=card.start_date,
        period_end=now,
    )
    updated = store.update_start_date(card.id, now)
    try:
        history.add_record(card.id, record)
    except StorageError:
        try:
            store.update(card)
        except SaveError:
            logger.exception("restart rollback failed card_id=%s", card.id)
        else:
            logger.warning("restart rolled back card_id=%s", card.id)
        raise
    logger.info("habit restarted card_id=%s days=%s", card.id, record.days)
    return RestartOutcome(card=updated, record=record)


def delete_habit(store: HabitStore, history: RestartHistoryLog, card_id: str) -> None:
    store.delete(card_id)
    try:
        history.clear(card_id)
    except SaveError:
        # The card is gone; a leftover history key is harmless.
        logger.warning("history not cleared card_id=%s", card_id, exc_info=True)


def card_view(card: HabitCard, now: datetime) -> CardView:
    return CardView(card=card, period=period_snapshot(card.start_date, now))


def dashboard(store: HabitStore, now: datetime) -> Dashboard:
    status = store.status_provider.get_current_status()
    return Dashboard(
        cards=[card_view(c, now) for c in store.displayable_cards()],
        status=status,
        total_cards=len(store.get_all()),
        max_cards=store.max_cards_limit(),
        can_add=store.can_create_new_card(),
    )


def build_user_services(
    db: Database,
    user_id: int,
    elevated_user_ids: Iterable[int] = (),
) -> tuple[HabitStore, RestartHistoryLog]:
    storage = storage_for_user(db, user_id)
    provider = DatabaseUserStatusProvider(db, user_id, elevated_user_ids)
    return HabitStore(storage, provider), RestartHistoryLog(storage)
