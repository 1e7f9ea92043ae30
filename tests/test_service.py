from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from days_without.db import Database
from days_without.errors import CardNotFound, EmptyTitle, LimitExceeded, LoadError, ReasonTooLong, SaveError
from days_without.habit_store import HabitStore
from days_without.history import RestartHistoryLog
from days_without.service import (
    build_user_services,
    dashboard,
    delete_habit,
    rename_habit,
    restart_habit,
    start_habit,
)
from days_without.tiers import StaticUserStatusProvider, UserStatus


def _dt(y: int, m: int, d: int, h: int = 10, minute: int = 0) -> datetime:
    return datetime(y, m, d, h, minute, tzinfo=ZoneInfo("Europe/Oslo"))


T0 = _dt(2026, 2, 1)


def test_start_habit_trims_and_validates(tmp_path: Path) -> None:
    store, _ = build_user_services(Database(tmp_path / "app.db"), 1)
    card = start_habit(store, "  Coffee  ", T0, color_id=4)
    assert card.title == "Coffee"
    assert card.color_id == 4
    assert store.get_all() == [card]

    with pytest.raises(EmptyTitle):
        start_habit(store, "   ", T0)


def test_fourth_card_on_basic_tier(tmp_path: Path) -> None:
    store, _ = build_user_services(Database(tmp_path / "app.db"), 1)
    for title in ("A", "B", "C"):
        start_habit(store, title, T0)
    with pytest.raises(LimitExceeded):
        start_habit(store, "D", T0)


def test_restart_logs_period_and_resets_start(tmp_path: Path) -> None:
    store, history = build_user_services(Database(tmp_path / "app.db"), 1)
    card = start_habit(store, "Coffee", T0)
    now = T0 + timedelta(days=5, hours=3)

    outcome = restart_habit(store, history, card.id, "  stress  ", now)

    assert outcome.record.days == 5
    assert outcome.record.reason == "stress"
    assert outcome.record.period_start == T0
    assert outcome.record.period_end == now
    assert outcome.card.start_date == now
    assert store.get(card.id).days_count(now) == 0
    assert history.get_history(card.id) == [outcome.record]


def test_second_restart_goes_first(tmp_path: Path) -> None:
    store, history = build_user_services(Database(tmp_path / "app.db"), 1)
    card = start_habit(store, "Coffee", T0)
    first = restart_habit(store, history, card.id, None, T0 + timedelta(days=2))
    second = restart_habit(store, history, card.id, "", T0 + timedelta(days=3))
    assert history.get_history(card.id) == [second.record, first.record]
    assert second.record.days == 1


def test_restart_reason_limit(tmp_path: Path) -> None:
    store, history = build_user_services(Database(tmp_path / "app.db"), 1)
    card = start_habit(store, "Coffee", T0)
    restart_habit(store, history, card.id, "x" * 30, T0 + timedelta(days=1))
    with pytest.raises(ReasonTooLong):
        restart_habit(store, history, card.id, "x" * 31, T0 + timedelta(days=2))
    assert len(history.get_history(card.id)) == 1


def test_restart_missing_card(tmp_path: Path) -> None:
    store, history = build_user_services(Database(tmp_path / "app.db"), 1)
    with pytest.raises(CardNotFound):
        restart_habit(store, history, "missing", "", T0)


def test_restart_rolls_back_when_history_fails(history_failing_storage) -> None:
    store = HabitStore(history_failing_storage, StaticUserStatusProvider())
    history = RestartHistoryLog(history_failing_storage)
    card = start_habit(store, "Coffee", T0)

    history_failing_storage.fail_saves = True
    with pytest.raises(SaveError):
        restart_habit(store, history, card.id, "", T0 + timedelta(days=4))
    assert store.get(card.id).start_date == T0
    assert history.get_history(card.id) == []


def test_restart_rolls_back_when_history_unreadable(flaky_storage) -> None:
    store = HabitStore(flaky_storage, StaticUserStatusProvider())
    history = RestartHistoryLog(flaky_storage)
    card = start_habit(store, "Coffee", T0)
    restart_habit(store, history, card.id, "stress", T0 + timedelta(days=2))

    flaky_storage.fail_loads = True
    with pytest.raises(LoadError):
        restart_habit(store, history, card.id, "", T0 + timedelta(days=5))
    flaky_storage.fail_loads = False

    assert store.get(card.id).start_date == T0 + timedelta(days=2)
    assert [r.reason for r in history.get_history(card.id)] == ["stress"]


def test_failed_rollback_keeps_original_error(flaky_storage, monkeypatch) -> None:
    store = HabitStore(flaky_storage, StaticUserStatusProvider())
    history = RestartHistoryLog(flaky_storage)
    card = start_habit(store, "Coffee", T0)
    original = LoadError(OSError("database is locked"))

    def broken_add_record(habit_id, record):
        flaky_storage.fail_saves = True
        raise original

    monkeypatch.setattr(history, "add_record", broken_add_record)
    with pytest.raises(LoadError) as exc_info:
        restart_habit(store, history, card.id, "", T0 + timedelta(days=4))
    assert exc_info.value is original


def test_delete_clears_history(tmp_path: Path) -> None:
    store, history = build_user_services(Database(tmp_path / "app.db"), 1)
    card = start_habit(store, "Coffee", T0)
    restart_habit(store, history, card.id, "", T0 + timedelta(days=2))

    delete_habit(store, history, card.id)
    assert store.get_all() == []
    assert history.get_history(card.id) == []


def test_delete_succeeds_when_history_clear_fails(history_failing_storage) -> None:
    store = HabitStore(history_failing_storage, StaticUserStatusProvider())
    history = RestartHistoryLog(history_failing_storage)
    card = start_habit(store, "Coffee", T0)
    restart_habit(store, history, card.id, "", T0 + timedelta(days=1))

    history_failing_storage.fail_saves = True
    delete_habit(store, history, card.id)
    assert store.get_all() == []


def test_rename(tmp_path: Path) -> None:
    store, _ = build_user_services(Database(tmp_path / "app.db"), 1)
    card = start_habit(store, "Coffee", T0)
    assert rename_habit(store, card.id, " Tea ").title == "Tea"
    with pytest.raises(EmptyTitle):
        rename_habit(store, card.id, " ")


def test_dashboard_values(tmp_path: Path) -> None:
    db = Database(tmp_path / "app.db")
    store, _ = build_user_services(db, 7, elevated_user_ids=[7])
    start_habit(store, "Coffee", T0)
    start_habit(store, "Sugar", T0 + timedelta(hours=12))

    board = dashboard(store, T0 + timedelta(days=2, hours=6))
    assert board.status is UserStatus.ELEVATED
    assert (board.total_cards, board.max_cards, board.can_add) == (2, 6, True)
    assert [v.period.days for v in board.cards] == [2, 1]
    assert board.cards[0].period.remaining_seconds == 18 * 3600
