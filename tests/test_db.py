from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from days_without.db import Database


def _dt(y: int, m: int, d: int, h: int = 10, minute: int = 0) -> datetime:
    return datetime(y, m, d, h, minute, tzinfo=ZoneInfo("Europe/Oslo"))


def test_kv_set_get_overwrite_delete(tmp_path: Path) -> None:
    db = Database(tmp_path / "app.db")
    assert db.kv_get("a") is None
    db.kv_set("a", b"one")
    db.kv_set("a", b"two")
    assert db.kv_get("a") == b"two"
    assert db.kv_delete("a") is True
    assert db.kv_delete("a") is False
    assert db.kv_get("a") is None


def test_migrations_are_idempotent(tmp_path: Path) -> None:
    Database(tmp_path / "app.db").kv_set("a", b"1")
    assert Database(tmp_path / "app.db").kv_get("a") == b"1"


def test_profiles_and_tiers(tmp_path: Path) -> None:
    db = Database(tmp_path / "app.db")
    db.upsert_user_profile(1, 100, _dt(2026, 2, 1))
    db.upsert_user_profile(1, 101, _dt(2026, 2, 2))
    db.upsert_user_profile(2, 200, _dt(2026, 2, 2))
    db.set_user_tier(2, "elevated", _dt(2026, 2, 3))

    profiles = db.get_all_user_profiles()
    assert [(p.user_id, p.chat_id, p.tier) for p in profiles] == [(1, 101, None), (2, 200, "elevated")]
    assert db.get_user_tier(1) is None

    db.set_user_tier(2, "basic", _dt(2026, 2, 4))
    profile = db.get_user_profile(2)
    assert profile is not None
    assert profile.tier == "basic"
    assert db.get_user_profile(3) is None
