from datetime import datetime, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

from fastapi.testclient import TestClient

from days_without.admin_app import build_admin_app
from days_without.db import Database
from days_without.service import build_user_services, restart_habit, start_habit

T0 = datetime(2026, 2, 1, 10, 0, tzinfo=ZoneInfo("Europe/Oslo"))
HEADERS = {"x-admin-token": "secret"}


def _setup(tmp_path: Path) -> tuple[Database, TestClient]:
    db = Database(tmp_path / "app.db")
    db.upsert_user_profile(1, 100, T0)
    app = build_admin_app(db, "secret")
    return db, TestClient(app)


def test_requires_token(tmp_path: Path) -> None:
    _, client = _setup(tmp_path)
    assert client.get("/api/users").status_code == 401
    assert client.get("/api/users?token=secret").status_code == 200


def test_users_and_habits(tmp_path: Path) -> None:
    db, client = _setup(tmp_path)
    store, _ = build_user_services(db, 1)
    card = start_habit(store, "Coffee", T0, color_id=2)

    users = client.get("/api/users", headers=HEADERS).json()["rows"]
    assert users == [
        {"user_id": 1, "last_seen_at": T0.isoformat(), "tier": "basic", "cards": 1, "max_cards": 3}
    ]

    habits = client.get("/api/users/1/habits", headers=HEADERS).json()
    assert habits["tier"] == "basic"
    row = habits["rows"][0]
    assert row["id"] == card.id
    assert row["title"] == "Coffee"
    assert row["color_id"] == 2
    assert row["hidden"] is False


def test_history_endpoint(tmp_path: Path) -> None:
    db, client = _setup(tmp_path)
    store, history = build_user_services(db, 1)
    card = start_habit(store, "Coffee", T0)
    restart_habit(store, history, card.id, "party", T0 + timedelta(days=3))

    rows = client.get(f"/api/users/1/habits/{card.id}/history", headers=HEADERS).json()["rows"]
    assert len(rows) == 1
    assert rows[0]["days"] == 3
    assert rows[0]["reason"] == "party"

    assert client.get("/api/users/1/habits/missing/history", headers=HEADERS).status_code == 404


def test_set_tier(tmp_path: Path) -> None:
    db, client = _setup(tmp_path)
    resp = client.put("/api/users/1/tier", headers=HEADERS, json={"tier": "pro"})
    assert resp.status_code == 200
    assert resp.json()["tier"] == "elevated"
    assert db.get_user_tier(1) == "elevated"

    users = client.get("/api/users", headers=HEADERS).json()["rows"]
    assert users[0]["max_cards"] == 6

    assert client.put("/api/users/1/tier", headers=HEADERS, json={"tier": "gold"}).status_code == 400
