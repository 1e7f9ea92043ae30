from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel

from days_without.config import load_settings
from days_without.db import Database
from days_without.errors import CardNotFound
from days_without.logging_setup import setup_logging
from days_without.periods import format_hours_minutes
from days_without.service import build_user_services, dashboard
from days_without.tiers import normalize_status_input
from days_without.time_utils import now_local


def _require_auth(request: Request, token: str | None) -> None:
    if not token:
        return
    header = request.headers.get("x-admin-token")
    query = request.query_params.get("token")
    if header == token or query == token:
        return
    raise HTTPException(status_code=401, detail="Unauthorized")


class TierUpdateRequest(BaseModel):
    tier: str


def build_admin_app(
    db: Database,
    admin_token: str | None,
    elevated_user_ids: Iterable[int] = (),
    tz: str = "Europe/Oslo",
) -> FastAPI:
    app = FastAPI(title="Days Without Admin", version="1.0.0")
    elevated = frozenset(elevated_user_ids)

    @app.get("/api/users")
    async def api_users(request: Request) -> dict[str, Any]:
        _require_auth(request, admin_token)
        rows = []
        for profile in db.get_all_user_profiles():
            store, _ = build_user_services(db, profile.user_id, elevated)
            rows.append(
                {
                    "user_id": profile.user_id,
                    "last_seen_at": profile.last_seen_at.isoformat(),
                    "tier": store.status_provider.get_current_status().value,
                    "cards": len(store.get_all()),
                    "max_cards": store.max_cards_limit(),
                }
            )
        return {"rows": rows}

    @app.get("/api/users/{user_id}/habits")
    async def api_habits(request: Request, user_id: int) -> dict[str, Any]:
        _require_auth(request, admin_token)
        store, _ = build_user_services(db, user_id, elevated)
        now = now_local(tz)
        board = dashboard(store, now)
        visible = {view.card.id: view for view in board.cards}
        rows = []
        for card in store.get_all():
            view = visible.get(card.id)
            rows.append(
                {
                    "id": card.id,
                    "title": card.title,
                    "start_date": card.start_date.isoformat(),
                    "color_id": card.color_id,
                    "days": card.days_count(now),
                    "remaining": format_hours_minutes(view.period.remaining_seconds) if view else None,
                    "hidden": view is None,
                }
            )
        return {"tier": board.status.value, "max_cards": board.max_cards, "rows": rows}

    @app.get("/api/users/{user_id}/habits/{habit_id}/history")
    async def api_history(request: Request, user_id: int, habit_id: str) -> dict[str, Any]:
        _require_auth(request, admin_token)
        store, history = build_user_services(db, user_id, elevated)
        try:
            store.get(habit_id)
        except CardNotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return {
            "rows": [
                {
                    "id": record.id,
                    "days": record.days,
                    "reason": record.reason,
                    "period_start": record.period_start.isoformat(),
                    "period_end": record.period_end.isoformat(),
                }
                for record in history.get_history(habit_id)
            ]
        }

    @app.put("/api/users/{user_id}/tier")
    async def api_set_tier(request: Request, user_id: int, payload: TierUpdateRequest) -> dict[str, Any]:
        _require_auth(request, admin_token)
        status = normalize_status_input(payload.tier)
        if status is None:
            raise HTTPException(status_code=400, detail=f"Unknown tier: {payload.tier}")
        db.set_user_tier(user_id, status.value, now_local(tz))
        return {"ok": True, "user_id": user_id, "tier": status.value}

    return app


def run_admin() -> None:
    settings = load_settings(require_token=False)
    setup_logging(settings.log_level)
    db = Database(settings.database_path)
    app = build_admin_app(db, settings.admin_panel_token, settings.elevated_user_ids, settings.tz)
    uvicorn.run(app, host=settings.admin_host, port=settings.admin_port)
