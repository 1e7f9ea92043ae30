from __future__ import annotations

from datetime import datetime

from telegram import Update
from telegram.ext import ContextTypes

from days_without.config import Settings
from days_without.db import Database
from days_without.habit_store import HabitStore
from days_without.history import RestartHistoryLog
from days_without.service import build_user_services
from days_without.time_utils import now_local


def get_db(context: ContextTypes.DEFAULT_TYPE) -> Database:
    db = context.application.bot_data.get("db")
    assert isinstance(db, Database)
    return db


def get_settings(context: ContextTypes.DEFAULT_TYPE) -> Settings:
    settings = context.application.bot_data.get("settings")
    assert isinstance(settings, Settings)
    return settings


def touch_user(update: Update, context: ContextTypes.DEFAULT_TYPE) -> tuple[int, int, datetime]:
    assert update.effective_user is not None
    assert update.effective_chat is not None
    user_id = update.effective_user.id
    chat_id = update.effective_chat.id

    now = now_local(get_settings(context).tz)
    get_db(context).upsert_user_profile(user_id=user_id, chat_id=chat_id, seen_at=now)
    return user_id, chat_id, now


def get_user_services(context: ContextTypes.DEFAULT_TYPE, user_id: int) -> tuple[HabitStore, RestartHistoryLog]:
    # One store per user for the lifetime of the process; it owns the card cache.
    services = context.application.bot_data.setdefault("user_services", {})
    if user_id not in services:
        services[user_id] = build_user_services(get_db(context), user_id, get_settings(context).elevated_user_ids)
    return services[user_id]
