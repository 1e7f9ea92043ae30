from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.error import BadRequest
from telegram.ext import Application, CallbackQueryHandler, CommandHandler, ContextTypes

from days_without.commands_shared import get_settings, get_user_services, touch_user
from days_without.errors import CardNotFound, HabitError
from days_without.habit_store import HabitStore
from days_without.messages import (
    HELP_TEXT,
    day_reached_message,
    dashboard_message,
    days_text,
    history_message,
    restart_message,
    tier_line,
    timer_message,
)
from days_without.models import COLOR_COUNT, DEFAULT_COLOR_ID, HabitCard
from days_without.service import dashboard, delete_habit, rename_habit, restart_habit, start_habit
from days_without.ticker import TICK_INTERVAL_SECONDS, PeriodTicker
from days_without.time_utils import StartParseError, now_local, parse_start_instant

logger = logging.getLogger(__name__)

_COLOR_SUFFIX = re.compile(r"\s*#(?P<color>\d+)\s*$")


@dataclass(frozen=True)
class NewHabitRequest:
    title: str
    start: datetime
    color_id: int


def parse_new_habit_args(text: str, now: datetime) -> NewHabitRequest:
    """Parse ``<title> [| start] [#color]`` as typed after /new."""
    raw = text.strip()
    color_id = DEFAULT_COLOR_ID
    match = _COLOR_SUFFIX.search(raw)
    if match:
        color_id = int(match.group("color"))
        if not 1 <= color_id <= COLOR_COUNT:
            raise StartParseError(f"Color must be between 1 and {COLOR_COUNT}")
        raw = raw[: match.start()]

    title, sep, start_raw = raw.partition("|")
    start = parse_start_instant(start_raw, now) if sep else now
    return NewHabitRequest(title=title.strip(), start=start, color_id=color_id)


def _resolve_card(store: HabitStore, raw: str | None) -> HabitCard | None:
    if not raw or not raw.isdigit():
        return None
    cards = store.displayable_cards()
    position = int(raw)
    if 1 <= position <= len(cards):
        return cards[position - 1]
    return None


def _timer_job_name(chat_id: int, card_id: str) -> str:
    return f"timer:{chat_id}:{card_id}"


def _stop_keyboard(card_id: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([[InlineKeyboardButton("⏹ Stop", callback_data=f"h:stop:{card_id}")]])


def _confirm_keyboard(action: str, card_id: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton("Yes", callback_data=f"h:{action}:{card_id}"),
                InlineKeyboardButton("Cancel", callback_data="h:cancel"),
            ]
        ]
    )


# ── Commands ──────────────────────────────────────────────────────


async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    touch_user(update, context)
    await update.effective_message.reply_text(HELP_TEXT)


async def cmd_list(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user_id, _, now = touch_user(update, context)
    store, _ = get_user_services(context, user_id)
    await update.effective_message.reply_text(dashboard_message(dashboard(store, now)))


async def cmd_new(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user_id, _, now = touch_user(update, context)
    store, _ = get_user_services(context, user_id)

    if not context.args:
        await update.effective_message.reply_text("Usage: /new <title> [| YYYY-MM-DD HH:MM] [#color]")
        return

    try:
        request = parse_new_habit_args(" ".join(context.args), now)
        card = start_habit(store, request.title, request.start, color_id=request.color_id)
    except (StartParseError, HabitError) as exc:
        await update.effective_message.reply_text(str(exc))
        return

    await update.effective_message.reply_text(
        f"Tracking started: {card.title} ({days_text(card.days_count(now))} so far)\n"
        f"{tier_line(store.status_provider.get_current_status(), len(store.get_all()), store.max_cards_limit())}"
    )


async def cmd_timer(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user_id, chat_id, now = touch_user(update, context)
    store, _ = get_user_services(context, user_id)
    card = _resolve_card(store, context.args[0] if context.args else None)
    if card is None:
        await update.effective_message.reply_text("Usage: /timer <n> (see /list)")
        return

    name = _timer_job_name(chat_id, card.id)
    for job in context.job_queue.get_jobs_by_name(name):
        job.data["ticker"].stop()

    ticker = PeriodTicker(card, now, get_settings(context).live_timer_seconds)
    text = timer_message(card.title, ticker.tick(now).snapshot)
    message = await update.effective_message.reply_text(text, reply_markup=_stop_keyboard(card.id))
    context.job_queue.run_repeating(
        _tick_live_timer,
        interval=TICK_INTERVAL_SECONDS,
        first=TICK_INTERVAL_SECONDS,
        name=name,
        chat_id=chat_id,
        user_id=user_id,
        data={"ticker": ticker, "message_id": message.message_id, "last_text": text},
    )


async def cmd_restart(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user_id, _, now = touch_user(update, context)
    store, _ = get_user_services(context, user_id)
    card = _resolve_card(store, context.args[0] if context.args else None)
    if card is None:
        await update.effective_message.reply_text("Usage: /restart <n> [reason]")
        return

    reason = " ".join(context.args[1:]).strip()
    context.user_data.setdefault("pending_restart", {})[card.id] = reason
    await update.effective_message.reply_text(
        f"Restart {card.title}? The current {days_text(card.days_count(now))} go to history.",
        reply_markup=_confirm_keyboard("restart", card.id),
    )


async def cmd_history(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user_id, _, _ = touch_user(update, context)
    store, history = get_user_services(context, user_id)
    card = _resolve_card(store, context.args[0] if context.args else None)
    if card is None:
        await update.effective_message.reply_text("Usage: /history <n>")
        return
    await update.effective_message.reply_text(history_message(card.title, history.get_history(card.id)))


async def cmd_rename(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user_id, _, _ = touch_user(update, context)
    store, _ = get_user_services(context, user_id)
    card = _resolve_card(store, context.args[0] if context.args else None)
    if card is None or len(context.args) < 2:
        await update.effective_message.reply_text("Usage: /rename <n> <title>")
        return

    try:
        updated = rename_habit(store, card.id, " ".join(context.args[1:]))
    except HabitError as exc:
        await update.effective_message.reply_text(str(exc))
        return
    await update.effective_message.reply_text(f"Renamed to {updated.title}")


async def cmd_delete(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user_id, _, _ = touch_user(update, context)
    store, _ = get_user_services(context, user_id)
    card = _resolve_card(store, context.args[0] if context.args else None)
    if card is None:
        await update.effective_message.reply_text("Usage: /delete <n>")
        return
    await update.effective_message.reply_text(
        f"Delete {card.title} and its history?",
        reply_markup=_confirm_keyboard("delete", card.id),
    )


async def cmd_tier(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user_id, _, _ = touch_user(update, context)
    store, _ = get_user_services(context, user_id)
    status = store.status_provider.get_current_status()
    await update.effective_message.reply_text(tier_line(status, len(store.get_all()), store.max_cards_limit()))


# ── Live timer ────────────────────────────────────────────────────


async def _tick_live_timer(context: ContextTypes.DEFAULT_TYPE) -> None:
    job = context.job
    data = job.data
    ticker: PeriodTicker = data["ticker"]
    store, _ = get_user_services(context, job.user_id)
    now = now_local(get_settings(context).tz)

    try:
        ticker.card = store.get(ticker.card.id)
    except CardNotFound:
        ticker.stop()

    if ticker.expired(now):
        job.schedule_removal()
        try:
            await context.bot.edit_message_reply_markup(
                chat_id=job.chat_id, message_id=data["message_id"], reply_markup=None
            )
        except BadRequest:
            pass
        return

    update = ticker.tick(now)
    text = timer_message(ticker.card.title, update.snapshot)
    if text != data["last_text"]:
        try:
            await context.bot.edit_message_text(
                text,
                chat_id=job.chat_id,
                message_id=data["message_id"],
                reply_markup=_stop_keyboard(ticker.card.id),
            )
            data["last_text"] = text
        except BadRequest:
            logger.debug("live timer edit skipped chat_id=%s", job.chat_id, exc_info=True)

    if update.rolled_over:
        await context.bot.send_message(job.chat_id, day_reached_message(ticker.card.title, update.snapshot.days))


# ── Callbacks ─────────────────────────────────────────────────────


async def handle_habit_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    if not query or not query.data:
        return
    await query.answer()

    user_id, chat_id, now = touch_user(update, context)
    store, history = get_user_services(context, user_id)
    parts = query.data.split(":", maxsplit=2)

    if parts[1] == "cancel":
        try:
            await query.edit_message_text("Cancelled")
        except BadRequest:
            pass
        return

    if len(parts) != 3:
        return
    action, card_id = parts[1], parts[2]

    if action == "stop":
        for job in context.job_queue.get_jobs_by_name(_timer_job_name(chat_id, card_id)):
            job.data["ticker"].stop()
        try:
            await query.edit_message_reply_markup(reply_markup=None)
        except BadRequest:
            pass
        return

    try:
        if action == "restart":
            reason = context.user_data.get("pending_restart", {}).pop(card_id, "")
            text = restart_message(restart_habit(store, history, card_id, reason, now))
        elif action == "delete":
            title = store.get(card_id).title
            delete_habit(store, history, card_id)
            text = f"Deleted {title}"
        else:
            return
    except HabitError as exc:
        text = str(exc)

    try:
        await query.edit_message_text(text)
    except BadRequest:
        pass


def register_habit_handlers(app: Application) -> None:
    app.add_handler(CommandHandler(["start", "help"], cmd_help))
    app.add_handler(CommandHandler("list", cmd_list))
    app.add_handler(CommandHandler("new", cmd_new))
    app.add_handler(CommandHandler("timer", cmd_timer))
    app.add_handler(CommandHandler("restart", cmd_restart))
    app.add_handler(CommandHandler("history", cmd_history))
    app.add_handler(CommandHandler("rename", cmd_rename))
    app.add_handler(CommandHandler("delete", cmd_delete))
    app.add_handler(CommandHandler("tier", cmd_tier))
    app.add_handler(CallbackQueryHandler(handle_habit_callback, pattern=r"^h:"))
