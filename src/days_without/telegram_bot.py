from __future__ import annotations

import logging

from telegram import BotCommand, Update
from telegram.ext import Application, ContextTypes, MessageHandler, filters

from days_without.commands_habits import register_habit_handlers
from days_without.config import Settings
from days_without.db import Database

logger = logging.getLogger(__name__)

BOT_COMMANDS = [
    BotCommand("list", "Your habits"),
    BotCommand("new", "Start tracking a habit"),
    BotCommand("timer", "Live timer for a habit"),
    BotCommand("restart", "Start a habit over"),
    BotCommand("history", "Past periods of a habit"),
    BotCommand("rename", "Rename a habit"),
    BotCommand("delete", "Delete a habit"),
    BotCommand("tier", "Card limit"),
    BotCommand("help", "How it works"),
]


async def handle_unknown(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if update.effective_message is None:
        return
    await update.effective_message.reply_text("Unknown command. Use /help to see all commands.")


async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error("unhandled error while processing update", exc_info=context.error)


async def _post_init(app: Application) -> None:
    await app.bot.set_my_commands(BOT_COMMANDS)


def build_application(settings: Settings, db: Database) -> Application:
    app = Application.builder().token(settings.telegram_bot_token).post_init(_post_init).build()
    app.bot_data["db"] = db
    app.bot_data["settings"] = settings

    register_habit_handlers(app)
    app.add_handler(MessageHandler(filters.COMMAND, handle_unknown))
    app.add_error_handler(handle_error)

    return app
