from __future__ import annotations

import asyncio

from days_without.config import load_settings
from days_without.db import Database
from days_without.logging_setup import setup_logging
from days_without.telegram_bot import build_application


def run_bot() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)
    db = Database(settings.database_path)

    # Python 3.14 does not auto-create a default event loop in main thread.
    try:
        asyncio.get_event_loop()
    except RuntimeError:
        asyncio.set_event_loop(asyncio.new_event_loop())

    application = build_application(settings, db)
    application.run_polling()
