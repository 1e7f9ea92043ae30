from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    telegram_bot_token: str
    database_path: Path
    tz: str
    live_timer_seconds: int
    admin_panel_token: str | None
    admin_host: str
    admin_port: int
    elevated_user_ids: frozenset[int] = field(default_factory=frozenset)
    log_level: str = "INFO"


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text().splitlines():
        raw = line.strip()
        if not raw or raw.startswith("#") or "=" not in raw:
            continue
        key, value = raw.split("=", maxsplit=1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _parse_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_id_list(value: str | None) -> frozenset[int]:
    if not value:
        return frozenset()
    ids: set[int] = set()
    for part in value.split(","):
        part = part.strip()
        if part.lstrip("-").isdigit():
            ids.add(int(part))
    return frozenset(ids)


def load_settings(require_token: bool = True) -> Settings:
    _load_env_file(Path(".env"))

    token = os.getenv("TELEGRAM_BOT_TOKEN", "")
    if require_token and not token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is required")

    return Settings(
        telegram_bot_token=token,
        database_path=Path(os.getenv("DATABASE_PATH", "./data/app.db")),
        tz=os.getenv("TZ", "Europe/Oslo"),
        live_timer_seconds=max(1, _parse_int(os.getenv("LIVE_TIMER_SECONDS"), 60)),
        admin_panel_token=os.getenv("ADMIN_PANEL_TOKEN"),
        admin_host=os.getenv("ADMIN_HOST", "127.0.0.1"),
        admin_port=_parse_int(os.getenv("ADMIN_PORT"), 8080),
        elevated_user_ids=_parse_id_list(os.getenv("ELEVATED_USER_IDS")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
