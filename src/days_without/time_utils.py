from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

DEFAULT_TZ = "Europe/Oslo"
START_INPUT_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%d")


class StartParseError(ValueError):
    pass


def now_local(tz_name: str = DEFAULT_TZ) -> datetime:
    return datetime.now(tz=ZoneInfo(tz_name))


def parse_start_instant(raw: str, now: datetime) -> datetime:
    value = raw.strip()
    if not value:
        raise StartParseError("Start date is required")

    for fmt in START_INPUT_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        start = parsed.replace(tzinfo=now.tzinfo)
        if start > now:
            raise StartParseError("Start date cannot be in the future")
        return start

    raise StartParseError("Invalid start date. Examples: 2026-01-31 08:30, 2026-01-31")


def format_day(dt: datetime) -> str:
    return dt.strftime("%d.%m.%Y")


def format_date_range(start: datetime, end: datetime) -> str:
    return f"{format_day(start)} – {format_day(end)}"
