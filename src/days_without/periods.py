from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

DAY_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class PeriodSnapshot:
    days: int
    elapsed_seconds: float
    remaining_seconds: float
    progress: float


def _delta_seconds(start: datetime, now: datetime) -> float:
    # Same-zone datetime subtraction ignores DST offset changes; timestamps do not.
    return now.timestamp() - start.timestamp()


def elapsed_whole_days(start: datetime, now: datetime) -> int:
    return max(0, math.floor(_delta_seconds(start, now) / DAY_SECONDS))


def elapsed_in_current_period(start: datetime, now: datetime) -> float:
    # Float modulo with a positive divisor is never negative.
    return _delta_seconds(start, now) % DAY_SECONDS


def remaining_in_current_period(start: datetime, now: datetime) -> float:
    remaining = DAY_SECONDS - elapsed_in_current_period(start, now)
    return min(max(remaining, 0.0), float(DAY_SECONDS))


def progress_fraction(start: datetime, now: datetime) -> float:
    return min(max(elapsed_in_current_period(start, now) / DAY_SECONDS, 0.0), 1.0)


def period_snapshot(start: datetime, now: datetime) -> PeriodSnapshot:
    return PeriodSnapshot(
        days=elapsed_whole_days(start, now),
        elapsed_seconds=elapsed_in_current_period(start, now),
        remaining_seconds=remaining_in_current_period(start, now),
        progress=progress_fraction(start, now),
    )


def format_clock(seconds: float) -> str:
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_hours_minutes(seconds: float) -> str:
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    return f"{hours:02d}:{rest // 60:02d}"
