from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from days_without.models import HabitCard
from days_without.periods import PeriodSnapshot, period_snapshot

TICK_INTERVAL_SECONDS = 1.0


@dataclass(frozen=True)
class TickUpdate:
    snapshot: PeriodSnapshot
    rolled_over: bool


class PeriodTicker:
    """Per-card refresh state for one live timer.

    The owner calls ``tick`` on its own schedule; the ticker only recomputes
    the period values and notices when the whole-day count moves forward.
    """

    def __init__(self, card: HabitCard, started_at: datetime, lifetime_seconds: float) -> None:
        self.card = card
        self.deadline = started_at + timedelta(seconds=lifetime_seconds)
        self._last_days = card.days_count(started_at)
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def stop(self) -> None:
        self._stopped = True

    def expired(self, now: datetime) -> bool:
        return self._stopped or now >= self.deadline

    def tick(self, now: datetime) -> TickUpdate:
        snapshot = period_snapshot(self.card.start_date, now)
        rolled_over = snapshot.days > self._last_days
        self._last_days = snapshot.days
        return TickUpdate(snapshot=snapshot, rolled_over=rolled_over)
