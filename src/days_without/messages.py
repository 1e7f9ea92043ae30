from __future__ import annotations

from days_without.models import COLOR_COUNT, MAX_REASON_LENGTH, MAX_TITLE_LENGTH, RestartRecord
from days_without.periods import PeriodSnapshot, format_clock, format_hours_minutes
from days_without.service import CardView, Dashboard, RestartOutcome
from days_without.tiers import UserStatus
from days_without.time_utils import format_date_range

COLOR_MARKS = {
    1: "🟩",
    2: "🟦",
    3: "🩷",
    4: "🟪",
    5: "🟧",
    6: "🟥",
    7: "🩵",
    8: "🟫",
}

TIER_LABELS = {
    UserStatus.BASIC: "Basic",
    UserStatus.ELEVATED: "Elevated",
}

HELP_TEXT = "\n".join(
    [
        "Days Without tracks how long you have gone without something.",
        "",
        "/list - your habits",
        f"/new <title> [| YYYY-MM-DD HH:MM] [#1-{COLOR_COUNT}] - start tracking (title up to {MAX_TITLE_LENGTH} chars)",
        "/timer <n> - live timer for habit n",
        f"/restart <n> [reason] - start over, reason up to {MAX_REASON_LENGTH} chars",
        "/history <n> - past periods of habit n",
        "/rename <n> <title> - change the title",
        "/delete <n> - remove habit n",
        "/tier - your card limit",
    ]
)


def _bar(ratio: float, width: int = 20) -> str:
    filled = max(0, min(width, int(round(ratio * width))))
    return "█" * filled + "░" * (width - filled)


def color_mark(color_id: int) -> str:
    return COLOR_MARKS.get(color_id, COLOR_MARKS[1])


def days_text(count: int) -> str:
    return f"{count} day" if count == 1 else f"{count} days"


def card_line(position: int, view: CardView) -> str:
    return (
        f"{position}. {color_mark(view.card.color_id)} {view.card.title} — {days_text(view.period.days)}\n"
        f"   {_bar(view.period.progress, width=10)} {format_hours_minutes(view.period.remaining_seconds)} left today"
    )


def tier_line(status: UserStatus, total: int, limit: int) -> str:
    return f"Tier: {TIER_LABELS[status]} ({total}/{limit} cards)"


def dashboard_message(board: Dashboard) -> str:
    if not board.cards:
        lines = ["No habits yet. Start one with /new <title>."]
    else:
        lines = ["📅 Days without"]
        for idx, view in enumerate(board.cards, 1):
            lines.append(card_line(idx, view))
    lines.append("")
    lines.append(tier_line(board.status, board.total_cards, board.max_cards))
    if board.total_cards > board.max_cards:
        lines.append(f"{board.total_cards - board.max_cards} card(s) hidden by your tier limit.")
    elif not board.can_add:
        lines.append("Card limit reached.")
    return "\n".join(lines)


def timer_message(title: str, snapshot: PeriodSnapshot) -> str:
    return "\n".join(
        [
            f"⏱ {title}",
            f"Days: {snapshot.days}",
            f"Current day: {format_clock(snapshot.elapsed_seconds)}",
            f"Until next day: {format_clock(snapshot.remaining_seconds)}",
            f"{_bar(snapshot.progress)} {snapshot.progress * 100:.1f}%",
        ]
    )


def day_reached_message(title: str, days: int) -> str:
    return f"🎉 {title}: {days_text(days)}!"


def restart_message(outcome: RestartOutcome) -> str:
    record = outcome.record
    reason = f"\nReason: {record.reason}" if record.reason else ""
    return f"🔄 {outcome.card.title} restarted after {days_text(record.days)}.{reason}"


def history_message(title: str, records: list[RestartRecord]) -> str:
    if not records:
        return f"{title}: no restarts yet."
    lines = [f"📖 {title}"]
    for record in records:
        line = f"• {format_date_range(record.period_start, record.period_end)} — {days_text(record.days)}"
        if record.reason:
            line += f"\n  {record.reason}"
        lines.append(line)
    return "\n".join(lines)
