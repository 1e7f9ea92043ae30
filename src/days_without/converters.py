from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from days_without.errors import LoadError
from days_without.models import HabitCard, RestartRecord


def _card_to_dict(card: HabitCard) -> dict[str, Any]:
    return {
        "id": card.id,
        "title": card.title,
        "startDate": card.start_date.isoformat(),
        "colorID": card.color_id,
    }


def _dict_to_card(raw: dict[str, Any]) -> HabitCard:
    return HabitCard(
        id=str(raw["id"]),
        title=str(raw["title"]),
        start_date=datetime.fromisoformat(raw["startDate"]),
        color_id=int(raw["colorID"]),
    )


def _record_to_dict(record: RestartRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "days": record.days,
        "reason": record.reason,
        "periodStart": record.period_start.isoformat(),
        "periodEnd": record.period_end.isoformat(),
    }


def _dict_to_record(raw: dict[str, Any]) -> RestartRecord:
    return RestartRecord(
        id=str(raw["id"]),
        days=int(raw["days"]),
        reason=str(raw.get("reason") or ""),
        period_start=datetime.fromisoformat(raw["periodStart"]),
        period_end=datetime.fromisoformat(raw["periodEnd"]),
    )


def _decode_list(data: bytes) -> list[dict[str, Any]]:
    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise LoadError(exc) from exc
    if not isinstance(payload, list):
        raise LoadError(ValueError("expected a JSON list"))
    return payload


def encode_cards(cards: list[HabitCard]) -> bytes:
    return json.dumps([_card_to_dict(c) for c in cards], ensure_ascii=False).encode("utf-8")


def decode_cards(data: bytes) -> list[HabitCard]:
    try:
        return [_dict_to_card(item) for item in _decode_list(data)]
    except (KeyError, TypeError, ValueError) as exc:
        raise LoadError(exc) from exc


def encode_records(records: list[RestartRecord]) -> bytes:
    return json.dumps([_record_to_dict(r) for r in records], ensure_ascii=False).encode("utf-8")


def decode_records(data: bytes) -> list[RestartRecord]:
    try:
        return [_dict_to_record(item) for item in _decode_list(data)]
    except (KeyError, TypeError, ValueError) as exc:
        raise LoadError(exc) from exc
