"""Conversions shared by the per-aggregate domain <-> ORM mappers."""
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any


def as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands timestamps back without tzinfo; everything is stored as UTC.
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_json(payload: Any) -> str:
    return json.dumps(payload, default=str, ensure_ascii=False)


def dict_from_json(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    return value if isinstance(value, dict) else {}


def list_from_json(raw: str | None) -> list[Any]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        return []
    return value if isinstance(value, list) else []


__all__ = ["as_utc", "to_json", "dict_from_json", "list_from_json"]
