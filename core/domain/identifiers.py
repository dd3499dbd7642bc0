from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4


def generate_id() -> str:
    return str(uuid4())


def is_valid_id(value: str | None) -> bool:
    try:
        UUID(str(value))
    except (TypeError, ValueError):
        return False
    return True


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


__all__ = ["generate_id", "is_valid_id", "utc_now"]
