from __future__ import annotations

from datetime import date, datetime

from core.exceptions import ValidationError


def blank_to_none(value: str | None) -> str | None:
    """Trim a text value and collapse an empty result to None."""
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


def parse_optional_date(value: date | datetime | str | None, field_label: str) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError as exc:
        raise ValidationError(
            f"{field_label} must be a valid date (YYYY-MM-DD).",
            code="INVALID_DATE",
        ) from exc


def require_text(value: str | None, field_label: str) -> str:
    cleaned = blank_to_none(value)
    if cleaned is None:
        raise ValidationError(f"{field_label} is required.", code="REQUIRED_FIELD")
    return cleaned


__all__ = ["blank_to_none", "parse_optional_date", "require_text"]
