from __future__ import annotations

import os
import re

from core.exceptions import ValidationError


_EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")


def allowed_email_domains() -> set[str]:
    raw = os.getenv("CREDOPS_ALLOWED_EMAIL_DOMAINS", "")
    return {part.strip().lower() for part in raw.split(",") if part.strip()}


class AuthValidationMixin:
    @staticmethod
    def _normalize_email(email: str | None) -> str | None:
        value = (email or "").strip().lower()
        return value or None

    @staticmethod
    def _validate_email(email: str | None) -> None:
        if email is None:
            return
        if not _EMAIL_RE.match(email):
            raise ValidationError(
                "Invalid email format.",
                code="INVALID_EMAIL",
            )

    @staticmethod
    def _is_allowed_email(email: str | None) -> bool:
        if not email:
            return False
        domains = allowed_email_domains()
        if not domains:
            return True
        _, _, domain = email.lower().partition("@")
        return domain in domains

    @staticmethod
    def _require_name(value: str | None, label: str) -> str:
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValidationError(f"{label} is required.", code="NAME_REQUIRED")
        return cleaned

    @staticmethod
    def _validate_team_number(team_number: int | None) -> None:
        if team_number is None:
            return
        if int(team_number) <= 0:
            raise ValidationError(
                "Team number must be a positive integer.",
                code="INVALID_TEAM_NUMBER",
            )
