from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from core.domain.enums import AuditAction
from core.domain.identifiers import generate_id, utc_now


@dataclass
class AuditLogEntry:
    id: str
    table_name: str
    record_id: str | None
    action: AuditAction
    actor_id: str | None
    actor_email: str | None
    created_at: datetime
    old_data: dict[str, Any] = field(default_factory=dict)
    new_data: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def create(
        table_name: str,
        record_id: str | None,
        action: AuditAction,
        *,
        actor_id: str | None = None,
        actor_email: str | None = None,
        old_data: dict[str, Any] | None = None,
        new_data: dict[str, Any] | None = None,
    ) -> "AuditLogEntry":
        return AuditLogEntry(
            id=generate_id(),
            table_name=table_name,
            record_id=record_id,
            action=action,
            actor_id=actor_id,
            actor_email=actor_email,
            created_at=utc_now(),
            old_data=dict(old_data or {}),
            new_data=dict(new_data or {}),
        )


@dataclass(frozen=True)
class AuditLogFilter:
    from_date: date | str | None = None
    to_date: date | str | None = None
    action: str | None = None
    table_name: str | None = None
    actor_email: str | None = None
    actor_id: str | None = None
    record_id: str | None = None
    limit: int = 50
    offset: int = 0


@dataclass
class AuditLogPage:
    rows: list[AuditLogEntry]
    total: int


__all__ = ["AuditLogEntry", "AuditLogFilter", "AuditLogPage"]
