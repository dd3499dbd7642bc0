from __future__ import annotations

from core.models import AuditLogEntry
from infra.db.mappers import as_utc, dict_from_json, to_json
from infra.db.models import AuditLogORM


def audit_to_orm(entry: AuditLogEntry) -> AuditLogORM:
    return AuditLogORM(
        id=entry.id,
        table_name=entry.table_name,
        record_id=entry.record_id,
        action=entry.action,
        actor_id=entry.actor_id,
        actor_email=entry.actor_email,
        old_data_json=to_json(entry.old_data) if entry.old_data else None,
        new_data_json=to_json(entry.new_data) if entry.new_data else None,
        created_at=entry.created_at,
    )


def audit_from_orm(obj: AuditLogORM) -> AuditLogEntry:
    return AuditLogEntry(
        id=obj.id,
        table_name=obj.table_name,
        record_id=obj.record_id,
        action=obj.action,
        actor_id=obj.actor_id,
        actor_email=obj.actor_email,
        created_at=as_utc(obj.created_at),
        old_data=dict_from_json(obj.old_data_json),
        new_data=dict_from_json(obj.new_data_json),
    )


__all__ = ["audit_to_orm", "audit_from_orm"]
