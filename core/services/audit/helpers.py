from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from core.models import AuditAction

TABLE_WORKFLOW_PHASES = "workflow_phases"
TABLE_INCIDENT_LOGS = "incident_logs"
TABLE_AGENTS = "agents"
TABLE_PROVIDERS = "providers"
TABLE_FACILITIES = "facilities"
TABLE_PROVIDER_FACILITY_CREDENTIALS = "provider_facility_credentials"
TABLE_STATE_LICENSES = "state_licenses"
TABLE_VESTA_PRIVILEGES = "provider_vesta_privileges"


def _json_safe(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_json_safe(v) for v in value]
    return value


def snapshot_of(entity: object | None) -> dict[str, Any] | None:
    """Full JSON-safe row image of a domain record for the audit log."""
    if entity is None:
        return None
    if is_dataclass(entity):
        return _json_safe(asdict(entity))
    return _json_safe(dict(entity))


def record_audit(
    owner: object,
    *,
    table_name: str,
    record_id: str | None,
    action: AuditAction | str,
    old: object | None = None,
    new: object | None = None,
) -> None:
    # Joins the caller's open transaction; the caller commits or rolls back.
    audit_service = getattr(owner, "_audit_service", None)
    if audit_service is None:
        raise RuntimeError(f"{type(owner).__name__} has no audit service configured.")
    audit_service.record(
        table_name=table_name,
        record_id=record_id,
        action=action,
        old_data=snapshot_of(old),
        new_data=snapshot_of(new),
    )


__all__ = [
    "record_audit",
    "snapshot_of",
    "TABLE_WORKFLOW_PHASES",
    "TABLE_INCIDENT_LOGS",
    "TABLE_AGENTS",
    "TABLE_PROVIDERS",
    "TABLE_FACILITIES",
    "TABLE_PROVIDER_FACILITY_CREDENTIALS",
    "TABLE_STATE_LICENSES",
    "TABLE_VESTA_PRIVILEGES",
]
