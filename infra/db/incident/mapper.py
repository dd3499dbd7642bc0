from __future__ import annotations

from core.models import IncidentLog
from infra.db.mappers import as_utc
from infra.db.models import IncidentLogORM

_FIELDS = (
    "id",
    "workflow_id",
    "who_reported",
    "escalated_to",
    "subcategory",
    "critical",
    "date_identified",
    "incident_description",
    "immediate_resolution_attempt",
    "resolution_date",
    "final_resolution",
    "preventative_action_taken",
    "follow_up_required",
    "follow_up_date",
    "final_notes",
    "discussed",
)


def incident_to_orm(incident: IncidentLog) -> IncidentLogORM:
    values = {name: getattr(incident, name) for name in _FIELDS}
    return IncidentLogORM(**values, created_at=incident.created_at, updated_at=incident.updated_at)


def incident_from_orm(obj: IncidentLogORM) -> IncidentLog:
    values = {name: getattr(obj, name) for name in _FIELDS}
    return IncidentLog(
        **values,
        created_at=as_utc(obj.created_at),
        updated_at=as_utc(obj.updated_at),
    )


def copy_incident_onto_orm(incident: IncidentLog, obj: IncidentLogORM) -> None:
    # workflow_id and escalated_to are fixed once the incident is logged.
    for name in _FIELDS:
        if name in ("id", "workflow_id", "escalated_to"):
            continue
        setattr(obj, name, getattr(incident, name))
    obj.updated_at = incident.updated_at


__all__ = ["incident_to_orm", "incident_from_orm", "copy_incident_onto_orm"]
