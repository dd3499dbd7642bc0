from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from core.domain.identifiers import generate_id, utc_now


@dataclass
class IncidentLog:
    id: str
    workflow_id: str
    who_reported: Optional[str]
    escalated_to: str
    subcategory: str
    date_identified: date
    critical: bool = False
    incident_description: Optional[str] = None
    immediate_resolution_attempt: Optional[str] = None
    resolution_date: Optional[date] = None
    final_resolution: Optional[str] = None
    preventative_action_taken: Optional[str] = None
    follow_up_required: bool = False
    follow_up_date: Optional[date] = None
    final_notes: Optional[str] = None
    discussed: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def create(
        workflow_id: str,
        who_reported: str | None,
        escalated_to: str,
        subcategory: str,
        date_identified: date,
        critical: bool = False,
        incident_description: str | None = None,
        immediate_resolution_attempt: str | None = None,
        now: datetime | None = None,
    ) -> "IncidentLog":
        now = now or utc_now()
        return IncidentLog(
            id=generate_id(),
            workflow_id=workflow_id,
            who_reported=who_reported,
            escalated_to=escalated_to,
            subcategory=subcategory,
            date_identified=date_identified,
            critical=critical,
            incident_description=incident_description,
            immediate_resolution_attempt=immediate_resolution_attempt,
            created_at=now,
            updated_at=now,
        )


@dataclass
class IncidentRow:
    incident: IncidentLog
    reporter_name: str | None = None


__all__ = ["IncidentLog", "IncidentRow"]
