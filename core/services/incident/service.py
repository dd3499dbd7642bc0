from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, List

from sqlalchemy.orm import Session

from core.events.domain_events import domain_events
from core.exceptions import NotFoundError, ValidationError
from core.interfaces import AgentRepository, IncidentRepository, WorkflowPhaseRepository
from core.models import AuditAction, IncidentLog, IncidentRow, is_valid_id, utc_now
from core.services.audit.helpers import TABLE_INCIDENT_LOGS, record_audit
from core.services.audit.service import AuditService
from core.services.auth.authorization import require_agent, require_permission
from core.services.auth.session import UserSessionContext
from core.services.common.values import blank_to_none, parse_optional_date, require_text

logger = logging.getLogger(__name__)


class IncidentService:
    def __init__(
        self,
        session: Session,
        incident_repo: IncidentRepository,
        phase_repo: WorkflowPhaseRepository,
        agent_repo: AgentRepository,
        audit_service: AuditService,
        user_session: UserSessionContext | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._session: Session = session
        self._incident_repo: IncidentRepository = incident_repo
        self._phase_repo: WorkflowPhaseRepository = phase_repo
        self._agent_repo: AgentRepository = agent_repo
        self._audit_service: AuditService = audit_service
        self._user_session: UserSessionContext | None = user_session
        self._clock: Callable[[], datetime] = clock or utc_now

    def list_incidents(self, phase_id: str) -> List[IncidentRow]:
        require_permission(self._user_session, "workflow.read", operation_label="list incidents")
        return self._incident_repo.list_rows_by_phase(phase_id)

    def create_incident(
        self,
        phase_id: str,
        *,
        subcategory: str,
        date_identified: date | str,
        escalated_to: str,
        critical: bool = False,
        incident_description: str | None = None,
        immediate_resolution_attempt: str | None = None,
    ) -> IncidentLog:
        require_permission(self._user_session, "incident.manage", operation_label="log incident")
        reporter_id = None
        if self._user_session is not None:
            reporter_id = require_agent(self._user_session, operation_label="log incident").agent_id

        cleaned_subcategory = require_text(subcategory, "Subcategory")
        identified = parse_optional_date(date_identified, "Date identified")
        if identified is None:
            raise ValidationError("Date identified is required.", code="REQUIRED_FIELD")
        escalation = require_text(escalated_to, "Escalated to")
        if not is_valid_id(escalation):
            raise ValidationError("Escalated to is not a valid agent.", code="INVALID_ID")
        if self._phase_repo.get(phase_id) is None:
            raise NotFoundError("Workflow phase not found.", code="PHASE_NOT_FOUND")
        if self._agent_repo.get(escalation) is None:
            raise NotFoundError("Escalation agent not found.", code="AGENT_NOT_FOUND")

        incident = IncidentLog.create(
            workflow_id=phase_id,
            who_reported=reporter_id,
            escalated_to=escalation,
            subcategory=cleaned_subcategory,
            date_identified=identified,
            critical=bool(critical),
            incident_description=blank_to_none(incident_description),
            immediate_resolution_attempt=blank_to_none(immediate_resolution_attempt),
            now=self._clock(),
        )
        try:
            self._incident_repo.add(incident)
            record_audit(
                self,
                table_name=TABLE_INCIDENT_LOGS,
                record_id=incident.id,
                action=AuditAction.INSERT,
                new=incident,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info("Logged incident %s on phase %s (critical=%s)", incident.id, phase_id, incident.critical)
        domain_events.incidents_changed.emit(phase_id)
        return incident

    def update_incident(
        self,
        incident_id: str,
        *,
        subcategory: str | None = None,
        critical: bool | None = None,
        resolution_date: date | str | None = None,
        final_resolution: str | None = None,
        preventative_action_taken: str | None = None,
        follow_up_required: bool | None = None,
        follow_up_date: date | str | None = None,
        final_notes: str | None = None,
        discussed: bool | None = None,
    ) -> IncidentLog:
        require_permission(self._user_session, "incident.manage", operation_label="update incident")
        incident = self._require_incident(incident_id)
        before = replace(incident)

        if subcategory is not None:
            incident.subcategory = require_text(subcategory, "Subcategory")
        if critical is not None:
            incident.critical = bool(critical)
        if resolution_date is not None:
            incident.resolution_date = parse_optional_date(resolution_date, "Resolution date")
        if final_resolution is not None:
            incident.final_resolution = blank_to_none(final_resolution)
        if preventative_action_taken is not None:
            incident.preventative_action_taken = blank_to_none(preventative_action_taken)
        if follow_up_required is not None:
            incident.follow_up_required = bool(follow_up_required)
        if follow_up_date is not None:
            incident.follow_up_date = parse_optional_date(follow_up_date, "Follow-up date")
        if final_notes is not None:
            incident.final_notes = blank_to_none(final_notes)
        if discussed is not None:
            incident.discussed = bool(discussed)

        identified = incident.date_identified
        if incident.resolution_date and identified and incident.resolution_date < identified:
            raise ValidationError(
                "Resolution date cannot be before the date identified.",
                code="INCIDENT_INVALID_DATE",
            )
        if incident.follow_up_date and identified and incident.follow_up_date < identified:
            raise ValidationError(
                "Follow-up date cannot be before the date identified.",
                code="INCIDENT_INVALID_DATE",
            )
        incident.updated_at = self._clock()

        try:
            self._incident_repo.update(incident)
            record_audit(
                self,
                table_name=TABLE_INCIDENT_LOGS,
                record_id=incident.id,
                action=AuditAction.UPDATE,
                old=before,
                new=incident,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        domain_events.incidents_changed.emit(incident.workflow_id)
        return incident

    def delete_incident(self, incident_id: str) -> None:
        require_permission(self._user_session, "incident.manage", operation_label="delete incident")
        incident = self._require_incident(incident_id)
        try:
            self._incident_repo.delete(incident.id)
            record_audit(
                self,
                table_name=TABLE_INCIDENT_LOGS,
                record_id=incident.id,
                action=AuditAction.DELETE,
                old=incident,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info("Deleted incident %s", incident.id)
        domain_events.incidents_changed.emit(incident.workflow_id)

    def _require_incident(self, incident_id: str) -> IncidentLog:
        incident = self._incident_repo.get(incident_id) if incident_id else None
        if not incident:
            raise NotFoundError("Incident not found.", code="INCIDENT_NOT_FOUND")
        return incident


__all__ = ["IncidentService"]
