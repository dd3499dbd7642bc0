from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Mapping

from sqlalchemy.orm import Session

from core.events.domain_events import domain_events
from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.interfaces import (
    CredentialLinkRepository,
    FacilityRepository,
    IncidentRepository,
    ProviderRepository,
    WorkflowPhaseRepository,
)
from core.models import (
    AuditAction,
    PhaseDefinition,
    ProviderFacilityCredential,
    WorkflowPhase,
    WorkflowType,
)
from core.services.audit.helpers import (
    TABLE_INCIDENT_LOGS,
    TABLE_PROVIDER_FACILITY_CREDENTIALS,
    TABLE_WORKFLOW_PHASES,
    record_audit,
)
from core.services.auth.authorization import require_agent, require_permission
from core.services.common.values import blank_to_none, parse_optional_date
from core.services.workflow.models import WorkflowCreation
from core.services.workflow.validation import WorkflowValidationMixin

logger = logging.getLogger(__name__)

PhaseInput = PhaseDefinition | Mapping


class WorkflowLifecycleMixin(WorkflowValidationMixin):
    _session: Session
    _phase_repo: WorkflowPhaseRepository
    _incident_repo: IncidentRepository
    _provider_repo: ProviderRepository
    _facility_repo: FacilityRepository
    _credential_repo: CredentialLinkRepository

    def create_workflow(
        self,
        workflow_type: WorkflowType | str,
        provider_id: str,
        facility_id: str,
        phases: Iterable[PhaseInput],
        *,
        facility_type: str | None = None,
        privileges: str | None = None,
        priority: str | None = None,
        application_required: bool | None = None,
        pfc_notes: str | None = None,
    ) -> WorkflowCreation:
        """Connect a provider to a facility and open its first phases.

        The link, every phase and every audit row are written in a single
        transaction.
        """
        require_permission(self._user_session, "workflow.manage", operation_label="create workflow")
        if self._user_session is not None:
            require_agent(self._user_session, operation_label="create workflow")
        resolved_type = self._coerce_workflow_type(workflow_type)
        definitions = list(phases or [])
        if not definitions:
            raise ValidationError("At least one phase is required.", code="PHASES_REQUIRED")
        if self._provider_repo.get(provider_id) is None:
            raise NotFoundError("Provider not found.", code="PROVIDER_NOT_FOUND")
        if self._facility_repo.get(facility_id) is None:
            raise NotFoundError("Facility not found.", code="FACILITY_NOT_FOUND")
        if self._credential_repo.get_for_pair(provider_id, facility_id) is not None:
            raise ConflictError(
                "This provider is already connected to this facility.",
                code="PFC_EXISTS",
            )

        link = ProviderFacilityCredential.create(
            provider_id=provider_id,
            facility_id=facility_id,
            facility_type=blank_to_none(facility_type),
            privileges=blank_to_none(privileges),
            priority=blank_to_none(priority),
            application_required=application_required,
            notes=blank_to_none(pfc_notes),
            now=self._now(),
        )
        new_phases = [self._build_phase(resolved_type, link.id, d) for d in definitions]

        try:
            self._credential_repo.add(link)
            record_audit(
                self,
                table_name=TABLE_PROVIDER_FACILITY_CREDENTIALS,
                record_id=link.id,
                action=AuditAction.INSERT,
                new=link,
            )
            self._insert_phases(new_phases)
            self._session.commit()
        except Exception as exc:
            self._session.rollback()
            logger.error("Error creating workflow for %s/%s: %s", provider_id, facility_id, exc)
            raise

        logger.info("Created %s workflow %s with %d phases", resolved_type.value, link.id, len(new_phases))
        domain_events.directory_changed.emit(link.id)
        domain_events.phases_changed.emit(link.id)
        return WorkflowCreation(link=link, phases=new_phases)

    def add_phases(
        self,
        workflow_type: WorkflowType | str,
        related_id: str,
        phases: Iterable[PhaseInput],
    ) -> List[WorkflowPhase]:
        require_permission(self._user_session, "workflow.manage", operation_label="add workflow phases")
        resolved_type = self._coerce_workflow_type(workflow_type)
        definitions = list(phases or [])
        if not definitions:
            raise ValidationError("At least one phase is required.", code="PHASES_REQUIRED")
        self._require_parent(resolved_type, related_id)
        new_phases = [self._build_phase(resolved_type, related_id, d) for d in definitions]
        try:
            self._insert_phases(new_phases)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        domain_events.phases_changed.emit(related_id)
        return new_phases

    def update_phase(
        self,
        phase_id: str,
        *,
        phase_name: str | None = None,
        status: str | None = None,
        start_date=None,
        due_date=None,
        completed_at=None,
        notes: str | None = None,
        agent_assigned: str | None = None,
        clear_assignment: bool = False,
    ) -> WorkflowPhase:
        require_permission(self._user_session, "workflow.manage", operation_label="update workflow phase")
        phase = self._require_phase(phase_id)
        before = replace(phase, supporting_agents=list(phase.supporting_agents))

        if phase_name is not None:
            phase.phase_name = self._validate_phase_name(phase_name)
        if status is not None:
            cleaned_status = blank_to_none(status)
            if cleaned_status is None:
                raise ValidationError("Status cannot be empty.", code="PHASE_STATUS_EMPTY")
            phase.status = cleaned_status
        if start_date is not None:
            phase.start_date = parse_optional_date(start_date, "Start date")
        if due_date is not None:
            phase.due_date = parse_optional_date(due_date, "Due date")
        if completed_at is not None:
            phase.completed_at = parse_optional_date(completed_at, "Completed date")
        if notes is not None:
            phase.notes = blank_to_none(notes)
        if clear_assignment:
            phase.agent_assigned = None
        elif agent_assigned is not None:
            new_assignee = blank_to_none(agent_assigned)
            if new_assignee is not None:
                self._require_existing_agent(new_assignee)
            phase.agent_assigned = new_assignee

        self._validate_phase_dates(phase.start_date, phase.due_date, phase.completed_at)

        actor_id = self._user_session.agent_id if self._user_session else None
        if actor_id and actor_id != phase.agent_assigned and actor_id not in phase.supporting_agents:
            phase.supporting_agents = [*phase.supporting_agents, actor_id]
        phase.updated_at = self._now()

        try:
            self._phase_repo.update(phase)
            record_audit(
                self,
                table_name=TABLE_WORKFLOW_PHASES,
                record_id=phase.id,
                action=AuditAction.UPDATE,
                old=before,
                new=phase,
            )
            self._session.commit()
        except Exception as exc:
            self._session.rollback()
            logger.error("Error updating phase %s: %s", phase_id, exc)
            raise
        domain_events.phases_changed.emit(phase.related_id)
        return phase

    def delete_phase(self, phase_id: str) -> None:
        require_permission(self._user_session, "workflow.admin", operation_label="delete workflow phase")
        phase = self._require_phase(phase_id)
        incidents = self._incident_repo.list_by_phase(phase.id)
        try:
            for incident in incidents:
                self._incident_repo.delete(incident.id)
                record_audit(
                    self,
                    table_name=TABLE_INCIDENT_LOGS,
                    record_id=incident.id,
                    action=AuditAction.DELETE,
                    old=incident,
                )
            self._phase_repo.delete(phase.id)
            record_audit(
                self,
                table_name=TABLE_WORKFLOW_PHASES,
                record_id=phase.id,
                action=AuditAction.DELETE,
                old=phase,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info("Deleted phase %s and %d incident(s)", phase.id, len(incidents))
        if incidents:
            domain_events.incidents_changed.emit(phase.id)
        domain_events.phases_changed.emit(phase.related_id)

    def _insert_phases(self, phases: List[WorkflowPhase]) -> None:
        for phase in phases:
            self._phase_repo.add(phase)
            record_audit(
                self,
                table_name=TABLE_WORKFLOW_PHASES,
                record_id=phase.id,
                action=AuditAction.INSERT,
                new=phase,
            )
