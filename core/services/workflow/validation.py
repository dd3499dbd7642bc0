from __future__ import annotations

from datetime import date
from typing import Mapping

from core.exceptions import NotFoundError, ValidationError
from core.interfaces import (
    AgentRepository,
    CredentialLinkRepository,
    FacilityRepository,
    StateLicenseRepository,
    VestaPrivilegeRepository,
    WorkflowPhaseRepository,
)
from core.models import PhaseDefinition, WorkflowPhase, WorkflowType, is_valid_id
from core.services.common.values import blank_to_none, parse_optional_date


class WorkflowValidationMixin:
    _phase_repo: WorkflowPhaseRepository
    _agent_repo: AgentRepository
    _credential_repo: CredentialLinkRepository
    _license_repo: StateLicenseRepository
    _privilege_repo: VestaPrivilegeRepository
    _facility_repo: FacilityRepository

    @staticmethod
    def _coerce_workflow_type(value, *, allow_all: bool = False) -> WorkflowType | None:
        allowed = ", ".join(t.value for t in WorkflowType)
        if value is None:
            if allow_all:
                return None
            raise ValidationError(f"Workflow type must be one of: {allowed}.", code="INVALID_WORKFLOW_TYPE")
        if isinstance(value, WorkflowType):
            return value
        text = str(value).strip().lower()
        if allow_all and text in ("", "all"):
            return None
        try:
            return WorkflowType(text)
        except ValueError as exc:
            raise ValidationError(
                f"Workflow type must be one of: {allowed}.",
                code="INVALID_WORKFLOW_TYPE",
            ) from exc

    @staticmethod
    def _validate_phase_name(name: str | None) -> str:
        cleaned = blank_to_none(name)
        if cleaned is None:
            raise ValidationError("Phase name cannot be empty.", code="PHASE_NAME_EMPTY")
        return cleaned

    @staticmethod
    def _validate_phase_dates(
        start_date: date | None,
        due_date: date | None,
        completed_at: date | None,
    ) -> None:
        if start_date and due_date and due_date < start_date:
            raise ValidationError(
                f"Due date ({due_date}) cannot be before start date ({start_date}).",
                code="PHASE_INVALID_DATE",
            )
        if start_date and completed_at and completed_at < start_date:
            raise ValidationError(
                f"Completed date ({completed_at}) cannot be before start date ({start_date}).",
                code="PHASE_INVALID_DATE",
            )

    @staticmethod
    def _validate_agent_id(agent_id: str | None, label: str = "Agent id") -> None:
        if agent_id is not None and not is_valid_id(agent_id):
            raise ValidationError(f"{label} is not a valid identifier.", code="INVALID_ID")

    def _require_phase(self, phase_id: str) -> WorkflowPhase:
        phase = self._phase_repo.get(phase_id) if phase_id else None
        if not phase:
            raise NotFoundError("Workflow phase not found.", code="PHASE_NOT_FOUND")
        return phase

    def _require_existing_agent(self, agent_id: str) -> None:
        self._validate_agent_id(agent_id, "Assigned agent")
        if self._agent_repo.get(agent_id) is None:
            raise NotFoundError("Assigned agent not found.", code="AGENT_NOT_FOUND")

    def _require_parent(self, workflow_type: WorkflowType, related_id: str) -> None:
        lookups = {
            WorkflowType.PFC: (self._credential_repo, "Provider-facility link not found."),
            WorkflowType.STATE_LICENSES: (self._license_repo, "State license not found."),
            WorkflowType.PROVIDER_VESTA_PRIVILEGES: (self._privilege_repo, "Vesta privilege not found."),
            WorkflowType.PRELIVE_PIPELINE: (self._facility_repo, "Facility not found."),
        }
        repo, message = lookups[workflow_type]
        if repo.get(related_id) is None:
            raise NotFoundError(message, code="WORKFLOW_PARENT_NOT_FOUND")

    def _build_phase(
        self,
        workflow_type: WorkflowType,
        related_id: str,
        definition: PhaseDefinition | Mapping,
    ) -> WorkflowPhase:
        if isinstance(definition, Mapping):
            definition = PhaseDefinition(**definition)
        name = self._validate_phase_name(definition.phase_name)
        start_date = parse_optional_date(definition.start_date, "Start date")
        due_date = parse_optional_date(definition.due_date, "Due date")
        completed_at = parse_optional_date(definition.completed_at, "Completed date")
        self._validate_phase_dates(start_date, due_date, completed_at)
        agent_assigned = blank_to_none(definition.agent_assigned)
        if agent_assigned is not None:
            self._require_existing_agent(agent_assigned)
        return WorkflowPhase.create(
            workflow_type=workflow_type,
            related_id=related_id,
            phase_name=name,
            status=blank_to_none(definition.status) or "Pending",
            start_date=start_date,
            due_date=due_date,
            completed_at=completed_at,
            notes=blank_to_none(definition.notes),
            agent_assigned=agent_assigned,
            now=self._now(),
        )
