from __future__ import annotations

from typing import Iterable, List

from core.exceptions import NotFoundError, ValidationError
from core.interfaces import (
    AgentRepository,
    CredentialLinkRepository,
    FacilityRepository,
    ProviderRepository,
    StateLicenseRepository,
    VestaPrivilegeRepository,
    WorkflowPhaseRepository,
)
from core.models import PhaseRow, WorkflowType
from core.services.auth.authorization import require_permission
from core.services.common.values import blank_to_none
from core.services.workflow.models import AgentOption, PhaseFilter

MAX_PHASE_PAGE = 500


class WorkflowQueryMixin:
    _phase_repo: WorkflowPhaseRepository
    _agent_repo: AgentRepository
    _provider_repo: ProviderRepository
    _facility_repo: FacilityRepository
    _credential_repo: CredentialLinkRepository
    _license_repo: StateLicenseRepository
    _privilege_repo: VestaPrivilegeRepository

    def list_phases(self, query: PhaseFilter | None = None) -> List[PhaseRow]:
        """Filtered page of phase rows, most recently updated first.

        The agent filters select whole workflows: every phase of a group in
        which the agent is assigned to, or supporting, at least one phase.
        """
        require_permission(self._user_session, "workflow.read", operation_label="list workflow phases")
        query = query or PhaseFilter()
        workflow_type = self._coerce_workflow_type(query.workflow_type, allow_all=True)
        status = blank_to_none(query.status)
        if status is not None and status.lower() == "all":
            status = None
        if query.limit < 1 or query.limit > MAX_PHASE_PAGE:
            raise ValidationError(
                f"Limit must be between 1 and {MAX_PHASE_PAGE}.",
                code="INVALID_LIMIT",
            )
        if query.offset < 0:
            raise ValidationError("Offset cannot be negative.", code="INVALID_OFFSET")

        involving: list[str] = []
        if query.assigned_to_me:
            principal = self._user_session.principal if self._user_session else None
            if principal is None or not principal.agent_id:
                return []
            involving.append(principal.agent_id)
        agent_filter = blank_to_none(query.assigned_to_agent)
        if agent_filter is not None:
            self._validate_agent_id(agent_filter, "Agent filter")
            involving.append(agent_filter)

        rows = self._phase_repo.list_rows(
            workflow_type=workflow_type,
            status=status,
            involving_agent_ids=involving,
            has_incidents=bool(query.has_incidents),
            search=blank_to_none(query.search),
            limit=query.limit,
            offset=query.offset,
        )
        self._attach_context_labels(rows)
        return rows

    def get_phase(self, phase_id: str) -> PhaseRow:
        require_permission(self._user_session, "workflow.read", operation_label="view workflow phase")
        row = self._phase_repo.get_row(phase_id) if phase_id else None
        if row is None:
            raise NotFoundError("Workflow phase not found.", code="PHASE_NOT_FOUND")
        self._attach_context_labels([row])
        return row

    def distinct_statuses(self, workflow_type: WorkflowType | str | None = None) -> List[str]:
        require_permission(self._user_session, "workflow.read", operation_label="list statuses")
        resolved = self._coerce_workflow_type(workflow_type, allow_all=True)
        return [s for s in self._phase_repo.distinct_statuses(resolved) if s]

    def resolve_agent_names(self, agent_ids: Iterable[str]) -> List[AgentOption]:
        ids = [a for a in dict.fromkeys(agent_ids or []) if a]
        if not ids:
            return []
        for agent_id in ids:
            self._validate_agent_id(agent_id)
        return [AgentOption(id=a.id, name=a.full_name) for a in self._agent_repo.list_by_ids(ids)]

    def list_agents_for_assignment(self) -> List[AgentOption]:
        require_permission(self._user_session, "workflow.read", operation_label="list agents")
        agents = sorted(self._agent_repo.list_all(), key=lambda a: (a.first_name, a.last_name))
        return [AgentOption(id=a.id, name=a.full_name, email=a.email) for a in agents]

    def _attach_context_labels(self, rows: List[PhaseRow]) -> None:
        by_type: dict[WorkflowType, set[str]] = {}
        for row in rows:
            by_type.setdefault(row.workflow_type, set()).add(row.related_id)

        labels: dict[tuple[WorkflowType, str], str] = {}
        pfc_ids = by_type.get(WorkflowType.PFC)
        if pfc_ids:
            links = self._credential_repo.list_by_ids(pfc_ids)
            providers = {p.id: p for p in self._provider_repo.list_by_ids({l.provider_id for l in links})}
            facilities = {f.id: f for f in self._facility_repo.list_by_ids({l.facility_id for l in links})}
            for link in links:
                provider = providers.get(link.provider_id)
                facility = facilities.get(link.facility_id)
                provider_name = provider.display_name if provider else "Unknown Provider"
                facility_name = (facility.name if facility else None) or "Unknown Facility"
                labels[(WorkflowType.PFC, link.id)] = f"{provider_name} → {facility_name}"

        license_ids = by_type.get(WorkflowType.STATE_LICENSES)
        if license_ids:
            licenses = self._license_repo.list_by_ids(license_ids)
            providers = {p.id: p for p in self._provider_repo.list_by_ids({l.provider_id for l in licenses})}
            for lic in licenses:
                provider = providers.get(lic.provider_id)
                provider_name = provider.display_name if provider else "Unknown Provider"
                labels[(WorkflowType.STATE_LICENSES, lic.id)] = (
                    f"{provider_name} – {lic.state}" if lic.state else provider_name
                )

        privilege_ids = by_type.get(WorkflowType.PROVIDER_VESTA_PRIVILEGES)
        if privilege_ids:
            privileges = self._privilege_repo.list_by_ids(privilege_ids)
            providers = {p.id: p for p in self._provider_repo.list_by_ids({p.provider_id for p in privileges})}
            for priv in privileges:
                provider = providers.get(priv.provider_id)
                labels[(WorkflowType.PROVIDER_VESTA_PRIVILEGES, priv.id)] = (
                    provider.display_name if provider else "Unknown Provider"
                )

        for row in rows:
            row.context_label = labels.get((row.workflow_type, row.related_id), "")
