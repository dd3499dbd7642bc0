from __future__ import annotations

from datetime import datetime
from typing import Callable

from sqlalchemy.orm import Session

from core.interfaces import (
    AgentRepository,
    CredentialLinkRepository,
    FacilityRepository,
    IncidentRepository,
    ProviderRepository,
    StateLicenseRepository,
    VestaPrivilegeRepository,
    WorkflowPhaseRepository,
)
from core.models import utc_now
from core.services.audit.service import AuditService
from core.services.auth.session import UserSessionContext
from core.services.workflow.assignment import WorkflowAssignmentMixin
from core.services.workflow.lifecycle import WorkflowLifecycleMixin
from core.services.workflow.query import WorkflowQueryMixin
from core.services.workflow.validation import WorkflowValidationMixin


class WorkflowService(
    WorkflowLifecycleMixin,
    WorkflowAssignmentMixin,
    WorkflowQueryMixin,
    WorkflowValidationMixin,
):
    def __init__(
        self,
        session: Session,
        phase_repo: WorkflowPhaseRepository,
        incident_repo: IncidentRepository,
        agent_repo: AgentRepository,
        provider_repo: ProviderRepository,
        facility_repo: FacilityRepository,
        credential_repo: CredentialLinkRepository,
        license_repo: StateLicenseRepository,
        privilege_repo: VestaPrivilegeRepository,
        audit_service: AuditService,
        user_session: UserSessionContext | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._session: Session = session
        self._phase_repo: WorkflowPhaseRepository = phase_repo
        self._incident_repo: IncidentRepository = incident_repo
        self._agent_repo: AgentRepository = agent_repo
        self._provider_repo: ProviderRepository = provider_repo
        self._facility_repo: FacilityRepository = facility_repo
        self._credential_repo: CredentialLinkRepository = credential_repo
        self._license_repo: StateLicenseRepository = license_repo
        self._privilege_repo: VestaPrivilegeRepository = privilege_repo
        self._audit_service: AuditService = audit_service
        self._user_session: UserSessionContext | None = user_session
        self._clock: Callable[[], datetime] = clock or utc_now

    def _now(self) -> datetime:
        return self._clock()
