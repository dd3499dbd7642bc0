from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, TypeVar

from sqlalchemy.orm import Session

from core.exceptions import DomainError
from core.services.audit import AuditService
from core.services.auth import AuthService
from core.services.auth.session import UserSessionContext
from core.services.directory import DirectoryService
from core.services.incident import IncidentService
from core.services.workflow import WorkflowService
from infra.db.repositories import (
    SqlAlchemyAgentRepository,
    SqlAlchemyAuditLogRepository,
    SqlAlchemyCredentialLinkRepository,
    SqlAlchemyFacilityRepository,
    SqlAlchemyIdentityUserRepository,
    SqlAlchemyIncidentRepository,
    SqlAlchemyProviderRepository,
    SqlAlchemyStateLicenseRepository,
    SqlAlchemyVestaPrivilegeRepository,
    SqlAlchemyWorkflowPhaseRepository,
)
from infra.operational_support import OperationalSupport, bind_trace_id, get_operational_support

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceGraph:
    session: Session
    user_session: UserSessionContext
    audit_service: AuditService
    auth_service: AuthService
    workflow_service: WorkflowService
    incident_service: IncidentService
    directory_service: DirectoryService
    support: OperationalSupport | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "session": self.session,
            "user_session": self.user_session,
            "audit_service": self.audit_service,
            "auth_service": self.auth_service,
            "workflow_service": self.workflow_service,
            "incident_service": self.incident_service,
            "directory_service": self.directory_service,
        }

    def dispatch(self, operation: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run one service call under a fresh trace id.

        Domain failures are recorded as support events and re-raised unchanged.
        """
        support = self.support or get_operational_support()
        with bind_trace_id(None) as trace_id:
            try:
                return fn(*args, **kwargs)
            except DomainError as exc:
                principal = self.user_session.principal
                logger.warning("%s failed [%s]: %s", operation, exc.code, exc)
                support.emit_event(
                    event_type="service.call_failed",
                    level="WARNING",
                    trace_id=trace_id,
                    message=f"{operation} failed: {exc}",
                    data={
                        "operation": operation,
                        "code": exc.code,
                        "error_type": type(exc).__name__,
                        "agent_id": principal.agent_id if principal else None,
                    },
                )
                raise


def build_service_graph(
    session: Session,
    *,
    clock: Callable[[], datetime] | None = None,
    support: OperationalSupport | None = None,
) -> ServiceGraph:
    user_session = UserSessionContext()
    agent_repo = SqlAlchemyAgentRepository(session)
    identity_user_repo = SqlAlchemyIdentityUserRepository(session)
    provider_repo = SqlAlchemyProviderRepository(session)
    facility_repo = SqlAlchemyFacilityRepository(session)
    credential_repo = SqlAlchemyCredentialLinkRepository(session)
    license_repo = SqlAlchemyStateLicenseRepository(session)
    privilege_repo = SqlAlchemyVestaPrivilegeRepository(session)
    phase_repo = SqlAlchemyWorkflowPhaseRepository(session)
    incident_repo = SqlAlchemyIncidentRepository(session)
    audit_repo = SqlAlchemyAuditLogRepository(session)

    audit_service = AuditService(
        session=session,
        audit_repo=audit_repo,
        user_session=user_session,
        phase_repo=phase_repo,
        credential_repo=credential_repo,
        license_repo=license_repo,
        privilege_repo=privilege_repo,
    )
    auth_service = AuthService(
        session=session,
        agent_repo=agent_repo,
        identity_user_repo=identity_user_repo,
        user_session=user_session,
        audit_service=audit_service,
        clock=clock,
    )
    workflow_service = WorkflowService(
        session,
        phase_repo,
        incident_repo,
        agent_repo,
        provider_repo,
        facility_repo,
        credential_repo,
        license_repo,
        privilege_repo,
        audit_service,
        user_session=user_session,
        clock=clock,
    )
    incident_service = IncidentService(
        session,
        incident_repo,
        phase_repo,
        agent_repo,
        audit_service,
        user_session=user_session,
        clock=clock,
    )
    directory_service = DirectoryService(
        session,
        provider_repo,
        facility_repo,
        license_repo,
        privilege_repo,
        credential_repo,
        phase_repo,
        incident_repo,
        audit_service,
        user_session=user_session,
        clock=clock,
    )

    return ServiceGraph(
        session=session,
        user_session=user_session,
        audit_service=audit_service,
        auth_service=auth_service,
        workflow_service=workflow_service,
        incident_service=incident_service,
        directory_service=directory_service,
        support=support,
    )
