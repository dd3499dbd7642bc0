# infra/db/repositories.py
"""Single import point for every SQLAlchemy repository."""

from infra.db.agent.repository import SqlAlchemyAgentRepository, SqlAlchemyIdentityUserRepository
from infra.db.audit.repository import SqlAlchemyAuditLogRepository
from infra.db.directory.repository import (
    SqlAlchemyCredentialLinkRepository,
    SqlAlchemyFacilityRepository,
    SqlAlchemyProviderRepository,
    SqlAlchemyStateLicenseRepository,
    SqlAlchemyVestaPrivilegeRepository,
)
from infra.db.incident.repository import SqlAlchemyIncidentRepository
from infra.db.workflow.repository import SqlAlchemyWorkflowPhaseRepository

__all__ = [
    "SqlAlchemyAgentRepository",
    "SqlAlchemyIdentityUserRepository",
    "SqlAlchemyAuditLogRepository",
    "SqlAlchemyProviderRepository",
    "SqlAlchemyFacilityRepository",
    "SqlAlchemyCredentialLinkRepository",
    "SqlAlchemyStateLicenseRepository",
    "SqlAlchemyVestaPrivilegeRepository",
    "SqlAlchemyIncidentRepository",
    "SqlAlchemyWorkflowPhaseRepository",
]
