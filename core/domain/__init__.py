from core.domain.audit import AuditLogEntry, AuditLogFilter, AuditLogPage
from core.domain.auth import Agent, IdentityUser
from core.domain.directory import (
    Facility,
    Provider,
    ProviderFacilityCredential,
    StateLicense,
    VestaPrivilege,
)
from core.domain.enums import (
    WORKFLOW_TYPE_LABELS,
    AgentRole,
    AuditAction,
    StatusCategory,
    Team,
    WorkflowType,
)
from core.domain.identifiers import generate_id, is_valid_id, utc_now
from core.domain.incident import IncidentLog, IncidentRow
from core.domain.workflow import (
    PhaseDefinition,
    PhaseRow,
    PhaseSummary,
    WorkflowGroup,
    WorkflowPhase,
)

__all__ = [
    "generate_id",
    "is_valid_id",
    "utc_now",
    "WorkflowType",
    "AgentRole",
    "Team",
    "AuditAction",
    "StatusCategory",
    "WORKFLOW_TYPE_LABELS",
    "WorkflowPhase",
    "PhaseDefinition",
    "PhaseRow",
    "WorkflowGroup",
    "PhaseSummary",
    "IncidentLog",
    "IncidentRow",
    "AuditLogEntry",
    "AuditLogFilter",
    "AuditLogPage",
    "Agent",
    "IdentityUser",
    "Provider",
    "Facility",
    "ProviderFacilityCredential",
    "StateLicense",
    "VestaPrivilege",
]
