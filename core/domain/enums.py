from __future__ import annotations

from enum import Enum


class WorkflowType(str, Enum):
    PFC = "pfc"
    STATE_LICENSES = "state_licenses"
    PRELIVE_PIPELINE = "prelive_pipeline"
    PROVIDER_VESTA_PRIVILEGES = "provider_vesta_privileges"


class AgentRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class Team(str, Enum):
    IN = "IN"
    US = "US"


class AuditAction(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class StatusCategory(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    DONE = "done"


WORKFLOW_TYPE_LABELS: dict[WorkflowType, str] = {
    WorkflowType.PFC: "PFC",
    WorkflowType.STATE_LICENSES: "State Licenses",
    WorkflowType.PRELIVE_PIPELINE: "Pre-Live Pipeline",
    WorkflowType.PROVIDER_VESTA_PRIVILEGES: "Vesta Privileges",
}


__all__ = [
    "WorkflowType",
    "AgentRole",
    "Team",
    "AuditAction",
    "StatusCategory",
    "WORKFLOW_TYPE_LABELS",
]
