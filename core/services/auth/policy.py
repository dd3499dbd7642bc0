from __future__ import annotations

from core.models import AgentRole

DEFAULT_PERMISSIONS: dict[str, str] = {
    "workflow.read": "View workflow phases",
    "workflow.manage": "Create, edit and claim workflow phases",
    "workflow.admin": "Delete workflow phases",
    "incident.manage": "Log and resolve incidents",
    "directory.read": "View providers and facilities",
    "directory.manage": "Create and edit providers, facilities and credential records",
    "directory.admin": "Delete providers, facilities and credential records",
    "audit.read": "View the audit log",
    "report.export": "Export the audit log",
    "agent.manage": "Manage agents and roles",
}


DEFAULT_ROLE_PERMISSIONS: dict[AgentRole, set[str]] = {
    AgentRole.USER: {
        "workflow.read",
        "workflow.manage",
        "incident.manage",
        "directory.read",
        "directory.manage",
    },
    AgentRole.ADMIN: {
        "workflow.read",
        "workflow.manage",
        "workflow.admin",
        "incident.manage",
        "directory.read",
        "directory.manage",
        "directory.admin",
        "audit.read",
        "report.export",
    },
    AgentRole.SUPERADMIN: set(DEFAULT_PERMISSIONS.keys()),
}


def get_app_role(agent_role: str | AgentRole | None) -> AgentRole:
    if isinstance(agent_role, AgentRole):
        return agent_role
    normalized = (agent_role or "").strip().lower()
    if normalized == AgentRole.SUPERADMIN.value:
        return AgentRole.SUPERADMIN
    if normalized == AgentRole.ADMIN.value:
        return AgentRole.ADMIN
    return AgentRole.USER


def permissions_for_role(role: AgentRole) -> frozenset[str]:
    return frozenset(DEFAULT_ROLE_PERMISSIONS.get(role, set()))


__all__ = [
    "DEFAULT_PERMISSIONS",
    "DEFAULT_ROLE_PERMISSIONS",
    "get_app_role",
    "permissions_for_role",
]
