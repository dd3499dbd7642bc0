from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet

from core.models import AgentRole


@dataclass(frozen=True)
class UserSessionPrincipal:
    user_id: str
    email: str | None
    agent_id: str | None
    display_name: str | None
    role: AgentRole
    permissions: FrozenSet[str]


class UserSessionContext:
    def __init__(self):
        self._principal: UserSessionPrincipal | None = None

    @property
    def principal(self) -> UserSessionPrincipal | None:
        return self._principal

    def set_principal(self, principal: UserSessionPrincipal) -> None:
        self._principal = principal

    def clear(self) -> None:
        self._principal = None

    def is_authenticated(self) -> bool:
        return self._principal is not None

    def has_permission(self, permission_code: str) -> bool:
        if self._principal is None:
            return False
        return permission_code in self._principal.permissions

    @property
    def agent_id(self) -> str | None:
        return self._principal.agent_id if self._principal else None


__all__ = ["UserSessionPrincipal", "UserSessionContext"]
