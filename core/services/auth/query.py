from __future__ import annotations

from core.exceptions import NotFoundError
from core.interfaces import AgentRepository, IdentityUserRepository
from core.models import Agent, IdentityUser
from core.services.auth.authorization import require_permission


class AuthQueryMixin:
    _agent_repo: AgentRepository
    _identity_user_repo: IdentityUserRepository

    def resolve_agent(self, user_id: str) -> Agent | None:
        """Map an external identity-provider user id to its agent, if any."""
        if not user_id:
            return None
        return self._agent_repo.get_by_user_id(user_id)

    def list_agents(self) -> list[Agent]:
        require_permission(self._user_session, "agent.manage", operation_label="list agents")
        return sorted(self._agent_repo.list_all(), key=lambda a: (a.first_name.lower(), a.last_name.lower()))

    def list_unassigned_users(self, search: str | None = None) -> list[IdentityUser]:
        require_permission(self._user_session, "agent.manage", operation_label="list unassigned users")
        agent_emails = {a.email.lower() for a in self._agent_repo.list_all()}
        users = [u for u in self._identity_user_repo.list_all() if u.email.lower() not in agent_emails]
        if search:
            needle = search.strip().lower()
            users = [u for u in users if needle in u.email.lower()]
        return sorted(users, key=lambda u: u.email.lower())

    def _require_agent(self, agent_id: str) -> Agent:
        agent = self._agent_repo.get(agent_id)
        if not agent:
            raise NotFoundError("Agent not found.", code="AGENT_NOT_FOUND")
        return agent
