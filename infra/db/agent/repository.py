from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError
from core.interfaces import AgentRepository, IdentityUserRepository
from core.models import Agent, IdentityUser
from infra.db.agent.mapper import (
    agent_from_orm,
    agent_to_orm,
    identity_user_from_orm,
    identity_user_to_orm,
)
from infra.db.models import AgentORM, IdentityUserORM, IncidentLogORM, WorkflowPhaseORM


class SqlAlchemyAgentRepository(AgentRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, agent: Agent) -> None:
        self.session.add(agent_to_orm(agent))

    def update(self, agent: Agent) -> None:
        obj = self.session.get(AgentORM, agent.id)
        if obj is None:
            raise NotFoundError("Agent not found.", code="AGENT_NOT_FOUND")
        obj.user_id = agent.user_id
        obj.first_name = agent.first_name
        obj.last_name = agent.last_name
        obj.email = agent.email
        obj.team = agent.team
        obj.team_number = agent.team_number
        obj.role = agent.role
        obj.updated_at = agent.updated_at

    def delete(self, agent_id: str) -> None:
        self.session.execute(delete(AgentORM).where(AgentORM.id == agent_id))

    def get(self, agent_id: str) -> Optional[Agent]:
        obj = self.session.get(AgentORM, agent_id)
        return agent_from_orm(obj) if obj else None

    def get_by_user_id(self, user_id: str) -> Optional[Agent]:
        stmt = select(AgentORM).where(AgentORM.user_id == user_id)
        obj = self.session.execute(stmt).scalars().first()
        return agent_from_orm(obj) if obj else None

    def get_by_email(self, email: str) -> Optional[Agent]:
        stmt = select(AgentORM).where(func.lower(AgentORM.email) == (email or "").lower())
        obj = self.session.execute(stmt).scalars().first()
        return agent_from_orm(obj) if obj else None

    def list_all(self) -> List[Agent]:
        stmt = select(AgentORM).order_by(AgentORM.first_name, AgentORM.last_name)
        return [agent_from_orm(row) for row in self.session.execute(stmt).scalars().all()]

    def list_by_ids(self, agent_ids: Iterable[str]) -> List[Agent]:
        ids = list(agent_ids)
        if not ids:
            return []
        stmt = select(AgentORM).where(AgentORM.id.in_(ids))
        return [agent_from_orm(row) for row in self.session.execute(stmt).scalars().all()]

    def count(self) -> int:
        return int(self.session.execute(select(func.count(AgentORM.id))).scalar_one())

    def count_references(self, agent_id: str) -> int:
        """Phases and incidents that still point at the agent."""
        phases = select(func.count(WorkflowPhaseORM.id)).where(
            or_(
                WorkflowPhaseORM.agent_assigned == agent_id,
                WorkflowPhaseORM.supporting_agents_json.contains(f'"{agent_id}"'),
            )
        )
        incidents = select(func.count(IncidentLogORM.id)).where(
            or_(IncidentLogORM.escalated_to == agent_id, IncidentLogORM.who_reported == agent_id)
        )
        return int(self.session.execute(phases).scalar_one()) + int(self.session.execute(incidents).scalar_one())


class SqlAlchemyIdentityUserRepository(IdentityUserRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, user: IdentityUser) -> None:
        self.session.add(identity_user_to_orm(user))

    def update(self, user: IdentityUser) -> None:
        obj = self.session.get(IdentityUserORM, user.id)
        if obj is None:
            raise NotFoundError("User not found.", code="USER_NOT_FOUND")
        obj.email = user.email

    def get(self, user_id: str) -> Optional[IdentityUser]:
        obj = self.session.get(IdentityUserORM, user_id)
        return identity_user_from_orm(obj) if obj else None

    def list_all(self) -> List[IdentityUser]:
        rows = self.session.execute(select(IdentityUserORM)).scalars().all()
        return [identity_user_from_orm(row) for row in rows]


__all__ = ["SqlAlchemyAgentRepository", "SqlAlchemyIdentityUserRepository"]
