from __future__ import annotations

from core.models import Agent, IdentityUser
from infra.db.mappers import as_utc
from infra.db.models import AgentORM, IdentityUserORM


def agent_to_orm(agent: Agent) -> AgentORM:
    return AgentORM(
        id=agent.id,
        user_id=agent.user_id,
        first_name=agent.first_name,
        last_name=agent.last_name,
        email=agent.email,
        team=agent.team,
        team_number=agent.team_number,
        role=agent.role,
        created_at=agent.created_at,
        updated_at=agent.updated_at,
    )


def agent_from_orm(obj: AgentORM) -> Agent:
    return Agent(
        id=obj.id,
        user_id=obj.user_id,
        first_name=obj.first_name,
        last_name=obj.last_name,
        email=obj.email,
        team=obj.team,
        team_number=obj.team_number,
        role=obj.role,
        created_at=as_utc(obj.created_at),
        updated_at=as_utc(obj.updated_at),
    )


def identity_user_to_orm(user: IdentityUser) -> IdentityUserORM:
    return IdentityUserORM(id=user.id, email=user.email, created_at=user.created_at)


def identity_user_from_orm(obj: IdentityUserORM) -> IdentityUser:
    return IdentityUser(id=obj.id, email=obj.email, created_at=as_utc(obj.created_at))


__all__ = ["agent_to_orm", "agent_from_orm", "identity_user_to_orm", "identity_user_from_orm"]
