from infra.db.agent.mapper import (
    agent_from_orm,
    agent_to_orm,
    identity_user_from_orm,
    identity_user_to_orm,
)
from infra.db.agent.repository import SqlAlchemyAgentRepository, SqlAlchemyIdentityUserRepository

__all__ = [
    "agent_to_orm",
    "agent_from_orm",
    "identity_user_to_orm",
    "identity_user_from_orm",
    "SqlAlchemyAgentRepository",
    "SqlAlchemyIdentityUserRepository",
]
