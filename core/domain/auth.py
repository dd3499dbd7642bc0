from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.domain.enums import AgentRole, Team
from core.domain.identifiers import generate_id, utc_now


@dataclass
class IdentityUser:
    """Mirror of a user in the external identity provider's pool."""

    id: str
    email: str
    created_at: datetime | None = None

    @staticmethod
    def create(user_id: str, email: str) -> "IdentityUser":
        return IdentityUser(id=user_id, email=email, created_at=utc_now())


@dataclass
class Agent:
    id: str
    user_id: Optional[str]
    first_name: str
    last_name: str
    email: str
    team: Team
    team_number: Optional[int] = None
    role: AgentRole = AgentRole.USER
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @staticmethod
    def create(
        user_id: str | None,
        first_name: str,
        last_name: str,
        email: str,
        team: Team,
        team_number: int | None = None,
        role: AgentRole = AgentRole.USER,
        now: datetime | None = None,
    ) -> "Agent":
        now = now or utc_now()
        return Agent(
            id=generate_id(),
            user_id=user_id,
            first_name=first_name,
            last_name=last_name,
            email=email,
            team=team,
            team_number=team_number,
            role=role,
            created_at=now,
            updated_at=now,
        )


__all__ = ["IdentityUser", "Agent"]
