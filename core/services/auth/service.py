from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.events.domain_events import domain_events
from core.exceptions import ConflictError, UnauthorizedError, ValidationError
from core.interfaces import AgentRepository, IdentityUserRepository
from core.models import Agent, AgentRole, AuditAction, IdentityUser, Team, utc_now
from core.services.audit.helpers import TABLE_AGENTS, record_audit
from core.services.auth.authorization import require_permission
from core.services.auth.policy import get_app_role, permissions_for_role
from core.services.auth.query import AuthQueryMixin
from core.services.auth.session import UserSessionContext, UserSessionPrincipal
from core.services.auth.validation import AuthValidationMixin

if TYPE_CHECKING:
    from core.services.audit.service import AuditService


logger = logging.getLogger(__name__)


class AuthService(AuthQueryMixin, AuthValidationMixin):
    def __init__(
        self,
        session: Session,
        agent_repo: AgentRepository,
        identity_user_repo: IdentityUserRepository,
        user_session: UserSessionContext | None = None,
        audit_service: "AuditService | None" = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._session: Session = session
        self._agent_repo: AgentRepository = agent_repo
        self._identity_user_repo: IdentityUserRepository = identity_user_repo
        self._user_session: UserSessionContext | None = user_session
        self._audit_service: AuditService | None = audit_service
        self._clock: Callable[[], datetime] = clock or utc_now

    def register_identity_user(self, user_id: str, email: str) -> IdentityUser:
        """Mirror a user from the identity provider; repeated calls update the email."""
        normalized_email = self._normalize_email(email)
        if not (user_id or "").strip():
            raise ValidationError("User id is required.", code="USER_ID_REQUIRED")
        if normalized_email is None:
            raise ValidationError("Email is required.", code="EMAIL_REQUIRED")
        self._validate_email(normalized_email)

        user = self._identity_user_repo.get(user_id)
        try:
            if user is None:
                user = IdentityUser.create(user_id=user_id, email=normalized_email)
                self._identity_user_repo.add(user)
            elif user.email != normalized_email:
                user.email = normalized_email
                self._identity_user_repo.update(user)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        return user

    def sign_in(self, user_id: str, email: str | None) -> UserSessionPrincipal:
        normalized_email = self._normalize_email(email)
        if not self._is_allowed_email(normalized_email):
            logger.warning("Rejected sign-in for %s: email domain not allowed", user_id)
            raise UnauthorizedError(
                "This email domain is not allowed to sign in.",
                code="DOMAIN_NOT_ALLOWED",
            )
        agent = self.resolve_agent(user_id)
        principal = self.build_principal(user_id, normalized_email, agent)
        if self._user_session is not None:
            self._user_session.set_principal(principal)
        logger.info("Signed in %s (agent=%s, role=%s)", user_id, principal.agent_id, principal.role.value)
        return principal

    def sign_out(self) -> None:
        if self._user_session is not None:
            self._user_session.clear()

    @staticmethod
    def build_principal(user_id: str, email: str | None, agent: Agent | None) -> UserSessionPrincipal:
        if agent is None:
            # Known to the identity provider but not yet promoted to an agent.
            return UserSessionPrincipal(
                user_id=user_id,
                email=email,
                agent_id=None,
                display_name=None,
                role=AgentRole.USER,
                permissions=frozenset(),
            )
        role = get_app_role(agent.role)
        return UserSessionPrincipal(
            user_id=user_id,
            email=email or agent.email,
            agent_id=agent.id,
            display_name=agent.full_name,
            role=role,
            permissions=permissions_for_role(role),
        )

    def bootstrap_superadmin(
        self,
        *,
        user_id: str,
        email: str,
        first_name: str,
        last_name: str,
        team: Team | str = Team.US,
    ) -> Agent:
        if self._agent_repo.count() > 0:
            raise ConflictError(
                "Agents already exist; use agent management instead.",
                code="ALREADY_BOOTSTRAPPED",
            )
        return self._create_agent(
            user_id=user_id,
            email=email,
            first_name=first_name,
            last_name=last_name,
            team=team,
            team_number=None,
            role=AgentRole.SUPERADMIN,
        )

    def assign_agent(
        self,
        *,
        user_id: str,
        email: str,
        first_name: str,
        last_name: str,
        team: Team | str,
        team_number: int | None = None,
        role: AgentRole | str = AgentRole.USER,
    ) -> Agent:
        require_permission(self._user_session, "agent.manage", operation_label="assign agent")
        return self._create_agent(
            user_id=user_id,
            email=email,
            first_name=first_name,
            last_name=last_name,
            team=team,
            team_number=team_number,
            role=role,
        )

    def update_agent_role(self, agent_id: str, role: AgentRole | str) -> Agent:
        require_permission(self._user_session, "agent.manage", operation_label="update agent role")
        self._refuse_self(agent_id, "You cannot change your own role.")
        new_role = self._coerce_role(role)
        agent = self._require_agent(agent_id)
        before = replace(agent)
        agent.role = new_role
        agent.updated_at = self._clock()
        try:
            self._agent_repo.update(agent)
            record_audit(
                self,
                table_name=TABLE_AGENTS,
                record_id=agent.id,
                action=AuditAction.UPDATE,
                old=before,
                new=agent,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info("Agent %s role changed %s -> %s", agent.id, before.role.value, new_role.value)
        domain_events.agents_changed.emit(agent.id)
        return agent

    def remove_agent(self, agent_id: str) -> None:
        require_permission(self._user_session, "agent.manage", operation_label="remove agent")
        self._refuse_self(agent_id, "You cannot remove yourself.")
        agent = self._require_agent(agent_id)
        references = self._agent_repo.count_references(agent.id)
        if references:
            raise ConflictError(
                f"Agent is still referenced by {references} workflow phase(s) or incident(s); reassign them first.",
                code="AGENT_IN_USE",
            )
        try:
            self._agent_repo.delete(agent.id)
            record_audit(
                self,
                table_name=TABLE_AGENTS,
                record_id=agent.id,
                action=AuditAction.DELETE,
                old=agent,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info("Removed agent %s (%s)", agent.id, agent.email)
        domain_events.agents_changed.emit(agent.id)

    def _create_agent(
        self,
        *,
        user_id: str,
        email: str,
        first_name: str,
        last_name: str,
        team: Team | str,
        team_number: int | None,
        role: AgentRole | str,
    ) -> Agent:
        normalized_email = self._normalize_email(email)
        if normalized_email is None:
            raise ValidationError("Email is required.", code="EMAIL_REQUIRED")
        self._validate_email(normalized_email)
        self._validate_team_number(team_number)
        agent = Agent.create(
            user_id=(user_id or "").strip() or None,
            first_name=self._require_name(first_name, "First name"),
            last_name=self._require_name(last_name, "Last name"),
            email=normalized_email,
            team=self._coerce_team(team),
            team_number=team_number,
            role=self._coerce_role(role),
            now=self._clock(),
        )
        if self._agent_repo.get_by_email(normalized_email):
            raise ConflictError("An agent with this email already exists.", code="AGENT_EMAIL_EXISTS")
        if agent.user_id and self._agent_repo.get_by_user_id(agent.user_id):
            raise ConflictError("This user is already an agent.", code="AGENT_USER_EXISTS")

        try:
            self._agent_repo.add(agent)
            record_audit(
                self,
                table_name=TABLE_AGENTS,
                record_id=agent.id,
                action=AuditAction.INSERT,
                new=agent,
            )
            self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            raise ConflictError(
                "An agent with this email already exists.",
                code="AGENT_EMAIL_EXISTS",
            ) from exc
        except Exception:
            self._session.rollback()
            raise
        logger.info("Created agent %s (%s, %s)", agent.id, agent.email, agent.role.value)
        domain_events.agents_changed.emit(agent.id)
        return agent

    def _refuse_self(self, agent_id: str, message: str) -> None:
        principal = self._user_session.principal if self._user_session else None
        if principal is not None and principal.agent_id == agent_id:
            raise UnauthorizedError(message, code="SELF_MODIFICATION")

    @staticmethod
    def _coerce_role(role: AgentRole | str) -> AgentRole:
        try:
            return AgentRole(role)
        except ValueError as exc:
            raise ValidationError(
                "Role must be one of: user, admin, superadmin.",
                code="INVALID_ROLE",
            ) from exc

    @staticmethod
    def _coerce_team(team: Team | str) -> Team:
        try:
            return Team(team)
        except ValueError as exc:
            raise ValidationError("Team must be IN or US.", code="INVALID_TEAM") from exc


__all__ = ["AuthService"]
