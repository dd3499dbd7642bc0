from __future__ import annotations

from core.exceptions import UnauthorizedError
from core.services.auth.session import UserSessionContext, UserSessionPrincipal


def require_permission(
    user_session: UserSessionContext | None,
    permission_code: str,
    *,
    operation_label: str,
) -> None:
    # Services built without a session context run as the system.
    if user_session is None:
        return
    if not user_session.is_authenticated():
        raise UnauthorizedError("Please sign in.", code="NOT_SIGNED_IN")
    if user_session.has_permission(permission_code):
        return
    raise UnauthorizedError(
        f"Permission denied for {operation_label}. Missing '{permission_code}'.",
        code="PERMISSION_DENIED",
    )


def require_agent(
    user_session: UserSessionContext | None,
    *,
    operation_label: str,
) -> UserSessionPrincipal:
    principal = user_session.principal if user_session is not None else None
    if principal is None or not principal.agent_id:
        raise UnauthorizedError(
            f"Agent record not found for current user ({operation_label}).",
            code="AGENT_NOT_FOUND",
        )
    return principal


def current_actor(user_session: UserSessionContext | None) -> tuple[str | None, str | None]:
    principal = user_session.principal if user_session is not None else None
    if principal is None:
        return None, None
    return principal.agent_id, principal.email


__all__ = [
    "require_permission",
    "require_agent",
    "current_actor",
]
