from __future__ import annotations

import uuid

import pytest

from core.events.domain_events import domain_events
from core.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from core.models import AgentRole, AuditLogFilter, PhaseDefinition, Team, WorkflowType
from core.services.auth.policy import get_app_role, permissions_for_role


def test_bootstrap_creates_first_superadmin_only_once(services):
    auth = services["auth_service"]

    root = auth.bootstrap_superadmin(
        user_id="idp-root", email=" Root@CredOps.test ", first_name="Rita", last_name="Root"
    )

    assert root.role == AgentRole.SUPERADMIN
    assert root.email == "root@credops.test"
    assert root.team == Team.US
    with pytest.raises(ConflictError) as exc:
        auth.bootstrap_superadmin(
            user_id="idp-second", email="second@credops.test", first_name="Sam", last_name="Second"
        )
    assert exc.value.code == "ALREADY_BOOTSTRAPPED"


def test_sign_in_builds_principal_from_agent_role(services, agents, login):
    principal = login(agents["admin"])

    assert principal.agent_id == agents["admin"].id
    assert principal.display_name == "Ada Admin"
    assert principal.role == AgentRole.ADMIN
    assert principal.permissions == permissions_for_role(AgentRole.ADMIN)
    assert "audit.read" in principal.permissions
    assert "agent.manage" not in principal.permissions
    assert services["user_session"].principal == principal


def test_identity_user_without_agent_gets_no_permissions(services, agents):
    principal = services["auth_service"].sign_in("idp-new", "New.Person@credops.test")

    assert principal.agent_id is None
    assert principal.email == "new.person@credops.test"
    assert principal.permissions == frozenset()


def test_sign_in_enforces_allowed_email_domains(services, agents, monkeypatch):
    auth = services["auth_service"]
    monkeypatch.setenv("CREDOPS_ALLOWED_EMAIL_DOMAINS", "credops.test, partner.org")

    assert auth.sign_in("idp-partner", "someone@partner.org").agent_id is None
    with pytest.raises(UnauthorizedError) as exc:
        auth.sign_in("idp-outsider", "someone@gmail.com")
    assert exc.value.code == "DOMAIN_NOT_ALLOWED"
    with pytest.raises(UnauthorizedError):
        auth.sign_in("idp-blank", None)


def test_role_policy_maps_unknown_roles_to_user():
    assert get_app_role("SuperAdmin") == AgentRole.SUPERADMIN
    assert get_app_role(" admin ") == AgentRole.ADMIN
    assert get_app_role("owner") == AgentRole.USER
    assert get_app_role(None) == AgentRole.USER
    assert permissions_for_role(AgentRole.USER) < permissions_for_role(AgentRole.ADMIN)
    assert permissions_for_role(AgentRole.ADMIN) < permissions_for_role(AgentRole.SUPERADMIN)


def test_assign_agent_requires_agent_manage(services, agents, login):
    login(agents["admin"])

    with pytest.raises(UnauthorizedError) as exc:
        services["auth_service"].assign_agent(
            user_id="idp-x", email="x@credops.test", first_name="X", last_name="Y", team=Team.US
        )
    assert exc.value.code == "PERMISSION_DENIED"


def test_assign_agent_rejects_duplicates(services, agents, login):
    auth = services["auth_service"]
    login(agents["superadmin"])

    with pytest.raises(ConflictError) as exc:
        auth.assign_agent(
            user_id="idp-fresh", email="UMA@credops.test", first_name="Uma", last_name="Again", team=Team.IN
        )
    assert exc.value.code == "AGENT_EMAIL_EXISTS"

    with pytest.raises(ConflictError) as exc:
        auth.assign_agent(
            user_id="idp-user", email="uma2@credops.test", first_name="Uma", last_name="Again", team=Team.IN
        )
    assert exc.value.code == "AGENT_USER_EXISTS"


@pytest.mark.parametrize(
    "overrides, code",
    [
        ({"email": "not-an-email"}, "INVALID_EMAIL"),
        ({"email": "  "}, "EMAIL_REQUIRED"),
        ({"first_name": " "}, "NAME_REQUIRED"),
        ({"team": "EU"}, "INVALID_TEAM"),
        ({"role": "owner"}, "INVALID_ROLE"),
        ({"team_number": 0}, "INVALID_TEAM_NUMBER"),
    ],
)
def test_assign_agent_validates_input(services, agents, login, overrides, code):
    login(agents["superadmin"])
    fields = dict(
        user_id="idp-val",
        email="val@credops.test",
        first_name="Val",
        last_name="Idation",
        team=Team.US,
    )
    fields.update(overrides)

    with pytest.raises(ValidationError) as exc:
        services["auth_service"].assign_agent(**fields)
    assert exc.value.code == code


def test_update_role_audits_and_takes_effect_on_next_sign_in(services, agents, login):
    auth = services["auth_service"]
    seen: list[str] = []

    def _on_agents_changed(agent_id: str) -> None:
        seen.append(agent_id)

    login(agents["superadmin"])
    domain_events.agents_changed.connect(_on_agents_changed)
    try:
        promoted = auth.update_agent_role(agents["user"].id, "admin")
    finally:
        domain_events.agents_changed.disconnect(_on_agents_changed)

    assert promoted.role == AgentRole.ADMIN
    assert seen == [agents["user"].id]
    [entry] = services["audit_service"].list_entries(
        AuditLogFilter(table_name="agents", action="update")
    ).rows
    assert entry.old_data["role"] == "user"
    assert entry.new_data["role"] == "admin"

    assert "audit.read" in login(agents["user"]).permissions


def test_agents_cannot_change_or_remove_themselves(services, agents, login):
    auth = services["auth_service"]
    login(agents["superadmin"])

    with pytest.raises(UnauthorizedError) as exc:
        auth.update_agent_role(agents["superadmin"].id, AgentRole.USER)
    assert exc.value.code == "SELF_MODIFICATION"
    with pytest.raises(UnauthorizedError) as exc:
        auth.remove_agent(agents["superadmin"].id)
    assert exc.value.code == "SELF_MODIFICATION"


def test_remove_agent_downgrades_that_identity(services, agents, login):
    auth = services["auth_service"]
    login(agents["superadmin"])

    auth.remove_agent(agents["other"].id)

    assert [a.email for a in auth.list_agents()] == [
        "ada@credops.test",
        "root@credops.test",
        "uma@credops.test",
    ]
    with pytest.raises(NotFoundError):
        auth.remove_agent(agents["other"].id)
    with pytest.raises(NotFoundError):
        auth.update_agent_role(str(uuid.uuid4()), AgentRole.ADMIN)
    assert login(agents["other"]).permissions == frozenset()


@pytest.mark.parametrize("reference", ["assignee", "supporter", "escalation"])
def test_remove_agent_refuses_while_phases_or_incidents_point_at_it(
    services, agents, login, directory, reference
):
    ws = services["workflow_service"]
    phase = ws.create_workflow(
        WorkflowType.PFC,
        directory["provider"].id,
        directory["facility"].id,
        [PhaseDefinition("QA1")],
    ).phases[0]
    if reference == "assignee":
        ws.update_phase(phase.id, agent_assigned=agents["other"].id)
    elif reference == "supporter":
        login(agents["other"])
        ws.update_phase(phase.id, notes="Called the facility")
    else:
        services["incident_service"].create_incident(
            phase.id,
            subcategory="Missing CV",
            date_identified="2026-03-02",
            escalated_to=agents["other"].id,
        )

    login(agents["superadmin"])
    with pytest.raises(ConflictError) as exc:
        services["auth_service"].remove_agent(agents["other"].id)

    assert exc.value.code == "AGENT_IN_USE"
    assert "otto@credops.test" in [a.email for a in services["auth_service"].list_agents()]
    assert services["audit_service"].list_entries(
        AuditLogFilter(table_name="agents", action="delete")
    ).total == 0


def test_register_identity_user_upserts_and_lists_unassigned(services, agents, login):
    auth = services["auth_service"]

    first = auth.register_identity_user("idp-lee", "lee@credops.test")
    again = auth.register_identity_user("idp-lee", "Lee.New@credops.test")
    auth.register_identity_user("idp-kim", "kim@partner.org")
    auth.register_identity_user("idp-user", "uma@credops.test")

    assert first.user_id == again.user_id
    assert again.email == "lee.new@credops.test"

    login(agents["superadmin"])
    assert [u.email for u in auth.list_unassigned_users()] == ["kim@partner.org", "lee.new@credops.test"]
    assert [u.user_id for u in auth.list_unassigned_users(search="PARTNER")] == ["idp-kim"]

    with pytest.raises(ValidationError) as exc:
        auth.register_identity_user(" ", "x@credops.test")
    assert exc.value.code == "USER_ID_REQUIRED"


def test_agent_listing_requires_agent_manage(services, agents, login):
    login(agents["admin"])

    with pytest.raises(UnauthorizedError):
        services["auth_service"].list_agents()
    with pytest.raises(UnauthorizedError):
        services["auth_service"].list_unassigned_users()
