from __future__ import annotations

import json
import uuid

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from core.events.domain_events import domain_events
from core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from core.models import AgentRole, AuditAction, AuditLogFilter, PhaseDefinition, Team, WorkflowType
from core.services.auth.policy import permissions_for_role
from core.services.auth.session import UserSessionPrincipal
from infra.db.base import Base
from infra.db.models import AuditLogORM, WorkflowPhaseORM
from infra.services import build_service_graph


def _open_phase(services, directory):
    created = services["workflow_service"].create_workflow(
        WorkflowType.PFC,
        directory["provider"].id,
        directory["facility"].id,
        [PhaseDefinition("Application Request")],
    )
    return created.phases[0]


def test_self_assign_claims_unassigned_phase_and_audits(services, directory, agents, login):
    phase = _open_phase(services, directory)
    seen: list[str] = []

    def _on_phases_changed(related_id: str) -> None:
        seen.append(related_id)

    login(agents["other"])
    domain_events.phases_changed.connect(_on_phases_changed)
    try:
        claimed = services["workflow_service"].self_assign(phase.id)
    finally:
        domain_events.phases_changed.disconnect(_on_phases_changed)

    assert claimed.agent_assigned == agents["other"].id
    assert services["workflow_service"].get_phase(phase.id).assigned_name == "Otto Other"
    assert seen == [phase.related_id]

    login(agents["admin"])
    [entry] = services["audit_service"].list_entries(AuditLogFilter(record_id=phase.id, action="update")).rows
    assert entry.old_data["agent_assigned"] is None
    assert entry.new_data["agent_assigned"] == agents["other"].id
    assert entry.actor_id == agents["other"].id


def test_second_claim_conflicts_and_keeps_first_assignee(services, directory, agents, login):
    ws = services["workflow_service"]
    phase = _open_phase(services, directory)
    login(agents["other"])
    ws.self_assign(phase.id)

    login(agents["admin"])
    with pytest.raises(ConflictError, match="already assigned") as exc:
        ws.self_assign(phase.id)

    assert exc.value.code == "PHASE_ALREADY_ASSIGNED"
    assert ws.get_phase(phase.id).phase.agent_assigned == agents["other"].id


def test_self_assign_missing_phase_and_missing_agent(services, directory, agents):
    ws = services["workflow_service"]
    phase = _open_phase(services, directory)

    with pytest.raises(NotFoundError):
        ws.self_assign(str(uuid.uuid4()))

    services["user_session"].set_principal(
        UserSessionPrincipal(
            user_id="idp-orphan",
            email="orphan@credops.test",
            agent_id=None,
            display_name=None,
            role=AgentRole.USER,
            permissions=permissions_for_role(AgentRole.USER),
        )
    )
    with pytest.raises(UnauthorizedError) as exc:
        ws.self_assign(phase.id)
    assert exc.value.code == "AGENT_NOT_FOUND"


@pytest.fixture
def two_sessions(tmp_path):
    engine = create_engine(f"sqlite:///{(tmp_path / 'race.db').as_posix()}", future=True)
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    first, second = factory(), factory()
    try:
        yield first, second
    finally:
        first.close()
        second.close()
        engine.dispose()


def test_concurrent_claims_have_exactly_one_winner(two_sessions, support, monkeypatch):
    session_a, session_b = two_sessions
    graph_a = build_service_graph(session_a, support=support)
    graph_b = build_service_graph(session_b, support=support)

    auth_a = graph_a.auth_service
    root = auth_a.bootstrap_superadmin(
        user_id="idp-root", email="root@credops.test", first_name="Rita", last_name="Root"
    )
    auth_a.sign_in(root.user_id, root.email)
    uma = auth_a.assign_agent(
        user_id="idp-uma", email="uma@credops.test", first_name="Uma", last_name="User", team=Team.US
    )
    otto = auth_a.assign_agent(
        user_id="idp-otto", email="otto@credops.test", first_name="Otto", last_name="Other", team=Team.IN
    )
    auth_a.sign_in(uma.user_id, uma.email)
    provider = graph_a.directory_service.create_provider("Jane", "Doe")
    facility = graph_a.directory_service.create_facility("Mercy General")
    phase = graph_a.workflow_service.create_workflow(
        WorkflowType.PFC, provider.id, facility.id, [PhaseDefinition("QA1")]
    ).phases[0]

    graph_b.auth_service.sign_in(otto.user_id, otto.email)
    # Otto's screen loaded the phase while it was still unassigned.
    stale = graph_b.workflow_service._phase_repo.get(phase.id)
    assert stale.agent_assigned is None
    monkeypatch.setattr(graph_b.workflow_service._phase_repo, "get", lambda _phase_id: stale)

    winner = graph_a.workflow_service.self_assign(phase.id)
    with pytest.raises(ConflictError) as exc:
        graph_b.workflow_service.self_assign(phase.id)

    assert winner.agent_assigned == uma.id
    assert exc.value.code == "PHASE_ALREADY_ASSIGNED"
    session_b.expire_all()
    stored = session_b.execute(select(WorkflowPhaseORM).where(WorkflowPhaseORM.id == phase.id)).scalar_one()
    assert stored.agent_assigned == uma.id
    claim_rows = session_b.execute(
        select(AuditLogORM).where(
            AuditLogORM.record_id == phase.id,
            AuditLogORM.action == AuditAction.UPDATE,
        )
    ).scalars().all()
    assert len(claim_rows) == 1


def test_self_assign_returns_row_as_stored_after_claim(two_sessions, support, monkeypatch):
    session_a, session_b = two_sessions
    graph_a = build_service_graph(session_a, support=support)
    graph_b = build_service_graph(session_b, support=support)

    auth_a = graph_a.auth_service
    root = auth_a.bootstrap_superadmin(
        user_id="idp-root", email="root@credops.test", first_name="Rita", last_name="Root"
    )
    auth_a.sign_in(root.user_id, root.email)
    uma = auth_a.assign_agent(
        user_id="idp-uma", email="uma@credops.test", first_name="Uma", last_name="User", team=Team.US
    )
    otto = auth_a.assign_agent(
        user_id="idp-otto", email="otto@credops.test", first_name="Otto", last_name="Other", team=Team.IN
    )
    auth_a.sign_in(uma.user_id, uma.email)
    provider = graph_a.directory_service.create_provider("Jane", "Doe")
    facility = graph_a.directory_service.create_facility("Mercy General")
    phase = graph_a.workflow_service.create_workflow(
        WorkflowType.PFC, provider.id, facility.id, [PhaseDefinition("QA1")]
    ).phases[0]

    graph_b.auth_service.sign_in(otto.user_id, otto.email)
    stale = graph_b.workflow_service._phase_repo.get(phase.id)
    monkeypatch.setattr(graph_b.workflow_service._phase_repo, "get", lambda _phase_id: stale)

    # Uma edits the notes after Otto's screen loaded the phase.
    graph_a.workflow_service.update_phase(phase.id, notes="Sent packet to facility")

    claimed = graph_b.workflow_service.self_assign(phase.id)

    assert claimed.agent_assigned == otto.id
    assert claimed.notes == "Sent packet to facility"
    assert claimed.supporting_agents == [uma.id]

    session_b.expire_all()
    claim_row = session_b.execute(
        select(AuditLogORM).where(
            AuditLogORM.record_id == phase.id,
            AuditLogORM.action == AuditAction.UPDATE,
            AuditLogORM.actor_id == otto.id,
        )
    ).scalar_one()
    new_data = json.loads(claim_row.new_data_json)
    assert new_data["notes"] == "Sent packet to facility"
    assert new_data["agent_assigned"] == otto.id
    assert json.loads(claim_row.old_data_json)["notes"] is None
