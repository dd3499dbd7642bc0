# tests/conftest.py
from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.models import AgentRole, Team
from infra.db.base import Base
from infra.operational_support import OperationalSupport
from infra.services import build_service_graph


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    monkeypatch.delenv("CREDOPS_ALLOWED_EMAIL_DOMAINS", raising=False)
    monkeypatch.delenv("CREDOPS_APP_VERSION", raising=False)
    monkeypatch.delenv("CREDOPS_LOG_LEVEL", raising=False)


@pytest.fixture
def session():
    # separate in-memory DB for tests
    engine = create_engine("sqlite:///:memory:", future=True)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def support(tmp_path):
    return OperationalSupport(events_path=tmp_path / "support-events.jsonl")


@pytest.fixture
def services(session, support):
    graph = build_service_graph(session, support=support)
    out = graph.as_dict()
    out["graph"] = graph
    return out


@pytest.fixture
def agents(services):
    """A superadmin, an admin and a plain user; nobody is signed in afterwards."""
    auth = services["auth_service"]
    superadmin = auth.bootstrap_superadmin(
        user_id="idp-root",
        email="root@credops.test",
        first_name="Rita",
        last_name="Root",
    )
    auth.sign_in(superadmin.user_id, superadmin.email)
    admin = auth.assign_agent(
        user_id="idp-admin",
        email="ada@credops.test",
        first_name="Ada",
        last_name="Admin",
        team=Team.US,
        role=AgentRole.ADMIN,
    )
    user = auth.assign_agent(
        user_id="idp-user",
        email="uma@credops.test",
        first_name="Uma",
        last_name="User",
        team=Team.IN,
        team_number=2,
    )
    other = auth.assign_agent(
        user_id="idp-other",
        email="otto@credops.test",
        first_name="Otto",
        last_name="Other",
        team=Team.IN,
    )
    auth.sign_out()
    return {"superadmin": superadmin, "admin": admin, "user": user, "other": other}


@pytest.fixture
def login(services):
    def _login(agent):
        return services["auth_service"].sign_in(agent.user_id, agent.email)

    return _login


@pytest.fixture
def directory(services, agents, login):
    """One provider with a facility, a state license and a Vesta privilege."""
    login(agents["user"])
    ds = services["directory_service"]
    provider = ds.create_provider("Jane", "Doe", degree="MD")
    facility = ds.create_facility("Mercy General", state="tx")
    license_ = ds.add_state_license(provider.id, "TX", status="Active")
    privilege = ds.add_vesta_privilege(provider.id, "Tier 1")
    return {
        "provider": provider,
        "facility": facility,
        "license": license_,
        "privilege": privilege,
    }
