from __future__ import annotations

import uuid

import pytest

from core.events.domain_events import domain_events
from core.exceptions import NotFoundError, UnauthorizedError, ValidationError
from core.models import AuditLogFilter, PhaseDefinition, WorkflowType


@pytest.fixture
def phase(services, directory):
    created = services["workflow_service"].create_workflow(
        WorkflowType.PFC,
        directory["provider"].id,
        directory["facility"].id,
        [PhaseDefinition("QA1")],
    )
    return created.phases[0]


def _log(services, phase, agents, **overrides):
    fields = dict(
        subcategory="Missing malpractice insurance",
        date_identified="2026-03-02",
        escalated_to=agents["admin"].id,
        critical=True,
        incident_description="COI expired last month",
    )
    fields.update(overrides)
    return services["incident_service"].create_incident(phase.id, **fields)


def test_create_incident_records_reporter_and_lists_with_name(services, phase, agents):
    incident = _log(services, phase, agents)

    assert incident.workflow_id == phase.id
    assert incident.who_reported == agents["user"].id
    assert incident.critical is True
    assert incident.date_identified.isoformat() == "2026-03-02"

    [row] = services["incident_service"].list_incidents(phase.id)
    assert row.incident.id == incident.id
    assert row.reporter_name == "Uma User"
    assert services["workflow_service"].get_phase(phase.id).incident_count == 1


@pytest.mark.parametrize(
    "overrides, error, code",
    [
        ({"subcategory": "  "}, ValidationError, "REQUIRED_FIELD"),
        ({"date_identified": ""}, ValidationError, "REQUIRED_FIELD"),
        ({"date_identified": "yesterday"}, ValidationError, "INVALID_DATE"),
        ({"escalated_to": "Ada"}, ValidationError, "INVALID_ID"),
        ({"escalated_to": str(uuid.uuid4())}, NotFoundError, "AGENT_NOT_FOUND"),
    ],
)
def test_create_incident_validates_input(services, phase, agents, overrides, error, code):
    with pytest.raises(error) as exc:
        _log(services, phase, agents, **overrides)
    assert exc.value.code == code
    assert services["incident_service"].list_incidents(phase.id) == []


def test_create_incident_on_missing_phase(services, agents, directory):
    with pytest.raises(NotFoundError, match="Workflow phase not found"):
        services["incident_service"].create_incident(
            str(uuid.uuid4()),
            subcategory="Other",
            date_identified="2026-03-02",
            escalated_to=agents["admin"].id,
        )


def test_update_incident_resolution_fields(services, phase, agents, login):
    incident = _log(services, phase, agents)

    updated = services["incident_service"].update_incident(
        incident.id,
        resolution_date="2026-03-05",
        final_resolution="Provider uploaded new COI",
        follow_up_required=True,
        follow_up_date="2026-04-05",
        discussed=True,
        critical=False,
    )

    assert updated.resolution_date.isoformat() == "2026-03-05"
    assert updated.final_resolution == "Provider uploaded new COI"
    assert updated.follow_up_required is True
    assert updated.discussed is True
    assert updated.critical is False
    # untouched fields survive a partial update
    assert updated.incident_description == "COI expired last month"

    login(agents["admin"])
    [entry] = services["audit_service"].list_entries(
        AuditLogFilter(table_name="incident_logs", action="update")
    ).rows
    assert entry.old_data["final_resolution"] is None
    assert entry.new_data["final_resolution"] == "Provider uploaded new COI"


@pytest.mark.parametrize("field", ["resolution_date", "follow_up_date"])
def test_update_incident_rejects_dates_before_identification(services, phase, agents, field):
    incident = _log(services, phase, agents)

    with pytest.raises(ValidationError) as exc:
        services["incident_service"].update_incident(incident.id, **{field: "2026-03-01"})

    assert exc.value.code == "INCIDENT_INVALID_DATE"
    [row] = services["incident_service"].list_incidents(phase.id)
    assert getattr(row.incident, field) is None


def test_resolved_incident_reads_back_through_listing(services, phase, agents):
    incidents = services["incident_service"]
    incident = _log(services, phase, agents)

    [row] = incidents.list_incidents(phase.id)
    assert row.incident.critical is True
    assert row.incident.resolution_date is None
    assert row.incident.follow_up_required is False

    incidents.update_incident(
        incident.id,
        resolution_date="2026-03-05",
        final_resolution="Carrier issued a renewed COI",
    )
    services["session"].expire_all()

    [row] = incidents.list_incidents(phase.id)
    assert row.incident.resolution_date.isoformat() == "2026-03-05"
    assert row.incident.final_resolution == "Carrier issued a renewed COI"
    assert row.incident.subcategory == "Missing malpractice insurance"
    assert row.incident.follow_up_required is False
    assert row.incident.critical is True


def test_delete_incident_and_missing_incident(services, phase, agents):
    incidents = services["incident_service"]
    incident = _log(services, phase, agents)

    incidents.delete_incident(incident.id)

    assert incidents.list_incidents(phase.id) == []
    with pytest.raises(NotFoundError):
        incidents.delete_incident(incident.id)
    with pytest.raises(NotFoundError):
        incidents.update_incident(incident.id, final_notes="late")


def test_incident_changes_emit_events_with_phase_id(services, phase, agents):
    seen: list[str] = []

    def _on_incidents_changed(phase_id: str) -> None:
        seen.append(phase_id)

    domain_events.incidents_changed.connect(_on_incidents_changed)
    try:
        incident = _log(services, phase, agents)
        services["incident_service"].update_incident(incident.id, final_notes="Closed")
        services["incident_service"].delete_incident(incident.id)
    finally:
        domain_events.incidents_changed.disconnect(_on_incidents_changed)

    assert seen == [phase.id, phase.id, phase.id]


def test_incident_operations_require_sign_in(services, phase, agents):
    services["auth_service"].sign_out()
    with pytest.raises(UnauthorizedError):
        _log(services, phase, agents)
    with pytest.raises(UnauthorizedError):
        services["incident_service"].list_incidents(phase.id)
