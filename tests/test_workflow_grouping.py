from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from core.models import PhaseRow, StatusCategory, WorkflowGroup, WorkflowPhase, WorkflowType
from core.services.workflow import (
    classify_status,
    group_phases,
    is_phase_done,
    is_phase_overdue,
    summarize_phases,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def _phase(related_id: str, name: str, status: str = "Pending", *, due=None, updated=None, wtype=WorkflowType.PFC):
    return WorkflowPhase(
        id=f"{related_id}-{name}",
        workflow_type=wtype,
        related_id=related_id,
        phase_name=name,
        status=status,
        due_date=due,
        updated_at=updated,
    )


def _row(phase: WorkflowPhase, *, label: str | None = "Jane Doe → Mercy", incidents: int = 0) -> PhaseRow:
    row = PhaseRow(phase=phase, incident_count=incidents)
    if label is not None:
        row.context_label = label
    return row


@pytest.mark.parametrize(
    "status, expected",
    [
        ("Completed", True),
        ("completed - signed off", True),
        ("Completed But Pending Review", True),
        ("Done", True),
        ("approved", True),
        ("In Progress", False),
        ("Blocked", False),
        ("", False),
    ],
)
def test_is_phase_done_matches_completion_words(status, expected):
    assert is_phase_done(_phase("w", "p", status)) is expected


@pytest.mark.parametrize(
    "status, expected",
    [
        ("Completed", StatusCategory.DONE),
        ("done", StatusCategory.DONE),
        ("Approved", StatusCategory.DONE),
        ("In Progress", StatusCategory.IN_PROGRESS),
        ("Processing", StatusCategory.IN_PROGRESS),
        ("Under Review", StatusCategory.IN_PROGRESS),
        ("Blocked", StatusCategory.BLOCKED),
        ("Denied", StatusCategory.BLOCKED),
        ("rejected", StatusCategory.BLOCKED),
        ("Pending", StatusCategory.PENDING),
        (None, StatusCategory.PENDING),
        ("Waiting on facility", StatusCategory.PENDING),
    ],
)
def test_classify_status_badges(status, expected):
    assert classify_status(status) == expected


def test_overdue_needs_past_due_date_and_open_status():
    today = NOW.date()
    assert is_phase_overdue(_phase("w", "a", due=today - timedelta(days=1)), NOW)
    assert not is_phase_overdue(_phase("w", "b", due=today), NOW)
    assert not is_phase_overdue(_phase("w", "c", "Completed", due=today - timedelta(days=5)), NOW)
    assert not is_phase_overdue(_phase("w", "d"), NOW)


def test_group_phases_aggregates_counts_and_flags():
    earlier = NOW - timedelta(days=2)
    rows = [
        _row(_phase("link-1", "Application Request", "Completed", updated=earlier)),
        _row(_phase("link-1", "QA1", "Blocked", updated=NOW), incidents=2),
        _row(_phase("link-1", "QA2", "Pending", due=date(2026, 3, 1), updated=earlier), incidents=1),
    ]

    [group] = group_phases(rows, now=NOW)

    assert group.key == "pfc:link-1"
    assert group.context_label == "Jane Doe → Mercy"
    assert group.total_count == 3
    assert group.completed_count == 1
    assert group.incident_count == 3
    assert group.has_blocked is True
    assert group.has_overdue is True
    assert group.latest_update == NOW
    assert group.completion_percent == pytest.approx(33.3)
    assert [p.phase.phase_name for p in group.phases] == ["Application Request", "QA1", "QA2"]


def test_group_phases_orders_by_latest_update_and_sinks_missing_timestamps():
    rows = [
        _row(_phase("old", "a", updated=NOW - timedelta(days=3))),
        _row(_phase("never", "a")),
        _row(_phase("new", "a", updated=NOW)),
        _row(_phase("old", "b", updated=NOW - timedelta(days=1))),
    ]

    groups = group_phases(rows, now=NOW)

    assert [g.related_id for g in groups] == ["new", "old", "never"]
    assert groups[1].latest_update == NOW - timedelta(days=1)
    assert groups[2].latest_update is None


def test_group_phases_keeps_workflow_types_apart_and_labels_unknown():
    rows = [
        _phase("shared", "a", wtype=WorkflowType.PFC, updated=NOW),
        _phase("shared", "b", wtype=WorkflowType.STATE_LICENSES, updated=NOW),
    ]

    groups = group_phases(rows, now=NOW)

    assert {g.key for g in groups} == {"pfc:shared", "state_licenses:shared"}
    # bare phases carry no context label
    assert all(g.context_label == "Unknown" for g in groups)


def test_group_phases_places_every_phase_in_exactly_one_group():
    types = list(WorkflowType)
    rows = []
    for i in range(24):
        wtype = types[i % len(types)]
        related = f"parent-{i % 3}"
        updated = None if i % 5 == 0 else NOW - timedelta(hours=i)
        status = "Completed" if i % 4 == 1 else "Pending"
        rows.append(_row(_phase(related, f"phase-{i}", status, updated=updated, wtype=wtype)))

    groups = group_phases(rows, now=NOW)

    placed = [p.id for g in groups for p in g.phases]
    assert sorted(placed) == sorted(r.id for r in rows)
    assert len(placed) == len(set(placed))
    assert sum(g.total_count for g in groups) == len(rows)
    assert sum(g.completed_count for g in groups) == sum(1 for r in rows if r.status == "Completed")
    assert len({g.key for g in groups}) == len(groups)
    for group in groups:
        assert all(
            (p.workflow_type, p.related_id) == (group.workflow_type, group.related_id) for p in group.phases
        )


def test_group_phases_empty_input_and_empty_group_percent():
    assert group_phases([], now=NOW) == []
    assert WorkflowGroup(key="pfc:x", workflow_type=WorkflowType.PFC, related_id="x").completion_percent == 0.0


def test_summarize_phases_counts_each_flag():
    phases = [
        _phase("w", "a", "Completed", due=date(2026, 1, 1)),
        _phase("w", "b", "Blocked", due=date(2026, 1, 1)),
        _phase("w", "c", "Pending", due=date(2026, 12, 1)),
    ]

    summary = summarize_phases(phases, now=NOW)

    assert (summary.total, summary.completed, summary.blocked, summary.overdue) == (3, 1, 1, 1)
