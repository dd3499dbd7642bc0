from __future__ import annotations

import copy
from datetime import date

import pytest

from core.models import IncidentLog, WorkflowPhase, WorkflowType
from core.services.audit import compute_changed_fields, field_diffs, format_value
from core.services.audit.helpers import snapshot_of


def test_changed_fields_lists_changed_then_added_then_removed():
    old = {"status": "Pending", "notes": None, "legacy": 1, "due_date": "2026-03-01"}
    new = {"status": "In Progress", "notes": None, "due_date": "2026-03-02", "agent_assigned": "a-1"}

    assert compute_changed_fields(old, new) == ["status", "due_date", "agent_assigned", "legacy"]


def test_changed_fields_compares_nested_values_structurally():
    old = {"supporting_agents": ["a", "b"], "meta": {"x": 1, "y": 2}}
    new = {"supporting_agents": ["a", "b"], "meta": {"y": 2, "x": 1}}

    assert compute_changed_fields(old, new) == []
    assert compute_changed_fields(old, {**new, "supporting_agents": ["b", "a"]}) == ["supporting_agents"]


def test_changed_fields_for_inserts_and_deletes():
    row = {"id": "p-1", "status": "Pending"}

    assert compute_changed_fields(None, row) == ["id", "status"]
    assert compute_changed_fields(row, {}) == ["id", "status"]
    assert compute_changed_fields(None, None) == []


@pytest.mark.parametrize(
    "snapshot",
    [
        {},
        {"status": "Pending", "notes": None},
        {"supporting_agents": ["a", "b"], "meta": {"x": [1, {"y": None}]}},
        snapshot_of(WorkflowPhase.create(WorkflowType.PFC, "link-1", "QA1", status="Blocked", supporting_agents=["a"])),
        snapshot_of(IncidentLog.create("p-1", "a-1", "a-2", "Missing CV", date(2026, 3, 2), critical=True)),
    ],
)
def test_changed_fields_of_a_snapshot_against_itself_is_empty(snapshot):
    assert compute_changed_fields(snapshot, snapshot) == []
    assert compute_changed_fields(snapshot, copy.deepcopy(snapshot)) == []


def test_field_diffs_put_changes_first_and_keep_discovery_order():
    old = {"id": "p-1", "status": "Pending", "notes": "a", "phase_name": "QA1"}
    new = {"id": "p-1", "status": "Done", "notes": "b", "phase_name": "QA1"}

    diffs = field_diffs(old, new)

    assert [(d.key, d.kind) for d in diffs] == [
        ("status", "changed"),
        ("notes", "changed"),
        ("id", "unchanged"),
        ("phase_name", "unchanged"),
    ]
    assert diffs[0].old_value == "Pending"
    assert diffs[0].new_value == "Done"
    assert diffs[0].changed and not diffs[-1].changed


def test_field_diffs_mark_added_and_removed_keys():
    diffs = {d.key: d for d in field_diffs({"gone": 1}, {"fresh": 2})}

    assert diffs["gone"].kind == "removed"
    assert diffs["gone"].new_value is None
    assert diffs["fresh"].kind == "added"
    assert diffs["fresh"].old_value is None


def test_format_value_renders_scalars_and_json():
    assert format_value(None) == ""
    assert format_value(True) == "true"
    assert format_value(False) == "false"
    assert format_value(3) == "3"
    assert format_value("QA1") == "QA1"
    assert format_value(["a-1"]) == '[\n  "a-1"\n]'
    assert format_value({"k": 1}) == '{\n  "k": 1\n}'
