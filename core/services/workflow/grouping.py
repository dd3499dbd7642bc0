"""Aggregation of flat phase rows into workflow groups.

A workflow is never stored as such: it is the set of phases sharing the
same (workflow_type, related_id) pair. Everything here is pure and works on
either ``PhaseRow`` read models or bare ``WorkflowPhase`` records.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, List

from core.models import PhaseSummary, StatusCategory, WorkflowGroup, utc_now

_DONE_EXACT = {"done", "approved"}
_BLOCKED_EXACT = {"blocked", "denied", "rejected"}
_IN_PROGRESS_MARKERS = ("progress", "processing", "review")


def _status_of(phase) -> str:
    return (getattr(phase, "status", None) or "").strip().lower()


def _today(now: datetime | date | None) -> date:
    if now is None:
        return utc_now().date()
    if isinstance(now, datetime):
        return now.date()
    return now


def is_phase_done(phase) -> bool:
    status = _status_of(phase)
    return "complet" in status or status in _DONE_EXACT


def is_phase_blocked(phase) -> bool:
    return _status_of(phase) == "blocked"


def is_phase_overdue(phase, now: datetime | date | None = None) -> bool:
    due = getattr(phase, "due_date", None)
    if due is None or is_phase_done(phase):
        return False
    return due < _today(now)


def classify_status(status: str | None) -> StatusCategory:
    s = (status or "Pending").strip().lower()
    if s in ("completed", "done", "approved"):
        return StatusCategory.DONE
    if any(marker in s for marker in _IN_PROGRESS_MARKERS):
        return StatusCategory.IN_PROGRESS
    if s in _BLOCKED_EXACT:
        return StatusCategory.BLOCKED
    return StatusCategory.PENDING


def group_key(workflow_type, related_id: str) -> str:
    type_value = getattr(workflow_type, "value", workflow_type)
    return f"{type_value}:{related_id}"


def group_phases(phases: Iterable, now: datetime | date | None = None) -> List[WorkflowGroup]:
    today = _today(now)
    groups: dict[str, WorkflowGroup] = {}
    for phase in phases:
        key = group_key(phase.workflow_type, phase.related_id)
        group = groups.get(key)
        if group is None:
            label = getattr(phase, "context_label", None)
            group = WorkflowGroup(
                key=key,
                workflow_type=phase.workflow_type,
                related_id=phase.related_id,
                context_label="Unknown" if label is None else label,
            )
            groups[key] = group

        group.phases.append(phase)
        group.total_count += 1
        group.incident_count += getattr(phase, "incident_count", 0) or 0
        if is_phase_done(phase):
            group.completed_count += 1
        if is_phase_overdue(phase, today):
            group.has_overdue = True
        if is_phase_blocked(phase):
            group.has_blocked = True
        updated_at = getattr(phase, "updated_at", None)
        if updated_at is not None and (group.latest_update is None or updated_at > group.latest_update):
            group.latest_update = updated_at

    ordered = list(groups.values())
    # Newest activity first; groups without a timestamp sink to the end.
    ordered.sort(key=lambda g: g.latest_update.timestamp() if g.latest_update else float("-inf"), reverse=True)
    return ordered


def summarize_phases(phases: Iterable, now: datetime | date | None = None) -> PhaseSummary:
    today = _today(now)
    total = completed = blocked = overdue = 0
    for phase in phases:
        total += 1
        if is_phase_done(phase):
            completed += 1
        if is_phase_blocked(phase):
            blocked += 1
        if is_phase_overdue(phase, today):
            overdue += 1
    return PhaseSummary(total=total, completed=completed, blocked=blocked, overdue=overdue)


__all__ = [
    "classify_status",
    "group_key",
    "group_phases",
    "is_phase_blocked",
    "is_phase_done",
    "is_phase_overdue",
    "summarize_phases",
]
