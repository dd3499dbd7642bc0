from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from core.domain.enums import WorkflowType
from core.domain.identifiers import generate_id, utc_now


@dataclass
class WorkflowPhase:
    id: str
    workflow_type: WorkflowType
    related_id: str
    phase_name: str
    status: str = "Pending"
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    completed_at: Optional[date] = None
    notes: Optional[str] = None
    agent_assigned: Optional[str] = None
    supporting_agents: List[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def create(
        workflow_type: WorkflowType,
        related_id: str,
        phase_name: str,
        now: datetime | None = None,
        **extra,
    ) -> "WorkflowPhase":
        now = now or utc_now()
        return WorkflowPhase(
            id=generate_id(),
            workflow_type=workflow_type,
            related_id=related_id,
            phase_name=phase_name,
            created_at=now,
            updated_at=now,
            **extra,
        )


@dataclass(frozen=True)
class PhaseDefinition:
    """One phase requested when a workflow is started."""

    phase_name: str
    status: str = "Pending"
    start_date: date | str | None = None
    due_date: date | str | None = None
    completed_at: date | str | None = None
    notes: str | None = None
    agent_assigned: str | None = None


@dataclass
class PhaseRow:
    """A phase enriched for listing: assignee name, incident count, parent label."""

    phase: WorkflowPhase
    assigned_name: str | None = None
    incident_count: int = 0
    context_label: str = ""

    @property
    def id(self) -> str:
        return self.phase.id

    @property
    def workflow_type(self) -> WorkflowType:
        return self.phase.workflow_type

    @property
    def related_id(self) -> str:
        return self.phase.related_id

    @property
    def status(self) -> str:
        return self.phase.status

    @property
    def due_date(self) -> date | None:
        return self.phase.due_date

    @property
    def updated_at(self) -> datetime | None:
        return self.phase.updated_at

    @property
    def supporting_agent_ids(self) -> List[str]:
        return list(self.phase.supporting_agents)


@dataclass
class WorkflowGroup:
    key: str
    workflow_type: WorkflowType
    related_id: str
    context_label: str = "Unknown"
    phases: list = field(default_factory=list)
    completed_count: int = 0
    total_count: int = 0
    incident_count: int = 0
    has_overdue: bool = False
    has_blocked: bool = False
    latest_update: datetime | None = None

    @property
    def completion_percent(self) -> float:
        if self.total_count == 0:
            return 0.0
        return round(self.completed_count / self.total_count * 100.0, 1)


@dataclass(frozen=True)
class PhaseSummary:
    total: int
    completed: int
    blocked: int
    overdue: int


__all__ = [
    "WorkflowPhase",
    "PhaseDefinition",
    "PhaseRow",
    "WorkflowGroup",
    "PhaseSummary",
]
