from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from core.models import ProviderFacilityCredential, WorkflowPhase, WorkflowType

PFC_PHASES: tuple[str, ...] = (
    "Application Request",
    "Application Completion",
    "QA1",
    "QA2",
    "QA3",
    "Provider QA",
    "Facility Decision",
)

DEFAULT_STATUS_SUGGESTIONS: tuple[str, ...] = ("Pending", "In Progress", "Blocked", "Completed")


@dataclass(frozen=True)
class PhaseFilter:
    workflow_type: WorkflowType | str | None = None
    status: str | None = None
    assigned_to_me: bool = False
    assigned_to_agent: str | None = None
    has_incidents: bool = False
    search: str | None = None
    limit: int = 60
    offset: int = 0


@dataclass
class WorkflowCreation:
    link: ProviderFacilityCredential
    phases: List[WorkflowPhase] = field(default_factory=list)


@dataclass(frozen=True)
class AgentOption:
    id: str
    name: str
    email: str | None = None


__all__ = [
    "PFC_PHASES",
    "DEFAULT_STATUS_SUGGESTIONS",
    "PhaseFilter",
    "WorkflowCreation",
    "AgentOption",
]
