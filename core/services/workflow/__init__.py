from core.services.workflow.grouping import (
    classify_status,
    group_phases,
    is_phase_blocked,
    is_phase_done,
    is_phase_overdue,
    summarize_phases,
)
from core.services.workflow.models import (
    DEFAULT_STATUS_SUGGESTIONS,
    PFC_PHASES,
    AgentOption,
    PhaseFilter,
    WorkflowCreation,
)
from core.services.workflow.service import WorkflowService

__all__ = [
    "WorkflowService",
    "PhaseFilter",
    "WorkflowCreation",
    "AgentOption",
    "PFC_PHASES",
    "DEFAULT_STATUS_SUGGESTIONS",
    "classify_status",
    "group_phases",
    "is_phase_blocked",
    "is_phase_done",
    "is_phase_overdue",
    "summarize_phases",
]
