from __future__ import annotations

from core.models import WorkflowPhase
from infra.db.mappers import as_utc, list_from_json, to_json
from infra.db.models import WorkflowPhaseORM


def phase_to_orm(phase: WorkflowPhase) -> WorkflowPhaseORM:
    return WorkflowPhaseORM(
        id=phase.id,
        workflow_type=phase.workflow_type,
        related_id=phase.related_id,
        phase_name=phase.phase_name,
        status=phase.status,
        start_date=phase.start_date,
        due_date=phase.due_date,
        completed_at=phase.completed_at,
        notes=phase.notes,
        agent_assigned=phase.agent_assigned,
        supporting_agents_json=to_json(list(phase.supporting_agents)),
        created_at=phase.created_at,
        updated_at=phase.updated_at,
    )


def phase_from_orm(obj: WorkflowPhaseORM) -> WorkflowPhase:
    return WorkflowPhase(
        id=obj.id,
        workflow_type=obj.workflow_type,
        related_id=obj.related_id,
        phase_name=obj.phase_name,
        status=obj.status,
        start_date=obj.start_date,
        due_date=obj.due_date,
        completed_at=obj.completed_at,
        notes=obj.notes,
        agent_assigned=obj.agent_assigned,
        supporting_agents=[str(a) for a in list_from_json(obj.supporting_agents_json)],
        created_at=as_utc(obj.created_at),
        updated_at=as_utc(obj.updated_at),
    )


__all__ = ["phase_to_orm", "phase_from_orm"]
