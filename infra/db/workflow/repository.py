from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import delete, exists, func, or_, select
from sqlalchemy.orm import Session, aliased

from core.exceptions import NotFoundError
from core.interfaces import WorkflowPhaseRepository
from core.models import PhaseRow, WorkflowPhase, WorkflowType
from infra.db.conditional import update_where
from infra.db.mappers import to_json
from infra.db.models import AgentORM, IncidentLogORM, WorkflowPhaseORM
from infra.db.workflow.mapper import phase_from_orm, phase_to_orm


def _assigned_name(first_name: str | None, last_name: str | None) -> str | None:
    if not first_name and not last_name:
        return None
    return f"{first_name or ''} {last_name or ''}".strip()


class SqlAlchemyWorkflowPhaseRepository(WorkflowPhaseRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, phase: WorkflowPhase) -> None:
        self.session.add(phase_to_orm(phase))

    def update(self, phase: WorkflowPhase) -> None:
        obj = self.session.get(WorkflowPhaseORM, phase.id)
        if obj is None:
            raise NotFoundError("Workflow phase not found.", code="PHASE_NOT_FOUND")
        obj.phase_name = phase.phase_name
        obj.status = phase.status
        obj.start_date = phase.start_date
        obj.due_date = phase.due_date
        obj.completed_at = phase.completed_at
        obj.notes = phase.notes
        obj.agent_assigned = phase.agent_assigned
        obj.supporting_agents_json = to_json(list(phase.supporting_agents))
        obj.updated_at = phase.updated_at

    def delete(self, phase_id: str) -> None:
        self.session.execute(delete(WorkflowPhaseORM).where(WorkflowPhaseORM.id == phase_id))

    def get(self, phase_id: str) -> Optional[WorkflowPhase]:
        obj = self.session.get(WorkflowPhaseORM, phase_id)
        return phase_from_orm(obj) if obj else None

    def refresh(self, phase_id: str) -> Optional[WorkflowPhase]:
        """Re-read the row, overwriting any copy already held by the session."""
        obj = self.session.get(WorkflowPhaseORM, phase_id, populate_existing=True)
        return phase_from_orm(obj) if obj else None

    def claim_if_unassigned(self, phase_id: str, agent_id: str, updated_at: datetime) -> bool:
        return update_where(
            self.session,
            WorkflowPhaseORM,
            phase_id,
            [WorkflowPhaseORM.agent_assigned.is_(None)],
            {"agent_assigned": agent_id, "updated_at": updated_at},
        )

    def list_rows(
        self,
        *,
        workflow_type: WorkflowType | None = None,
        status: str | None = None,
        involving_agent_ids: Iterable[str] = (),
        has_incidents: bool = False,
        search: str | None = None,
        limit: int = 60,
        offset: int = 0,
    ) -> List[PhaseRow]:
        stmt = self._row_select()
        if workflow_type is not None:
            stmt = stmt.where(WorkflowPhaseORM.workflow_type == workflow_type)
        if status is not None:
            stmt = stmt.where(WorkflowPhaseORM.status == status)
        for agent_id in involving_agent_ids:
            # Whole workflows: any group where the agent touches at least one phase.
            inner = aliased(WorkflowPhaseORM)
            related = (
                select(inner.related_id)
                .where(
                    or_(
                        inner.agent_assigned == agent_id,
                        inner.supporting_agents_json.like(f'%"{agent_id}"%'),
                    )
                )
                .distinct()
            )
            stmt = stmt.where(WorkflowPhaseORM.related_id.in_(related))
        if has_incidents:
            stmt = stmt.where(
                exists(select(IncidentLogORM.id).where(IncidentLogORM.workflow_id == WorkflowPhaseORM.id))
            )
        if search:
            stmt = stmt.where(WorkflowPhaseORM.phase_name.ilike(f"%{search}%"))
        stmt = (
            stmt.order_by(WorkflowPhaseORM.updated_at.desc(), WorkflowPhaseORM.id)
            .limit(limit)
            .offset(offset)
        )
        return [self._to_row(*result) for result in self.session.execute(stmt).all()]

    def get_row(self, phase_id: str) -> Optional[PhaseRow]:
        stmt = self._row_select().where(WorkflowPhaseORM.id == phase_id)
        result = self.session.execute(stmt).first()
        return self._to_row(*result) if result else None

    def list_by_related_ids(self, related_ids: Iterable[str]) -> List[WorkflowPhase]:
        ids = list(related_ids)
        if not ids:
            return []
        stmt = select(WorkflowPhaseORM).where(WorkflowPhaseORM.related_id.in_(ids))
        return [phase_from_orm(row) for row in self.session.execute(stmt).scalars().all()]

    def distinct_statuses(self, workflow_type: WorkflowType | None = None) -> List[str]:
        stmt = select(WorkflowPhaseORM.status).distinct()
        if workflow_type is not None:
            stmt = stmt.where(WorkflowPhaseORM.workflow_type == workflow_type)
        stmt = stmt.order_by(WorkflowPhaseORM.status.asc())
        return [s for s in self.session.execute(stmt).scalars().all()]

    @staticmethod
    def _row_select():
        incident_count = (
            select(func.count(IncidentLogORM.id))
            .where(IncidentLogORM.workflow_id == WorkflowPhaseORM.id)
            .correlate(WorkflowPhaseORM)
            .scalar_subquery()
        )
        return select(
            WorkflowPhaseORM,
            AgentORM.first_name,
            AgentORM.last_name,
            incident_count.label("incident_count"),
        ).outerjoin(AgentORM, WorkflowPhaseORM.agent_assigned == AgentORM.id)

    @staticmethod
    def _to_row(obj: WorkflowPhaseORM, first_name, last_name, incident_count) -> PhaseRow:
        return PhaseRow(
            phase=phase_from_orm(obj),
            assigned_name=_assigned_name(first_name, last_name),
            incident_count=int(incident_count or 0),
        )


__all__ = ["SqlAlchemyWorkflowPhaseRepository"]
