from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError
from core.interfaces import IncidentRepository
from core.models import IncidentLog, IncidentRow
from infra.db.incident.mapper import copy_incident_onto_orm, incident_from_orm, incident_to_orm
from infra.db.models import AgentORM, IncidentLogORM


class SqlAlchemyIncidentRepository(IncidentRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, incident: IncidentLog) -> None:
        self.session.add(incident_to_orm(incident))

    def update(self, incident: IncidentLog) -> None:
        obj = self.session.get(IncidentLogORM, incident.id)
        if obj is None:
            raise NotFoundError("Incident not found.", code="INCIDENT_NOT_FOUND")
        copy_incident_onto_orm(incident, obj)

    def delete(self, incident_id: str) -> None:
        self.session.execute(delete(IncidentLogORM).where(IncidentLogORM.id == incident_id))

    def get(self, incident_id: str) -> Optional[IncidentLog]:
        obj = self.session.get(IncidentLogORM, incident_id)
        return incident_from_orm(obj) if obj else None

    def list_by_phase(self, phase_id: str) -> List[IncidentLog]:
        stmt = (
            select(IncidentLogORM)
            .where(IncidentLogORM.workflow_id == phase_id)
            .order_by(IncidentLogORM.created_at.desc())
        )
        return [incident_from_orm(row) for row in self.session.execute(stmt).scalars().all()]

    def list_rows_by_phase(self, phase_id: str) -> List[IncidentRow]:
        stmt = (
            select(IncidentLogORM, AgentORM.first_name, AgentORM.last_name)
            .outerjoin(AgentORM, IncidentLogORM.who_reported == AgentORM.id)
            .where(IncidentLogORM.workflow_id == phase_id)
            .order_by(IncidentLogORM.created_at.desc(), IncidentLogORM.id)
        )
        rows: List[IncidentRow] = []
        for obj, first_name, last_name in self.session.execute(stmt).all():
            reporter = f"{first_name} {last_name}".strip() if first_name and last_name else None
            rows.append(IncidentRow(incident=incident_from_orm(obj), reporter_name=reporter))
        return rows


__all__ = ["SqlAlchemyIncidentRepository"]
