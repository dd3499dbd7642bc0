from __future__ import annotations

from datetime import datetime, time, timedelta, timezone
from typing import Iterable, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from core.interfaces import AuditLogRepository
from core.models import AuditAction, AuditLogEntry, AuditLogFilter
from infra.db.audit.mapper import audit_from_orm, audit_to_orm
from infra.db.models import AuditLogORM


def _filter_conditions(query: AuditLogFilter) -> list:
    conditions = []
    if query.from_date is not None:
        start = datetime.combine(query.from_date, time.min, tzinfo=timezone.utc)
        conditions.append(AuditLogORM.created_at >= start)
    if query.to_date is not None:
        # Whole-day inclusive upper bound.
        end = datetime.combine(query.to_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
        conditions.append(AuditLogORM.created_at < end)
    if query.action:
        conditions.append(AuditLogORM.action == AuditAction(query.action))
    if query.table_name:
        conditions.append(AuditLogORM.table_name == query.table_name)
    if query.actor_email:
        conditions.append(AuditLogORM.actor_email.ilike(f"%{query.actor_email}%"))
    if query.actor_id:
        conditions.append(AuditLogORM.actor_id == query.actor_id)
    if query.record_id:
        conditions.append(AuditLogORM.record_id.ilike(f"%{query.record_id}%"))
    return conditions


class SqlAlchemyAuditLogRepository(AuditLogRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, entry: AuditLogEntry) -> None:
        self.session.add(audit_to_orm(entry))

    def list_filtered(self, query: AuditLogFilter) -> List[AuditLogEntry]:
        stmt = (
            select(AuditLogORM)
            .where(*_filter_conditions(query))
            .order_by(AuditLogORM.created_at.desc(), AuditLogORM.id.desc())
            .limit(max(1, int(query.limit)))
            .offset(max(0, int(query.offset)))
        )
        rows = self.session.execute(stmt).scalars().all()
        return [audit_from_orm(row) for row in rows]

    def count_filtered(self, query: AuditLogFilter) -> int:
        stmt = select(func.count(AuditLogORM.id)).where(*_filter_conditions(query))
        return int(self.session.execute(stmt).scalar_one())

    def list_by_record_ids(
        self, record_ids: Iterable[str], *, limit: int = 30, offset: int = 0
    ) -> List[AuditLogEntry]:
        ids = list(record_ids)
        if not ids:
            return []
        stmt = (
            select(AuditLogORM)
            .where(AuditLogORM.record_id.in_(ids))
            .order_by(AuditLogORM.created_at.desc(), AuditLogORM.id.desc())
            .limit(max(1, int(limit)))
            .offset(max(0, int(offset)))
        )
        return [audit_from_orm(row) for row in self.session.execute(stmt).scalars().all()]


__all__ = ["SqlAlchemyAuditLogRepository"]
