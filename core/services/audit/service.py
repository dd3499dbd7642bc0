from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, List

from sqlalchemy.orm import Session

from core.exceptions import ValidationError
from core.interfaces import (
    AuditLogRepository,
    CredentialLinkRepository,
    StateLicenseRepository,
    VestaPrivilegeRepository,
    WorkflowPhaseRepository,
)
from core.models import AuditAction, AuditLogEntry, AuditLogFilter, AuditLogPage
from core.services.auth.authorization import current_actor, require_permission
from core.services.auth.session import UserSessionContext
from core.services.common.values import blank_to_none, parse_optional_date

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 500
ENTITY_TYPES = ("provider", "facility")


class AuditService:
    def __init__(
        self,
        session: Session,
        audit_repo: AuditLogRepository,
        user_session: UserSessionContext | None = None,
        *,
        phase_repo: WorkflowPhaseRepository | None = None,
        credential_repo: CredentialLinkRepository | None = None,
        license_repo: StateLicenseRepository | None = None,
        privilege_repo: VestaPrivilegeRepository | None = None,
    ):
        self._session: Session = session
        self._audit_repo: AuditLogRepository = audit_repo
        self._user_session: UserSessionContext | None = user_session
        self._phase_repo = phase_repo
        self._credential_repo = credential_repo
        self._license_repo = license_repo
        self._privilege_repo = privilege_repo

    def record(
        self,
        *,
        table_name: str,
        record_id: str | None,
        action: AuditAction | str,
        old_data: dict[str, Any] | None = None,
        new_data: dict[str, Any] | None = None,
        commit: bool = False,
    ) -> AuditLogEntry:
        actor_id, actor_email = current_actor(self._user_session)
        entry = AuditLogEntry.create(
            table_name=table_name,
            record_id=record_id,
            action=AuditAction(action),
            actor_id=actor_id,
            actor_email=actor_email,
            old_data=old_data,
            new_data=new_data,
        )
        self._audit_repo.add(entry)
        if commit:
            self._session.commit()
        logger.debug("Audit %s %s/%s", entry.action.value, table_name, record_id)
        return entry

    def list_entries(self, query: AuditLogFilter | None = None) -> AuditLogPage:
        require_permission(self._user_session, "audit.read", operation_label="view audit log")
        normalized = self.normalize_filter(query or AuditLogFilter())
        rows = self._audit_repo.list_filtered(normalized)
        total = self._audit_repo.count_filtered(normalized)
        return AuditLogPage(rows=rows, total=total)

    def collect_for_export(
        self,
        query: AuditLogFilter | None = None,
        *,
        max_rows: int = 10_000,
    ) -> tuple[AuditLogFilter, List[AuditLogEntry], int]:
        """All entries matching the filter (ignoring its paging), capped at max_rows."""
        require_permission(self._user_session, "report.export", operation_label="export audit log")
        normalized = self.normalize_filter(replace(query or AuditLogFilter(), limit=1, offset=0))
        total = self._audit_repo.count_filtered(normalized)
        entries: List[AuditLogEntry] = []
        offset = 0
        while offset < min(total, max_rows):
            batch_size = min(MAX_PAGE_SIZE, max_rows - offset)
            batch = self._audit_repo.list_filtered(replace(normalized, limit=batch_size, offset=offset))
            if not batch:
                break
            entries.extend(batch)
            offset += len(batch)
        logger.info("Collected %d of %d audit entries for export", len(entries), total)
        return normalized, entries, total

    @property
    def actor_email(self) -> str | None:
        return current_actor(self._user_session)[1]

    def list_by_entity(
        self,
        entity_type: str,
        entity_id: str,
        *,
        limit: int = 30,
        offset: int = 0,
    ) -> List[AuditLogEntry]:
        """Activity feed for a provider or facility and every record hanging off it."""
        require_permission(self._user_session, "directory.read", operation_label="view activity")
        kind = (entity_type or "").strip().lower()
        if kind not in ENTITY_TYPES:
            raise ValidationError(
                f"Entity type must be one of: {', '.join(ENTITY_TYPES)}.",
                code="INVALID_ENTITY_TYPE",
            )
        self._validate_paging(limit, offset)
        record_ids = self._related_record_ids(kind, entity_id)
        return self._audit_repo.list_by_record_ids(record_ids, limit=limit, offset=offset)

    def normalize_filter(self, query: AuditLogFilter) -> AuditLogFilter:
        from_date = parse_optional_date(query.from_date, "From date")
        to_date = parse_optional_date(query.to_date, "To date")
        if from_date and to_date and to_date < from_date:
            raise ValidationError("To date cannot be before from date.", code="INVALID_DATE_RANGE")

        action = (query.action or "").strip().lower() or None
        if action == "all":
            action = None
        if action is not None and action not in {a.value for a in AuditAction}:
            raise ValidationError(
                "Action must be one of: all, insert, update, delete.",
                code="INVALID_AUDIT_ACTION",
            )
        self._validate_paging(query.limit, query.offset)
        return replace(
            query,
            from_date=from_date,
            to_date=to_date,
            action=action,
            table_name=blank_to_none(query.table_name),
            actor_email=blank_to_none(query.actor_email),
            actor_id=blank_to_none(query.actor_id),
            record_id=blank_to_none(query.record_id),
        )

    @staticmethod
    def _validate_paging(limit: int, offset: int) -> None:
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise ValidationError(
                f"Limit must be between 1 and {MAX_PAGE_SIZE}.",
                code="INVALID_LIMIT",
            )
        if offset < 0:
            raise ValidationError("Offset cannot be negative.", code="INVALID_OFFSET")

    def _related_record_ids(self, kind: str, entity_id: str) -> list[str]:
        ids: list[str] = [entity_id]
        parent_ids: list[str] = []
        if kind == "provider":
            links = self._credential_repo.list_by_provider(entity_id) if self._credential_repo else []
            licenses = self._license_repo.list_by_provider(entity_id) if self._license_repo else []
            privileges = self._privilege_repo.list_by_provider(entity_id) if self._privilege_repo else []
            parent_ids = [r.id for r in links] + [r.id for r in licenses] + [r.id for r in privileges]
        else:
            links = self._credential_repo.list_by_facility(entity_id) if self._credential_repo else []
            # prelive pipeline phases hang directly off the facility
            parent_ids = [r.id for r in links] + [entity_id]
        ids.extend(parent_ids)
        if self._phase_repo is not None:
            ids.extend(p.id for p in self._phase_repo.list_by_related_ids(parent_ids))
        return list(dict.fromkeys(ids))


__all__ = ["AuditService", "MAX_PAGE_SIZE"]
