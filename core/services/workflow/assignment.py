from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from core.events.domain_events import domain_events
from core.exceptions import ConflictError, NotFoundError
from core.interfaces import WorkflowPhaseRepository
from core.models import AuditAction, WorkflowPhase
from core.services.audit.helpers import TABLE_WORKFLOW_PHASES, record_audit
from core.services.auth.authorization import require_agent, require_permission

logger = logging.getLogger(__name__)


class WorkflowAssignmentMixin:
    _session: Session
    _phase_repo: WorkflowPhaseRepository

    def self_assign(self, phase_id: str) -> WorkflowPhase:
        """Claim an unassigned phase for the signed-in agent.

        The claim is a single conditional UPDATE; when several agents race for
        the same phase exactly one of them wins and the others get a conflict.
        """
        require_permission(self._user_session, "workflow.manage", operation_label="claim workflow phase")
        before = self._require_phase(phase_id)
        principal = require_agent(self._user_session, operation_label="claim workflow phase")
        now = self._now()

        try:
            claimed = self._phase_repo.claim_if_unassigned(before.id, principal.agent_id, now)
            if not claimed:
                self._session.rollback()
                if self._phase_repo.get(before.id) is None:
                    raise NotFoundError("Workflow phase not found.", code="PHASE_NOT_FOUND")
                raise ConflictError(
                    "This workflow is already assigned to someone.",
                    code="PHASE_ALREADY_ASSIGNED",
                )
            after = self._phase_repo.refresh(before.id)
            if after is None:
                self._session.rollback()
                raise NotFoundError("Workflow phase not found.", code="PHASE_NOT_FOUND")
            record_audit(
                self,
                table_name=TABLE_WORKFLOW_PHASES,
                record_id=before.id,
                action=AuditAction.UPDATE,
                old=before,
                new=after,
            )
            self._session.commit()
        except (ConflictError, NotFoundError):
            raise
        except Exception:
            self._session.rollback()
            raise

        logger.info("Agent %s claimed phase %s", principal.agent_id, before.id)
        domain_events.phases_changed.emit(after.related_id)
        return after
