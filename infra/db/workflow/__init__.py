from infra.db.workflow.mapper import phase_from_orm, phase_to_orm
from infra.db.workflow.repository import SqlAlchemyWorkflowPhaseRepository

__all__ = ["phase_to_orm", "phase_from_orm", "SqlAlchemyWorkflowPhaseRepository"]
