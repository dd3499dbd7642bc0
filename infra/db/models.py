# infra/db/models.py
from __future__ import annotations
from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from infra.db.base import Base
from core.models import AgentRole, AuditAction, Team, WorkflowType


def _values(enum_cls):
    return [member.value for member in enum_cls]


class AgentORM(Base):
    __tablename__ = "agents"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[Optional[str]] = mapped_column(String, nullable=True, unique=True)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    team: Mapped[Team] = mapped_column(
        SAEnum(Team, name="team", native_enum=False, values_callable=_values), nullable=False
    )
    team_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    role: Mapped[AgentRole] = mapped_column(
        SAEnum(AgentRole, name="agent_role", native_enum=False, values_callable=_values),
        default=AgentRole.USER,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class IdentityUserORM(Base):
    __tablename__ = "identity_users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
Index("idx_identity_users_email", IdentityUserORM.email)

class ProviderORM(Base):
    __tablename__ = "providers"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    first_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    degree: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class FacilityORM(Base):
    __tablename__ = "facilities"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class ProviderFacilityCredentialORM(Base):
    __tablename__ = "provider_facility_credentials"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    provider_id: Mapped[str] = mapped_column(
        String, ForeignKey("providers.id", ondelete="CASCADE"), nullable=False
    )
    facility_id: Mapped[str] = mapped_column(
        String, ForeignKey("facilities.id", ondelete="CASCADE"), nullable=False
    )
    facility_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    privileges: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    priority: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    application_required: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
Index("idx_pfc_facility", ProviderFacilityCredentialORM.facility_id)
Index(
    "ux_pfc_provider_facility",
    ProviderFacilityCredentialORM.provider_id,
    ProviderFacilityCredentialORM.facility_id,
    unique=True,
)

class StateLicenseORM(Base):
    __tablename__ = "state_licenses"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    provider_id: Mapped[str] = mapped_column(
        String, ForeignKey("providers.id", ondelete="CASCADE"), nullable=False
    )
    state: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    number: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
Index("idx_state_licenses_provider", StateLicenseORM.provider_id)

class VestaPrivilegeORM(Base):
    __tablename__ = "provider_vesta_privileges"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    provider_id: Mapped[str] = mapped_column(
        String, ForeignKey("providers.id", ondelete="CASCADE"), nullable=False
    )
    privilege_tier: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
Index("idx_vesta_privileges_provider", VestaPrivilegeORM.provider_id)

class WorkflowPhaseORM(Base):
    __tablename__ = "workflow_phases"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    workflow_type: Mapped[WorkflowType] = mapped_column(
        SAEnum(WorkflowType, name="workflow_type", native_enum=False, values_callable=_values),
        nullable=False,
    )
    # Points at a PFC link, state license, Vesta privilege or facility depending on workflow_type.
    related_id: Mapped[str] = mapped_column(String, nullable=False)
    phase_name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="Pending")
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    completed_at: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    agent_assigned: Mapped[Optional[str]] = mapped_column(
        String, ForeignKey("agents.id", ondelete="SET NULL"), nullable=True
    )
    supporting_agents_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
Index("idx_workflow_phases_related", WorkflowPhaseORM.workflow_type, WorkflowPhaseORM.related_id)
Index("idx_workflow_phases_updated", WorkflowPhaseORM.updated_at)
Index("idx_workflow_phases_agent", WorkflowPhaseORM.agent_assigned)

class IncidentLogORM(Base):
    __tablename__ = "incident_logs"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    workflow_id: Mapped[str] = mapped_column(
        String, ForeignKey("workflow_phases.id", ondelete="CASCADE"), nullable=False
    )
    who_reported: Mapped[Optional[str]] = mapped_column(
        String, ForeignKey("agents.id", ondelete="SET NULL"), nullable=True
    )
    escalated_to: Mapped[str] = mapped_column(String, ForeignKey("agents.id"), nullable=False)
    subcategory: Mapped[str] = mapped_column(String, nullable=False)
    critical: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    date_identified: Mapped[date] = mapped_column(Date, nullable=False)
    incident_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    immediate_resolution_attempt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resolution_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    final_resolution: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    preventative_action_taken: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    follow_up_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    follow_up_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    final_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    discussed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
Index("idx_incident_logs_workflow", IncidentLogORM.workflow_id)

class AuditLogORM(Base):
    __tablename__ = "audit_log"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    table_name: Mapped[str] = mapped_column(String, nullable=False)
    record_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    action: Mapped[AuditAction] = mapped_column(
        SAEnum(AuditAction, name="audit_action", native_enum=False, values_callable=_values),
        nullable=False,
    )
    actor_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    actor_email: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    old_data_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    new_data_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
Index("idx_audit_log_created", AuditLogORM.created_at)
Index("idx_audit_log_record", AuditLogORM.record_id)
Index("idx_audit_log_table", AuditLogORM.table_name)
