"""initial credentialing schema

Revision ID: 4a1c7e20b9d3
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


revision = "4a1c7e20b9d3"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(*, updated: bool = True) -> list[sa.Column]:
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False))
    return cols


def upgrade() -> None:
    op.create_table(
        "agents",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("team", sa.String(length=2), nullable=False),
        sa.Column("team_number", sa.Integer(), nullable=True),
        sa.Column("role", sa.String(length=10), nullable=False, server_default=sa.text("'user'")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
        sa.UniqueConstraint("email"),
    )
    op.create_table(
        "identity_users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_identity_users_email", "identity_users", ["email"], unique=False)

    op.create_table(
        "providers",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=True),
        sa.Column("last_name", sa.String(), nullable=True),
        sa.Column("degree", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "facilities",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("state", sa.String(length=2), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=True, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "provider_facility_credentials",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("provider_id", sa.String(), nullable=False),
        sa.Column("facility_id", sa.String(), nullable=False),
        sa.Column("facility_type", sa.String(), nullable=True),
        sa.Column("privileges", sa.String(), nullable=True),
        sa.Column("priority", sa.String(), nullable=True),
        sa.Column("application_required", sa.Boolean(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["provider_id"], ["providers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["facility_id"], ["facilities.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_pfc_facility", "provider_facility_credentials", ["facility_id"], unique=False)
    op.create_index(
        "ux_pfc_provider_facility",
        "provider_facility_credentials",
        ["provider_id", "facility_id"],
        unique=True,
    )

    op.create_table(
        "state_licenses",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("provider_id", sa.String(), nullable=False),
        sa.Column("state", sa.String(length=2), nullable=True),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("number", sa.String(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["provider_id"], ["providers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_state_licenses_provider", "state_licenses", ["provider_id"], unique=False)

    op.create_table(
        "provider_vesta_privileges",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("provider_id", sa.String(), nullable=False),
        sa.Column("privilege_tier", sa.String(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["provider_id"], ["providers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_vesta_privileges_provider",
        "provider_vesta_privileges",
        ["provider_id"],
        unique=False,
    )

    op.create_table(
        "workflow_phases",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("workflow_type", sa.String(length=25), nullable=False),
        sa.Column("related_id", sa.String(), nullable=False),
        sa.Column("phase_name", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default=sa.text("'Pending'")),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("completed_at", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("agent_assigned", sa.String(), nullable=True),
        sa.Column("supporting_agents_json", sa.Text(), nullable=False, server_default=sa.text("'[]'")),
        *_timestamps(),
        sa.ForeignKeyConstraint(["agent_assigned"], ["agents.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_workflow_phases_related",
        "workflow_phases",
        ["workflow_type", "related_id"],
        unique=False,
    )
    op.create_index("idx_workflow_phases_updated", "workflow_phases", ["updated_at"], unique=False)
    op.create_index("idx_workflow_phases_agent", "workflow_phases", ["agent_assigned"], unique=False)

    op.create_table(
        "incident_logs",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("workflow_id", sa.String(), nullable=False),
        sa.Column("who_reported", sa.String(), nullable=True),
        sa.Column("escalated_to", sa.String(), nullable=False),
        sa.Column("subcategory", sa.String(), nullable=False),
        sa.Column("critical", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("date_identified", sa.Date(), nullable=False),
        sa.Column("incident_description", sa.Text(), nullable=True),
        sa.Column("immediate_resolution_attempt", sa.Text(), nullable=True),
        sa.Column("resolution_date", sa.Date(), nullable=True),
        sa.Column("final_resolution", sa.Text(), nullable=True),
        sa.Column("preventative_action_taken", sa.Text(), nullable=True),
        sa.Column("follow_up_required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("follow_up_date", sa.Date(), nullable=True),
        sa.Column("final_notes", sa.Text(), nullable=True),
        sa.Column("discussed", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(["workflow_id"], ["workflow_phases.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["who_reported"], ["agents.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["escalated_to"], ["agents.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_incident_logs_workflow", "incident_logs", ["workflow_id"], unique=False)

    op.create_table(
        "audit_log",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("table_name", sa.String(), nullable=False),
        sa.Column("record_id", sa.String(), nullable=True),
        sa.Column("action", sa.String(length=6), nullable=False),
        sa.Column("actor_id", sa.String(), nullable=True),
        sa.Column("actor_email", sa.String(), nullable=True),
        sa.Column("old_data_json", sa.Text(), nullable=True),
        sa.Column("new_data_json", sa.Text(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_audit_log_created", "audit_log", ["created_at"], unique=False)
    op.create_index("idx_audit_log_record", "audit_log", ["record_id"], unique=False)
    op.create_index("idx_audit_log_table", "audit_log", ["table_name"], unique=False)


def downgrade() -> None:
    op.drop_index("idx_audit_log_table", table_name="audit_log")
    op.drop_index("idx_audit_log_record", table_name="audit_log")
    op.drop_index("idx_audit_log_created", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_index("idx_incident_logs_workflow", table_name="incident_logs")
    op.drop_table("incident_logs")
    op.drop_index("idx_workflow_phases_agent", table_name="workflow_phases")
    op.drop_index("idx_workflow_phases_updated", table_name="workflow_phases")
    op.drop_index("idx_workflow_phases_related", table_name="workflow_phases")
    op.drop_table("workflow_phases")
    op.drop_index("idx_vesta_privileges_provider", table_name="provider_vesta_privileges")
    op.drop_table("provider_vesta_privileges")
    op.drop_index("idx_state_licenses_provider", table_name="state_licenses")
    op.drop_table("state_licenses")
    op.drop_index("ux_pfc_provider_facility", table_name="provider_facility_credentials")
    op.drop_index("idx_pfc_facility", table_name="provider_facility_credentials")
    op.drop_table("provider_facility_credentials")
    op.drop_table("facilities")
    op.drop_table("providers")
    op.drop_index("idx_identity_users_email", table_name="identity_users")
    op.drop_table("identity_users")
    op.drop_table("agents")
