# This project was developed with assistance from AI tools.
"""create lead pipeline tables

Revision ID: 3b1f0c2d9e4a
Revises:
Create Date: 2026-10-19 09:12:41.518204

"""

import sqlalchemy as sa
from alembic import op

revision = "3b1f0c2d9e4a"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "leads",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("referral_source", sa.String(100), nullable=True),
        sa.Column("stage", sa.String(50), nullable=False, server_default="leads"),
        sa.Column("pipeline_section", sa.String(8), nullable=True),
        sa.Column("loan_status", sa.String(50), nullable=True),
        sa.Column("converted", sa.String(50), nullable=True),
        sa.Column("lead_on_date", sa.Date(), nullable=True),
        sa.Column("task_eta", sa.Date(), nullable=True),
        sa.Column("pending_app_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("app_complete_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("pre_qualified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("pre_approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("active_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("loan_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("sales_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("interest_rate", sa.Numeric(6, 3), nullable=True),
        sa.Column("term", sa.Integer(), nullable=True),
        sa.Column("property_type", sa.String(100), nullable=True),
        sa.Column("occupancy", sa.String(100), nullable=True),
        sa.Column("pr_type", sa.String(5), nullable=True),
        sa.Column("total_monthly_income", sa.Numeric(12, 2), nullable=True),
        sa.Column("monthly_liabilities", sa.Numeric(12, 2), nullable=True),
        sa.Column("principal_interest", sa.Numeric(12, 2), nullable=True),
        sa.Column("property_taxes", sa.Numeric(12, 2), nullable=True),
        sa.Column("homeowners_insurance", sa.Numeric(12, 2), nullable=True),
        sa.Column("hoa_dues", sa.Numeric(12, 2), nullable=True),
        sa.Column("mortgage_insurance", sa.Numeric(12, 2), nullable=True),
        sa.Column("piti", sa.Numeric(12, 2), nullable=True),
        sa.Column("front_dti", sa.Numeric(6, 2), nullable=True),
        sa.Column("dti", sa.Numeric(6, 2), nullable=True),
        sa.Column("piti_computed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("lead_strength", sa.String(9), nullable=True),
        sa.Column("likely_to_apply", sa.String(6), nullable=True),
        sa.Column("contract_file", sa.String(500), nullable=True),
        sa.Column("disclosure_status", sa.String(50), nullable=True),
        sa.Column("disc_file", sa.String(500), nullable=True),
        sa.Column("initial_approval_file", sa.String(500), nullable=True),
        sa.Column("appraisal_status", sa.String(50), nullable=True),
        sa.Column("appr_date_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("appraisal_file", sa.String(500), nullable=True),
        sa.Column("title_status", sa.String(50), nullable=True),
        sa.Column("title_eta", sa.Date(), nullable=True),
        sa.Column("title_file", sa.String(500), nullable=True),
        sa.Column("hoi_status", sa.String(50), nullable=True),
        sa.Column("insurance_policy_file", sa.String(500), nullable=True),
        sa.Column("insurance_status", sa.String(50), nullable=True),
        sa.Column("insurance_file", sa.String(500), nullable=True),
        sa.Column("package_status", sa.String(50), nullable=True),
        sa.Column("fcp_file", sa.String(500), nullable=True),
        sa.Column("condo_status", sa.String(50), nullable=True),
        sa.Column("condo_ordered_date", sa.Date(), nullable=True),
        sa.Column("condo_eta", sa.Date(), nullable=True),
        sa.Column("condo_file", sa.String(500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_leads_email", "leads", ["email"])
    op.create_index("ix_leads_stage", "leads", ["stage"])

    op.create_table(
        "lead_conditions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("lead_id", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("document_id", sa.String(255), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("priority", sa.String(6), nullable=True),
        sa.Column("needed_from", sa.String(100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["lead_id"], ["leads.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_lead_conditions_lead_id", "lead_conditions", ["lead_id"])

    op.create_table(
        "condition_status_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("condition_id", sa.Integer(), nullable=False),
        sa.Column("old_status", sa.String(50), nullable=True),
        sa.Column("new_status", sa.String(50), nullable=False),
        sa.Column("changed_by", sa.String(255), nullable=True),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["condition_id"], ["lead_conditions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_condition_status_history_condition_id", "condition_status_history", ["condition_id"],
    )

    op.create_table(
        "stage_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("lead_id", sa.Integer(), nullable=False),
        sa.Column("from_stage", sa.String(50), nullable=True),
        sa.Column("to_stage", sa.String(50), nullable=False),
        sa.Column("changed_by", sa.String(255), nullable=True),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["lead_id"], ["leads.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_stage_history_lead_id", "stage_history", ["lead_id"])


def downgrade() -> None:
    op.drop_index("ix_stage_history_lead_id", table_name="stage_history")
    op.drop_table("stage_history")
    op.drop_index(
        "ix_condition_status_history_condition_id", table_name="condition_status_history",
    )
    op.drop_table("condition_status_history")
    op.drop_index("ix_lead_conditions_lead_id", table_name="lead_conditions")
    op.drop_table("lead_conditions")
    op.drop_index("ix_leads_stage", table_name="leads")
    op.drop_index("ix_leads_email", table_name="leads")
    op.drop_table("leads")
