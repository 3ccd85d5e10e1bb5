# This project was developed with assistance from AI tools.
"""
Lead pipeline -- domain models

Leads moving through the pipeline, their underwriting conditions, and the
append-only history tables for stage and condition status changes.
"""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import (
    ConditionPriority,
    ConditionStatus,
    LeadStrength,
    LikelyToApply,
    PipelineSection,
    PipelineStage,
    TransactionType,
)


def _enum_values(enum_cls):
    """Persist enum values rather than member names."""
    return [member.value for member in enum_cls]


class Lead(Base):
    """Loan application tracked through the pipeline."""

    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(50), nullable=True)
    referral_source = Column(String(100), nullable=True)

    # Stored as a plain key so legacy stage values never fail to load.
    stage = Column(String(50), nullable=False, default=PipelineStage.LEADS.value, index=True)
    pipeline_section = Column(
        Enum(PipelineSection, name="pipeline_section", native_enum=False, values_callable=_enum_values),
        nullable=True,
    )
    loan_status = Column(String(50), nullable=True)
    converted = Column(String(50), nullable=True)
    lead_on_date = Column(Date, nullable=True)
    task_eta = Column(Date, nullable=True)

    pending_app_at = Column(DateTime(timezone=True), nullable=True)
    app_complete_at = Column(DateTime(timezone=True), nullable=True)
    pre_qualified_at = Column(DateTime(timezone=True), nullable=True)
    pre_approved_at = Column(DateTime(timezone=True), nullable=True)
    active_at = Column(DateTime(timezone=True), nullable=True)

    # -- Loan inputs --
    loan_amount = Column(Numeric(12, 2), nullable=True)
    sales_price = Column(Numeric(12, 2), nullable=True)
    interest_rate = Column(Numeric(6, 3), nullable=True)
    term = Column(Integer, nullable=True)
    property_type = Column(String(100), nullable=True)
    occupancy = Column(String(100), nullable=True)
    pr_type = Column(
        Enum(TransactionType, name="pr_type", native_enum=False, values_callable=_enum_values),
        nullable=True,
    )
    total_monthly_income = Column(Numeric(12, 2), nullable=True)
    monthly_liabilities = Column(Numeric(12, 2), nullable=True)

    # -- Derived financials --
    principal_interest = Column(Numeric(12, 2), nullable=True)
    property_taxes = Column(Numeric(12, 2), nullable=True)
    homeowners_insurance = Column(Numeric(12, 2), nullable=True)
    hoa_dues = Column(Numeric(12, 2), nullable=True)
    mortgage_insurance = Column(Numeric(12, 2), nullable=True)
    piti = Column(Numeric(12, 2), nullable=True)
    front_dti = Column(Numeric(6, 2), nullable=True)
    dti = Column(Numeric(6, 2), nullable=True)
    piti_computed = Column(Boolean, nullable=False, default=False)

    # -- Qualification --
    lead_strength = Column(
        Enum(LeadStrength, name="lead_strength", native_enum=False, values_callable=_enum_values),
        nullable=True,
    )
    likely_to_apply = Column(
        Enum(LikelyToApply, name="likely_to_apply", native_enum=False, values_callable=_enum_values),
        nullable=True,
    )
    contract_file = Column(String(500), nullable=True)

    # -- Milestone statuses and their supporting attachments --
    disclosure_status = Column(String(50), nullable=True)
    disc_file = Column(String(500), nullable=True)
    initial_approval_file = Column(String(500), nullable=True)
    appraisal_status = Column(String(50), nullable=True)
    appr_date_time = Column(DateTime(timezone=True), nullable=True)
    appraisal_file = Column(String(500), nullable=True)
    title_status = Column(String(50), nullable=True)
    title_eta = Column(Date, nullable=True)
    title_file = Column(String(500), nullable=True)
    hoi_status = Column(String(50), nullable=True)
    insurance_policy_file = Column(String(500), nullable=True)
    insurance_status = Column(String(50), nullable=True)
    insurance_file = Column(String(500), nullable=True)
    package_status = Column(String(50), nullable=True)
    fcp_file = Column(String(500), nullable=True)
    condo_status = Column(String(50), nullable=True)
    condo_ordered_date = Column(Date, nullable=True)
    condo_eta = Column(Date, nullable=True)
    condo_file = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    conditions = relationship(
        "LeadCondition", back_populates="lead", cascade="all, delete-orphan",
    )
    stage_history = relationship(
        "StageHistory", back_populates="lead", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Lead(id={self.id}, stage='{self.stage}')>"


class LeadCondition(Base):
    """Underwriting condition attached to a lead."""

    __tablename__ = "lead_conditions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(
        Integer, ForeignKey("leads.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    description = Column(Text, nullable=False)
    status = Column(
        Enum(ConditionStatus, name="condition_status", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=ConditionStatus.ADDED,
    )
    # Reference into the external document store.
    document_id = Column(String(255), nullable=True)
    due_date = Column(Date, nullable=True)
    priority = Column(
        Enum(ConditionPriority, name="condition_priority", native_enum=False, values_callable=_enum_values),
        nullable=True,
    )
    needed_from = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    lead = relationship("Lead", back_populates="conditions")
    status_history = relationship(
        "ConditionStatusHistory", back_populates="condition", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<LeadCondition(id={self.id}, status='{self.status}')>"


class ConditionStatusHistory(Base):
    """Append-only record of condition status changes. INSERT + SELECT only."""

    __tablename__ = "condition_status_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    condition_id = Column(
        Integer, ForeignKey("lead_conditions.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    old_status = Column(String(50), nullable=True)
    new_status = Column(String(50), nullable=False)
    changed_by = Column(String(255), nullable=True)
    changed_at = Column(DateTime(timezone=True), nullable=False)

    condition = relationship("LeadCondition", back_populates="status_history")

    def __repr__(self):
        return (
            f"<ConditionStatusHistory(condition_id={self.condition_id}, "
            f"{self.old_status}->{self.new_status})>"
        )


class StageHistory(Base):
    """Append-only record of pipeline stage changes."""

    __tablename__ = "stage_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(
        Integer, ForeignKey("leads.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    from_stage = Column(String(50), nullable=True)
    to_stage = Column(String(50), nullable=False)
    changed_by = Column(String(255), nullable=True)
    changed_at = Column(DateTime(timezone=True), nullable=False)

    lead = relationship("Lead", back_populates="stage_history")

    def __repr__(self):
        return f"<StageHistory(lead_id={self.lead_id}, {self.from_stage}->{self.to_stage})>"
