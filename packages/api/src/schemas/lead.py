# This project was developed with assistance from AI tools.
"""Lead schemas: engine snapshot, API requests and responses."""

from datetime import date, datetime
from typing import Literal

from db.enums import (
    LeadStrength,
    LikelyToApply,
    PipelineSection,
    PipelineStage,
    TransactionType,
)
from pydantic import BaseModel, ConfigDict, Field


class LeadSnapshot(BaseModel):
    """Point-in-time view of a lead consumed by the pipeline engine.

    Built from the ORM row via ``model_validate(lead, from_attributes=True)``.
    ``stage`` stays a plain string so legacy values are representable.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    stage: str = PipelineStage.LEADS.value
    pipeline_section: PipelineSection | None = None
    loan_status: str | None = None
    converted: str | None = None
    lead_on_date: date | None = None
    task_eta: date | None = None

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    referral_source: str | None = None

    pending_app_at: datetime | None = None
    app_complete_at: datetime | None = None
    pre_qualified_at: datetime | None = None
    pre_approved_at: datetime | None = None
    active_at: datetime | None = None

    loan_amount: float | None = None
    sales_price: float | None = None
    interest_rate: float | None = None
    term: int | None = None
    property_type: str | None = None
    occupancy: str | None = None
    pr_type: TransactionType | None = None
    total_monthly_income: float | None = None
    monthly_liabilities: float | None = None

    principal_interest: float | None = None
    property_taxes: float | None = None
    homeowners_insurance: float | None = None
    hoa_dues: float | None = None
    mortgage_insurance: float | None = None
    piti: float | None = None
    front_dti: float | None = None
    dti: float | None = None
    piti_computed: bool = False

    lead_strength: LeadStrength | None = None
    likely_to_apply: LikelyToApply | None = None
    contract_file: str | None = None

    disclosure_status: str | None = None
    disc_file: str | None = None
    initial_approval_file: str | None = None
    appraisal_status: str | None = None
    appr_date_time: datetime | None = None
    appraisal_file: str | None = None
    title_status: str | None = None
    title_eta: date | None = None
    title_file: str | None = None
    hoi_status: str | None = None
    insurance_policy_file: str | None = None
    insurance_status: str | None = None
    insurance_file: str | None = None
    package_status: str | None = None
    fcp_file: str | None = None
    condo_status: str | None = None
    condo_ordered_date: date | None = None
    condo_eta: date | None = None
    condo_file: str | None = None

    def with_fields(self, fields: dict) -> "LeadSnapshot":
        """Return a validated copy with ``fields`` applied."""
        return LeadSnapshot.model_validate({**self.model_dump(), **fields})


class LeadResponse(LeadSnapshot):
    """Lead as returned by the API."""

    stage_label: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LeadUpdate(BaseModel):
    """Manual edits. Only the fields present in the request are applied."""

    loan_amount: float | None = Field(default=None, ge=0)
    sales_price: float | None = Field(default=None, ge=0)
    interest_rate: float | None = Field(default=None, ge=0, le=25)
    term: int | None = Field(default=None, gt=0, le=480)
    property_type: str | None = None
    occupancy: str | None = None
    pr_type: TransactionType | None = None
    total_monthly_income: float | None = Field(default=None, ge=0)
    monthly_liabilities: float | None = Field(default=None, ge=0)
    property_taxes: float | None = Field(default=None, ge=0)
    homeowners_insurance: float | None = Field(default=None, ge=0)
    hoa_dues: float | None = Field(default=None, ge=0)
    mortgage_insurance: float | None = Field(default=None, ge=0)
    lead_strength: LeadStrength | None = None
    likely_to_apply: LikelyToApply | None = None
    contract_file: str | None = None
    disclosure_status: str | None = None
    disc_file: str | None = None
    initial_approval_file: str | None = None
    appraisal_status: str | None = None
    appr_date_time: datetime | None = None
    appraisal_file: str | None = None
    title_status: str | None = None
    title_eta: date | None = None
    title_file: str | None = None
    hoi_status: str | None = None
    insurance_policy_file: str | None = None
    insurance_status: str | None = None
    insurance_file: str | None = None
    package_status: str | None = None
    fcp_file: str | None = None
    condo_status: str | None = None
    condo_ordered_date: date | None = None
    condo_eta: date | None = None
    condo_file: str | None = None
    needs_review: bool = Field(
        default=False,
        description="Values came from automated extraction and await review; skips PITI auto-seeding.",
    )
    changed_by: str | None = None


class StageCorrections(BaseModel):
    """Fields that may be corrected inline while resolving a deficiency."""

    lead_strength: LeadStrength | None = None
    likely_to_apply: LikelyToApply | None = None


class StageValidateRequest(BaseModel):
    target_stage: str


class StageTransitionRequest(BaseModel):
    """Request body for POST /leads/{id}/stage."""

    target_stage: str
    bypass: bool = False
    corrected_fields: StageCorrections | None = None
    changed_by: str | None = None


class StageDeficiencyResponse(BaseModel):
    """Why a stage change was refused and how the user can resolve it."""

    target_stage: str
    message: str
    action_label: str | None = None
    missing_fields: list[str]
    bypass_available: bool = False


class StageValidationResponse(BaseModel):
    approved: bool
    deficiency: StageDeficiencyResponse | None = None


class MutationResponse(BaseModel):
    """Outcome of a lead mutation. ``status`` tells the caller whether to keep
    or discard any optimistic copy it holds."""

    lead_id: int
    status: Literal["applied", "deficient", "failed", "unknown"]
    fields: dict = Field(default_factory=dict)
    deficiency: StageDeficiencyResponse | None = None
    created_lead_ids: list[int] = Field(default_factory=list)
    error: str | None = None


class ActiveStatusRequest(BaseModel):
    sub_status: str = Field(description="Stored code or display label, e.g. \"SUV\" or \"SUB\".")
    changed_by: str | None = None


class PastClientStatusRequest(BaseModel):
    status: str = Field(description="Free-form status; unrecognised values map to Closed.")
    changed_by: str | None = None
