# This project was developed with assistance from AI tools.
"""Payment and ratio calculator schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class PitiBreakdown(BaseModel):
    """Monthly housing payment components, rounded to cents.

    ``piti`` is the sum of the rounded components.
    """

    principal_interest: float
    property_taxes: float
    homeowners_insurance: float
    hoa_dues: float
    mortgage_insurance: float
    piti: float
    ltv: float = Field(description="Loan-to-value percent used to decide mortgage insurance.")


class DtiRatios(BaseModel):
    """Front-end (housing only) and back-end (housing + debts) ratios, in percent."""

    front: float
    back: float


class RecalculateRequest(BaseModel):
    """Request body for POST /leads/{id}/financials/recalculate."""

    changed_field: Literal["loan_amount", "interest_rate", "term"]


class FinancialsResponse(BaseModel):
    """Fields written by a financial recalculation."""

    lead_id: int
    updated_fields: dict[str, float | int | bool | None]
