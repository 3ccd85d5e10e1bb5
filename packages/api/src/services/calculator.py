# This project was developed with assistance from AI tools.
"""Mortgage payment and ratio calculations.

Pure math, no I/O. Shared by the lead mutation coordinator and the
recalculation route. Components are carried to the cent while computing
and rounded to whole currency units only when turned into persisted fields.
"""

from collections.abc import Collection
from decimal import ROUND_HALF_UP, Decimal

from ..schemas.calculator import DtiRatios, PitiBreakdown
from ..schemas.lead import LeadSnapshot

# Fields whose change refreshes principal & interest.
LOAN_INPUT_FIELDS = frozenset({"loan_amount", "interest_rate", "term"})

PROPERTY_TAX_RATE = 0.015
HOI_MINIMUM = 75.0
HOI_PER_100K = 75.0
CONDO_HOA_PER_100K = 150.0
MI_ANNUAL_RATE = 0.005
MI_LTV_THRESHOLD = 80.0

# Stored monthly components recombined with P&I into the PITI total.
ESCROW_FIELDS = ("property_taxes", "homeowners_insurance", "hoa_dues", "mortgage_insurance")

DEFAULT_TERM_MONTHS = 360

# Largest ratio the front_dti / dti columns hold (NUMERIC(6, 2)).
MAX_STORED_DTI = 9999.99


def compute_principal_and_interest(
    loan_amount: float,
    annual_rate_percent: float,
    term_months: int,
) -> float:
    """Monthly principal & interest for a fully amortizing loan.

    A non-positive loan amount is a valid "not yet quotable" state and
    yields 0 rather than an error.
    """
    if loan_amount <= 0 or term_months <= 0:
        return 0.0

    monthly_rate = annual_rate_percent / 100 / 12
    if monthly_rate <= 0:
        return loan_amount / term_months

    compound = (1 + monthly_rate) ** term_months
    return loan_amount * monthly_rate * compound / (compound - 1)


def compute_ltv(loan_amount: float, sales_price: float) -> float:
    """Loan-to-value in percent, 0 when there is no sales price."""
    if sales_price <= 0:
        return 0.0
    return loan_amount / sales_price * 100


def compute_piti(
    loan_amount: float,
    sales_price: float,
    interest_rate: float,
    term_months: int = DEFAULT_TERM_MONTHS,
    property_type: str | None = None,
) -> PitiBreakdown:
    """Estimate every PITI component from the raw loan inputs."""
    principal_interest = compute_principal_and_interest(loan_amount, interest_rate, term_months)

    # 1.5% of the sales price annually
    property_taxes = sales_price * PROPERTY_TAX_RATE / 12 if sales_price > 0 else 0.0

    is_condo = "condo" in (property_type or "").lower()
    per_100k = sales_price / 100_000
    if is_condo:
        homeowners_insurance = HOI_MINIMUM
        hoa_dues = per_100k * CONDO_HOA_PER_100K
    else:
        homeowners_insurance = max(HOI_MINIMUM, per_100k * HOI_PER_100K)
        hoa_dues = 0.0

    ltv = compute_ltv(loan_amount, sales_price)
    mortgage_insurance = loan_amount * MI_ANNUAL_RATE / 12 if ltv > MI_LTV_THRESHOLD else 0.0

    components = {
        "principal_interest": round(principal_interest, 2),
        "property_taxes": round(property_taxes, 2),
        "homeowners_insurance": round(homeowners_insurance, 2),
        "hoa_dues": round(hoa_dues, 2),
        "mortgage_insurance": round(mortgage_insurance, 2),
    }
    return PitiBreakdown(
        **components,
        piti=round(sum(components.values()), 2),
        ltv=round(ltv, 2),
    )


def compute_dti(
    piti: float,
    monthly_liabilities: float,
    total_monthly_income: float,
) -> DtiRatios | None:
    """Front/back-end DTI. None when income is missing: the ratio is undefined, not zero."""
    if total_monthly_income <= 0:
        return None
    return DtiRatios(
        front=round(piti / total_monthly_income * 100, 2),
        back=round((piti + monthly_liabilities) / total_monthly_income * 100, 2),
    )


def to_persisted_amount(value: float) -> Decimal:
    """Round a monetary amount half-up to whole currency units for storage."""
    return Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def _dti_fields(lead: LeadSnapshot, piti: float) -> dict:
    ratios = compute_dti(piti, lead.monthly_liabilities or 0.0, lead.total_monthly_income or 0.0)
    if ratios is None:
        return {"front_dti": None, "dti": None}
    return {"front_dti": min(ratios.front, MAX_STORED_DTI), "dti": min(ratios.back, MAX_STORED_DTI)}


def full_piti_fields(
    lead: LeadSnapshot,
    interest_rate: float | None = None,
    *,
    keep: Collection[str] = (),
    default_term: int = DEFAULT_TERM_MONTHS,
) -> dict:
    """Persistable fields for a complete PITI computation, DTI included.

    Escrow components named in ``keep`` take the lead's own value (a figure
    the user entered) instead of the estimate, and the total is built from
    them.
    """
    rate = interest_rate if interest_rate is not None else (lead.interest_rate or 0.0)
    breakdown = compute_piti(
        lead.loan_amount or 0.0,
        lead.sales_price or 0.0,
        rate,
        lead.term or default_term,
        lead.property_type,
    )
    components = {"principal_interest": breakdown.principal_interest}
    for name in ESCROW_FIELDS:
        entered = getattr(lead, name)
        components[name] = entered if name in keep and entered is not None else getattr(breakdown, name)
    piti = round(sum(components.values()), 2)

    fields = {name: to_persisted_amount(value) for name, value in components.items()}
    fields["piti"] = to_persisted_amount(piti)
    fields.update(_dti_fields(lead, piti))
    return fields


def principal_interest_fields(
    lead: LeadSnapshot,
    changed_field: str,
    *,
    default_term: int = DEFAULT_TERM_MONTHS,
) -> dict:
    """Refresh P&I, the PITI total, and DTI after a loan input change.

    Taxes, insurance, HOA and MI keep their stored values and are only
    recombined into the total. Returns an empty dict when the field is not
    a loan input or the lead is not yet quotable.
    """
    if changed_field not in LOAN_INPUT_FIELDS:
        return {}
    loan_amount = lead.loan_amount or 0.0
    if loan_amount <= 0:
        return {}

    principal_interest = compute_principal_and_interest(
        loan_amount,
        lead.interest_rate or 0.0,
        lead.term or default_term,
    )
    escrow = sum(getattr(lead, name) or 0.0 for name in ESCROW_FIELDS)
    piti = principal_interest + escrow

    fields = {
        "principal_interest": to_persisted_amount(principal_interest),
        "piti": to_persisted_amount(piti),
    }
    fields.update(_dti_fields(lead, float(fields["piti"])))
    return fields


def seed_piti_fields(
    lead: LeadSnapshot,
    default_rate: float,
    *,
    keep: Collection[str] = (),
    default_term: int = DEFAULT_TERM_MONTHS,
) -> dict | None:
    """First-time PITI for a lead with a loan amount and no PITI on record.

    Seeds ``interest_rate`` when unset and flips ``piti_computed`` so the
    seed never runs twice. Escrow figures named in ``keep`` are left as the
    lead has them. Returns None when seeding does not apply.
    """
    if lead.piti_computed or lead.piti or (lead.loan_amount or 0.0) <= 0:
        return None

    fields: dict = {}
    rate = lead.interest_rate
    if rate is None:
        rate = default_rate
        fields["interest_rate"] = Decimal(str(default_rate))

    fields.update(full_piti_fields(lead, interest_rate=rate, keep=keep, default_term=default_term))
    for name in ESCROW_FIELDS:
        if name in keep:
            fields.pop(name, None)
    fields["piti_computed"] = True
    return fields
