# This project was developed with assistance from AI tools.
"""Tests for the payment and ratio calculator."""

from decimal import Decimal

import pytest

from src.services.calculator import (
    MAX_STORED_DTI,
    compute_dti,
    compute_ltv,
    compute_piti,
    compute_principal_and_interest,
    full_piti_fields,
    principal_interest_fields,
    seed_piti_fields,
    to_persisted_amount,
)
from tests.factories import make_lead

# ---------------------------------------------------------------------------
# Principal & interest
# ---------------------------------------------------------------------------


def test_principal_and_interest_standard_loan():
    assert compute_principal_and_interest(300_000, 7.0, 360) == pytest.approx(1995.91, abs=0.01)


@pytest.mark.parametrize("amount,term", [(120_000, 360), (380_000, 180), (1, 12)])
def test_zero_rate_is_straight_line(amount, term):
    assert compute_principal_and_interest(amount, 0, term) == pytest.approx(amount / term)


@pytest.mark.parametrize("amount", [0, -5_000])
def test_non_positive_loan_yields_zero(amount):
    assert compute_principal_and_interest(amount, 6.5, 360) == 0.0


def test_non_positive_term_yields_zero():
    assert compute_principal_and_interest(200_000, 6.5, 0) == 0.0


@pytest.mark.parametrize("rate", [0, 3.5, 6.25, 9.0])
def test_payment_decreases_as_term_grows(rate):
    terms = [120, 180, 240, 300, 360]
    payments = [compute_principal_and_interest(250_000, rate, n) for n in terms]
    assert all(a > b for a, b in zip(payments, payments[1:]))


@pytest.mark.parametrize("term", [60, 180, 360])
def test_payment_increases_with_rate(term):
    rates = [0, 0.5, 2.0, 4.75, 6.25, 10.0]
    payments = [compute_principal_and_interest(250_000, r, term) for r in rates]
    assert all(a < b for a, b in zip(payments, payments[1:]))


# ---------------------------------------------------------------------------
# PITI / LTV / DTI
# ---------------------------------------------------------------------------


def test_condo_scenario_breakdown():
    breakdown = compute_piti(380_000, 400_000, 6.25, 360, "Condo")
    assert breakdown.principal_interest == pytest.approx(2339.73, abs=0.01)
    assert breakdown.property_taxes == 500.00
    assert breakdown.homeowners_insurance == 75.00
    assert breakdown.hoa_dues == 600.00
    assert breakdown.ltv == 95.00
    assert breakdown.mortgage_insurance == pytest.approx(158.33, abs=0.005)
    assert breakdown.piti == pytest.approx(3673.06, abs=0.005)


def test_piti_is_sum_of_rounded_components():
    b = compute_piti(212_345, 250_001, 5.875, 360, "Single Family")
    total = (
        b.principal_interest
        + b.property_taxes
        + b.homeowners_insurance
        + b.hoa_dues
        + b.mortgage_insurance
    )
    assert b.piti == round(total, 2)


def test_single_family_insurance_scales_with_price():
    b = compute_piti(400_000, 500_000, 6.0, 360, "Single Family")
    assert b.homeowners_insurance == 375.00
    assert b.hoa_dues == 0.0
    assert b.mortgage_insurance == 0.0


def test_insurance_minimum_applies_to_cheap_homes():
    b = compute_piti(50_000, 80_000, 6.0, 360, None)
    assert b.homeowners_insurance == 75.00


def test_mi_only_above_eighty_percent_ltv():
    at_threshold = compute_piti(400_000, 500_000, 6.0, 360)
    above = compute_piti(400_001, 500_000, 6.0, 360)
    assert at_threshold.mortgage_insurance == 0.0
    assert above.mortgage_insurance > 0


def test_ltv_without_sales_price():
    assert compute_ltv(300_000, 0) == 0.0


def test_dti_undefined_without_income():
    assert compute_dti(2_500, 400, 0) is None


def test_dti_front_and_back():
    ratios = compute_dti(2_500, 500, 10_000)
    assert ratios.front == 25.0
    assert ratios.back == 30.0


def test_persisted_amount_rounds_half_up():
    assert to_persisted_amount(158.5) == Decimal("159")
    assert to_persisted_amount(2339.49) == Decimal("2339")


# ---------------------------------------------------------------------------
# Persisted field sets
# ---------------------------------------------------------------------------


def test_full_fields_are_whole_units():
    lead = make_lead(
        loan_amount=380_000, sales_price=400_000, interest_rate=6.25, term=360,
        property_type="Condo", total_monthly_income=12_000, monthly_liabilities=600,
    )
    fields = full_piti_fields(lead)
    assert fields["principal_interest"] == Decimal("2340")
    assert fields["mortgage_insurance"] == Decimal("158")
    assert fields["piti"] == Decimal("3673")
    assert fields["front_dti"] == pytest.approx(30.61, abs=0.01)
    assert fields["dti"] == pytest.approx(35.61, abs=0.01)


def test_partial_recompute_keeps_escrow_components():
    lead = make_lead(
        loan_amount=300_000, interest_rate=7.0, term=360,
        property_taxes=400, homeowners_insurance=100, mortgage_insurance=0, hoa_dues=50,
    )
    fields = principal_interest_fields(lead, "interest_rate")
    assert set(fields) == {"principal_interest", "piti", "front_dti", "dti"}
    assert fields["principal_interest"] == Decimal("1996")
    assert fields["piti"] == Decimal("2546")
    assert fields["front_dti"] is None


def test_partial_recompute_ignores_other_fields():
    lead = make_lead(loan_amount=300_000, interest_rate=7.0)
    assert principal_interest_fields(lead, "sales_price") == {}


def test_partial_recompute_skipped_without_loan_amount():
    lead = make_lead(loan_amount=0, interest_rate=7.0)
    assert principal_interest_fields(lead, "loan_amount") == {}


def test_seed_uses_default_rate_when_unset():
    lead = make_lead(loan_amount=300_000, sales_price=375_000)
    fields = seed_piti_fields(lead, 7.0)
    assert fields["interest_rate"] == Decimal("7.0")
    assert fields["principal_interest"] == Decimal("1996")
    assert fields["piti_computed"] is True


def test_seed_keeps_existing_rate():
    lead = make_lead(loan_amount=300_000, sales_price=375_000, interest_rate=6.0)
    fields = seed_piti_fields(lead, 7.0)
    assert "interest_rate" not in fields


def test_seed_is_idempotent():
    lead = make_lead(loan_amount=300_000, sales_price=375_000)
    first = seed_piti_fields(lead, 7.0)
    seeded = lead.with_fields(first)
    assert seed_piti_fields(seeded, 7.0) is None
    assert seeded.piti == float(first["piti"])


@pytest.mark.parametrize(
    "overrides",
    [{"loan_amount": None}, {"loan_amount": 0}, {"loan_amount": 1, "piti": 900}],
)
def test_seed_not_applicable(overrides):
    assert seed_piti_fields(make_lead(**overrides), 7.0) is None


def test_seed_builds_total_from_kept_escrow_figures():
    lead = make_lead(loan_amount=300_000, sales_price=375_000, property_taxes=123)
    fields = seed_piti_fields(lead, 7.0, keep={"property_taxes"})
    assert "property_taxes" not in fields
    assert fields["homeowners_insurance"] == Decimal("281")
    assert fields["piti"] == Decimal("2400")


def test_default_term_applies_when_lead_has_none():
    lead = make_lead(loan_amount=300_000, interest_rate=7.0)
    fields = principal_interest_fields(lead, "loan_amount", default_term=180)
    assert fields["principal_interest"] == Decimal("2696")


def test_stored_dti_capped_for_tiny_income():
    lead = make_lead(
        loan_amount=300_000, sales_price=375_000, interest_rate=7.0, total_monthly_income=0.01,
    )
    fields = full_piti_fields(lead)
    assert fields["front_dti"] == MAX_STORED_DTI
    assert fields["dti"] == MAX_STORED_DTI
