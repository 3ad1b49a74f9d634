"""
Derived money field tests.
"""

from decimal import Decimal

from trip_ledger.app.domain.ledger.calculator import (
    DERIVED_FIELDS,
    FinancialInputs,
    compute_financials,
    km_travelled,
    round_money,
)


def adhoc_inputs(**overrides):
    values = dict(
        fixed_freight=Decimal("1000"),
        per_km_variable_rate=Decimal("10"),
        toll_expenses=Decimal("50"),
        opening_km=100,
        closing_km=150,
        advance_paid=Decimal("500"),
        balance_paid_so_far=Decimal("1000"),
    )
    values.update(overrides)
    return FinancialInputs(**values)


def test_total_freight_from_fixed_variable_and_toll():
    result = compute_financials(adhoc_inputs())

    assert result.km_travelled == 50
    assert result.variable_freight == Decimal("500.00")
    assert result.total_freight == Decimal("1550.00")


def test_balance_and_variance():
    result = compute_financials(adhoc_inputs())

    assert result.balance_to_be_paid == Decimal("1050.00")
    assert result.variance == Decimal("-50.00")


def test_revenue_defaults_to_total_freight():
    result = compute_financials(adhoc_inputs())

    assert result.revenue == Decimal("1550.00")
    assert result.margin == Decimal("0.00")
    assert result.margin_percentage == Decimal("0.0000")


def test_revenue_override_drives_margin():
    result = compute_financials(adhoc_inputs(revenue_override=Decimal("2000")))

    assert result.revenue == Decimal("2000.00")
    assert result.margin == Decimal("450.00")
    assert result.margin_percentage == Decimal("0.2250")


def test_zero_revenue_has_zero_margin_percentage():
    result = compute_financials(FinancialInputs(revenue_override=Decimal("0")))

    assert result.total_freight == Decimal("0.00")
    assert result.margin_percentage == Decimal("0.0000")


def test_missing_inputs_count_as_zero():
    result = compute_financials(FinancialInputs())

    assert result.km_travelled == 0
    assert result.total_freight == Decimal("0.00")
    assert result.balance_to_be_paid == Decimal("0.00")


def test_km_travelled_needs_both_readings():
    assert km_travelled(100, None) == 0
    assert km_travelled(None, 150) == 0
    assert km_travelled(100, 150) == 50


def test_deterministic_for_identical_inputs():
    first = compute_financials(adhoc_inputs(loading_charges=Decimal("12.345")))
    second = compute_financials(adhoc_inputs(loading_charges=Decimal("12.345")))

    assert first == second


def test_rounds_half_up_at_output_only():
    assert round_money(Decimal("0.005")) == Decimal("0.01")
    assert round_money(Decimal("2.675")) == Decimal("2.68")

    # Three charges of 0.004 sum to 0.012 before rounding, not 0.00 + 0.00 + 0.00
    result = compute_financials(
        FinancialInputs(
            loading_charges=Decimal("0.004"),
            unloading_charges=Decimal("0.004"),
            other_charges=Decimal("0.004"),
        )
    )
    assert result.total_freight == Decimal("0.01")


def test_derived_field_names():
    assert DERIVED_FIELDS == {
        "km_travelled",
        "variable_freight",
        "total_freight",
        "balance_to_be_paid",
        "variance",
        "revenue",
        "margin",
        "margin_percentage",
    }
