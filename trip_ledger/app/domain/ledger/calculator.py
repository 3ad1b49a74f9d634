"""
Derived-field calculator.

Single source of truth for every trip money field. Pure functions only:
no I/O, no persistence. Intermediate values keep full Decimal precision and
are rounded once, at the output boundary.
"""

from dataclasses import dataclass, asdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional, Union

Number = Union[int, float, str, Decimal]

MONEY_QUANTUM = Decimal("0.01")
RATIO_QUANTUM = Decimal("0.0001")
ZERO = Decimal("0")


def to_decimal(value: Optional[Number]) -> Decimal:
    """Convert to Decimal, treating a missing value as zero. Floats go through str."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class FinancialInputs:
    """Base values a trip's money fields are derived from."""
    fixed_freight: Optional[Decimal] = None
    per_km_variable_rate: Optional[Decimal] = None
    toll_expenses: Optional[Decimal] = None
    parking_charges: Optional[Decimal] = None
    loading_charges: Optional[Decimal] = None
    unloading_charges: Optional[Decimal] = None
    other_charges: Optional[Decimal] = None
    opening_km: Optional[int] = None
    closing_km: Optional[int] = None
    advance_paid: Optional[Decimal] = None
    balance_paid_so_far: Optional[Decimal] = None
    revenue_override: Optional[Decimal] = None


@dataclass(frozen=True)
class DerivedFinancials:
    km_travelled: int
    variable_freight: Decimal
    total_freight: Decimal
    balance_to_be_paid: Decimal
    variance: Decimal
    revenue: Decimal
    margin: Decimal
    margin_percentage: Decimal

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Field names a client may never set directly
DERIVED_FIELDS = frozenset(DerivedFinancials.__dataclass_fields__)


def km_travelled(opening_km: Optional[int], closing_km: Optional[int]) -> int:
    if opening_km is None or closing_km is None:
        return 0
    return max(closing_km - opening_km, 0)


def compute_financials(inputs: FinancialInputs) -> DerivedFinancials:
    """
    Derive every money field from a trip's base inputs.

    variable_freight   = per_km_variable_rate * km_travelled
    total_freight      = fixed + variable + toll + parking + loading + unloading + other
    balance_to_be_paid = total_freight - advance_paid
    variance           = balance_paid_so_far - balance_to_be_paid
    revenue            = revenue_override if present else total_freight
    margin             = revenue - total_freight
    margin_percentage  = margin / revenue if revenue > 0 else 0
    """
    km = km_travelled(inputs.opening_km, inputs.closing_km)

    variable_freight = to_decimal(inputs.per_km_variable_rate) * km
    total_freight = (
        to_decimal(inputs.fixed_freight)
        + variable_freight
        + to_decimal(inputs.toll_expenses)
        + to_decimal(inputs.parking_charges)
        + to_decimal(inputs.loading_charges)
        + to_decimal(inputs.unloading_charges)
        + to_decimal(inputs.other_charges)
    )
    balance_to_be_paid = total_freight - to_decimal(inputs.advance_paid)
    variance = to_decimal(inputs.balance_paid_so_far) - balance_to_be_paid

    if inputs.revenue_override is not None:
        revenue = to_decimal(inputs.revenue_override)
    else:
        revenue = total_freight
    margin = revenue - total_freight

    if revenue > ZERO:
        margin_percentage = (margin / revenue).quantize(RATIO_QUANTUM, rounding=ROUND_HALF_UP)
    else:
        margin_percentage = ZERO.quantize(RATIO_QUANTUM)

    return DerivedFinancials(
        km_travelled=km,
        variable_freight=round_money(variable_freight),
        total_freight=round_money(total_freight),
        balance_to_be_paid=round_money(balance_to_be_paid),
        variance=round_money(variance),
        revenue=round_money(revenue),
        margin=round_money(margin),
        margin_percentage=margin_percentage,
    )
