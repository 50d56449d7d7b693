"""
EMI (equated monthly installment) arithmetic for offer pricing.

All amounts are whole currency units. Intermediate values are computed in
double precision and rounded half-up only at the end, which keeps results
within one unit of a reference amortization table for principals up to
1e9 and annual rates up to 30%.
"""

import logging
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Union

from app.schemas.offer_schema import ProcessingFeeTypeEnum

logger = logging.getLogger(__name__)

Number = Union[int, float]

DEFAULT_TENURE_YEARS = 20
TENURE_OPTIONS_YEARS = (10, 15, 20, 25, 30)


def round_currency(amount: Number) -> int:
    """Round to the nearest whole currency unit, halves away from zero."""
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _require_finite(name: str, value: Number):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite")


def calculate_emi(principal: Number, annual_rate_percent: Number, tenure_years: int = DEFAULT_TENURE_YEARS) -> int:
    """Monthly installment for a reducing-balance loan.

    Raises ValueError when principal or rate is negative or when tenure is
    not a whole number of years >= 1.
    """
    _require_finite("principal", principal)
    _require_finite("annual_rate_percent", annual_rate_percent)
    _require_finite("tenure_years", tenure_years)
    if principal < 0:
        raise ValueError("principal must be >= 0")
    if annual_rate_percent < 0:
        raise ValueError("annual_rate_percent must be >= 0")
    if tenure_years < 1 or int(tenure_years) != tenure_years:
        raise ValueError("tenure_years must be a whole number >= 1")

    monthly_rate = annual_rate_percent / 100 / 12
    tenure_months = int(tenure_years) * 12

    if monthly_rate == 0:
        return round_currency(principal / tenure_months)

    # (1 + r)^n - 1 via expm1/log1p; the naive power collapses to 0 for tiny r
    growth_minus_one = math.expm1(tenure_months * math.log1p(monthly_rate))
    if growth_minus_one == 0:
        return round_currency(principal / tenure_months)

    emi = principal * monthly_rate * (growth_minus_one + 1) / growth_minus_one
    return round_currency(emi)


def calculate_processing_fee(loan_amount: Number, fee_type: Union[ProcessingFeeTypeEnum, str], fee_value: Number) -> int:
    _require_finite("processing_fee_value", fee_value)
    if fee_value < 0:
        raise ValueError("processing_fee_value must be >= 0")

    fee_type = ProcessingFeeTypeEnum(fee_type)
    if fee_type == ProcessingFeeTypeEnum.percentage:
        return round_currency(fee_value / 100 * loan_amount)
    return round_currency(fee_value)


def calculate_total_interest(emi: int, principal: Number, tenure_years: int) -> int:
    # Rounded installments can undershoot the principal on near-zero rates
    return max(0, emi * tenure_years * 12 - round_currency(principal))


def tenure_options(
    principal: Number,
    annual_rate_percent: Number,
    tenures: Iterable[int] = TENURE_OPTIONS_YEARS,
) -> List[Dict[str, int]]:
    options = []
    for years in tenures:
        emi = calculate_emi(principal, annual_rate_percent, years)
        options.append({
            "tenure_years": years,
            "emi": emi,
            "total_payment": emi * years * 12,
        })
    return options
