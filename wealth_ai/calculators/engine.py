from __future__ import annotations

"""Closed-form tax, SIP, EMI and fixed-deposit calculators.

Every function here is total: unparsable or out-of-range inputs are coerced to
a default instead of raising, so a form can pass raw field values straight in.
"""

import logging
import math
import re
import sys
from dataclasses import dataclass

logger = logging.getLogger(__name__)

STANDARD_EXEMPTION = 250_000.0
DEFAULT_SIP_RETURN_PCT = 12.0
MAX_RESULT = sys.float_info.max

# (upper bound of slab, rate) applied to income above the exemption.
TAX_SLABS: tuple[tuple[float, float], ...] = (
    (500_000.0, 0.05),
    (1_250_000.0, 0.20),
    (math.inf, 0.30),
)

_LEADING_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class TaxResult:
    tax: float


@dataclass(frozen=True)
class SIPResult:
    maturity_amount: float
    total_investment: float
    total_gains: float


@dataclass(frozen=True)
class EMIResult:
    emi: float
    total_amount: float
    total_interest: float


@dataclass(frozen=True)
class FDResult:
    maturity_amount: float
    interest: float


def coerce_number(value: object, default: float = 0.0) -> float:
    """Parse a form value the way a browser parseFloat would, falling back to default."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        match = _LEADING_NUMBER_RE.match(text)
        if not match:
            return default
        number = float(match.group(0))
    if not math.isfinite(number):
        return default
    return number


def coerce_non_negative(value: object) -> float:
    """Coerce to a number, treating negatives like missing input."""
    return max(0.0, coerce_number(value, default=0.0))


def coerce_years(value: object) -> float:
    """Coerce a tenure in years; zero, negative or missing values become one year."""
    years = coerce_number(value, default=1.0)
    if years <= 0:
        return 1.0
    return years


def periodic_rate(annual_pct: float, periods_per_year: int) -> float:
    """Convert a yearly percentage to a per-period rate.

    A rate that loses the whole balance or more each period has no real
    compounding, so it is treated like missing input (0%).
    """
    rate = annual_pct / 100 / periods_per_year
    if rate <= -1:
        return 0.0
    return rate


def compound_growth(rate: float, periods: float) -> float:
    """Return ``(1 + rate) ** periods - 1``, saturating to inf instead of overflowing.

    Computed through ``expm1``/``log1p`` so rates too small to change ``1 + rate``
    still yield a non-zero gain.
    """
    if rate == 0:
        return 0.0
    try:
        return math.expm1(periods * math.log1p(rate))
    except OverflowError:
        return math.inf


def bounded(value: float) -> float:
    """Clamp a result to the finite float range; undefined results become 0."""
    if math.isnan(value):
        return 0.0
    return max(-MAX_RESULT, min(MAX_RESULT, value))


def compute_tax(gross_income: object, total_deductions: object) -> TaxResult:
    """Apply the progressive slab schedule above the standard exemption."""
    income = coerce_non_negative(gross_income)
    deductions = coerce_non_negative(total_deductions)
    taxable = max(0.0, income - deductions - STANDARD_EXEMPTION)
    tax = 0.0
    lower = 0.0
    for upper, rate in TAX_SLABS:
        if taxable <= lower:
            break
        tax += (min(taxable, upper) - lower) * rate
        lower = upper
    logger.debug("calculation_complete", extra={"kind": "tax", "taxable": taxable})
    return TaxResult(tax=tax)


def compute_sip(
    monthly_amount: object,
    years: object,
    annual_return_pct: object = DEFAULT_SIP_RETURN_PCT,
) -> SIPResult:
    """Future value of a monthly contribution paid at the start of each period."""
    principal = coerce_number(monthly_amount)
    rate = periodic_rate(coerce_number(annual_return_pct, default=DEFAULT_SIP_RETURN_PCT), 12)
    periods = coerce_years(years) * 12
    gain = compound_growth(rate, periods)
    if gain == 0:
        maturity = principal * periods
    else:
        maturity = principal * (gain / rate) * (1 + rate)
    maturity = bounded(maturity)
    invested = bounded(principal * periods)
    logger.debug("calculation_complete", extra={"kind": "sip", "periods": periods})
    return SIPResult(
        maturity_amount=maturity,
        total_investment=invested,
        total_gains=bounded(maturity - invested),
    )


def compute_emi(loan_amount: object, annual_rate_pct: object, years: object) -> EMIResult:
    """Equated monthly instalment for a fully amortising loan."""
    principal = coerce_number(loan_amount)
    rate = periodic_rate(coerce_number(annual_rate_pct), 12)
    periods = coerce_years(years) * 12
    gain = compound_growth(rate, periods)
    if gain == 0:
        emi = principal / periods
    else:
        # P*r*(1+g)/g with g = (1+r)**n - 1, split so g == inf stays finite.
        emi = principal * rate + principal * rate / gain
    emi = bounded(emi)
    total = bounded(emi * periods)
    logger.debug("calculation_complete", extra={"kind": "emi", "periods": periods})
    return EMIResult(emi=emi, total_amount=total, total_interest=bounded(total - principal))


def compute_fd(principal: object, annual_rate_pct: object, years: object) -> FDResult:
    """Maturity of a lump sum compounded annually."""
    amount = coerce_number(principal)
    rate = periodic_rate(coerce_number(annual_rate_pct), 1)
    term = coerce_years(years)
    interest = bounded(amount * compound_growth(rate, term))
    logger.debug("calculation_complete", extra={"kind": "fd", "years": term})
    return FDResult(maturity_amount=bounded(amount + interest), interest=interest)
