from __future__ import annotations

"""Calculator formula and coercion tests."""

import math
import sys

import pytest

from wealth_ai.calculators.engine import (
    compound_growth,
    coerce_number,
    compute_emi,
    compute_fd,
    compute_sip,
    compute_tax,
    periodic_rate,
)
from wealth_ai.calculators.formatting import format_inr


def test_tax_is_zero_up_to_exemption() -> None:
    assert compute_tax(0, 0).tax == 0
    assert compute_tax(250000, 0).tax == 0
    assert compute_tax(400000, 200000).tax == 0


def test_tax_second_slab() -> None:
    assert compute_tax(760000, 0).tax == pytest.approx(27000)


def test_tax_first_and_top_slabs() -> None:
    assert compute_tax(550000, 0).tax == pytest.approx(15000)
    # taxable 1,750,000: 25,000 + 150,000 + 500,000 * 0.30
    assert compute_tax(2000000, 0).tax == pytest.approx(325000)


def test_tax_is_monotonic_in_income_and_deductions() -> None:
    incomes = range(0, 3_000_001, 125_000)
    taxes = [compute_tax(income, 150000).tax for income in incomes]
    assert taxes == sorted(taxes)

    deductions = range(0, 2_000_001, 100_000)
    by_deduction = [compute_tax(1800000, value).tax for value in deductions]
    assert by_deduction == sorted(by_deduction, reverse=True)


def test_tax_coerces_bad_and_negative_input() -> None:
    assert compute_tax("abc", None).tax == 0
    assert compute_tax(-500000, 0).tax == 0
    assert compute_tax("760000", "-100").tax == pytest.approx(27000)
    assert compute_tax("7,60,000", "").tax == pytest.approx(27000)


def test_fd_single_year() -> None:
    result = compute_fd(100000, 10, 1)
    assert result.maturity_amount == pytest.approx(110000)
    assert result.interest == pytest.approx(10000)


def test_fd_fractional_years_and_default_term() -> None:
    half = compute_fd(100000, 10, 0.5)
    assert half.maturity_amount == pytest.approx(100000 * 1.1**0.5)
    assert compute_fd(100000, 10, "").maturity_amount == pytest.approx(110000)


def test_sip_zero_return_is_plain_sum() -> None:
    result = compute_sip(5000, 10, 0)
    assert result.maturity_amount == pytest.approx(5000 * 10 * 12)
    assert result.total_gains == pytest.approx(0)


def test_sip_annuity_due() -> None:
    result = compute_sip(1000, 1, 12)
    r = 0.01
    expected = 1000 * ((1 + r) ** 12 - 1) / r * (1 + r)
    assert result.maturity_amount == pytest.approx(expected)
    assert result.total_investment == pytest.approx(12000)
    assert result.total_gains == pytest.approx(expected - 12000)


def test_sip_defaults() -> None:
    defaulted = compute_sip(1000, "not a number", "")
    explicit = compute_sip(1000, 1, 12)
    assert defaulted == explicit


def test_emi_totals_are_consistent() -> None:
    result = compute_emi(500000, 9.5, 5)
    assert result.total_amount == pytest.approx(result.emi * 60)
    assert result.total_amount == pytest.approx(result.total_interest + 500000, rel=1e-6)
    assert result.total_interest > 0


def test_emi_known_value() -> None:
    result = compute_emi(100000, 12, 1)
    assert result.emi == pytest.approx(8884.88, abs=0.01)


def test_emi_zero_rate() -> None:
    result = compute_emi(120000, 0, 1)
    assert result.emi == pytest.approx(10000)
    assert result.total_interest == pytest.approx(0)


def test_coerce_number_parses_leading_number() -> None:
    assert coerce_number("12.5%") == 12.5
    assert coerce_number("  42 ") == 42
    assert coerce_number("nan", default=3) == 3
    assert coerce_number(float("inf")) == 0
    assert coerce_number(True, default=7) == 7


def test_format_inr_uses_indian_grouping() -> None:
    assert format_inr(1234567) == "₹12,34,567"
    assert format_inr(100000) == "₹1,00,000"
    assert format_inr(999) == "₹999"
    assert format_inr(1234.5, decimals=2) == "₹1,234.50"
    assert format_inr(-50000) == "-₹50,000"
    assert format_inr("abc") == "₹0"


def _all_finite(result: object) -> bool:
    return all(
        isinstance(value, float) and math.isfinite(value)
        for value in vars(result).values()
    )


@pytest.mark.parametrize(
    ("compute", "args"),
    [
        (compute_sip, (1000, "1e300", 12)),
        (compute_sip, (1000, 1, "1e-15")),
        (compute_sip, (1000, "1e308", 12)),
        (compute_sip, (1000, 2.5, -1500)),
        (compute_sip, (1000, "1e300", -50)),
        (compute_emi, (100000, "1e-15", 1)),
        (compute_emi, (100000, 12, "1e300")),
        (compute_emi, (100000, 0, "1e308")),
        (compute_emi, (100000, -1200, 1)),
        (compute_emi, (100000, -50, "1e300")),
        (compute_emi, ("1e308", "1e300", 30)),
        (compute_fd, (100000, 10, "1e10")),
        (compute_fd, (100, -250, 1.5)),
        (compute_fd, (100, -100, 2)),
        (compute_fd, (100, -40, 1.5)),
        (compute_fd, ("1e308", "1e300", 1)),
        (compute_fd, (0, 10, "1e10")),
    ],
)
def test_calculators_return_finite_floats_for_extreme_input(compute, args) -> None:
    assert _all_finite(compute(*args))


def test_huge_growth_saturates_at_largest_float() -> None:
    result = compute_fd(100000, 10, "1e10")
    assert result.maturity_amount == sys.float_info.max
    assert result.interest == sys.float_info.max
    assert compute_sip(1000, "1e300", 12).maturity_amount == sys.float_info.max


def test_tiny_rates_behave_like_zero_rate() -> None:
    sip = compute_sip(1000, 1, "1e-15")
    assert sip.maturity_amount == pytest.approx(12000)
    assert sip.total_gains == pytest.approx(0, abs=1e-6)
    emi = compute_emi(100000, "1e-15", 1)
    assert emi.emi == pytest.approx(100000 / 12)
    assert emi.total_interest == pytest.approx(0, abs=1e-6)


def test_emi_over_unbounded_tenure_is_interest_only() -> None:
    result = compute_emi(100000, 12, "1e300")
    assert result.emi == pytest.approx(1000)


def test_total_loss_rates_count_as_zero_percent() -> None:
    assert periodic_rate(-250, 1) == 0.0
    assert periodic_rate(-100, 1) == 0.0
    assert periodic_rate(-1200, 12) == 0.0
    assert periodic_rate(-50, 1) == pytest.approx(-0.5)
    assert compute_fd(100, -250, 1.5) == compute_fd(100, 0, 1.5)
    assert compute_fd(100, -250, 1.5).maturity_amount == pytest.approx(100)


def test_negative_rate_with_fractional_term_stays_real() -> None:
    result = compute_fd(100, -40, 1.5)
    assert result.maturity_amount == pytest.approx(100 * 0.6**1.5)
    assert result.interest < 0


def test_compound_growth() -> None:
    assert compound_growth(0, math.inf) == 0.0
    assert compound_growth(0.1, 2) == pytest.approx(0.21)
    assert compound_growth(1e-18, 12) == pytest.approx(12e-18)
    assert compound_growth(0.1, 1e10) == math.inf
