import pandas as pd
import pytest

from bondcalc.bonds import InstrumentTerms, build_schedule
from bondcalc.pricing import price_from_yield
from bondcalc.risk import RiskStats, risk_stats
from bondcalc.utils import yearfrac


@pytest.fixture(scope="module")
def settle():
    return pd.Timestamp("2022-07-15")


@pytest.fixture(scope="module")
def terms():
    return InstrumentTerms(
        face=100.0,
        coupon_rate=0.075,
        frequency_months=6,
        issue_date="2020-01-15",
        maturity_date="2025-01-15",
        day_count="ACT/365-Fixed",
    )


@pytest.fixture(scope="module")
def cashflows(terms):
    return build_schedule(terms).cashflows


def test_zero_coupon_closed_form():
    """Single flow two years out: Macaulay duration is exactly the time to payment."""
    flows = [("2025-01-01", 100.0)]  # 731 days
    t = 731 / 365.0
    y = 0.06
    stats = risk_stats("2023-01-01", flows, y, "ACT/365-Fixed", "ANNUAL")

    assert stats.price == pytest.approx(100 * 1.06 ** -t, abs=1e-8)
    assert stats.macaulay_duration == pytest.approx(t, abs=1e-8)
    assert stats.modified_duration == pytest.approx(t / 1.06, abs=1e-8)
    assert stats.convexity == pytest.approx(t * (t + 1) / 1.06 ** 2, abs=1e-7)
    assert stats.dv01 == pytest.approx(t / 1.06 * stats.price * 1e-4, abs=1e-8)


def test_price_matches_price_from_yield(settle, cashflows):
    for comp in ("ANNUAL", "SEMI-ANNUAL"):
        stats = risk_stats(settle, cashflows, 0.072, compounding=comp)
        assert stats.price == price_from_yield(settle, cashflows, 0.072, compounding=comp)


@pytest.mark.parametrize("compounding", ["ANNUAL", "SEMI-ANNUAL"])
def test_dv01_matches_bumped_prices(settle, cashflows, compounding):
    y, h = 0.072, 1e-4
    stats = risk_stats(settle, cashflows, y, compounding=compounding)
    up = price_from_yield(settle, cashflows, y + h, compounding=compounding)
    down = price_from_yield(settle, cashflows, y - h, compounding=compounding)
    assert stats.dv01 > 0.0
    assert stats.dv01 == pytest.approx((down - up) / 2.0, abs=1e-6)


@pytest.mark.parametrize("compounding", ["ANNUAL", "SEMI-ANNUAL"])
def test_convexity_matches_second_difference(settle, cashflows, compounding):
    y, h = 0.072, 1e-3
    stats = risk_stats(settle, cashflows, y, compounding=compounding)
    up = price_from_yield(settle, cashflows, y + h, compounding=compounding)
    down = price_from_yield(settle, cashflows, y - h, compounding=compounding)
    numeric = (up + down - 2.0 * stats.price) / (stats.price * h ** 2)
    assert stats.convexity > 0.0
    assert stats.convexity == pytest.approx(numeric, rel=1e-3)


def test_macaulay_shorter_than_remaining_life(settle, terms, cashflows):
    stats = risk_stats(settle, cashflows, 0.072)
    remaining = yearfrac(settle, terms.maturity_date, terms.day_count)
    assert 0.0 < stats.macaulay_duration < remaining
    assert stats.modified_duration < stats.macaulay_duration


def test_percent_yield_input(settle, cashflows):
    assert risk_stats(settle, cashflows, 7.2) == risk_stats(settle, cashflows, 0.072)


def test_degenerate_inputs_give_zero_stats(cashflows):
    assert risk_stats("2030-01-01", cashflows, 0.05) == RiskStats.zero()
    assert risk_stats("2022-01-01", [], 0.05) == RiskStats.zero()
    assert risk_stats("2022-01-01", [("2023-01-01", 0.0)], 0.05) == RiskStats.zero()


def test_outputs_rounded_to_8dp(settle, cashflows):
    stats = risk_stats(settle, cashflows, 0.072)
    for v in stats.to_dict().values():
        assert v == round(v, 8)
