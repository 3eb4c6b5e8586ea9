import math

import pandas as pd
import pytest

from bondcalc.accrual import accrued_interest, adjacent_coupons, coupon_for_period
from bondcalc.bonds import InstrumentTerms, build_schedule


@pytest.fixture(scope="module")
def schedule():
    return build_schedule(
        InstrumentTerms(
            coupon_rate=0.075,
            frequency_months=6,
            issue_date="2020-01-15",
            maturity_date="2025-01-15",
            day_count="ACT/365-Fixed",
        )
    )


def test_adjacent_coupons_sorts_input():
    dates = ["2024-07-31", "2024-01-31", "2025-01-31"]
    last, nxt = adjacent_coupons(dates, "2024-03-15")
    assert last == pd.Timestamp("2024-01-31")
    assert nxt == pd.Timestamp("2024-07-31")


def test_adjacent_coupons_on_coupon_date():
    last, nxt = adjacent_coupons(["2024-01-31", "2024-07-31"], "2024-01-31")
    assert last == pd.Timestamp("2024-01-31"), "a coupon on settlement counts as the last coupon"
    assert nxt == pd.Timestamp("2024-07-31")


def test_adjacent_coupons_outside_schedule():
    assert adjacent_coupons(["2024-01-31", "2024-07-31"], "2023-12-01") == (None, pd.Timestamp("2024-01-31"))
    assert adjacent_coupons(["2024-01-31", "2024-07-31"], "2024-08-01") == (pd.Timestamp("2024-07-31"), None)
    assert adjacent_coupons([], "2024-08-01") == (None, None)


def test_accrued_zero_on_coupon_date():
    ai = accrued_interest("ACT/365-Fixed", "2024-01-31", "2024-01-31", "2024-07-31", 3.75)
    assert ai == 0.0


def test_accrued_linear_in_elapsed_days():
    # 2024-01-31 -> 2024-07-31 is 182 days; 91 days in is exactly half
    ai = accrued_interest("ACT/365-Fixed", "2024-01-31", "2024-05-01", "2024-07-31", 3.75)
    assert ai == pytest.approx(1.875, abs=1e-8)


def test_accrued_approaches_full_coupon():
    ai = accrued_interest("ACT/360", "2024-01-31", "2024-07-30", "2024-07-31", 3.75)
    assert ai == pytest.approx(3.75 * 181 / 182, abs=1e-8)
    assert ai < 3.75


def test_accrued_30_360():
    ai = accrued_interest("30/360-US", "2024-01-31", "2024-04-30", "2024-07-31", 4.0)
    # 30/360: 90 of 180 days
    assert ai == pytest.approx(2.0, abs=1e-8)


def test_accrued_degenerate_inputs():
    assert accrued_interest("ACT/360", None, "2024-03-01", "2024-07-31", 3.75) == 0.0
    assert accrued_interest("ACT/360", "2024-01-31", "2024-03-01", None, 3.75) == 0.0
    assert accrued_interest("ACT/360", "2024-01-31", "2024-03-01", "2024-07-31", math.nan) == 0.0
    assert accrued_interest("ACT/360", "2024-07-31", "2024-03-01", "2024-01-31", 3.75) == 0.0
    assert accrued_interest("ACT/360", "2024-01-31", "2024-01-15", "2024-07-31", 3.75) == 0.0


def test_coupon_for_period_uses_period_ending_on_next(schedule):
    target = schedule.periods[3]
    assert coupon_for_period(schedule, target.end) == target.coupon_amount
    assert coupon_for_period(schedule, None) == schedule.first_coupon_amount
    assert coupon_for_period(schedule, "1999-01-01") == schedule.first_coupon_amount
