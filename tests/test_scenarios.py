import pandas as pd
import pytest

from bondcalc.bonds import InstrumentTerms, build_schedule
from bondcalc.scenarios import run_yield_scenarios


@pytest.fixture(scope="module")
def settle():
    return pd.Timestamp("2022-07-15")


@pytest.fixture(scope="module")
def cashflows():
    terms = InstrumentTerms(
        coupon_rate=0.075,
        frequency_months=6,
        issue_date="2020-01-15",
        maturity_date="2025-01-15",
        day_count="ACT/365-Fixed",
    )
    return build_schedule(terms).cashflows


@pytest.fixture(scope="module")
def grid(settle, cashflows):
    return run_yield_scenarios(settle, cashflows, 0.072, shifts_bp=(50, -25, 25, -50))


def test_grid_shape(grid):
    assert list(grid["shift_bp"]) == [-50, -25, 25, 50]
    assert list(grid["scenario"]) == ["PAR_-50bp", "PAR_-25bp", "PAR_+25bp", "PAR_+50bp"]
    assert grid["base"].nunique() == 1


def test_pnl_falls_as_yields_rise(grid):
    pnl = grid["pnl"].tolist()
    assert all(a > b for a, b in zip(pnl, pnl[1:]))
    assert pnl[0] > 0.0 > pnl[-1]


def test_convexity_adjusted_estimate_is_close(grid):
    assert (grid["approx_error"].abs() < 5e-3).all(), "duration+convexity should explain small shifts"
    # positive convexity: gains on rallies exceed losses on sell-offs
    assert grid.loc[0, "pnl"] > -grid.loc[3, "pnl"]
