from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Tuple, Union

import numpy as np
import pandas as pd
from scipy.optimize import brentq

from .bonds import Cashflow, coerce_cashflows
from .config import (
    BRACKET_HIGH,
    BRACKET_LOW,
    DEFAULT_COMPOUNDING,
    DEFAULT_DAY_COUNT,
    ROUND_DP,
    SOLVER_BUMP,
    SOLVER_FLAT_DERIVATIVE,
    SOLVER_FLAT_STEP,
    SOLVER_MAX_ITER,
    SOLVER_RESET_YIELD,
    SOLVER_SEED_DISCOUNT,
    SOLVER_SEED_PREMIUM,
    SOLVER_TOL,
    SOLVER_YIELD_FLOOR,
    YIELD_PERCENT_THRESHOLD,
)
from .conventions import Compounding, DayCount
from .errors import InvalidTargetPrice, InvalidYield
from .utils import DateLike, normalize, yearfrac

logger = logging.getLogger(__name__)


def normalize_yield(value: float) -> float:
    """
    Read a quoted yield as a decimal. Magnitudes above 1.5 are taken to be
    percentages, so 7.5 and 0.075 both mean 7.5%.
    """
    try:
        y = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidYield(f"Invalid yield: {value!r}") from exc
    if not math.isfinite(y):
        raise InvalidYield(f"Invalid yield: {value!r}")
    if abs(y) > YIELD_PERCENT_THRESHOLD:
        return y / 100.0
    return y


def eligible_cashflows(settle: pd.Timestamp, cashflows) -> List[Cashflow]:
    """Cashflows paid on or after settlement, sorted by date."""
    return [cf for cf in coerce_cashflows(cashflows) if cf.date >= settle]


def times_and_amounts(
    settle: pd.Timestamp,
    flows: List[Cashflow],
    day_count: DayCount,
) -> Tuple[np.ndarray, np.ndarray]:
    taus = np.array([yearfrac(settle, cf.date, day_count) for cf in flows], dtype=float)
    amounts = np.array([cf.amount for cf in flows], dtype=float)
    return taus, amounts


def discount_factors(taus: np.ndarray, y: float, freq: int) -> np.ndarray:
    """(1 + y/f)^(-t f), exactly 1 for t <= 0."""
    taus = np.asarray(taus, dtype=float)
    with np.errstate(invalid="ignore", over="ignore", divide="ignore"):
        dfs = np.power(1.0 + y / freq, -taus * freq)
    return np.where(taus <= 0.0, 1.0, dfs)


def _pv(taus: np.ndarray, amounts: np.ndarray, y: float, freq: int) -> float:
    if len(amounts) == 0:
        return 0.0
    return round(float(np.sum(amounts * discount_factors(taus, y, freq))), ROUND_DP)


def price_from_yield(
    settle: DateLike,
    cashflows: Iterable,
    yield_input: float,
    day_count: Union[str, DayCount] = DEFAULT_DAY_COUNT,
    compounding: Union[str, Compounding] = DEFAULT_COMPOUNDING,
) -> float:
    """
    Present value at settlement of the cashflows paid on/after settlement,
    discounted at a flat periodically-compounded yield. Earlier cashflows
    are excluded.
    """
    settle = normalize(settle)
    day_count = DayCount.parse(day_count)
    freq = Compounding.parse(compounding).frequency
    y = normalize_yield(yield_input)

    flows = eligible_cashflows(settle, cashflows)
    taus, amounts = times_and_amounts(settle, flows, day_count)
    return _pv(taus, amounts, y, freq)


class SolverState(str, Enum):
    ITERATING = "iterating"
    CONVERGED = "converged"
    CAP_EXCEEDED = "cap-exceeded"


@dataclass(frozen=True)
class YieldSolution:
    ytm: float
    state: SolverState
    iterations: int

    @property
    def converged(self) -> bool:
        return self.state is SolverState.CONVERGED


def _target_price(value: float) -> float:
    try:
        target = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidTargetPrice(f"Invalid target price: {value!r}") from exc
    if not math.isfinite(target):
        raise InvalidTargetPrice(f"Invalid target price: {value!r}")
    return target


def _newton_step(price_fn, y: float, diff: float) -> float:
    up = price_fn(y + SOLVER_BUMP)
    down = price_fn(y - SOLVER_BUMP)
    deriv = (up - down) / (2.0 * SOLVER_BUMP)

    if not math.isfinite(deriv) or abs(deriv) < SOLVER_FLAT_DERIVATIVE:
        # price falls as yield rises: too expensive -> raise yield
        y = y + (SOLVER_FLAT_STEP if diff > 0 else -SOLVER_FLAT_STEP)
    else:
        y = y - diff / deriv

    if not math.isfinite(y) or y <= SOLVER_YIELD_FLOOR:
        y = SOLVER_RESET_YIELD
    return y


def ytm_from_price(
    settle: DateLike,
    cashflows: Iterable,
    target_price: float,
    day_count: Union[str, DayCount] = DEFAULT_DAY_COUNT,
    compounding: Union[str, Compounding] = DEFAULT_COMPOUNDING,
) -> YieldSolution:
    """
    Yield-to-maturity reproducing target_price (a dirty price).

    Newton iteration on a central-difference derivative. The solver moves
    ITERATING -> CONVERGED when |price - target| < 1e-8, or
    ITERATING -> CAP_EXCEEDED after 100 iterations, in which case the last
    iterate is returned as a best estimate.
    """
    settle = normalize(settle)
    day_count = DayCount.parse(day_count)
    freq = Compounding.parse(compounding).frequency
    target = _target_price(target_price)

    flows = eligible_cashflows(settle, cashflows)
    if not flows:
        return YieldSolution(0.0, SolverState.CONVERGED, 0)

    taus, amounts = times_and_amounts(settle, flows, day_count)

    def price_fn(y: float) -> float:
        return _pv(taus, amounts, y, freq)

    y = SOLVER_SEED_PREMIUM if target >= 100.0 else SOLVER_SEED_DISCOUNT
    state = SolverState.ITERATING
    iterations = 0

    while state is SolverState.ITERATING:
        if iterations >= SOLVER_MAX_ITER:
            state = SolverState.CAP_EXCEEDED
            break

        iterations += 1
        diff = price_fn(y) - target
        if abs(diff) < SOLVER_TOL:
            state = SolverState.CONVERGED
            break

        y = _newton_step(price_fn, y, diff)
        logger.debug("ytm iter=%d y=%.10f diff=%.3e", iterations, y, diff)

    if state is SolverState.CAP_EXCEEDED:
        logger.warning(
            "ytm solver hit %d iterations without converging (target=%.8f, last y=%.8f)",
            SOLVER_MAX_ITER, target, y,
        )

    return YieldSolution(round(y, ROUND_DP), state, iterations)


def ytm_from_price_bracketed(
    settle: DateLike,
    cashflows: Iterable,
    target_price: float,
    day_count: Union[str, DayCount] = DEFAULT_DAY_COUNT,
    compounding: Union[str, Compounding] = DEFAULT_COMPOUNDING,
    low: float = BRACKET_LOW,
    high: float = BRACKET_HIGH,
) -> float:
    """
    Yield-to-maturity by Brent's method on [low, high].

    Independent of the Newton solver's seeding and divergence guards; raises
    ValueError when the target is not bracketed.
    """
    settle = normalize(settle)
    day_count = DayCount.parse(day_count)
    freq = Compounding.parse(compounding).frequency
    target = _target_price(target_price)

    flows = eligible_cashflows(settle, cashflows)
    if not flows:
        return 0.0

    taus, amounts = times_and_amounts(settle, flows, day_count)

    def residual(y: float) -> float:
        return float(np.sum(amounts * discount_factors(taus, y, freq))) - target

    fa, fb = residual(low), residual(high)
    if fa * fb > 0:
        raise ValueError(f"Yield not bracketed in [{low}, {high}] for target price {target}")

    return round(float(brentq(residual, low, high, maxiter=300, xtol=1e-14)), ROUND_DP)
