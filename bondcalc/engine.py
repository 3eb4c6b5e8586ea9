"""
Entry points for the request layer.

Four operations, all pure:
- price_from_schedule / yield_from_schedule: instrument terms -> coupon
  schedule -> price or yield, with the accrued split into clean/dirty.
- price_from_cashflows / yield_from_cashflows: explicit cashflow list, no
  coupon schedule, hence no accrued interest (dirty == clean).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

import pandas as pd

from .accrual import accrued_interest, adjacent_coupons, coupon_for_period
from .bonds import Cashflow, InstrumentTerms, Schedule, build_schedule, coerce_cashflows
from .config import DEFAULT_COMPOUNDING, DEFAULT_DAY_COUNT, DEFAULT_SETTLEMENT_LAG, ROUND_DP
from .conventions import Compounding, DayCount
from .errors import EmptyCashflowSet, InvalidTargetPrice
from .pricing import discount_factors, normalize_yield, times_and_amounts, ytm_from_price
from .risk import RiskStats, risk_stats_decimal
from .utils import DateLike, normalize, settlement_date, to_iso, utc_today


@dataclass(frozen=True)
class SettlementInputs:
    settlement_date: Optional[DateLike] = None  # trade date; today when None
    lag_days: int = DEFAULT_SETTLEMENT_LAG


@dataclass(frozen=True)
class ValuationResult:
    dirty_price: float
    clean_price: float
    accrued: float
    ytm: float
    risk: RiskStats
    cashflows: Tuple[Cashflow, ...]
    settlement_date: pd.Timestamp
    day_count: DayCount
    compounding: Compounding
    converged: bool = True
    iterations: int = 0

    def to_dict(self) -> dict:
        return {
            "dirtyPrice": self.dirty_price,
            "cleanPrice": self.clean_price,
            "accrued": self.accrued,
            "ytm": self.ytm,
            "macaulay": self.risk.macaulay_duration,
            "modified": self.risk.modified_duration,
            "dv01": self.risk.dv01,
            "convexity": self.risk.convexity,
            "converged": self.converged,
            "cashflows": [cf.to_dict() for cf in self.cashflows],
            "settlementDate": to_iso(self.settlement_date),
        }

    def cashflow_frame(self) -> pd.DataFrame:
        """Per-cashflow discounting detail at the result's yield, for display/export."""
        flows = list(self.cashflows)
        taus, amounts = times_and_amounts(self.settlement_date, flows, self.day_count)
        dfs = discount_factors(taus, self.ytm, self.compounding.frequency)

        out = pd.DataFrame({
            "date": [cf.date for cf in flows],
            "amount": amounts,
            "t": taus,
            "df": dfs,
        })
        # already-paid flows carry no value
        out["pv"] = (out["amount"] * out["df"]).where(out["date"] >= self.settlement_date, 0.0)
        return out


def _require_cashflows(flows: Iterable) -> Tuple[Cashflow, ...]:
    flows = tuple(coerce_cashflows(flows))
    if not flows:
        raise EmptyCashflowSet("No cashflows provided")
    return flows


def _coerce_target(target_price: float) -> float:
    try:
        return float(target_price)
    except (TypeError, ValueError) as exc:
        raise InvalidTargetPrice(f"Invalid target price: {target_price!r}") from exc


def _schedule_context(
    terms: InstrumentTerms,
    settlement: Optional[SettlementInputs],
) -> Tuple[Schedule, pd.Timestamp, float]:
    settlement = settlement or SettlementInputs()
    settle = settlement_date(settlement.settlement_date, settlement.lag_days, terms.business_roll)

    schedule = build_schedule(terms)
    if not schedule.cashflows:
        raise EmptyCashflowSet("Schedule produced no cashflows")

    last, nxt = adjacent_coupons(schedule.coupon_dates, settle)
    accrued = accrued_interest(terms.day_count, last, settle, nxt, coupon_for_period(schedule, nxt))
    return schedule, settle, accrued


def _result(
    risk: RiskStats,
    accrued: float,
    y: float,
    flows: Tuple[Cashflow, ...],
    settle: pd.Timestamp,
    day_count: DayCount,
    compounding: Compounding,
    converged: bool = True,
    iterations: int = 0,
) -> ValuationResult:
    return ValuationResult(
        dirty_price=round(risk.price, ROUND_DP),
        clean_price=round(risk.price - accrued, ROUND_DP),
        accrued=round(accrued, ROUND_DP),
        ytm=round(y, ROUND_DP),
        risk=risk,
        cashflows=flows,
        settlement_date=settle,
        day_count=day_count,
        compounding=compounding,
        converged=converged,
        iterations=iterations,
    )


def price_from_schedule(
    terms: InstrumentTerms,
    settlement: Optional[SettlementInputs],
    yield_input: float,
) -> ValuationResult:
    schedule, settle, accrued = _schedule_context(terms, settlement)
    y = normalize_yield(yield_input)

    risk = risk_stats_decimal(settle, schedule.cashflows, y, terms.day_count, terms.compounding)
    return _result(risk, accrued, y, schedule.cashflows, settle, terms.day_count, terms.compounding)


def yield_from_schedule(
    terms: InstrumentTerms,
    settlement: Optional[SettlementInputs],
    target_price: float,
    clean_target: bool = False,
) -> ValuationResult:
    """
    Solve for the yield reproducing target_price. The target is a dirty
    price unless clean_target is set, in which case accrued is added first.
    """
    schedule, settle, accrued = _schedule_context(terms, settlement)

    target = _coerce_target(target_price)
    if clean_target:
        target = target + accrued

    sol = ytm_from_price(settle, schedule.cashflows, target, terms.day_count, terms.compounding)
    risk = risk_stats_decimal(settle, schedule.cashflows, sol.ytm, terms.day_count, terms.compounding)
    return _result(
        risk, accrued, sol.ytm, schedule.cashflows, settle, terms.day_count, terms.compounding,
        converged=sol.converged, iterations=sol.iterations,
    )


def _direct_settlement(settle: Optional[DateLike]) -> pd.Timestamp:
    return normalize(settle or utc_today())


def price_from_cashflows(
    settle: Optional[DateLike],
    cashflows: Iterable,
    yield_input: float,
    day_count: Union[str, DayCount] = DEFAULT_DAY_COUNT,
    compounding: Union[str, Compounding] = DEFAULT_COMPOUNDING,
) -> ValuationResult:
    settle = _direct_settlement(settle)
    day_count = DayCount.parse(day_count)
    compounding = Compounding.parse(compounding)
    flows = _require_cashflows(cashflows)
    y = normalize_yield(yield_input)

    risk = risk_stats_decimal(settle, flows, y, day_count, compounding)
    return _result(risk, 0.0, y, flows, settle, day_count, compounding)


def yield_from_cashflows(
    settle: Optional[DateLike],
    cashflows: Iterable,
    target_price: float,
    day_count: Union[str, DayCount] = DEFAULT_DAY_COUNT,
    compounding: Union[str, Compounding] = DEFAULT_COMPOUNDING,
) -> ValuationResult:
    settle = _direct_settlement(settle)
    day_count = DayCount.parse(day_count)
    compounding = Compounding.parse(compounding)
    flows = _require_cashflows(cashflows)

    sol = ytm_from_price(settle, flows, _coerce_target(target_price), day_count, compounding)
    risk = risk_stats_decimal(settle, flows, sol.ytm, day_count, compounding)
    return _result(
        risk, 0.0, sol.ytm, flows, settle, day_count, compounding,
        converged=sol.converged, iterations=sol.iterations,
    )
