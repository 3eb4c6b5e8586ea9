"""
Bond Valuation Engine

Modules:
- utils: calendar arithmetic, business-day rolling, day counts, settlement
- bonds: instrument terms + coupon schedule construction
- pricing: price from yield + yield-from-price solvers
- risk: duration / DV01 / convexity
- accrual: accrued interest between coupons
- engine: schedule and explicit-cashflow valuation entry points
- scenarios: parallel yield-shift scenario runner

The request layer should import from this package.
"""
from .bonds import Cashflow, InstrumentTerms, Period, Schedule, build_schedule, coerce_cashflows
from .conventions import BusinessDayRoll, Compounding, DayCount
from .engine import (
    SettlementInputs,
    ValuationResult,
    price_from_cashflows,
    price_from_schedule,
    yield_from_cashflows,
    yield_from_schedule,
)
from .errors import (
    BondCalcError,
    EmptyCashflowSet,
    InvalidDate,
    InvalidTargetPrice,
    InvalidYield,
    ScheduleTooLong,
    UnsupportedConvention,
)
from .pricing import YieldSolution, price_from_yield, ytm_from_price
from .risk import RiskStats, risk_stats

__version__ = "0.1.0"
