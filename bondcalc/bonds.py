from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

from .config import (
    DEFAULT_BUSINESS_ROLL,
    DEFAULT_COMPOUNDING,
    DEFAULT_DAY_COUNT,
    DEFAULT_FACE,
    DEFAULT_FREQUENCY_MONTHS,
    DEFAULT_REDEMPTION_PCT,
    MAX_SCHEDULE_PERIODS,
    ROUND_DP,
)
from .conventions import BusinessDayRoll, Compounding, DayCount
from .errors import ScheduleTooLong
from .utils import add_months, end_of_month, normalize, to_iso, yearfrac

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cashflow:
    date: pd.Timestamp
    amount: float

    def to_dict(self) -> dict:
        return {"date": to_iso(self.date), "amount": self.amount}


@dataclass(frozen=True)
class Period:
    start: pd.Timestamp
    end: pd.Timestamp
    accrual_factor: float
    coupon_amount: float
    redemption_amount: float
    total_amount: float


@dataclass(frozen=True)
class InstrumentTerms:
    """
    Fixed-coupon bond terms.

    coupon_rate is a decimal (0.075 = 7.5%); redemption_pct is a percent of face.
    With anchor_to_month_end every generated coupon date is the last day of
    its month.
    """
    issue_date: pd.Timestamp
    maturity_date: pd.Timestamp
    coupon_rate: float = 0.0
    face: float = DEFAULT_FACE
    frequency_months: int = DEFAULT_FREQUENCY_MONTHS
    redemption_pct: float = DEFAULT_REDEMPTION_PCT
    day_count: DayCount = DayCount.parse(DEFAULT_DAY_COUNT)
    business_roll: BusinessDayRoll = BusinessDayRoll.parse(DEFAULT_BUSINESS_ROLL)
    compounding: Compounding = Compounding.parse(DEFAULT_COMPOUNDING)
    anchor_to_month_end: bool = True

    def __post_init__(self):
        # frozen: coerce through object.__setattr__
        object.__setattr__(self, "issue_date", normalize(self.issue_date))
        object.__setattr__(self, "maturity_date", normalize(self.maturity_date))
        object.__setattr__(self, "day_count", DayCount.parse(self.day_count))
        object.__setattr__(self, "business_roll", BusinessDayRoll.parse(self.business_roll))
        object.__setattr__(self, "compounding", Compounding.parse(self.compounding))
        object.__setattr__(self, "face", float(self.face))
        object.__setattr__(self, "coupon_rate", float(self.coupon_rate))
        object.__setattr__(self, "redemption_pct", float(self.redemption_pct))

        if self.issue_date >= self.maturity_date:
            raise ValueError(f"issue_date must precede maturity_date: {self.issue_date=} {self.maturity_date=}")

        if int(self.frequency_months) != self.frequency_months or self.frequency_months < 1:
            raise ValueError(f"frequency_months must be a positive integer, got {self.frequency_months!r}")
        object.__setattr__(self, "frequency_months", int(self.frequency_months))


@dataclass(frozen=True)
class Schedule:
    periods: Tuple[Period, ...]
    cashflows: Tuple[Cashflow, ...]
    first_coupon_amount: float
    redemption_amount: float
    coupon_dates: Tuple[pd.Timestamp, ...] = field(default=())

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                (p.start, p.end, p.accrual_factor, p.coupon_amount, p.redemption_amount, p.total_amount)
                for p in self.periods
            ],
            columns=["start", "end", "accrual_factor", "coupon", "redemption", "total"],
        )


def coupon_dates(terms: InstrumentTerms) -> List[pd.Timestamp]:
    """
    Coupon dates strictly after issue, ending at (the month end of) maturity.

    Candidates step forward frequency_months at a time, anchored to the issue
    day-of-month so that a 31st issue keeps landing on month ends after a
    short February.
    """
    issue = terms.issue_date
    maturity = terms.maturity_date
    anchor_day = issue.day

    def adjust(d: pd.Timestamp) -> pd.Timestamp:
        return end_of_month(d) if terms.anchor_to_month_end else d

    final = adjust(maturity)

    dates: List[pd.Timestamp] = []
    cursor = issue
    while True:
        if len(dates) >= MAX_SCHEDULE_PERIODS:
            raise ScheduleTooLong(
                f"Schedule exceeds {MAX_SCHEDULE_PERIODS} periods "
                f"({to_iso(issue)} -> {to_iso(maturity)}, every {terms.frequency_months}M)"
            )

        cursor = add_months(cursor, terms.frequency_months, anchor_day)
        candidate = adjust(cursor)
        if candidate >= maturity:
            dates.append(final)
            break
        dates.append(candidate)

    return dates


def build_schedule(terms: InstrumentTerms) -> Schedule:
    dates = coupon_dates(terms)
    redemption = round(terms.face * terms.redemption_pct / 100.0, ROUND_DP)

    periods: List[Period] = []
    start = terms.issue_date
    for i, end in enumerate(dates):
        accrual = max(yearfrac(start, end, terms.day_count), 0.0)
        coupon = round(terms.face * terms.coupon_rate * accrual, ROUND_DP)
        red = redemption if i == len(dates) - 1 else 0.0
        periods.append(Period(start, end, accrual, coupon, red, round(coupon + red, ROUND_DP)))
        start = end

    cashflows = tuple(Cashflow(p.end, p.total_amount) for p in periods)
    logger.debug(
        "built %d periods %s -> %s (%s, every %dM)",
        len(periods), to_iso(terms.issue_date), to_iso(dates[-1]), terms.day_count.value, terms.frequency_months,
    )

    return Schedule(
        periods=tuple(periods),
        cashflows=cashflows,
        first_coupon_amount=periods[0].coupon_amount,
        redemption_amount=redemption,
        coupon_dates=tuple(dates),
    )


CashflowLike = Union[Cashflow, Mapping[str, Any], Tuple[Any, Any]]


def _field(row: Mapping[str, Any], name: str) -> Optional[Any]:
    for key in (name, name.capitalize()):
        if key in row and row[key] is not None:
            return row[key]
    return None


def coerce_cashflows(flows: Union[Iterable[CashflowLike], pd.DataFrame, None]) -> List[Cashflow]:
    """
    Normalize caller cashflows into Cashflow objects sorted by date.

    Accepts Cashflow objects, {"date": ..., "amount": ...} mappings
    ("Date"/"Amount" also accepted), (date, amount) pairs or a DataFrame with
    date/amount columns. Rows with a non-finite amount are dropped; rows with
    the same date are kept as separate flows.
    """
    if flows is None:
        return []

    if isinstance(flows, pd.DataFrame):
        cols = {c.lower(): c for c in flows.columns}
        if "date" not in cols or "amount" not in cols:
            raise ValueError(f"Cashflow frame needs date and amount columns, got {list(flows.columns)}")
        flows = list(zip(flows[cols["date"]], flows[cols["amount"]]))

    out: List[Cashflow] = []
    for flow in flows:
        if isinstance(flow, Cashflow):
            d, amt = flow.date, flow.amount
        elif isinstance(flow, Mapping):
            d, amt = _field(flow, "date"), _field(flow, "amount")
        else:
            d, amt = flow

        try:
            amt = float(amt)
        except (TypeError, ValueError):
            continue
        if not math.isfinite(amt):
            continue

        out.append(Cashflow(normalize(d), amt))

    return sorted(out, key=lambda cf: cf.date)
