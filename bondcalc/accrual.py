from __future__ import annotations

import math
from typing import Iterable, Optional, Tuple, Union

import pandas as pd

from .bonds import Schedule
from .config import ROUND_DP
from .conventions import DayCount
from .utils import DateLike, normalize, yearfrac


def adjacent_coupons(
    coupon_dates: Iterable[DateLike],
    settle: DateLike,
) -> Tuple[Optional[pd.Timestamp], Optional[pd.Timestamp]]:
    """
    (last, next): latest coupon date <= settle and earliest coupon date > settle.
    Either side is None when the settlement is outside the schedule.
    """
    settle = normalize(settle)
    last: Optional[pd.Timestamp] = None
    nxt: Optional[pd.Timestamp] = None

    for d in sorted(normalize(d) for d in coupon_dates):
        if d <= settle:
            last = d
        else:
            nxt = d
            break
    return last, nxt


def coupon_for_period(schedule: Schedule, next_coupon: Optional[DateLike]) -> float:
    """Coupon of the period ending on next_coupon, else the first coupon."""
    if next_coupon is not None:
        end = normalize(next_coupon)
        for p in schedule.periods:
            if p.end == end:
                return p.coupon_amount
    return schedule.first_coupon_amount


def accrued_interest(
    day_count: Union[str, DayCount],
    last_coupon: Optional[DateLike],
    settle: DateLike,
    next_coupon: Optional[DateLike],
    coupon_amount: float,
) -> float:
    """
    Accrued interest in currency units (same units as coupon_amount).
    Zero outside a coupon period, on the coupon date itself, and for a
    non-finite coupon.
    """
    if last_coupon is None or next_coupon is None:
        return 0.0
    try:
        coupon_amount = float(coupon_amount)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(coupon_amount):
        return 0.0

    period = yearfrac(last_coupon, next_coupon, day_count)
    if period <= 0:
        return 0.0

    elapsed = yearfrac(last_coupon, settle, day_count)
    if elapsed <= 0:
        return 0.0

    return round(coupon_amount * (elapsed / period), ROUND_DP)
