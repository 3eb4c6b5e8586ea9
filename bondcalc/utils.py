from __future__ import annotations

import datetime as dt
import re
from typing import Optional, Union

import numpy as np
import pandas as pd

from .config import DEFAULT_BUSINESS_ROLL, DEFAULT_SETTLEMENT_LAG
from .conventions import BusinessDayRoll, DayCount
from .errors import InvalidDate

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

DateLike = Union[str, dt.date, dt.datetime, np.datetime64, pd.Timestamp]


def normalize(value: DateLike) -> pd.Timestamp:
    """
    Canonical calendar date: tz-naive pd.Timestamp at midnight.

    Timezone and time-of-day components are dropped, not converted, so
    "2024-03-01T23:30:00-05:00" is 2024-03-01.
    """
    if value is None:
        raise InvalidDate("Date value is required")

    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidDate("Date value is required")
        m = _ISO_DATE.match(text)
        if m:
            y, mo, d = (int(g) for g in m.groups())
            try:
                return pd.Timestamp(year=y, month=mo, day=d)
            except ValueError as exc:
                raise InvalidDate(f"Invalid date value: {value!r}") from exc
        value = text
    elif isinstance(value, (bool, int, float, np.number)):
        # pd.Timestamp reads bare numbers as epoch nanoseconds
        raise InvalidDate(f"Invalid date value: {value!r}")

    try:
        ts = pd.Timestamp(value)
    except (ValueError, TypeError, OverflowError) as exc:
        raise InvalidDate(f"Invalid date value: {value!r}") from exc

    if pd.isna(ts):
        raise InvalidDate(f"Invalid date value: {value!r}")

    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.normalize()


def utc_today() -> pd.Timestamp:
    """Current calendar date in UTC."""
    return normalize(pd.Timestamp.now(tz="UTC"))


def to_iso(value: DateLike) -> str:
    return normalize(value).strftime("%Y-%m-%d")


def compare(a: DateLike, b: DateLike) -> int:
    a, b = normalize(a), normalize(b)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def days_between(start: DateLike, end: DateLike) -> int:
    return (normalize(end) - normalize(start)).days


def add_days(value: DateLike, n: int) -> pd.Timestamp:
    return normalize(value) + pd.Timedelta(days=int(n))


def add_months(value: DateLike, n: int, anchor_day: Optional[int] = None) -> pd.Timestamp:
    """
    Shift by n calendar months, keeping anchor_day (default: the source day)
    and clamping to the last day of the target month.

    add_months("2024-01-31", 1) -> 2024-02-29
    add_months("2024-02-29", 1, anchor_day=31) -> 2024-03-31
    """
    d = normalize(value)
    day = d.day if anchor_day is None else int(anchor_day)

    first = d.replace(day=1) + pd.DateOffset(months=int(n))
    return first.replace(day=max(1, min(day, first.days_in_month)))


def end_of_month(value: DateLike) -> pd.Timestamp:
    return normalize(value) + pd.offsets.MonthEnd(0)


def is_weekend(value: DateLike) -> bool:
    return normalize(value).dayofweek >= 5


def next_business_day(value: DateLike, direction: int = 1) -> pd.Timestamp:
    """Nearest weekday strictly after (direction >= 0) or before the date."""
    step = pd.Timedelta(days=1 if direction >= 0 else -1)
    d = normalize(value) + step
    while d.dayofweek >= 5:
        d = d + step
    return d


def previous_business_day(value: DateLike) -> pd.Timestamp:
    return next_business_day(value, -1)


def roll_business_day(value: DateLike, roll: Union[str, BusinessDayRoll] = DEFAULT_BUSINESS_ROLL) -> pd.Timestamp:
    """
    Map a weekend date to a business day. Weekdays are returned unchanged;
    there is no holiday calendar.
    """
    roll = BusinessDayRoll.parse(roll)
    d = normalize(value)
    if d.dayofweek < 5:
        return d

    if roll is BusinessDayRoll.PRECEDING:
        return previous_business_day(d)

    following = next_business_day(d)
    if roll is BusinessDayRoll.MODIFIED_FOLLOWING and following.month != d.month:
        return previous_business_day(d)
    return following


def yearfrac(start: DateLike, end: DateLike, convention: Union[str, DayCount]) -> float:
    """
    Year fraction between two dates under a day count convention.

    Supported:
    - ACT/365-Fixed
    - ACT/360
    - 30/360-US (US bond basis)

    Returns 0.0 when end <= start; accrual is never negative.
    """
    convention = DayCount.parse(convention)
    start = normalize(start)
    end = normalize(end)

    if end <= start:
        return 0.0

    if convention is DayCount.ACT_365F:
        return (end - start).days / 365.0

    if convention is DayCount.ACT_360:
        return (end - start).days / 360.0

    y1, m1, d1 = start.year, start.month, start.day
    y2, m2, d2 = end.year, end.month, end.day

    if d1 == 31:
        d1 = 30
    if d2 == 31 and d1 >= 30:
        d2 = 30

    return ((y2 - y1) * 360 + (m2 - m1) * 30 + (d2 - d1)) / 360.0


def settlement_date(
    settle: Optional[DateLike] = None,
    lag_days: int = DEFAULT_SETTLEMENT_LAG,
    roll: Union[str, BusinessDayRoll] = DEFAULT_BUSINESS_ROLL,
    today: Optional[DateLike] = None,
) -> pd.Timestamp:
    """
    Settlement date: trade date (default today, UTC) + lag_days calendar days,
    rolled onto a business day.
    """
    if settle is None or (isinstance(settle, str) and not settle.strip()):
        settle = today if today is not None else utc_today()
    base = normalize(settle)
    return roll_business_day(add_days(base, int(lag_days or 0)), roll)
