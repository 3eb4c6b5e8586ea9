from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, Union

import numpy as np
import pandas as pd

from .config import BP, DEFAULT_COMPOUNDING, DEFAULT_DAY_COUNT, ROUND_DP
from .conventions import Compounding, DayCount
from .pricing import times_and_amounts, discount_factors, eligible_cashflows, normalize_yield
from .utils import DateLike, normalize


@dataclass(frozen=True)
class RiskStats:
    price: float
    macaulay_duration: float
    modified_duration: float
    dv01: float
    convexity: float

    @classmethod
    def zero(cls) -> "RiskStats":
        return cls(0.0, 0.0, 0.0, 0.0, 0.0)

    def to_dict(self) -> dict:
        return asdict(self)


def risk_stats(
    settle: DateLike,
    cashflows: Iterable,
    yield_input: float,
    day_count: Union[str, DayCount] = DEFAULT_DAY_COUNT,
    compounding: Union[str, Compounding] = DEFAULT_COMPOUNDING,
) -> RiskStats:
    """
    Price, Macaulay/modified duration, DV01 and convexity from one pass over
    the discounted cashflows, so every figure agrees with the reported price.

    dv01 is the positive price change for a 1bp fall in yield.
    Nothing to value (no eligible cashflows, or zero price) gives all zeros.
    """
    return risk_stats_decimal(
        normalize(settle), cashflows, normalize_yield(yield_input), DayCount.parse(day_count), Compounding.parse(compounding),
    )


def risk_stats_decimal(
    settle: pd.Timestamp,
    cashflows: Iterable,
    y: float,
    day_count: DayCount,
    compounding: Compounding,
) -> RiskStats:
    """risk_stats for an already-normalized settlement, decimal yield and parsed conventions."""
    freq = compounding.frequency
    flows = eligible_cashflows(settle, cashflows)
    if not flows:
        return RiskStats.zero()

    taus, amounts = times_and_amounts(settle, flows, day_count)
    pvs = amounts * discount_factors(taus, y, freq)

    price = round(float(np.sum(pvs)), ROUND_DP)
    if price == 0.0:
        return RiskStats.zero()

    growth = 1.0 + y / freq
    macaulay = float(np.sum(taus * pvs)) / price
    modified = macaulay / growth
    convexity = float(np.sum(pvs * taus * (taus + 1.0 / freq))) / (price * growth ** 2)
    dv01 = modified * price * BP

    return RiskStats(
        price=price,
        macaulay_duration=round(macaulay, ROUND_DP),
        modified_duration=round(modified, ROUND_DP),
        dv01=round(dv01, ROUND_DP),
        convexity=round(convexity, ROUND_DP),
    )
