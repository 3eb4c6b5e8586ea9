from __future__ import annotations

from typing import Iterable, Sequence, Union

import pandas as pd

from .config import BP, DEFAULT_COMPOUNDING, DEFAULT_DAY_COUNT, ROUND_DP
from .conventions import Compounding, DayCount
from .pricing import eligible_cashflows, normalize_yield
from .risk import risk_stats_decimal
from .utils import DateLike, normalize


def run_yield_scenarios(
    settle: DateLike,
    cashflows: Iterable,
    yield_input: float,
    day_count: Union[str, DayCount] = DEFAULT_DAY_COUNT,
    compounding: Union[str, Compounding] = DEFAULT_COMPOUNDING,
    shifts_bp: Sequence[float] = (-50, -25, 25, 50),
) -> pd.DataFrame:
    """
    Reprice under parallel yield shifts.

    One row per shift with the shocked yield, price, PnL vs. the base price
    and the duration+convexity estimate of that PnL:
      approx = -D_mod * P * dy + 0.5 * C * P * dy^2
    """
    settle = normalize(settle)
    day_count = DayCount.parse(day_count)
    compounding = Compounding.parse(compounding)
    y = normalize_yield(yield_input)
    flows = eligible_cashflows(settle, cashflows)

    base = risk_stats_decimal(settle, flows, y, day_count, compounding)

    rows = []
    for bp in shifts_bp:
        dy = bp * BP
        shocked = risk_stats_decimal(settle, flows, y + dy, day_count, compounding)
        approx = -base.modified_duration * base.price * dy + 0.5 * base.convexity * base.price * dy ** 2
        rows.append(
            {
                "scenario": f"PAR_{bp:+g}bp",
                "shift_bp": bp,
                "yield": round(y + dy, ROUND_DP),
                "base": base.price,
                "price": shocked.price,
                "pnl": round(shocked.price - base.price, ROUND_DP),
                "approx_pnl": round(approx, ROUND_DP),
            }
        )

    out = pd.DataFrame(rows, columns=["scenario", "shift_bp", "yield", "base", "price", "pnl", "approx_pnl"])
    out["approx_error"] = out["pnl"] - out["approx_pnl"]
    return out.sort_values("shift_bp").reset_index(drop=True)
