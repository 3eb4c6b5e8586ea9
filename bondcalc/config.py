# Engine defaults and numerical constants.

from __future__ import annotations

DEFAULT_FACE = 100.0
DEFAULT_FREQUENCY_MONTHS = 6
DEFAULT_REDEMPTION_PCT = 100.0
DEFAULT_DAY_COUNT = "ACT/365-Fixed"
DEFAULT_BUSINESS_ROLL = "FOLLOWING"
DEFAULT_COMPOUNDING = "ANNUAL"
DEFAULT_SETTLEMENT_LAG = 0

ROUND_DP = 8
BP = 1e-4

# |y| above this is read as a percentage (7.5 -> 0.075)
YIELD_PERCENT_THRESHOLD = 1.5

# Newton yield solver
SOLVER_TOL = 1e-8
SOLVER_MAX_ITER = 100
SOLVER_BUMP = 1e-5
SOLVER_SEED_PREMIUM = 0.05
SOLVER_SEED_DISCOUNT = 0.02
SOLVER_FLAT_DERIVATIVE = 1e-10
SOLVER_FLAT_STEP = 0.01
SOLVER_YIELD_FLOOR = -0.99
SOLVER_RESET_YIELD = 0.0001

# bracketed cross-check solver
BRACKET_LOW = -0.99
BRACKET_HIGH = 10.0

MAX_SCHEDULE_PERIODS = 600
