"""Pure arithmetic for the accrual engine.

Every function is stateless and operates on plain Python ints.

Rounding is explicit: all divisions use `//` (floor) and are applied in the
order written. Do not reassociate the divisions; the per-second rate is
floored *before* it is multiplied by elapsed time, and that truncation is
what keeps paid-out rewards at or below continuous accrual.
"""

from __future__ import annotations

PRECISION: int = 10**18
BPS_DENOMINATOR: int = 10_000
SECONDS_PER_YEAR: int = 31_536_000

MAX_BASE_RATE_BPS: int = 10_000


def require_uint(value: int, *, name: str) -> int:
    """Return *value* if it is a non-negative int (bools rejected)."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")
    return value


# -- Base rate (global index) ------------------------------------------------

def reward_per_token_per_second(base_rate_annual_bps: int) -> int:
    """Index increment per second: ``rate * PRECISION / 10000 / year``."""
    return base_rate_annual_bps * PRECISION // BPS_DENOMINATOR // SECONDS_PER_YEAR


def index_delta(base_rate_annual_bps: int, elapsed: int) -> int:
    """Index growth over *elapsed* seconds at the given annual rate."""
    return reward_per_token_per_second(base_rate_annual_bps) * elapsed


def base_owed(staked_balance: int, index: int, paid_index: int) -> int:
    """Base reward owed since the user's last checkpoint (floor)."""
    return staked_balance * (index - paid_index) // PRECISION


# -- Bonus rate (per-user) ---------------------------------------------------

def bonus_owed(staked_balance: int, bonus_bps: int, elapsed: int) -> int:
    """Bonus reward for *elapsed* seconds at *bonus_bps* (floor, fixed order)."""
    return staked_balance * bonus_bps * elapsed // BPS_DENOMINATOR // SECONDS_PER_YEAR
