"""Tier tables: step functions from elapsed time / staked size to score buckets.

Both tables have six tiers. A boundary value belongs to the higher tier:

  time (seconds since stake start)      score
    [0, 2_628_000)                       0
    [2_628_000, 15_768_000)              50
    [15_768_000, 31_536_000)             250
    [31_536_000, 63_072_000)             500
    [63_072_000, 94_608_000)             750
    [94_608_000, inf)                    1000

  balance (whole tokens)                score
    [0, 5_000)                           0
    [5_000, 10_000)                      100
    [10_000, 20_000)                     250
    [20_000, 50_000)                     500
    [50_000, 100_000)                    1000
    [100_000, inf)                       2000
"""

from __future__ import annotations

from .math import require_uint

TIME_TIER_BOUNDARIES: tuple[int, ...] = (
    2_628_000,
    15_768_000,
    31_536_000,
    63_072_000,
    94_608_000,
)
TIME_TIER_SCORES: tuple[int, ...] = (0, 50, 250, 500, 750, 1000)

BALANCE_TIER_THRESHOLDS: tuple[int, ...] = (5_000, 10_000, 20_000, 50_000, 100_000)
BALANCE_TIER_SCORES: tuple[int, ...] = (0, 100, 250, 500, 1000, 2000)

MAX_TIME_POINTS: int = TIME_TIER_SCORES[-1]
MAX_BAL_POINTS: int = BALANCE_TIER_SCORES[-1]


def _bucket(value: int, boundaries: tuple[int, ...], scores: tuple[int, ...]) -> int:
    tier = 0
    for boundary in boundaries:
        if value < boundary:
            break
        tier += 1
    return scores[tier]


def time_tier_score(elapsed_seconds: int) -> int:
    """Score for a position that has been open for *elapsed_seconds*."""
    require_uint(elapsed_seconds, name="elapsed_seconds")
    return _bucket(elapsed_seconds, TIME_TIER_BOUNDARIES, TIME_TIER_SCORES)


def balance_tier_score(staked_balance: int, unit: int = 1) -> int:
    """Score for *staked_balance* base units, with thresholds in whole tokens.

    `unit` is the number of base units per whole token (``10**decimals``).
    """
    require_uint(staked_balance, name="staked_balance")
    if not isinstance(unit, int) or isinstance(unit, bool) or unit <= 0:
        raise ValueError(f"unit must be a positive int: {unit!r}")
    thresholds = tuple(t * unit for t in BALANCE_TIER_THRESHOLDS)
    return _bucket(staked_balance, thresholds, BALANCE_TIER_SCORES)


def is_time_score(value: int) -> bool:
    return value in TIME_TIER_SCORES


def is_balance_score(value: int) -> bool:
    return value in BALANCE_TIER_SCORES
