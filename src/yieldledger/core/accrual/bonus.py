"""Bonus calculator: maps (time_score, balance_score) to a capped bonus rate in bps."""

from __future__ import annotations

from .math import require_uint
from .tiers import MAX_BAL_POINTS, MAX_TIME_POINTS

MAX_TIME_BONUS_BPS: int = 200
MAX_BAL_BONUS_BPS: int = 300
MAX_TOTAL_BONUS_BPS: int = 500


def time_bonus_bps(time_score: int) -> int:
    return time_score * MAX_TIME_BONUS_BPS // MAX_TIME_POINTS


def balance_bonus_bps(balance_score: int) -> int:
    return balance_score * MAX_BAL_BONUS_BPS // MAX_BAL_POINTS


def compute_bonus_bps(time_score: int, balance_score: int) -> int:
    """Combined bonus rate, each component floored, total capped at 500 bps."""
    require_uint(time_score, name="time_score")
    require_uint(balance_score, name="balance_score")
    total = time_bonus_bps(time_score) + balance_bonus_bps(balance_score)
    return min(total, MAX_TOTAL_BONUS_BPS)
