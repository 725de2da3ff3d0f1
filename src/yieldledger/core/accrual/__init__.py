"""`accrual`: pure-Python, integer-only reward accrual kernel.

- immutable records (frozen dataclasses),
- explicit floor rounding in a fixed division order,
- invariant checks the shell runs before committing.

Public API:
- `refresh_index`, `settle_base`, `settle_bonus`, `settle`, `project_available`
- `time_tier_score`, `balance_tier_score`, `compute_bonus_bps`
"""

from .bonus import MAX_TOTAL_BONUS_BPS, compute_bonus_bps
from .errors import (
    InsufficientReserveError,
    LedgerError,
    LedgerInvariantError,
    PausedError,
    ReentrancyError,
    StatePreconditionError,
    TransferError,
    UnauthorizedError,
    ValidationError,
)
from .invariants import check_account, check_all, check_global_transition
from .math import BPS_DENOMINATOR, PRECISION, SECONDS_PER_YEAR
from .tiers import balance_tier_score, time_tier_score
from .types import ActivityScore, Event, GlobalState, LedgerEvent, UserAccount
from .updates import project_available, refresh_index, settle, settle_base, settle_bonus

__all__ = [
    "MAX_TOTAL_BONUS_BPS",
    "BPS_DENOMINATOR",
    "PRECISION",
    "SECONDS_PER_YEAR",
    "compute_bonus_bps",
    "time_tier_score",
    "balance_tier_score",
    "refresh_index",
    "settle_base",
    "settle_bonus",
    "settle",
    "project_available",
    "check_account",
    "check_all",
    "check_global_transition",
    "ActivityScore",
    "Event",
    "GlobalState",
    "LedgerEvent",
    "UserAccount",
    "LedgerError",
    "ValidationError",
    "StatePreconditionError",
    "UnauthorizedError",
    "InsufficientReserveError",
    "PausedError",
    "ReentrancyError",
    "TransferError",
    "LedgerInvariantError",
]
