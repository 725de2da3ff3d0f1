"""Data types for the accrual engine.

All records are frozen dataclasses (immutable). The ledger shell replaces a
record wholesale when it commits an operation.

Units/conventions:
- amounts (`*_balance`, `*_rewards`, `total_staked`) are integer base units.
- `reward_per_token_*` values are scaled by `PRECISION` (1e18).
- `*_bps` rates are basis points (1/10_000).
- timestamps are integer seconds; 0 means "unset".
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique

from .math import require_uint
from .tiers import is_balance_score, is_time_score


@unique
class Event(Enum):
    """One member per observable state change."""
    DEPOSITED = "Deposited"
    WITHDRAWN = "Withdrawn"
    REWARDS_CLAIMED = "RewardsClaimed"
    BASE_RATE_UPDATED = "BaseRateUpdated"
    REWARDS_FUNDED = "RewardsFunded"
    TIME_SCORE_UPDATED = "TimeScoreUpdated"
    BALANCE_SCORE_UPDATED = "BalanceScoreUpdated"
    PAUSED = "Paused"
    UNPAUSED = "Unpaused"


@dataclass(frozen=True)
class GlobalState:
    """Ledger-wide aggregate (singleton)."""

    total_staked: int = 0
    reward_per_token_index: int = 0
    last_update_time: int = 0
    base_rate_annual_bps: int = 0

    def __post_init__(self) -> None:
        for name in ("total_staked", "reward_per_token_index", "last_update_time", "base_rate_annual_bps"):
            require_uint(getattr(self, name), name=name)


@dataclass(frozen=True)
class UserAccount:
    """Per-user accrual record. Created on first touch, never deleted."""

    staked_balance: int = 0
    reward_per_token_paid: int = 0
    accrued_rewards: int = 0
    bonus_checkpoint_time: int = 0
    stake_start_time: int = 0

    def __post_init__(self) -> None:
        for name in (
            "staked_balance",
            "reward_per_token_paid",
            "accrued_rewards",
            "bonus_checkpoint_time",
            "stake_start_time",
        ):
            require_uint(getattr(self, name), name=name)

    @property
    def is_active(self) -> bool:
        return self.staked_balance > 0


@dataclass(frozen=True)
class ActivityScore:
    """Per-user behavioral scores; each is one of its table's tier values."""

    time_score: int = 0
    balance_score: int = 0

    def __post_init__(self) -> None:
        require_uint(self.time_score, name="time_score")
        require_uint(self.balance_score, name="balance_score")
        if not is_time_score(self.time_score):
            raise ValueError(f"time_score is not a tier value: {self.time_score}")
        if not is_balance_score(self.balance_score):
            raise ValueError(f"balance_score is not a tier value: {self.balance_score}")


@dataclass(frozen=True)
class LedgerEvent:
    """Emitted after a successful commit, carrying the affected identity and resulting value."""

    event: Event
    account: str
    value: int
    timestamp: int
