"""State transition functions for the accrual engine.

Each function takes frozen records and returns new ones; nothing here
mutates or performs I/O. The ledger shell composes them in a fixed order:

    refresh_index -> settle_base -> settle_bonus -> operation effect

`settle_base` must see a `GlobalState` that was refreshed to the same `now`
that `settle_bonus` uses; `project_available` follows the same path without
returning the new records.
"""

from __future__ import annotations

from dataclasses import replace

from .math import base_owed, bonus_owed, index_delta
from .types import GlobalState, UserAccount


def refresh_index(state: GlobalState, now: int) -> GlobalState:
    """Advance the reward-per-token index to *now*.

    With nothing staked the index is frozen but `last_update_time` still
    moves, so the empty interval is never credited retroactively.
    """
    if now < state.last_update_time:
        raise ValueError(f"now {now} precedes last_update_time {state.last_update_time}")
    if state.total_staked == 0:
        return replace(state, last_update_time=now)
    elapsed = now - state.last_update_time
    return replace(
        state,
        reward_per_token_index=state.reward_per_token_index + index_delta(state.base_rate_annual_bps, elapsed),
        last_update_time=now,
    )


def settle_base(state: GlobalState, account: UserAccount) -> UserAccount:
    owed = base_owed(account.staked_balance, state.reward_per_token_index, account.reward_per_token_paid)
    return replace(
        account,
        accrued_rewards=account.accrued_rewards + owed,
        reward_per_token_paid=state.reward_per_token_index,
    )


def settle_bonus(account: UserAccount, bonus_bps: int, now: int) -> UserAccount:
    """Integrate the bonus rate over the time since the user's bonus checkpoint.

    A flat position (or one never checkpointed) only records *now* as the
    new checkpoint. A zero bonus rate still advances the checkpoint so a
    later non-zero rate is not applied to time already spent at zero.
    """
    if account.staked_balance == 0 or account.bonus_checkpoint_time == 0:
        return replace(account, bonus_checkpoint_time=now)
    if now < account.bonus_checkpoint_time:
        raise ValueError(f"now {now} precedes bonus_checkpoint_time {account.bonus_checkpoint_time}")
    elapsed = now - account.bonus_checkpoint_time
    if elapsed == 0:
        return account
    if bonus_bps == 0:
        return replace(account, bonus_checkpoint_time=now)
    return replace(
        account,
        accrued_rewards=account.accrued_rewards + bonus_owed(account.staked_balance, bonus_bps, elapsed),
        bonus_checkpoint_time=now,
    )


def settle(state: GlobalState, account: UserAccount, bonus_bps: int, now: int) -> tuple[GlobalState, UserAccount]:
    """Refresh the index, then settle base and bonus for one account."""
    refreshed = refresh_index(state, now)
    settled = settle_bonus(settle_base(refreshed, account), bonus_bps, now)
    return refreshed, settled


def project_available(state: GlobalState, account: UserAccount, bonus_bps: int, now: int) -> int:
    """Claimable rewards at *now*, computed with the same path as `settle`."""
    _state, settled = settle(state, account, bonus_bps, now)
    return settled.accrued_rewards


def apply_deposit(state: GlobalState, account: UserAccount, amount: int, now: int) -> tuple[GlobalState, UserAccount]:
    """Add *amount* to a settled account; opening a flat position stamps `stake_start_time`."""
    opened = account.staked_balance == 0
    return (
        replace(state, total_staked=state.total_staked + amount),
        replace(
            account,
            staked_balance=account.staked_balance + amount,
            stake_start_time=now if opened else account.stake_start_time,
        ),
    )


def apply_withdraw(state: GlobalState, account: UserAccount, amount: int) -> tuple[GlobalState, UserAccount]:
    """Remove *amount* from a settled account; closing the position clears `stake_start_time`."""
    remaining = account.staked_balance - amount
    return (
        replace(state, total_staked=state.total_staked - amount),
        replace(
            account,
            staked_balance=remaining,
            stake_start_time=0 if remaining == 0 else account.stake_start_time,
        ),
    )


def apply_claim(account: UserAccount) -> UserAccount:
    return replace(account, accrued_rewards=0)
