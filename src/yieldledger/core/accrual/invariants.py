"""Invariant checkers for the accrual engine.

Account invariants are evaluated against the global state they were settled
under; ledger invariants span every account. Each `check_*` function returns
the list of violated invariant IDs (empty = all pass).
"""

from __future__ import annotations

from typing import Callable, Mapping

from .types import GlobalState, UserAccount


def inv_paid_not_ahead_of_index(g: GlobalState, a: UserAccount) -> bool:
    return a.reward_per_token_paid <= g.reward_per_token_index


def inv_start_zero_iff_flat(g: GlobalState, a: UserAccount) -> bool:
    return (a.stake_start_time == 0) == (a.staked_balance == 0)


def inv_start_not_from_future(g: GlobalState, a: UserAccount) -> bool:
    return a.stake_start_time <= g.last_update_time


def inv_checkpoint_not_from_future(g: GlobalState, a: UserAccount) -> bool:
    return a.bonus_checkpoint_time <= g.last_update_time


def inv_balance_within_total(g: GlobalState, a: UserAccount) -> bool:
    return a.staked_balance <= g.total_staked


ACCOUNT_INVARIANTS: dict[str, Callable[[GlobalState, UserAccount], bool]] = {
    "inv_paid_not_ahead_of_index": inv_paid_not_ahead_of_index,
    "inv_start_zero_iff_flat": inv_start_zero_iff_flat,
    "inv_start_not_from_future": inv_start_not_from_future,
    "inv_checkpoint_not_from_future": inv_checkpoint_not_from_future,
    "inv_balance_within_total": inv_balance_within_total,
}


def check_account(state: GlobalState, account: UserAccount) -> list[str]:
    """Return violated account invariant IDs."""
    return [
        inv_id
        for inv_id, check_fn in ACCOUNT_INVARIANTS.items()
        if not check_fn(state, account)
    ]


def check_global_transition(before: GlobalState, after: GlobalState) -> list[str]:
    """Invariants relating a pre-state to its post-state."""
    violations: list[str] = []
    if after.reward_per_token_index < before.reward_per_token_index:
        violations.append("inv_index_monotone")
    if after.last_update_time < before.last_update_time:
        violations.append("inv_time_monotone")
    return violations


def check_all(state: GlobalState, accounts: Mapping[str, UserAccount]) -> list[str]:
    """Return every violated invariant ID across the ledger (sorted, de-duplicated)."""
    violations: set[str] = set()
    if sum(a.staked_balance for a in accounts.values()) != state.total_staked:
        violations.add("inv_total_staked_is_sum")
    for account in accounts.values():
        violations.update(check_account(state, account))
    return sorted(violations)
