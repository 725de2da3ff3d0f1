"""Tests for yieldledger/core/accrual/invariants.py."""

from yieldledger.core.accrual.invariants import (
    ACCOUNT_INVARIANTS,
    check_account,
    check_all,
    check_global_transition,
)
from yieldledger.core.accrual.types import GlobalState, UserAccount


def _g(**kw) -> GlobalState:
    base = dict(total_staked=100, reward_per_token_index=50, last_update_time=1000, base_rate_annual_bps=1000)
    base.update(kw)
    return GlobalState(**base)


def _a(**kw) -> UserAccount:
    base = dict(
        staked_balance=100,
        reward_per_token_paid=50,
        accrued_rewards=0,
        bonus_checkpoint_time=1000,
        stake_start_time=900,
    )
    base.update(kw)
    return UserAccount(**base)


def test_valid_account_passes() -> None:
    assert check_account(_g(), _a()) == []


def test_flat_account_passes() -> None:
    assert check_account(_g(), UserAccount()) == []


def test_paid_ahead_of_index() -> None:
    assert "inv_paid_not_ahead_of_index" in check_account(_g(), _a(reward_per_token_paid=51))


def test_start_without_balance() -> None:
    assert "inv_start_zero_iff_flat" in check_account(_g(), _a(staked_balance=0))


def test_balance_without_start() -> None:
    assert "inv_start_zero_iff_flat" in check_account(_g(), _a(stake_start_time=0))


def test_future_start_and_checkpoint() -> None:
    v = check_account(_g(), _a(stake_start_time=1001, bonus_checkpoint_time=1001))
    assert "inv_start_not_from_future" in v
    assert "inv_checkpoint_not_from_future" in v


def test_balance_above_total() -> None:
    assert "inv_balance_within_total" in check_account(_g(total_staked=99), _a())


def test_registry_ids_match_functions() -> None:
    for inv_id, fn in ACCOUNT_INVARIANTS.items():
        assert fn.__name__ == inv_id


def test_check_all_sum() -> None:
    accounts = {"a": _a(staked_balance=60), "b": _a(staked_balance=40)}
    assert check_all(_g(), accounts) == []
    accounts["b"] = _a(staked_balance=39)
    assert "inv_total_staked_is_sum" in check_all(_g(), accounts)


def test_global_transition_monotone() -> None:
    assert check_global_transition(_g(), _g(reward_per_token_index=60, last_update_time=2000)) == []
    v = check_global_transition(_g(), _g(reward_per_token_index=49, last_update_time=999))
    assert v == ["inv_index_monotone", "inv_time_monotone"]
