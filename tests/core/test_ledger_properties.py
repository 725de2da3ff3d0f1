"""Property tests: random operation sequences against the accrual ledger.

Each generated sequence interleaves clock advances with deposits,
withdrawals, claims, attestations, rate changes and pauses. Rejected
operations are expected (bad amounts, empty claims, paused ledger); the
properties must hold after every step either way.
"""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import given, settings

from yieldledger.core.accrual.errors import LedgerError
from yieldledger.core.ledger import AccrualLedger
from yieldledger.integration.config import LedgerConfig
from yieldledger.state.tokens import Token

LEDGER = "0x" + "1e" * 20
OPERATOR = "0x" + "0a" * 20
USERS = ["0x" + "a1" * 20, "0x" + "b2" * 20, "0x" + "c3" * 20]
UNIT = 10**18
T0 = 1_700_000_000
FUNDING = 10**12 * UNIT

KINDS = ("deposit", "withdraw", "claim", "attest", "set_rate", "pause", "unpause")


class _Clock:
    def __init__(self) -> None:
        self.now = T0

    def __call__(self) -> int:
        return self.now


def step_strategy() -> st.SearchStrategy:
    return st.tuples(
        st.sampled_from(KINDS),
        st.integers(min_value=0, max_value=len(USERS) - 1),
        st.integers(min_value=0, max_value=200_000 * UNIT),
        st.integers(min_value=0, max_value=90 * 86_400),
    )


def _build() -> tuple[AccrualLedger, Token, _Clock]:
    clock = _Clock()
    staking = Token("STAKE", 18)
    reward = Token("REWARD", 18)
    ledger = AccrualLedger(LedgerConfig(LEDGER, OPERATOR), staking, reward, clock=clock)
    reward.mint(OPERATOR, FUNDING)
    reward.approve(OPERATOR, LEDGER, FUNDING)
    ledger.fund_rewards(OPERATOR, FUNDING)
    for user in USERS:
        staking.mint(user, 10**6 * UNIT)
        staking.approve(user, LEDGER, 10**6 * UNIT)
    return ledger, staking, clock


def _apply(ledger: AccrualLedger, kind: str, user: str, amount: int) -> None:
    if kind == "deposit":
        ledger.deposit(user, amount)
    elif kind == "withdraw":
        ledger.withdraw(user, amount)
    elif kind == "claim":
        expected = ledger.preview_available(user)
        paid = ledger.claim(user)
        assert paid == expected
    elif kind == "attest":
        ledger.attest_activity(user)
    elif kind == "set_rate":
        ledger.set_base_rate(OPERATOR, amount % 12_000)
    elif kind == "pause":
        ledger.pause(OPERATOR)
    else:
        ledger.unpause(OPERATOR)


@settings(max_examples=50, deadline=None)
@given(st.lists(step_strategy(), min_size=1, max_size=40))
def test_random_sequences_keep_invariants(steps) -> None:
    ledger, staking, clock = _build()
    for kind, idx, amount, dt in steps:
        before = ledger.global_state()
        clock.now += dt
        try:
            _apply(ledger, kind, USERS[idx], amount)
        except LedgerError:
            assert ledger.global_state() == before

        after = ledger.global_state()
        assert ledger.check_invariants() == []
        assert after.reward_per_token_index >= before.reward_per_token_index
        assert after.last_update_time >= before.last_update_time
        assert ledger.total_funded - ledger.reward_reserve() == ledger.total_claimed
        assert staking.balance_of(LEDGER) == after.total_staked
        assert 0 <= ledger.bonus_bps(USERS[idx]) <= 500


@settings(max_examples=50, deadline=None)
@given(
    st.lists(step_strategy(), min_size=1, max_size=20),
    st.integers(min_value=0, max_value=5 * 31_536_000),
)
def test_preview_is_pure_and_monotone_in_time(steps, horizon) -> None:
    ledger, _staking, clock = _build()
    for kind, idx, amount, dt in steps:
        clock.now += dt
        try:
            _apply(ledger, kind, USERS[idx], amount)
        except LedgerError:
            pass

    snap = ledger.snapshot()
    for user in USERS:
        now_value = ledger.preview_available(user)
        assert ledger.preview_available(user) == now_value
        assert ledger.preview_available(user, clock.now + horizon) >= now_value
    assert ledger.snapshot() == snap
