"""Tests for yieldledger/core/scorer.py: restricted-caller score store."""

from __future__ import annotations

import pytest

from yieldledger.core.accrual.errors import UnauthorizedError, ValidationError
from yieldledger.core.accrual.types import ActivityScore
from yieldledger.core.scorer import ActivityScorer

LEDGER = "0x" + "1e" * 20
USER = "0x" + "b0" * 20
MALLORY = "0x" + "ee" * 20
UNIT = 10**18


def test_unknown_user_scores_zero() -> None:
    s = ActivityScorer(LEDGER)
    assert s.get(USER) == ActivityScore(0, 0)


def test_authorized_caller_is_canonical() -> None:
    s = ActivityScorer(LEDGER.upper().replace("0X", "0x"))
    assert s.authorized_caller == LEDGER


def test_rejects_zero_address_as_authority() -> None:
    with pytest.raises(ValidationError):
        ActivityScorer("0x" + "00" * 20)


def test_set_requires_authorized_caller() -> None:
    s = ActivityScorer(LEDGER)
    with pytest.raises(UnauthorizedError):
        s.set(MALLORY, USER, ActivityScore(1000, 2000))
    assert s.get(USER) == ActivityScore(0, 0)


def test_malformed_caller_is_unauthorized() -> None:
    s = ActivityScorer(LEDGER)
    with pytest.raises(UnauthorizedError):
        s.set("not-an-address", USER, ActivityScore(0, 100))


def test_balance_score_preview_then_set() -> None:
    s = ActivityScorer(LEDGER)
    out = s.preview_balance_score(USER, 20_000 * UNIT, UNIT)
    assert out == ActivityScore(time_score=0, balance_score=500)
    s.set(LEDGER, USER, out)
    assert s.get(USER) == out


def test_time_score_preview_keeps_balance_score() -> None:
    s = ActivityScorer(LEDGER)
    s.set(LEDGER, USER, s.preview_balance_score(USER, 5000, 1))
    out = s.preview_time_score(USER, stake_start_time=1_000, now=1_000 + 15_770_000)
    assert out == ActivityScore(time_score=250, balance_score=100)


def test_time_score_requires_position() -> None:
    s = ActivityScorer(LEDGER)
    with pytest.raises(ValidationError):
        s.preview_time_score(USER, stake_start_time=0, now=10)


def test_time_score_rejects_start_in_future() -> None:
    s = ActivityScorer(LEDGER)
    with pytest.raises(ValidationError):
        s.preview_time_score(USER, stake_start_time=100, now=99)


def test_preview_does_not_store() -> None:
    s = ActivityScorer(LEDGER)
    s.preview_balance_score(USER, 100_000, 1)
    assert s.get(USER) == ActivityScore(0, 0)


def test_get_all_is_a_copy() -> None:
    s = ActivityScorer(LEDGER)
    s.set(LEDGER, USER, ActivityScore(0, 100))
    snapshot = s.get_all()
    snapshot.clear()  # type: ignore[attr-defined]
    assert s.get(USER).balance_score == 100
