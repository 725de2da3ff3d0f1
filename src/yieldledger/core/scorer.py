"""
Activity scorer: per-user (time_score, balance_score) store.

Reads are open; every write must come from the single authorized caller
(the ledger's own address). Scores are recomputed from the tier tables when
the ledger signals a triggering event; nothing here runs on a timer.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Mapping

from .accrual.errors import UnauthorizedError, ValidationError
from .accrual.tiers import balance_tier_score, time_tier_score
from .accrual.types import ActivityScore
from ..state.canonical import canonical_address


class ActivityScorer:
    def __init__(self, authorized_caller: str) -> None:
        try:
            self._authorized = canonical_address(authorized_caller, name="authorized_caller")
        except (TypeError, ValueError) as exc:
            raise ValidationError(str(exc)) from exc
        self._scores: Dict[str, ActivityScore] = {}

    @property
    def authorized_caller(self) -> str:
        return self._authorized

    def get(self, user: str) -> ActivityScore:
        """Scores for *user*; an untouched user scores (0, 0)."""
        return self._scores.get(canonical_address(user, name="user"), ActivityScore())

    def get_all(self) -> Mapping[str, ActivityScore]:
        return dict(self._scores)

    def set(self, caller: str, user: str, score: ActivityScore) -> None:
        self._require_authorized(caller)
        self._scores[canonical_address(user, name="user")] = score

    def preview_time_score(self, user: str, stake_start_time: int, now: int) -> ActivityScore:
        if stake_start_time == 0:
            raise ValidationError("no active position to measure")
        if now < stake_start_time:
            raise ValidationError(f"now {now} precedes stake_start_time {stake_start_time}")
        return replace(self.get(user), time_score=time_tier_score(now - stake_start_time))

    def preview_balance_score(self, user: str, staked_balance: int, unit: int = 1) -> ActivityScore:
        return replace(self.get(user), balance_score=balance_tier_score(staked_balance, unit))

    def _require_authorized(self, caller: str) -> None:
        try:
            ok = canonical_address(caller, name="caller") == self._authorized
        except (TypeError, ValueError):
            ok = False
        if not ok:
            raise UnauthorizedError(f"caller {caller!r} may not update activity scores")
