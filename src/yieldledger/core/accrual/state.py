"""Snapshot construction and serialization for the accrual engine.

A `LedgerSnapshot` captures everything needed to rebuild a ledger: the
global record, every account, every score, and the reward bookkeeping
counters.

Round-trip property (tested): `snapshot_from_dict(snapshot_to_dict(s)) == s`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .types import ActivityScore, GlobalState, UserAccount

GLOBAL_VAR_NAMES: tuple[str, ...] = tuple(GlobalState.__dataclass_fields__)
ACCOUNT_VAR_NAMES: tuple[str, ...] = tuple(UserAccount.__dataclass_fields__)
SCORE_VAR_NAMES: tuple[str, ...] = tuple(ActivityScore.__dataclass_fields__)


@dataclass(frozen=True)
class LedgerSnapshot:
    global_state: GlobalState
    accounts: Mapping[str, UserAccount] = field(default_factory=dict)
    scores: Mapping[str, ActivityScore] = field(default_factory=dict)
    paused: bool = False
    total_funded: int = 0
    total_claimed: int = 0


def _int_record(cls: Any, names: tuple[str, ...], d: Mapping[str, Any], *, where: str) -> Any:
    kwargs: dict[str, int] = {}
    for name in names:
        val = d[name]
        if not isinstance(val, int) or isinstance(val, bool):
            raise TypeError(f"{where}.{name} must be int, got {type(val).__name__}")
        kwargs[name] = int(val)
    return cls(**kwargs)


def snapshot_to_dict(snapshot: LedgerSnapshot) -> dict[str, Any]:
    """Serialize to plain JSON-compatible types (accounts sorted by address)."""
    return {
        "global": {name: getattr(snapshot.global_state, name) for name in GLOBAL_VAR_NAMES},
        "accounts": {
            addr: {name: getattr(acct, name) for name in ACCOUNT_VAR_NAMES}
            for addr, acct in sorted(snapshot.accounts.items())
        },
        "scores": {
            addr: {name: getattr(score, name) for name in SCORE_VAR_NAMES}
            for addr, score in sorted(snapshot.scores.items())
        },
        "paused": snapshot.paused,
        "total_funded": snapshot.total_funded,
        "total_claimed": snapshot.total_claimed,
    }


def snapshot_from_dict(d: Mapping[str, Any]) -> LedgerSnapshot:
    """Deserialize a dict to a LedgerSnapshot. Raises KeyError on missing fields."""
    paused = d["paused"]
    if not isinstance(paused, bool):
        raise TypeError("paused must be bool")
    counters: dict[str, int] = {}
    for name in ("total_funded", "total_claimed"):
        val = d[name]
        if not isinstance(val, int) or isinstance(val, bool) or val < 0:
            raise TypeError(f"{name} must be a non-negative int")
        counters[name] = val
    return LedgerSnapshot(
        global_state=_int_record(GlobalState, GLOBAL_VAR_NAMES, d["global"], where="global"),
        accounts={
            addr: _int_record(UserAccount, ACCOUNT_VAR_NAMES, rec, where=f"accounts[{addr}]")
            for addr, rec in d["accounts"].items()
        },
        scores={
            addr: _int_record(ActivityScore, SCORE_VAR_NAMES, rec, where=f"scores[{addr}]")
            for addr, rec in d["scores"].items()
        },
        paused=paused,
        **counters,
    )
