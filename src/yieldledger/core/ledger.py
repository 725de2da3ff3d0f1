"""
Accrual ledger (imperative shell around the `accrual` kernel).

Every mutating operation follows the same path:

1. gate and argument checks (nothing staged yet),
2. refresh the global index to `now`, settle the caller's base and bonus
   rewards against their *pre-operation* position,
3. stage the operation's own effect and any score re-bucketing,
4. check invariants on the staged records,
5. move funds through the token collaborator,
6. commit the staged records, then publish events.

Any failure before step 6 raises and leaves the ledger untouched. A single
re-entrant lock serializes operations across threads; a nested call from
the same thread (e.g. a token hook calling back in) is rejected. The pause
flag is re-read under the lock, so no user operation commits after a pause.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterator, List, Mapping, Optional

from .accrual.bonus import compute_bonus_bps
from .accrual.errors import (
    InsufficientReserveError,
    LedgerInvariantError,
    ReentrancyError,
    StatePreconditionError,
    TransferError,
    ValidationError,
)
from .accrual.invariants import check_account, check_all, check_global_transition
from .accrual.state import LedgerSnapshot
from .accrual.types import ActivityScore, Event, GlobalState, LedgerEvent, UserAccount
from .accrual.updates import (
    apply_claim,
    apply_deposit,
    apply_withdraw,
    project_available,
    refresh_index,
    settle_base,
    settle_bonus,
)
from .scorer import ActivityScorer
from ..integration.config import LedgerConfig
from ..integration.gate import AccessGate
from ..state.canonical import canonical_address
from ..state.tokens import AssetTransfer

logger = logging.getLogger(__name__)

Clock = Callable[[], int]
Subscriber = Callable[[LedgerEvent], None]


def _wall_clock() -> int:
    return int(time.time())


def _identity(value: str, *, name: str) -> str:
    try:
        return canonical_address(value, name=name)
    except (TypeError, ValueError) as exc:
        raise ValidationError(str(exc)) from exc


def _positive_amount(amount: int) -> int:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise ValidationError("amount must be an int")
    if amount <= 0:
        raise ValidationError(f"amount must be positive: {amount}")
    return amount


@dataclass
class _Staged:
    """Records touched by one operation, committed together or not at all."""

    now: int
    state: GlobalState
    accounts: Dict[str, UserAccount] = field(default_factory=dict)
    scores: Dict[str, ActivityScore] = field(default_factory=dict)
    events: List[LedgerEvent] = field(default_factory=list)
    funded: int = 0
    claimed: int = 0

    def emit(self, event: Event, account: str, value: int) -> None:
        self.events.append(LedgerEvent(event=event, account=account, value=value, timestamp=self.now))


class AccrualLedger:
    def __init__(
        self,
        config: LedgerConfig,
        staking_token: AssetTransfer,
        reward_token: AssetTransfer,
        *,
        gate: Optional[AccessGate] = None,
        scorer: Optional[ActivityScorer] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        if staking_token is reward_token or staking_token.asset_id == reward_token.asset_id:
            raise ValidationError("staking and reward assets must differ")
        if staking_token.decimals != reward_token.decimals:
            raise ValidationError(
                f"asset decimals mismatch: staking={staking_token.decimals} reward={reward_token.decimals}"
            )
        self._config = config
        self._address = config.ledger_address
        self._staking = staking_token
        self._reward = reward_token
        self._unit = 10 ** staking_token.decimals
        self._gate = gate if gate is not None else AccessGate(config.operator)
        self._scorer = scorer if scorer is not None else ActivityScorer(self._address)
        if self._scorer.authorized_caller != self._address:
            raise ValidationError("activity scorer must authorize the ledger address")
        self._clock: Clock = clock if clock is not None else _wall_clock

        self._global = GlobalState(base_rate_annual_bps=config.base_rate_annual_bps)
        self._accounts: Dict[str, UserAccount] = {}
        self._total_funded = 0
        self._total_claimed = 0

        self._lock = threading.RLock()
        self._active_op: Optional[str] = None
        self._subscribers: List[Subscriber] = []
        self.events: List[LedgerEvent] = []

    @classmethod
    def from_snapshot(
        cls,
        config: LedgerConfig,
        staking_token: AssetTransfer,
        reward_token: AssetTransfer,
        snapshot: LedgerSnapshot,
        **kwargs,
    ) -> "AccrualLedger":
        """Rebuild a ledger from a snapshot; the snapshot must satisfy every invariant."""
        ledger = cls(config, staking_token, reward_token, **kwargs)
        accounts = {_identity(addr, name="account"): acct for addr, acct in snapshot.accounts.items()}
        violations = check_all(snapshot.global_state, accounts)
        if violations:
            raise LedgerInvariantError(violations)
        ledger._global = snapshot.global_state
        ledger._accounts = accounts
        for addr, score in snapshot.scores.items():
            ledger._scorer.set(ledger._address, addr, score)
        if snapshot.paused:
            ledger._gate.pause(ledger._gate.operator)
        ledger._total_funded = snapshot.total_funded
        ledger._total_claimed = snapshot.total_claimed
        return ledger

    # -- Read-only queries ---------------------------------------------------

    @property
    def address(self) -> str:
        return self._address

    @property
    def gate(self) -> AccessGate:
        return self._gate

    @property
    def scorer(self) -> ActivityScorer:
        return self._scorer

    @property
    def paused(self) -> bool:
        return self._gate.paused

    @property
    def total_funded(self) -> int:
        return self._total_funded

    @property
    def total_claimed(self) -> int:
        return self._total_claimed

    def global_state(self) -> GlobalState:
        return self._global

    def account(self, user: str) -> UserAccount:
        return self._accounts.get(_identity(user, name="user"), UserAccount())

    def accounts(self) -> Mapping[str, UserAccount]:
        return dict(self._accounts)

    def score(self, user: str) -> ActivityScore:
        return self._scorer.get(_identity(user, name="user"))

    def bonus_bps(self, user: str) -> int:
        score = self.score(user)
        return compute_bonus_bps(score.time_score, score.balance_score)

    def reward_reserve(self) -> int:
        return self._reward.balance_of(self._address)

    def preview_available(self, user: str, now: Optional[int] = None) -> int:
        """Rewards a claim at *now* would pay, computed without mutating anything."""
        user = _identity(user, name="user")
        with self._lock:
            now = self._read_clock() if now is None else now
            self._check_time(now)
            account = self._accounts.get(user, UserAccount())
            return project_available(self._global, account, self.bonus_bps(user), now)

    def snapshot(self) -> LedgerSnapshot:
        with self._lock:
            return LedgerSnapshot(
                global_state=self._global,
                accounts=dict(self._accounts),
                scores=dict(self._scorer.get_all()),
                paused=self._gate.paused,
                total_funded=self._total_funded,
                total_claimed=self._total_claimed,
            )

    def check_invariants(self) -> list[str]:
        with self._lock:
            return check_all(self._global, self._accounts)

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    # -- User operations -----------------------------------------------------

    def deposit(self, caller: str, amount: int) -> UserAccount:
        self._gate.require_not_paused()
        user = self._user(caller)
        amount = _positive_amount(amount)
        if self._staking.allowance(user, self._address) < amount:
            raise ValidationError("staking allowance below deposit amount")
        if self._staking.balance_of(user) < amount:
            raise ValidationError("staking balance below deposit amount")

        with self._operation("deposit", gated=True) as tx:
            account = self._settle(tx, user)
            tx.state, account = apply_deposit(tx.state, account, amount, tx.now)
            tx.accounts[user] = account
            self._rebucket_balance(tx, user, account)
            self._verify(tx)
            self._pull(self._staking, user, amount)
            tx.emit(Event.DEPOSITED, user, amount)
            self._commit(tx)
            logger.info("deposit %s amount=%d staked=%d", user, amount, account.staked_balance)
        self._publish(tx)
        return account

    def withdraw(self, caller: str, amount: int) -> UserAccount:
        self._gate.require_not_paused()
        user = self._user(caller)
        amount = _positive_amount(amount)

        with self._operation("withdraw", gated=True) as tx:
            current = self._accounts.get(user, UserAccount())
            if current.staked_balance == 0:
                raise StatePreconditionError("nothing staked to withdraw")
            if amount > current.staked_balance:
                raise ValidationError(f"amount {amount} exceeds staked balance {current.staked_balance}")
            account = self._settle(tx, user)
            tx.state, account = apply_withdraw(tx.state, account, amount)
            tx.accounts[user] = account
            self._rebucket_balance(tx, user, account)
            self._verify(tx)
            self._push(self._staking, user, amount)
            tx.emit(Event.WITHDRAWN, user, amount)
            self._commit(tx)
            logger.info("withdraw %s amount=%d staked=%d", user, amount, account.staked_balance)
        self._publish(tx)
        return account

    def claim(self, caller: str) -> int:
        self._gate.require_not_paused()
        user = self._user(caller)

        with self._operation("claim", gated=True) as tx:
            account = self._settle(tx, user)
            payout = account.accrued_rewards
            if payout == 0:
                raise StatePreconditionError("nothing to claim")
            reserve = self.reward_reserve()
            if reserve < payout:
                logger.warning("claim %s rejected: reserve=%d payout=%d", user, reserve, payout)
                raise InsufficientReserveError(requested=payout, available=reserve)
            tx.accounts[user] = apply_claim(account)
            tx.claimed = payout
            self._verify(tx)
            self._push(self._reward, user, payout)
            tx.emit(Event.REWARDS_CLAIMED, user, payout)
            self._commit(tx)
            logger.info("claim %s payout=%d", user, payout)
        self._publish(tx)
        return payout

    def attest_activity(self, caller: str) -> ActivityScore:
        """Re-bucket the caller's time tier after settling at the old bonus rate."""
        self._gate.require_not_paused()
        user = self._user(caller)

        with self._operation("attest_activity", gated=True) as tx:
            if self._accounts.get(user, UserAccount()).stake_start_time == 0:
                raise StatePreconditionError("no activity history to attest")
            account = self._settle(tx, user)
            tx.accounts[user] = account
            score = self._scorer.preview_time_score(user, account.stake_start_time, tx.now)
            tx.scores[user] = score
            tx.emit(Event.TIME_SCORE_UPDATED, user, score.time_score)
            self._verify(tx)
            self._commit(tx)
            logger.info("attest %s time_score=%d", user, score.time_score)
        self._publish(tx)
        return score

    # -- Privileged operations -----------------------------------------------

    def set_base_rate(self, caller: str, new_rate_bps: int) -> GlobalState:
        """Change the annual base rate after locking in accrual at the old rate."""
        self._gate.require_operator(caller)
        if not isinstance(new_rate_bps, int) or isinstance(new_rate_bps, bool):
            raise ValidationError("new_rate_bps must be an int")
        if not (0 < new_rate_bps <= self._config.max_base_rate_bps):
            raise ValidationError(f"new_rate_bps must be in [1, {self._config.max_base_rate_bps}]: {new_rate_bps}")

        with self._operation("set_base_rate") as tx:
            old_rate = tx.state.base_rate_annual_bps
            tx.state = replace(tx.state, base_rate_annual_bps=new_rate_bps)
            tx.emit(Event.BASE_RATE_UPDATED, self._gate.operator, new_rate_bps)
            self._verify(tx)
            self._commit(tx)
            logger.info("base rate %d -> %d bps", old_rate, new_rate_bps)
        self._publish(tx)
        return tx.state

    def fund_rewards(self, caller: str, amount: int) -> int:
        """Pull reward asset from the operator into the reserve. Returns the new reserve."""
        self._gate.require_operator(caller)
        funder = self._gate.operator
        amount = _positive_amount(amount)
        if self._reward.allowance(funder, self._address) < amount:
            raise ValidationError("reward allowance below funding amount")

        with self._operation("fund_rewards") as tx:
            tx.funded = amount
            self._pull(self._reward, funder, amount)
            tx.emit(Event.REWARDS_FUNDED, funder, amount)
            self._commit(tx)
            reserve = self.reward_reserve()
            logger.info("funded %d reward units, reserve=%d", amount, reserve)
        self._publish(tx)
        return reserve

    def pause(self, caller: str) -> None:
        with self._exclusive("pause"):
            tx = _Staged(now=self._read_clock(), state=self._global)
            if self._gate.pause(caller):
                tx.emit(Event.PAUSED, self._gate.operator, 1)
            self.events.extend(tx.events)
        self._publish(tx)

    def unpause(self, caller: str) -> None:
        with self._exclusive("unpause"):
            tx = _Staged(now=self._read_clock(), state=self._global)
            if self._gate.unpause(caller):
                tx.emit(Event.UNPAUSED, self._gate.operator, 0)
            self.events.extend(tx.events)
        self._publish(tx)

    # -- Internals -----------------------------------------------------------

    def _user(self, caller: str) -> str:
        user = _identity(caller, name="caller")
        if user == self._address:
            raise ValidationError("the ledger address cannot hold a position")
        return user

    def _read_clock(self) -> int:
        now = self._clock()
        if not isinstance(now, int) or isinstance(now, bool) or now < 0:
            raise ValidationError(f"clock returned an invalid timestamp: {now!r}")
        return now

    def _check_time(self, now: int) -> None:
        if not isinstance(now, int) or isinstance(now, bool) or now < 0:
            raise ValidationError(f"invalid timestamp: {now!r}")
        if now < self._global.last_update_time:
            raise ValidationError(f"timestamp {now} precedes last update {self._global.last_update_time}")

    @contextmanager
    def _exclusive(self, name: str) -> Iterator[None]:
        with self._lock:
            if self._active_op is not None:
                raise ReentrancyError(f"{name} called while {self._active_op} is in progress")
            self._active_op = name
            try:
                yield
            finally:
                self._active_op = None

    @contextmanager
    def _operation(self, name: str, *, gated: bool = False) -> Iterator[_Staged]:
        with self._exclusive(name):
            if gated:
                # Re-checked under the lock: a pause may have committed while we waited.
                self._gate.require_not_paused()
            now = self._read_clock()
            self._check_time(now)
            yield _Staged(now=now, state=refresh_index(self._global, now))

    def _settle(self, tx: _Staged, user: str) -> UserAccount:
        account = tx.accounts.get(user) or self._accounts.get(user, UserAccount())
        before = account.accrued_rewards
        account = settle_bonus(settle_base(tx.state, account), self.bonus_bps(user), tx.now)
        logger.debug("settled %s +%d (accrued=%d)", user, account.accrued_rewards - before, account.accrued_rewards)
        return account

    def _rebucket_balance(self, tx: _Staged, user: str, account: UserAccount) -> None:
        base = tx.scores.get(user) or self._scorer.get(user)
        rebucketed = self._scorer.preview_balance_score(user, account.staked_balance, self._unit)
        score = replace(base, balance_score=rebucketed.balance_score)
        tx.scores[user] = score
        tx.emit(Event.BALANCE_SCORE_UPDATED, user, score.balance_score)

    def _verify(self, tx: _Staged) -> None:
        violations = check_global_transition(self._global, tx.state)
        for account in tx.accounts.values():
            violations.extend(check_account(tx.state, account))
        if violations:
            raise LedgerInvariantError(sorted(set(violations)))

    def _pull(self, token: AssetTransfer, owner: str, amount: int) -> None:
        if not token.transfer_from(self._address, owner, self._address, amount):
            raise TransferError(f"{token.asset_id}: transfer_from {owner} of {amount} refused")

    def _push(self, token: AssetTransfer, recipient: str, amount: int) -> None:
        if not token.transfer(self._address, recipient, amount):
            raise TransferError(f"{token.asset_id}: transfer to {recipient} of {amount} refused")

    def _commit(self, tx: _Staged) -> None:
        self._global = tx.state
        self._accounts.update(tx.accounts)
        for user, score in tx.scores.items():
            self._scorer.set(self._address, user, score)
        self._total_funded += tx.funded
        self._total_claimed += tx.claimed
        self.events.extend(tx.events)

    def _publish(self, tx: _Staged) -> None:
        for event in tx.events:
            for callback in list(self._subscribers):
                try:
                    callback(event)
                except Exception:
                    # Already committed: subscriber errors are logged, never raised.
                    logger.exception("subscriber %r failed on %s", callback, event.event.value)
