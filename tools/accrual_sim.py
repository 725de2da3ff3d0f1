#!/usr/bin/env python3
"""Offline accrual demo: one staker, a funded reserve, and a simulated clock.

Example:
    python tools/accrual_sim.py --stake 5000 --days 365 --rate-bps 1000 --attest
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from yieldledger import AccrualLedger, LedgerConfig, load_config
from yieldledger.state import Token, compute_state_root

LEDGER = "0x" + "1e" * 20
OPERATOR = "0x" + "0a" * 20
USER = "0x" + "b0" * 20
DAY = 86_400


class SimClock:
    def __init__(self, start: int) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Simulate reward accrual for a single staker.")
    ap.add_argument("--config", type=Path, help="YAML ledger config (defaults to built-in addresses)")
    ap.add_argument("--stake", type=int, default=1000, help="whole tokens to stake")
    ap.add_argument("--days", type=int, default=365)
    ap.add_argument("--rate-bps", type=int, default=1000)
    ap.add_argument("--fund", type=int, default=1_000_000, help="whole reward tokens to fund")
    ap.add_argument("--attest", action="store_true", help="attest activity before claiming")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(name)s %(message)s")

    if args.config is not None:
        config = load_config(args.config)
    else:
        config = LedgerConfig(ledger_address=LEDGER, operator=OPERATOR, base_rate_annual_bps=args.rate_bps)

    stake_token = Token("STAKE", decimals=18)
    reward_token = Token("REWARD", decimals=18)
    unit = stake_token.unit
    clock = SimClock(1_700_000_000)
    ledger = AccrualLedger(config, stake_token, reward_token, clock=clock)

    reward_token.mint(config.operator, args.fund * unit)
    reward_token.approve(config.operator, ledger.address, args.fund * unit)
    ledger.fund_rewards(config.operator, args.fund * unit)

    stake_token.mint(USER, args.stake * unit)
    stake_token.approve(USER, ledger.address, args.stake * unit)
    ledger.deposit(USER, args.stake * unit)
    print(f"[accrual-sim] staked={args.stake} bonus_bps={ledger.bonus_bps(USER)}")

    clock.now += args.days * DAY
    if args.attest:
        score = ledger.attest_activity(USER)
        print(f"[accrual-sim] attested time_score={score.time_score} bonus_bps={ledger.bonus_bps(USER)}")

    preview = ledger.preview_available(USER)
    paid = ledger.claim(USER)
    print(f"[accrual-sim] preview={preview / unit:.6f} paid={paid / unit:.6f}")
    print(f"[accrual-sim] reserve={ledger.reward_reserve() / unit:.6f}")
    print(f"[accrual-sim] state_root={compute_state_root(ledger.snapshot())}")
    if preview != paid:
        print("[accrual-sim] FAIL: preview does not match payout")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
