"""
Ledger configuration.

`LedgerConfig` is validated on construction. It can be built directly,
loaded from a YAML mapping (`load_config`), or read from `YIELDLEDGER_*`
environment variables (`config_from_env`).

YAML layout:

    ledger_address: "0x..."
    operator: "0x..."
    base_rate_annual_bps: 1000
    max_base_rate_bps: 10000
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..core.accrual.errors import ValidationError
from ..core.accrual.math import MAX_BASE_RATE_BPS
from ..state.canonical import canonical_address


ENV_PREFIX = "YIELDLEDGER_"


@dataclass(frozen=True)
class LedgerConfig:
    # Custody address: holds staked and reward assets and is the only caller
    # allowed to write activity scores.
    ledger_address: str
    # Single privileged identity (rate changes, reward funding, pause).
    operator: str
    base_rate_annual_bps: int = 1000
    # Upper bound accepted by set_base_rate.
    max_base_rate_bps: int = MAX_BASE_RATE_BPS

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "ledger_address", canonical_address(self.ledger_address, name="ledger_address"))
            object.__setattr__(self, "operator", canonical_address(self.operator, name="operator"))
        except (TypeError, ValueError) as exc:
            raise ValidationError(str(exc)) from exc
        if self.ledger_address == self.operator:
            raise ValidationError("ledger_address and operator must differ")
        for name in ("base_rate_annual_bps", "max_base_rate_bps"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise ValidationError(f"{name} must be an int")
        if not (1 <= self.max_base_rate_bps <= MAX_BASE_RATE_BPS):
            raise ValidationError(f"max_base_rate_bps must be in [1, {MAX_BASE_RATE_BPS}]: {self.max_base_rate_bps}")
        if not (1 <= self.base_rate_annual_bps <= self.max_base_rate_bps):
            raise ValidationError(
                f"base_rate_annual_bps must be in [1, {self.max_base_rate_bps}]: {self.base_rate_annual_bps}"
            )


_FIELD_NAMES = tuple(f.name for f in fields(LedgerConfig))


def config_from_mapping(obj: Mapping[str, Any]) -> LedgerConfig:
    """Build a config from a plain mapping. Unknown keys are rejected."""
    if not isinstance(obj, Mapping):
        raise ValidationError("config must be a mapping")
    unknown = sorted(set(obj) - set(_FIELD_NAMES))
    if unknown:
        raise ValidationError(f"unknown config keys: {', '.join(unknown)}")
    for required in ("ledger_address", "operator"):
        if required not in obj:
            raise ValidationError(f"missing config key: {required}")
    return LedgerConfig(**dict(obj))


def load_config(path: str | Path) -> LedgerConfig:
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    return config_from_mapping(obj or {})


def _env_int(name: str, default: int, *, lo: int, hi: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return int(default)
    try:
        v = int(raw.strip())
    except ValueError:
        return int(default)
    if v < lo:
        return int(lo)
    if v > hi:
        return int(hi)
    return int(v)


def _env_str(name: str) -> str:
    raw = os.environ.get(name)
    v = (raw or "").strip()
    if not v:
        raise ValidationError(f"environment variable {name} is required")
    return v


def config_from_env() -> LedgerConfig:
    """Read `YIELDLEDGER_LEDGER_ADDRESS`, `YIELDLEDGER_OPERATOR` and the optional rate knobs."""
    max_rate = _env_int(ENV_PREFIX + "MAX_BASE_RATE_BPS", MAX_BASE_RATE_BPS, lo=1, hi=MAX_BASE_RATE_BPS)
    return LedgerConfig(
        ledger_address=_env_str(ENV_PREFIX + "LEDGER_ADDRESS"),
        operator=_env_str(ENV_PREFIX + "OPERATOR"),
        base_rate_annual_bps=_env_int(ENV_PREFIX + "BASE_RATE_BPS", 1000, lo=1, hi=max_rate),
        max_base_rate_bps=max_rate,
    )
