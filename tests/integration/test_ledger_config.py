from __future__ import annotations

import pytest

from yieldledger.core.accrual.errors import ValidationError
from yieldledger.integration.config import (
    LedgerConfig,
    config_from_env,
    config_from_mapping,
    load_config,
)

LEDGER = "0x" + "1e" * 20
OPERATOR = "0x" + "0a" * 20


def test_defaults_and_canonical_addresses() -> None:
    cfg = LedgerConfig(LEDGER.upper().replace("0X", "0x"), OPERATOR)
    assert cfg.ledger_address == LEDGER
    assert cfg.base_rate_annual_bps == 1000
    assert cfg.max_base_rate_bps == 10_000


def test_ledger_and_operator_must_differ() -> None:
    with pytest.raises(ValidationError):
        LedgerConfig(LEDGER, LEDGER)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"base_rate_annual_bps": 0},
        {"base_rate_annual_bps": 10_001},
        {"base_rate_annual_bps": True},
        {"max_base_rate_bps": 0},
        {"max_base_rate_bps": 500, "base_rate_annual_bps": 600},
    ],
)
def test_rate_bounds(kwargs) -> None:
    with pytest.raises(ValidationError):
        LedgerConfig(LEDGER, OPERATOR, **kwargs)


def test_mapping_rejects_unknown_and_missing_keys() -> None:
    with pytest.raises(ValidationError, match="unknown config keys"):
        config_from_mapping({"ledger_address": LEDGER, "operator": OPERATOR, "fee_bps": 30})
    with pytest.raises(ValidationError, match="missing config key"):
        config_from_mapping({"ledger_address": LEDGER})
    with pytest.raises(ValidationError):
        config_from_mapping(["not", "a", "mapping"])  # type: ignore[arg-type]


def test_load_config_from_yaml(tmp_path) -> None:
    path = tmp_path / "ledger.yaml"
    path.write_text(
        f'ledger_address: "{LEDGER}"\noperator: "{OPERATOR}"\nbase_rate_annual_bps: 750\n',
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg == LedgerConfig(LEDGER, OPERATOR, base_rate_annual_bps=750)


def test_load_config_empty_file(tmp_path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ValidationError, match="missing config key"):
        load_config(path)


def test_config_from_env(monkeypatch) -> None:
    monkeypatch.setenv("YIELDLEDGER_LEDGER_ADDRESS", LEDGER)
    monkeypatch.setenv("YIELDLEDGER_OPERATOR", OPERATOR)
    monkeypatch.setenv("YIELDLEDGER_BASE_RATE_BPS", "250")
    monkeypatch.delenv("YIELDLEDGER_MAX_BASE_RATE_BPS", raising=False)
    cfg = config_from_env()
    assert cfg.base_rate_annual_bps == 250
    assert cfg.max_base_rate_bps == 10_000


def test_config_from_env_clamps_and_ignores_garbage(monkeypatch) -> None:
    monkeypatch.setenv("YIELDLEDGER_LEDGER_ADDRESS", LEDGER)
    monkeypatch.setenv("YIELDLEDGER_OPERATOR", OPERATOR)
    monkeypatch.setenv("YIELDLEDGER_MAX_BASE_RATE_BPS", "2000")
    monkeypatch.setenv("YIELDLEDGER_BASE_RATE_BPS", "999999")
    assert config_from_env().base_rate_annual_bps == 2000
    monkeypatch.setenv("YIELDLEDGER_BASE_RATE_BPS", "lots")
    assert config_from_env().base_rate_annual_bps == 1000


def test_config_from_env_requires_addresses(monkeypatch) -> None:
    monkeypatch.delenv("YIELDLEDGER_LEDGER_ADDRESS", raising=False)
    monkeypatch.setenv("YIELDLEDGER_OPERATOR", OPERATOR)
    with pytest.raises(ValidationError, match="YIELDLEDGER_LEDGER_ADDRESS"):
        config_from_env()
