"""
yieldledger: reward-accrual ledger with an activity bonus.
"""

from .core.ledger import AccrualLedger
from .integration.config import LedgerConfig, config_from_env, load_config

__all__ = [
    "AccrualLedger",
    "LedgerConfig",
    "config_from_env",
    "load_config",
]
