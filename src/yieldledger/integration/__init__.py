"""
Configuration and access-control layer
"""

from .config import LedgerConfig, config_from_env, config_from_mapping, load_config
from .gate import AccessGate

__all__ = [
    "AccessGate",
    "LedgerConfig",
    "config_from_env",
    "config_from_mapping",
    "load_config",
]
