"""
Core accrual algorithms and the ledger shell
"""

from .ledger import AccrualLedger
from .scorer import ActivityScorer

__all__ = [
    "AccrualLedger",
    "ActivityScorer",
]
