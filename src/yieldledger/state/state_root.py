"""
Deterministic ledger state root (v1).

Intended for audit and debugging: the same logical ledger state always
hashes to the same root, independent of dict insertion order.
"""

from __future__ import annotations

from ..core.accrual.state import LedgerSnapshot, snapshot_to_dict
from .canonical import CANONICAL_ENCODING_VERSION, canonical_json_bytes, domain_sep_bytes, sha256_hex


STATE_ROOT_VERSION = 1


def compute_state_root(snapshot: LedgerSnapshot) -> str:
    payload = {
        "encoding": CANONICAL_ENCODING_VERSION,
        "snapshot": snapshot_to_dict(snapshot),
    }
    return sha256_hex(domain_sep_bytes("ledger_state_root", STATE_ROOT_VERSION) + canonical_json_bytes(payload))
