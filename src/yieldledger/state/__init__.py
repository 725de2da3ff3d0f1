"""
Token collaborators and canonical state encoding
"""

from .state_root import compute_state_root
from .tokens import AssetTransfer, Token

__all__ = [
    "AssetTransfer",
    "Token",
    "compute_state_root",
]
