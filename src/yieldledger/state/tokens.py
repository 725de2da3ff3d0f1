"""
Asset-transfer collaborator for the ledger.

`AssetTransfer` is the interface the ledger consumes (balance/allowance
queries plus transfer and transfer_from). `Token` is a deterministic
in-memory implementation keyed by canonical addresses.
"""

from __future__ import annotations

from typing import Dict, Tuple

from .canonical import canonical_hex_fixed_allow_0x


# Type aliases
Address = str  # 20-byte hex string (0x...)
Amount = int  # Non-negative integer (arbitrary precision)


def _addr(address: Address, name: str) -> Address:
    return canonical_hex_fixed_allow_0x(address, nbytes=20, name=name)


def _amount(amount: Amount) -> Amount:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
        raise ValueError(f"amount must be a non-negative int, got {amount!r}")
    return amount


class AssetTransfer:
    """Interface for moving one fungible asset."""

    asset_id: str
    decimals: int

    def balance_of(self, holder: Address) -> Amount:
        raise NotImplementedError

    def allowance(self, owner: Address, spender: Address) -> Amount:
        raise NotImplementedError

    def transfer(self, sender: Address, recipient: Address, amount: Amount) -> bool:
        raise NotImplementedError

    def transfer_from(self, spender: Address, owner: Address, recipient: Address, amount: Amount) -> bool:
        raise NotImplementedError


class Token(AssetTransfer):
    """
    In-memory fungible token.

    Transfers return False (and change nothing) when the sender's balance or
    the spender's allowance is too small.
    """

    def __init__(self, asset_id: str, decimals: int = 18):
        if not isinstance(asset_id, str) or not asset_id:
            raise ValueError("asset_id must be a non-empty str")
        if not isinstance(decimals, int) or isinstance(decimals, bool) or not (0 <= decimals <= 36):
            raise ValueError(f"decimals must be an int in [0, 36], got {decimals!r}")
        self.asset_id = asset_id
        self.decimals = decimals
        self._balances: Dict[Address, Amount] = {}
        self._allowances: Dict[Tuple[Address, Address], Amount] = {}

    @property
    def unit(self) -> int:
        """Base units per whole token."""
        return 10 ** self.decimals

    def balance_of(self, holder: Address) -> Amount:
        return self._balances.get(_addr(holder, "holder"), 0)

    def allowance(self, owner: Address, spender: Address) -> Amount:
        return self._allowances.get((_addr(owner, "owner"), _addr(spender, "spender")), 0)

    def mint(self, recipient: Address, amount: Amount) -> None:
        recipient = _addr(recipient, "recipient")
        self._set_balance(recipient, self.balance_of(recipient) + _amount(amount))

    def approve(self, owner: Address, spender: Address, amount: Amount) -> None:
        self._allowances[(_addr(owner, "owner"), _addr(spender, "spender"))] = _amount(amount)

    def transfer(self, sender: Address, recipient: Address, amount: Amount) -> bool:
        sender = _addr(sender, "sender")
        recipient = _addr(recipient, "recipient")
        amount = _amount(amount)
        if self.balance_of(sender) < amount:
            return False
        self._move(sender, recipient, amount)
        return True

    def transfer_from(self, spender: Address, owner: Address, recipient: Address, amount: Amount) -> bool:
        spender = _addr(spender, "spender")
        owner = _addr(owner, "owner")
        recipient = _addr(recipient, "recipient")
        amount = _amount(amount)
        allowed = self.allowance(owner, spender)
        if allowed < amount or self.balance_of(owner) < amount:
            return False
        self._allowances[(owner, spender)] = allowed - amount
        self._move(owner, recipient, amount)
        return True

    def total_supply(self) -> Amount:
        return sum(self._balances.values())

    def _move(self, sender: Address, recipient: Address, amount: Amount) -> None:
        self._set_balance(sender, self.balance_of(sender) - amount)
        self._set_balance(recipient, self.balance_of(recipient) + amount)

    def _set_balance(self, holder: Address, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            # Remove zero balances to keep table sparse
            self._balances.pop(holder, None)
        else:
            self._balances[holder] = amount

    def __repr__(self) -> str:
        return f"Token({self.asset_id!r}, {len(self._balances)} holders)"
