"""
Authorization and pause gate (imperative shell).

A single operator identity may run privileged operations and toggle the
pause flag. The check is an explicit identity comparison, not a role
hierarchy.
"""

from __future__ import annotations

import logging

from ..core.accrual.errors import PausedError, UnauthorizedError, ValidationError
from ..state.canonical import canonical_address

logger = logging.getLogger(__name__)


class AccessGate:
    def __init__(self, operator: str) -> None:
        try:
            self._operator = canonical_address(operator, name="operator")
        except (TypeError, ValueError) as exc:
            raise ValidationError(str(exc)) from exc
        self._paused = False

    @property
    def operator(self) -> str:
        return self._operator

    @property
    def paused(self) -> bool:
        return self._paused

    def is_operator(self, caller: str) -> bool:
        try:
            return canonical_address(caller, name="caller") == self._operator
        except (TypeError, ValueError):
            return False

    def require_operator(self, caller: str) -> None:
        if not self.is_operator(caller):
            raise UnauthorizedError(f"caller {caller!r} is not the operator")

    def require_not_paused(self) -> None:
        if self._paused:
            raise PausedError("ledger is paused")

    def pause(self, caller: str) -> bool:
        """Set the pause flag. Returns False when it was already set."""
        self.require_operator(caller)
        if self._paused:
            return False
        self._paused = True
        logger.warning("ledger paused by %s", self._operator)
        return True

    def unpause(self, caller: str) -> bool:
        """Clear the pause flag. Returns False when it was already clear."""
        self.require_operator(caller)
        if not self._paused:
            return False
        self._paused = False
        logger.info("ledger unpaused by %s", self._operator)
        return True

    def transfer_operator(self, caller: str, new_operator: str) -> None:
        self.require_operator(caller)
        try:
            self._operator = canonical_address(new_operator, name="new_operator")
        except (TypeError, ValueError) as exc:
            raise ValidationError(str(exc)) from exc
        logger.info("operator transferred to %s", self._operator)
