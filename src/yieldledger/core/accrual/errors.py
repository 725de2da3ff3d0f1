"""Exception types for the accrual ledger.

Every error is raised before the ledger commits anything, so a caught
`LedgerError` always means state is unchanged. Callers decide whether to
retry; the ledger never does.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for every rejection raised by the ledger."""


class ValidationError(LedgerError):
    """Raised when an argument is malformed or out of its domain."""


class StatePreconditionError(LedgerError):
    """Raised when the account is not in a state that allows the operation."""


class UnauthorizedError(LedgerError):
    """Raised when the caller lacks the capability the operation requires."""


class InsufficientReserveError(LedgerError):
    """Raised when the reward reserve cannot cover a claim.

    The user's accrued rewards are kept; the claim can be retried once the
    reserve is funded.
    """

    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(f"reward reserve {available} cannot cover claim of {requested}")


class PausedError(LedgerError):
    """Raised for mutating user operations while the ledger is paused."""


class ReentrancyError(LedgerError):
    """Raised when a mutating operation is entered while another one is running."""


class TransferError(LedgerError):
    """Raised when the asset-transfer collaborator refuses a movement of funds."""


class LedgerInvariantError(LedgerError):
    """Raised when a staged post-state violates one or more invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
