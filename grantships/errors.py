"""Mini README: Error taxonomy shared by the ledger and its adapters.

Structure:
    * GrantShipsError - base class carrying a stable ``code`` and details.
    * One subclass per failure the ledger reports to callers.
    * ChainError - transport or node failures raised by chain gateways.

Every error is recovered at the request boundary; the web layer maps the
class to an HTTP status and renders ``details()`` into the JSON body.
"""

from __future__ import annotations

from typing import Dict


class GrantShipsError(Exception):
    """Base class for all ledger failures surfaced to callers."""

    code = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def details(self) -> Dict[str, object]:
        return {}


class InvalidInput(GrantShipsError):
    code = "invalid_input"


class InvalidAmount(GrantShipsError):
    code = "invalid_amount"


class NotFound(GrantShipsError):
    code = "not_found"


class Forbidden(GrantShipsError):
    code = "forbidden"


class InvalidState(GrantShipsError):
    """Raised when a round or application status does not permit an operation."""

    code = "invalid_state"


class InsufficientBudget(GrantShipsError):
    """Raised when an approval exceeds what is left of the round budget."""

    code = "insufficient_budget"

    def __init__(self, remaining: int, requested: int) -> None:
        super().__init__("Insufficient budget")
        self.remaining = remaining
        self.requested = requested

    def details(self) -> Dict[str, object]:
        return {"remaining": str(self.remaining), "requested": str(self.requested)}


class NothingToDistribute(GrantShipsError):
    code = "nothing_to_distribute"


class PaymentsUnavailable(GrantShipsError):
    code = "payments_unavailable"


class TransactionNotFound(GrantShipsError):
    code = "transaction_not_found"


class WrongRecipient(GrantShipsError):
    code = "wrong_recipient"


class DuplicateFunding(GrantShipsError):
    """Raised when a funding transaction has already been credited."""

    code = "duplicate_funding"

    def __init__(self, transaction_ref: str) -> None:
        super().__init__(f"Transaction {transaction_ref} has already been credited")
        self.transaction_ref = transaction_ref

    def details(self) -> Dict[str, object]:
        return {"transaction_ref": self.transaction_ref}


class ChainError(Exception):
    """Raised by chain gateways when the node cannot be reached or errors."""
