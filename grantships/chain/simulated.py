"""Mini README: In-memory chain gateway for demos and tests.

Structure:
    * SimulatedGateway - records inbound transfers and outbound payments
      without touching a network.

The simulation mirrors the behaviour the ledger relies on: unknown
references return ``None``, payments without signing capability raise
``PaymentsUnavailable``, and individual recipients can be configured to
fail so partial distribution runs can be exercised.
"""

from __future__ import annotations

import hashlib
import threading
from typing import Dict, List, Optional, Set, Tuple

from ..configuration import GrantShipsSettings
from ..errors import ChainError, PaymentsUnavailable
from ..logging_utils import get_logger
from .base import ChainGateway, ChainTransaction
from .registry import REGISTRY

LOGGER = get_logger(__name__)


@REGISTRY.register
class SimulatedGateway(ChainGateway):
    """Gateway keeping every transaction in process memory."""

    gateway_name = "simulated"

    def __init__(self, treasury_address: str, *, signing_enabled: bool = True) -> None:
        super().__init__(treasury_address)
        self.signing_enabled = signing_enabled
        self.failing_recipients: Set[str] = set()
        self.payments: List[Tuple[str, str, int]] = []
        self._transactions: Dict[str, ChainTransaction] = {}
        self._counter = 0
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: GrantShipsSettings) -> "SimulatedGateway":
        return cls(settings.treasury_address, signing_enabled=settings.payouts_enabled)

    @property
    def can_sign(self) -> bool:
        return self.signing_enabled

    def _next_reference(self, *parts: object) -> str:
        with self._lock:
            self._counter += 1
            seed = ":".join(str(part) for part in (self._counter, *parts))
        return "0x" + hashlib.sha256(seed.encode()).hexdigest()

    def record_transfer(
        self,
        sender: str,
        value: int,
        *,
        recipient: Optional[str] = None,
        succeeded: bool = True,
        reference: Optional[str] = None,
    ) -> ChainTransaction:
        """Register an inbound transfer, defaulting to one sent to the treasury."""

        transaction = ChainTransaction(
            reference=(reference or self._next_reference(sender, value)).lower(),
            sender=sender.lower(),
            recipient=(recipient or self.treasury_address).lower(),
            value=value,
            succeeded=succeeded,
        )
        self._transactions[transaction.reference] = transaction
        return transaction

    def get_transaction(self, reference: str) -> Optional[ChainTransaction]:
        return self._transactions.get(reference.lower())

    def send_payment(self, recipient: str, amount: int) -> str:
        if not self.signing_enabled:
            raise PaymentsUnavailable("Wallet not configured")
        if recipient.lower() in self.failing_recipients:
            raise ChainError(f"transfer to {recipient} rejected")
        reference = self._next_reference(recipient, amount)
        self.payments.append((reference, recipient.lower(), amount))
        LOGGER.info("Simulated transfer %s of %s wei to %s", reference, amount, recipient)
        return reference
