"""Mini README: Abstract chain gateway used by the ledger.

Structure:
    * ChainTransaction - the facts the funding verifier needs about a transfer.
    * ChainGateway - abstract interface implemented by concrete backends.

The ledger never talks to a node directly. It reads inbound transactions
through ``get_transaction`` and submits native-currency payouts through
``send_payment``; backends decide how (JSON-RPC, simulation, ...).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional

from ..logging_utils import get_logger

if TYPE_CHECKING:
    from ..configuration import GrantShipsSettings

LOGGER = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class ChainTransaction:
    """Confirmed view of a native-currency transfer."""

    reference: str
    sender: Optional[str]
    recipient: Optional[str]
    value: int
    succeeded: bool


class ChainGateway(ABC):
    """Base interface for settlement-chain integrations."""

    gateway_name: str = "generic"

    def __init__(self, treasury_address: str) -> None:
        self.treasury_address = treasury_address.lower()
        LOGGER.debug(
            "Initialising %s gateway for treasury %s", self.gateway_name, self.treasury_address
        )

    @classmethod
    @abstractmethod
    def from_settings(cls, settings: "GrantShipsSettings") -> "ChainGateway":
        """Build the gateway from runtime configuration."""

    @abstractmethod
    def get_transaction(self, reference: str) -> Optional[ChainTransaction]:
        """Return the transaction or ``None`` when the chain does not know it."""

    @property
    @abstractmethod
    def can_sign(self) -> bool:
        """Whether outbound payments are possible."""

    @abstractmethod
    def send_payment(self, recipient: str, amount: int) -> str:
        """Transfer ``amount`` wei to ``recipient`` and return the transaction reference."""

    def close(self) -> None:
        """Release network resources held by the gateway."""

    def metadata(self) -> Dict[str, object]:
        """Return diagnostic metadata for the health endpoint."""

        return {
            "gateway": self.gateway_name,
            "treasury": self.treasury_address,
            "payouts_enabled": self.can_sign,
        }
