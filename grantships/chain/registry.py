"""Mini README: Registry mapping backend names to chain gateway classes.

Structure:
    * ChainGatewayRegistry - registers gateway classes and builds them from
      settings.

Backends register themselves on import; ``GrantShipsSettings.chain_backend``
selects which one the platform uses.
"""

from __future__ import annotations

from typing import Dict, Iterable, Type

from ..configuration import GrantShipsSettings
from ..logging_utils import get_logger
from .base import ChainGateway

LOGGER = get_logger(__name__)


class ChainGatewayRegistry:
    """Simple registry for mapping backend identifiers to gateway classes."""

    def __init__(self) -> None:
        self._gateways: Dict[str, Type[ChainGateway]] = {}

    def register(self, gateway: Type[ChainGateway]) -> Type[ChainGateway]:
        """Register a gateway class; usable as a class decorator."""

        identifier = gateway.gateway_name.lower()
        LOGGER.debug("Registering chain gateway '%s'", identifier)
        self._gateways[identifier] = gateway
        return gateway

    def available_gateways(self) -> Iterable[str]:
        return sorted(self._gateways.keys())

    def create(self, identifier: str, settings: GrantShipsSettings) -> ChainGateway:
        """Instantiate the gateway matching ``identifier`` from settings."""

        gateway_cls = self._gateways.get(identifier.lower())
        if not gateway_cls:
            raise KeyError(f"Unknown chain gateway '{identifier}'")
        LOGGER.info("Creating chain gateway '%s'", identifier)
        return gateway_cls.from_settings(settings)


REGISTRY = ChainGatewayRegistry()
