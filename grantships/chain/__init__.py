"""Mini README: Settlement-chain gateways package initialiser.

Re-exports the gateway abstraction and registry. ``base`` holds the
abstract interface, ``registry`` the backend lookup, and ``rpc`` /
``simulated`` the concrete backends, imported here so they register.
"""

from .base import ChainGateway, ChainTransaction
from .registry import REGISTRY, ChainGatewayRegistry
from .rpc import JsonRpcClient, JsonRpcError, JsonRpcGateway
from .simulated import SimulatedGateway

__all__ = [
    "ChainGateway",
    "ChainGatewayRegistry",
    "ChainTransaction",
    "JsonRpcClient",
    "JsonRpcError",
    "JsonRpcGateway",
    "REGISTRY",
    "SimulatedGateway",
]
