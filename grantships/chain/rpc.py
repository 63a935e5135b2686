"""Mini README: JSON-RPC chain gateway for EVM networks.

Structure:
    * JsonRpcError - error object returned by the node.
    * JsonRpcClient - minimal JSON-RPC 2.0 client over ``httpx``.
    * JsonRpcGateway - ``ChainGateway`` verifying funding transfers and
      submitting locally signed payouts.

Reads are retried with exponential backoff. Payment submission is never
retried: a timed-out ``eth_sendRawTransaction`` may still have been
accepted, and resending could pay twice. Payouts are signed locally with
``eth-account`` (EIP-1559 transfers) and nonce lookup plus submission is
serialised so concurrent distributions never reuse a nonce.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Dict, List, Optional

import httpx
from eth_account import Account
from eth_utils import to_checksum_address, to_hex

from ..configuration import GrantShipsSettings
from ..errors import ChainError, PaymentsUnavailable
from ..logging_utils import get_logger
from .base import ChainGateway, ChainTransaction
from .registry import REGISTRY

LOGGER = get_logger(__name__)

TRANSFER_GAS = 21_000


class JsonRpcError(ChainError):
    """Error object returned by the node."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(f"JSON-RPC error {code}: {message}")
        self.code = code
        self.data = data


def _quantity(value: Optional[str]) -> int:
    """Decode a hex-encoded JSON-RPC quantity."""

    if value is None:
        return 0
    return int(value, 16)


class JsonRpcClient:
    """Minimal JSON-RPC client with retries for idempotent calls."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 30.0,
        retries: int = 2,
        backoff: float = 0.25,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.url = url
        self.retries = max(0, retries)
        self.backoff = max(0.0, backoff)
        self._id = 0
        self._id_lock = threading.Lock()
        self._client = client or httpx.Client(timeout=timeout)

    def _next_id(self) -> int:
        with self._id_lock:
            self._id += 1
            return self._id

    def call(self, method: str, params: Optional[List[Any]] = None, *, retry: bool = True) -> Any:
        """Single JSON-RPC call; raises ``JsonRpcError`` on node-side errors."""

        payload = {"jsonrpc": "2.0", "id": self._next_id(), "method": method, "params": params or []}
        attempts = self.retries + 1 if retry else 1
        for attempt in range(attempts):
            try:
                response = self._client.post(self.url, json=payload)
                response.raise_for_status()
                body = response.json()
                break
            except (httpx.HTTPError, ValueError) as error:
                if attempt + 1 >= attempts:
                    raise ChainError(f"{method} failed: {error}") from error
                LOGGER.debug("%s attempt %s failed: %s", method, attempt + 1, error)
                time.sleep(self.backoff * (2**attempt))
        if "error" in body:
            error = body["error"] or {}
            raise JsonRpcError(
                error.get("code", -32000), error.get("message", "Unknown error"), error.get("data")
            )
        return body.get("result")

    def close(self) -> None:
        self._client.close()


@REGISTRY.register
class JsonRpcGateway(ChainGateway):
    """Gateway backed by an EVM JSON-RPC node."""

    gateway_name = "rpc"

    def __init__(
        self,
        client: JsonRpcClient,
        treasury_address: str,
        *,
        private_key: Optional[str] = None,
    ) -> None:
        super().__init__(treasury_address)
        self.client = client
        self._account = Account.from_key(private_key) if private_key else None
        self._send_lock = threading.Lock()
        self._chain_id: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: GrantShipsSettings) -> "JsonRpcGateway":
        key = settings.treasury_private_key
        return cls(
            JsonRpcClient(settings.rpc_url, timeout=settings.rpc_timeout_seconds),
            settings.treasury_address,
            private_key=key.get_secret_value() if key else None,
        )

    @property
    def can_sign(self) -> bool:
        return self._account is not None

    def get_transaction(self, reference: str) -> Optional[ChainTransaction]:
        transaction = self.client.call("eth_getTransactionByHash", [reference])
        receipt = self.client.call("eth_getTransactionReceipt", [reference])
        if not transaction or not receipt:
            return None
        return ChainTransaction(
            reference=reference,
            sender=(transaction.get("from") or "").lower() or None,
            recipient=(transaction.get("to") or "").lower() or None,
            value=_quantity(transaction.get("value")),
            succeeded=_quantity(receipt.get("status")) == 1,
        )

    def send_payment(self, recipient: str, amount: int) -> str:
        if self._account is None:
            raise PaymentsUnavailable("Wallet not configured")
        with self._send_lock:
            transaction = self._build_transfer(recipient, amount)
            signed = self._account.sign_transaction(transaction)
            reference = self.client.call(
                "eth_sendRawTransaction", [to_hex(signed.raw_transaction)], retry=False
            )
        LOGGER.debug("Submitted transfer %s of %s wei to %s", reference, amount, recipient)
        return reference

    def _build_transfer(self, recipient: str, amount: int) -> Dict[str, Any]:
        assert self._account is not None
        if self._chain_id is None:
            self._chain_id = _quantity(self.client.call("eth_chainId"))
        nonce = _quantity(
            self.client.call("eth_getTransactionCount", [self._account.address, "pending"])
        )
        latest = self.client.call("eth_getBlockByNumber", ["latest", False]) or {}
        priority_fee = _quantity(self.client.call("eth_maxPriorityFeePerGas"))
        base_fee = _quantity(latest.get("baseFeePerGas"))
        return {
            "type": 2,
            "chainId": self._chain_id,
            "nonce": nonce,
            "to": to_checksum_address(recipient),
            "value": amount,
            "gas": TRANSFER_GAS,
            "maxPriorityFeePerGas": priority_fee,
            "maxFeePerGas": 2 * base_fee + priority_fee,
        }

    def close(self) -> None:
        self.client.close()

    def metadata(self) -> Dict[str, object]:
        info = super().metadata()
        info["rpc_url"] = self.client.url
        return info
