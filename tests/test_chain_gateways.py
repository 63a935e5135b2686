"""Mini README: Tests for the chain gateway registry and JSON-RPC backend.

The JSON-RPC node is simulated with ``httpx.MockTransport``; payouts are
signed for real with a throwaway key and the signer is recovered from the
raw transaction to prove the gateway signed what it submitted.
"""

from __future__ import annotations

import json

import httpx
import pytest
from eth_account import Account

from conftest import APPLICANT, FUNDER, TREASURY
from grantships.chain import (
    REGISTRY,
    ChainGateway,
    JsonRpcClient,
    JsonRpcError,
    JsonRpcGateway,
    SimulatedGateway,
)
from grantships.configuration import GrantShipsSettings
from grantships.errors import ChainError, PaymentsUnavailable

TEST_KEY = "0x" + "11" * 32
TX_HASH = "0x" + "ab" * 32


class _Node:
    """Mock JSON-RPC node answering from a method -> result table."""

    def __init__(self, results) -> None:
        self.results = results
        self.calls = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append((body["method"], body["params"]))
        result = self.results[body["method"]]
        if isinstance(result, dict) and "error" in result:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], **result})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


def _gateway(node: _Node, private_key=None) -> JsonRpcGateway:
    client = JsonRpcClient(
        "https://rpc.test",
        backoff=0.0,
        client=httpx.Client(transport=httpx.MockTransport(node)),
    )
    return JsonRpcGateway(client, TREASURY, private_key=private_key)


def test_registry_lists_and_builds_backends() -> None:
    """Both backends are registered and unknown names raise KeyError."""

    assert {"rpc", "simulated"} <= set(REGISTRY.available_gateways())

    settings = GrantShipsSettings(chain_backend="simulated", treasury_address=TREASURY)
    gateway = REGISTRY.create("simulated", settings)

    assert isinstance(gateway, SimulatedGateway)
    assert isinstance(gateway, ChainGateway)
    assert not gateway.can_sign
    with pytest.raises(KeyError):
        REGISTRY.create("carrier-pigeon", settings)


def test_rpc_gateway_from_settings_uses_private_key() -> None:
    """A configured private key enables signing on the RPC gateway."""

    settings = GrantShipsSettings(treasury_private_key=TEST_KEY, treasury_address=TREASURY)

    gateway = REGISTRY.create("rpc", settings)

    assert isinstance(gateway, JsonRpcGateway)
    assert gateway.can_sign
    gateway.close()


def test_get_transaction_decodes_node_response() -> None:
    """Transaction and receipt fields decode into a normalized transfer."""

    node = _Node(
        {
            "eth_getTransactionByHash": {
                "from": FUNDER,
                "to": TREASURY.upper().replace("0X", "0x"),
                "value": "0x0a",
            },
            "eth_getTransactionReceipt": {"status": "0x1"},
        }
    )

    transaction = _gateway(node).get_transaction(TX_HASH)

    assert transaction.value == 10
    assert transaction.recipient == TREASURY
    assert transaction.sender == FUNDER
    assert transaction.succeeded


def test_get_transaction_unknown_or_reverted() -> None:
    """Unknown hashes are None and reverted receipts are not successful."""

    unknown = _Node({"eth_getTransactionByHash": None, "eth_getTransactionReceipt": None})
    assert _gateway(unknown).get_transaction(TX_HASH) is None

    reverted = _Node(
        {
            "eth_getTransactionByHash": {"from": FUNDER, "to": TREASURY, "value": "0x1"},
            "eth_getTransactionReceipt": {"status": "0x0"},
        }
    )
    assert not _gateway(reverted).get_transaction(TX_HASH).succeeded


def test_node_errors_surface_as_chain_errors() -> None:
    """JSON-RPC error objects raise JsonRpcError with the node's code."""

    node = _Node({"eth_getTransactionByHash": {"error": {"code": -32602, "message": "invalid hash"}}})

    with pytest.raises(JsonRpcError) as excinfo:
        _gateway(node).get_transaction("0x1234")

    assert isinstance(excinfo.value, ChainError)
    assert excinfo.value.code == -32602


def test_transport_failures_are_retried_then_raised() -> None:
    """Reads retry transport failures while sends are attempted once."""

    attempts = []

    def unreachable(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    client = JsonRpcClient(
        "https://rpc.test",
        retries=2,
        backoff=0.0,
        client=httpx.Client(transport=httpx.MockTransport(unreachable)),
    )

    with pytest.raises(ChainError):
        client.call("eth_chainId")
    assert len(attempts) == 3

    attempts.clear()
    with pytest.raises(ChainError):
        client.call("eth_sendRawTransaction", ["0x00"], retry=False)
    assert len(attempts) == 1


def test_send_payment_requires_key() -> None:
    """A gateway without a key refuses to pay."""

    gateway = _gateway(_Node({}))

    assert not gateway.can_sign
    with pytest.raises(PaymentsUnavailable):
        gateway.send_payment(APPLICANT, 1)


def test_send_payment_signs_and_submits_transfer() -> None:
    """Payouts are signed by the treasury key and use its pending nonce."""

    node = _Node(
        {
            "eth_chainId": "0x2105",
            "eth_getTransactionCount": "0x3",
            "eth_getBlockByNumber": {"baseFeePerGas": "0x64"},
            "eth_maxPriorityFeePerGas": "0x1",
            "eth_sendRawTransaction": TX_HASH,
        }
    )
    gateway = _gateway(node, private_key=TEST_KEY)

    reference = gateway.send_payment(APPLICANT, 950_000)

    assert reference == TX_HASH
    method, params = node.calls[-1]
    assert method == "eth_sendRawTransaction"
    raw = params[0]
    assert raw.startswith("0x")
    signer = Account.recover_transaction(raw)
    assert signer == Account.from_key(TEST_KEY).address
    nonce_call = next(call for call in node.calls if call[0] == "eth_getTransactionCount")
    assert nonce_call[1] == [signer, "pending"]


def test_gateway_metadata_describes_backend() -> None:
    """Metadata names the backend, treasury, signing state and node URL."""

    signing = _gateway(_Node({}), private_key=TEST_KEY).metadata()
    read_only = SimulatedGateway(TREASURY, signing_enabled=False).metadata()

    assert signing == {
        "gateway": "rpc",
        "treasury": TREASURY,
        "payouts_enabled": True,
        "rpc_url": "https://rpc.test",
    }
    assert read_only == {"gateway": "simulated", "treasury": TREASURY, "payouts_enabled": False}
