"""
Shared fixtures: an in-memory Ethereum node behind ``httpx.MockTransport``.

The node keeps a deterministic ledger (native balances, nonces, one
ERC-20 token, logs, receipts) and executes signed raw transactions, so
the library and the CLI lessons run end-to-end without network access.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

import httpx
import pytest
import rlp
from click.testing import CliRunner
from eth_abi import decode, encode
from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import keccak

from learnether.node.rpc import Provider

RPC_URL = "http://fake.node"

# Well-known test key; never holds real funds
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"

USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
RECEIVER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
HOLDER = "0x38AAEF3782910bdd9eA3566C839788Af6FF9B200"
RICH = "0x396343362be2A4dA1cE0C1C210945346fb82Aa49"

ETHER = 10**18
TRANSFER_TOPIC = "0x" + keccak(text="Transfer(address,address,uint256)").hex()

_SELECTORS = {
    keccak(text=sig)[:4].hex(): sig
    for sig in (
        "name()",
        "symbol()",
        "decimals()",
        "totalSupply()",
        "balanceOf(address)",
        "transfer(address,uint256)",
    )
}

TRANSFER_GAS = 21_000
CALL_GAS = 50_000


class NodeError(Exception):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def _pad_address(address: str) -> str:
    return "0x" + "0" * 24 + address.lower()[2:]


def make_transfer_log(
    token: str,
    sender: str,
    receiver: str,
    amount: int,
    block: int,
    index: int = 0,
) -> dict[str, Any]:
    """Raw eth_getLogs entry for an ERC-20 Transfer."""
    return {
        "address": token.lower(),
        "topics": [TRANSFER_TOPIC, _pad_address(sender), _pad_address(receiver)],
        "data": "0x" + encode(["uint256"], [amount]).hex(),
        "blockNumber": hex(block),
        "blockHash": "0x" + keccak(text=f"block-{block}").hex(),
        "transactionHash": "0x" + keccak(text=f"tx-{block}-{index}").hex(),
        "transactionIndex": hex(index),
        "logIndex": hex(index),
        "removed": False,
    }


class FakeToken:
    def __init__(self, name: str, symbol: str, decimals: int) -> None:
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.balances: dict[str, int] = {}

    @property
    def total_supply(self) -> int:
        return sum(self.balances.values())


class FakeNode:
    """Just enough of an Ethereum node for the lessons."""

    def __init__(self) -> None:
        self.chain_id = 1
        self.block_number = 100
        self.base_fee: Optional[int] = 1
        self.priority_fee: Optional[int] = 1
        self.gas_price = 2
        self.balances: dict[str, int] = {}
        self.nonces: dict[str, int] = {}
        self.tokens: dict[str, FakeToken] = {}
        self.logs: list[dict[str, Any]] = []
        self.receipts: dict[str, dict[str, Any]] = {}
        self.auto_mine = True
        self.respect_log_range = True
        self.down: set[str] = set()
        self.calls: list[str] = []

    # -- setup helpers --------------------------------------------------

    def fund(self, address: str, amount: int) -> None:
        self.balances[address.lower()] = amount

    def add_token(self, address: str, token: FakeToken) -> FakeToken:
        self.tokens[address.lower()] = token
        return token

    def balance_of(self, address: str) -> int:
        return self.balances.get(address.lower(), 0)

    # -- transport ------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        method = payload["method"]
        self.calls.append(method)

        if "*" in self.down or method in self.down:
            raise httpx.ConnectError("connection refused", request=request)

        handler: Callable[..., Any] = getattr(self, "_" + method)
        try:
            result = handler(*payload.get("params", []))
        except NodeError as exc:
            return httpx.Response(
                200,
                json={
                    "jsonrpc": "2.0",
                    "id": payload["id"],
                    "error": {"code": exc.code, "message": exc.message},
                },
            )
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": result})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    # -- reads ----------------------------------------------------------

    def _eth_chainId(self) -> str:
        return hex(self.chain_id)

    def _eth_blockNumber(self) -> str:
        return hex(self.block_number)

    def _eth_getBalance(self, address: str, block: str) -> str:
        return hex(self.balance_of(address))

    def _eth_getTransactionCount(self, address: str, block: str) -> str:
        return hex(self.nonces.get(address.lower(), 0))

    def _eth_getBlockByNumber(self, block: str, full: bool) -> dict[str, Any]:
        result: dict[str, Any] = {"number": hex(self.block_number)}
        if self.base_fee is not None:
            result["baseFeePerGas"] = hex(self.base_fee)
        return result

    def _eth_gasPrice(self) -> str:
        return hex(self.gas_price)

    def _eth_maxPriorityFeePerGas(self) -> str:
        if self.priority_fee is None:
            raise NodeError(-32601, "the method eth_maxPriorityFeePerGas does not exist")
        return hex(self.priority_fee)

    def _eth_estimateGas(self, tx: dict[str, Any]) -> str:
        return hex(CALL_GAS if tx.get("data", "0x") != "0x" else TRANSFER_GAS)

    def _eth_call(self, tx: dict[str, Any], block: str) -> str:
        token = self.tokens.get(tx["to"].lower())
        data = bytes.fromhex(tx.get("data", "0x")[2:])
        if token is None or len(data) < 4:
            return "0x"

        signature = _SELECTORS.get(data[:4].hex())
        if signature == "name()":
            return "0x" + encode(["string"], [token.name]).hex()
        if signature == "symbol()":
            return "0x" + encode(["string"], [token.symbol]).hex()
        if signature == "decimals()":
            return "0x" + encode(["uint8"], [token.decimals]).hex()
        if signature == "totalSupply()":
            return "0x" + encode(["uint256"], [token.total_supply]).hex()
        if signature == "balanceOf(address)":
            (owner,) = decode(["address"], data[4:])
            return "0x" + encode(["uint256"], [token.balances.get(owner.lower(), 0)]).hex()
        raise NodeError(3, "execution reverted")

    def _eth_getTransactionReceipt(self, tx_hash: str) -> Optional[dict[str, Any]]:
        return self.receipts.get(tx_hash)

    def _eth_getLogs(self, query: dict[str, Any]) -> list[dict[str, Any]]:
        start = int(query["fromBlock"], 16)
        end = int(query["toBlock"], 16)
        topics = query.get("topics") or []
        found = []
        for log in self.logs:
            if log["address"] != query["address"].lower():
                continue
            if topics and topics[0] and log["topics"][0] != topics[0]:
                continue
            if self.respect_log_range and not start <= int(log["blockNumber"], 16) <= end:
                continue
            found.append(log)
        return found

    # -- writes ---------------------------------------------------------

    def _eth_sendRawTransaction(self, raw_hex: str) -> str:
        raw = bytes.fromhex(raw_hex[2:])
        sender = Account.recover_transaction(raw_hex).lower()

        if raw[0] == 2:
            fields = rlp.decode(raw[1:])
            nonce, priority, max_fee, gas, to, value, data = (
                int.from_bytes(fields[1], "big"),
                int.from_bytes(fields[2], "big"),
                int.from_bytes(fields[3], "big"),
                int.from_bytes(fields[4], "big"),
                fields[5],
                int.from_bytes(fields[6], "big"),
                fields[7],
            )
            price = min(max_fee, (self.base_fee or 0) + priority)
        else:
            fields = rlp.decode(raw)
            nonce, price, gas, to, value, data = (
                int.from_bytes(fields[0], "big"),
                int.from_bytes(fields[1], "big"),
                int.from_bytes(fields[2], "big"),
                fields[3],
                int.from_bytes(fields[4], "big"),
                fields[5],
            )

        if nonce != self.nonces.get(sender, 0):
            raise NodeError(-32000, "nonce too low")

        gas_used = CALL_GAS if data else TRANSFER_GAS
        fee = gas_used * price
        if self.balance_of(sender) < value + fee:
            raise NodeError(-32000, "insufficient funds for gas * price + value")

        tx_hash = "0x" + keccak(raw).hex()
        recipient = "0x" + to.hex()
        self.block_number += 1
        self.nonces[sender] = nonce + 1
        self.balances[sender] = self.balance_of(sender) - fee
        status = 1

        if data:
            status = self._execute_token_call(sender, recipient, data)
        else:
            self.balances[sender] -= value
            self.balances[recipient] = self.balance_of(recipient) + value

        if self.auto_mine:
            self.receipts[tx_hash] = {
                "transactionHash": tx_hash,
                "blockNumber": hex(self.block_number),
                "blockHash": "0x" + keccak(text=f"block-{self.block_number}").hex(),
                "from": sender,
                "to": recipient,
                "status": hex(status),
                "gasUsed": hex(gas_used),
                "effectiveGasPrice": hex(price),
                "logs": [],
            }
        return tx_hash

    def _execute_token_call(self, sender: str, token_address: str, data: bytes) -> int:
        token = self.tokens.get(token_address)
        if token is None or _SELECTORS.get(data[:4].hex()) != "transfer(address,uint256)":
            return 0
        receiver, amount = decode(["address", "uint256"], data[4:])
        receiver = receiver.lower()
        if token.balances.get(sender, 0) < amount:
            return 0
        token.balances[sender] -= amount
        token.balances[receiver] = token.balances.get(receiver, 0) + amount
        self.logs.append(
            make_transfer_log(token_address, sender, receiver, amount, self.block_number)
        )
        return 1


@pytest.fixture()
def wallet() -> LocalAccount:
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture()
def node(wallet: LocalAccount) -> FakeNode:
    fake = FakeNode()
    fake.fund(wallet.address, 10 * ETHER)
    fake.fund(RECEIVER, 1 * ETHER)
    fake.fund(RICH, 23_549_600_706_125_768_371)

    usdc = fake.add_token(USDC, FakeToken("USD Coin", "USDC", 6))
    usdc.balances[wallet.address.lower()] = 10_000_000
    usdc.balances[HOLDER.lower()] = 2_560_196_682_000_000
    return fake


@pytest.fixture()
def provider(node: FakeNode):
    with Provider(RPC_URL, transport=node.transport()) as p:
        yield p


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own configuration out of the tests."""
    for name in (
        "ALCHEMY_API_KEY",
        "TENDERLY_RPC_URL",
        "RPC_URL",
        "PRIVATE_KEY",
        "LEARNETHER_TX_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo the handler the CLI installs so later tests see a plain logger."""
    yield
    logger = logging.getLogger("learnether")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
