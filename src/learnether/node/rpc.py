"""
JSON-RPC Provider.

Lightweight alternative to web3.py: uses httpx for HTTP.  Supports
balance and block queries, read-only calls, raw transaction submission,
receipt polling and log filtering.
"""

from __future__ import annotations

import itertools
import logging
import time
from typing import Any, Optional, Sequence, Union

import httpx

from ..errors import ConfirmationTimeoutError, RpcConnectionError, RpcError

logger = logging.getLogger(__name__)

BlockId = Union[int, str]

DEFAULT_TIMEOUT = 30.0


def to_block_param(block: BlockId) -> str:
    """Encode a block number as a hex quantity; tags pass through."""
    if isinstance(block, int):
        if block < 0:
            raise ValueError(f"Block number must be non-negative, got {block}")
        return hex(block)
    return block


def to_int(quantity: Optional[str]) -> int:
    """Decode a hex quantity (``"0x1a"``) into an int.  None decodes to 0."""
    if quantity is None:
        return 0
    if isinstance(quantity, int):
        return quantity
    return int(quantity, 16)


class Provider:
    """
    Connection handle for one JSON-RPC endpoint.

    Holds a single ``httpx.Client`` for its lifetime; use it as a context
    manager so the connection pool is released on exit.

    Args:
        url: RPC endpoint URL
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests inject ``httpx.MockTransport``)
    """

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._ids = itertools.count(1)
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def __enter__(self) -> "Provider":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def request(self, method: str, params: Optional[list] = None) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_call")
            params: RPC parameters

        Returns:
            Result field from the RPC response

        Raises:
            RpcConnectionError: If the endpoint is unreachable or answers
                with an HTTP error or a non-JSON body
            RpcError: If the node returns a JSON-RPC error object
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": next(self._ids),
        }
        logger.debug("-> %s %s", method, payload["params"])

        try:
            response = self._client.post(self.url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise RpcConnectionError(
                f"{method}: endpoint returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RpcConnectionError(f"{method}: cannot reach {self.url}: {exc}") from exc
        except ValueError as exc:
            raise RpcConnectionError(f"{method}: endpoint returned invalid JSON") from exc

        if not isinstance(data, dict):
            raise RpcConnectionError(f"{method}: unexpected response {data!r}")

        if "error" in data:
            error = data["error"]
            if isinstance(error, dict):
                raise RpcError(method, error.get("code"), error.get("message", ""), error.get("data"))
            raise RpcError(method, None, str(error))

        result = data.get("result")
        logger.debug("<- %s %s", method, result)
        return result

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    def get_balance(self, address: str, block: BlockId = "latest") -> int:
        """Get native balance for an address, in wei."""
        return to_int(self.request("eth_getBalance", [address, to_block_param(block)]))

    def get_block_number(self) -> int:
        return to_int(self.request("eth_blockNumber"))

    def get_block(self, block: BlockId = "latest") -> dict[str, Any]:
        result = self.request("eth_getBlockByNumber", [to_block_param(block), False])
        if result is None:
            raise RpcError("eth_getBlockByNumber", None, f"block {block} not found")
        return result

    def get_chain_id(self) -> int:
        return to_int(self.request("eth_chainId"))

    def get_transaction_count(self, address: str, block: BlockId = "pending") -> int:
        """Get the transaction nonce for an address."""
        return to_int(
            self.request("eth_getTransactionCount", [address, to_block_param(block)])
        )

    def get_gas_price(self) -> int:
        return to_int(self.request("eth_gasPrice"))

    def get_max_priority_fee(self) -> int:
        return to_int(self.request("eth_maxPriorityFeePerGas"))

    def estimate_gas(self, tx: dict[str, Any]) -> int:
        return to_int(self.request("eth_estimateGas", [_rpc_tx(tx)]))

    def call(self, tx: dict[str, Any], block: BlockId = "latest") -> str:
        """Execute a read-only call (eth_call) and return the raw hex result."""
        return self.request("eth_call", [_rpc_tx(tx), to_block_param(block)])

    def get_logs(
        self,
        address: str,
        topics: Sequence[Optional[Union[str, list[str]]]],
        from_block: BlockId,
        to_block: BlockId,
    ) -> list[dict[str, Any]]:
        result = self.request(
            "eth_getLogs",
            [
                {
                    "address": address,
                    "topics": list(topics),
                    "fromBlock": to_block_param(from_block),
                    "toBlock": to_block_param(to_block),
                }
            ],
        )
        return result or []

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def send_raw_transaction(self, raw_tx: str) -> str:
        """Broadcast a signed raw transaction.  Returns the transaction hash."""
        return self.request("eth_sendRawTransaction", [raw_tx])

    def get_transaction_receipt(self, tx_hash: str) -> Optional[dict[str, Any]]:
        return self.request("eth_getTransactionReceipt", [tx_hash])

    def wait_for_transaction(
        self,
        tx_hash: str,
        timeout: float = 120,
        poll_interval: float = 2.0,
        confirmations: int = 1,
    ) -> dict[str, Any]:
        """
        Wait until a transaction is mined with enough confirmations.

        Args:
            tx_hash: Transaction hash
            timeout: Maximum wait time in seconds
            poll_interval: Polling interval in seconds
            confirmations: Blocks required, counting the inclusion block

        Returns:
            Transaction receipt dict

        Raises:
            ConfirmationTimeoutError: If not confirmed within timeout
        """
        deadline = time.monotonic() + timeout
        while True:
            receipt = self.get_transaction_receipt(tx_hash)
            if receipt is not None and receipt.get("blockNumber") is not None:
                if confirmations <= 1:
                    return receipt
                mined_in = to_int(receipt["blockNumber"])
                if self.get_block_number() - mined_in + 1 >= confirmations:
                    return receipt

            if time.monotonic() + poll_interval > deadline:
                raise ConfirmationTimeoutError(tx_hash, timeout)
            time.sleep(poll_interval)


def _rpc_tx(tx: dict[str, Any]) -> dict[str, Any]:
    """Hex-encode integer fields of a transaction dict for the wire."""
    encoded: dict[str, Any] = {}
    for key, value in tx.items():
        if value is None:
            continue
        if isinstance(value, int) and not isinstance(value, bool):
            encoded[key] = hex(value)
        elif isinstance(value, bytes):
            encoded[key] = "0x" + value.hex()
        else:
            encoded[key] = value
    return encoded
